"""
Repository interfaces - Define contracts for data access
"""
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any, List, AsyncContextManager

from .models import User, Blog, BlogQuery


class IUserRepository(ABC):
    """User repository interface"""

    @abstractmethod
    async def create(self, fullname: str, email: str, username: str, password: str,
                     google_auth: bool = False,
                     profile_img: Optional[str] = None) -> User:
        """
        Insert a new user

        Raises:
            DuplicateEmailError: email is already registered
            DuplicateUsernameError: username is already taken
        """
        pass

    @abstractmethod
    async def find_by_id(self, user_id: str) -> Optional[User]:
        """Find user by ID"""
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        """Find user by email"""
        pass

    @abstractmethod
    async def find_profile(self, username: str) -> Optional[Dict[str, Any]]:
        """Find the public profile document of a user"""
        pass

    @abstractmethod
    async def search(self, query: str, limit: int) -> List[Dict[str, Any]]:
        """Find users whose username matches the query"""
        pass

    @abstractmethod
    async def add_blog(self, user_id: str, blog_ref: str, post_increment: int) -> None:
        """Append a blog reference and bump the post counter"""
        pass

    @abstractmethod
    async def increment_reads(self, user_id: str, amount: int) -> None:
        """Bump the total read counter of a user"""
        pass


class IBlogRepository(ABC):
    """Blog repository interface"""

    @abstractmethod
    async def create(self, blog_id: str, author: str, title: str, des: str, banner: str,
                     content: Dict[str, Any], tags: List[str], draft: bool) -> Blog:
        """Insert a new blog"""
        pass

    @abstractmethod
    async def find_by_blog_id(self, blog_id: str) -> Optional[Blog]:
        """Find blog by its slug"""
        pass

    @abstractmethod
    async def find_by_id(self, blog_ref: str) -> Optional[Blog]:
        """Find blog by its document id"""
        pass

    @abstractmethod
    async def update(self, blog_id: str, updates: Dict[str, Any]) -> None:
        """Update blog fields by slug"""
        pass

    @abstractmethod
    async def list_published(self, criteria: BlogQuery, skip: int, limit: int) -> List[Dict[str, Any]]:
        """Published blogs matching the criteria, newest first, author populated"""
        pass

    @abstractmethod
    async def count_published(self, criteria: BlogQuery) -> int:
        """Count published blogs matching the criteria"""
        pass

    @abstractmethod
    async def list_trending(self, limit: int) -> List[Dict[str, Any]]:
        """Published blogs ordered by reads, likes, then publish date"""
        pass

    @abstractmethod
    async def read(self, blog_id: str, read_increment: int) -> Optional[Dict[str, Any]]:
        """Bump the read counter and return the blog with its author populated"""
        pass

    @abstractmethod
    async def increment_likes(self, blog_ref: str, amount: int, session=None) -> None:
        """Bump the like counter of a blog"""
        pass


class INotificationRepository(ABC):
    """Notification repository interface"""

    @abstractmethod
    async def create_like(self, user_id: str, blog_ref: str, notification_for: str,
                          session=None) -> bool:
        """
        Insert a like notification; False when one already exists for the pair

        Inside a transaction an existing like raises DuplicateLikeError instead,
        since the failed insert aborts the transaction.
        """
        pass

    @abstractmethod
    async def delete_like(self, user_id: str, blog_ref: str, session=None) -> bool:
        """Delete the like notification; False when there was none"""
        pass

    @abstractmethod
    async def like_exists(self, user_id: str, blog_ref: str, session=None) -> bool:
        """Check if the user has liked the blog"""
        pass


class ITransactionManager(ABC):
    """Groups several writes into one unit where the store supports it"""

    @abstractmethod
    def transaction(self) -> AsyncContextManager[Any]:
        """Yield a session to pass to repository writes, or None"""
        pass
