"""
Domain models - Core business entities
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List, Dict, Any
from enum import Enum


class NotificationType(str, Enum):
    """Notification type enumeration"""
    LIKE = "like"


@dataclass
class User:
    """User domain model"""
    id: str
    fullname: str
    email: str
    username: str
    password: str = ""
    profile_img: Optional[str] = None
    bio: str = ""
    google_auth: bool = False
    total_posts: int = 0
    total_reads: int = 0
    blogs: List[str] = field(default_factory=list)
    joined_at: Optional[datetime] = None

    def has_local_password(self) -> bool:
        """Federated accounts are stored with an empty password"""
        return not self.google_auth and bool(self.password)


@dataclass
class Blog:
    """Blog domain model"""
    id: str
    blog_id: str
    title: str
    author: str
    des: str = ""
    banner: str = ""
    content: Dict[str, Any] = field(default_factory=dict)
    tags: List[str] = field(default_factory=list)
    draft: bool = False
    total_likes: int = 0
    total_reads: int = 0
    published_at: Optional[datetime] = None

    def is_owner(self, user_id: str) -> bool:
        """Check if the given user_id is the author of this blog"""
        return self.author == user_id


@dataclass
class FederatedIdentity:
    """Claims extracted from a verified identity provider token"""
    email: str
    name: str
    picture: Optional[str] = None


@dataclass
class BlogQuery:
    """Search criteria shared by blog search and its count"""
    tag: Optional[str] = None
    query: Optional[str] = None
    author: Optional[str] = None
    eliminate_blog: Optional[str] = None
