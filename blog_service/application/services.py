"""
Application services - Business logic layer
"""
from typing import Optional, Dict, Any, List
import logging
import random
import re

from blog_service.config import settings
from blog_service.domain.exceptions import (
    AuthError,
    DuplicateEmailError,
    DuplicateLikeError,
    DuplicateUsernameError,
    DraftNotAccessibleError,
    FederatedAccountConflictError,
    InternalError,
    NotFoundError,
    ValidationError,
    WrongPasswordError,
)
from blog_service.domain.models import User, BlogQuery
from blog_service.domain.repositories import (
    IUserRepository,
    IBlogRepository,
    INotificationRepository,
    ITransactionManager,
)
from blog_service.infrastructure.auth import (
    create_access_token,
    generate_id,
    hash_password,
    validate_email,
    validate_password_strength,
    verify_password,
)
from blog_service.infrastructure.identity import GoogleIdentityVerifier

logger = logging.getLogger(__name__)

USERNAME_SUFFIX_LENGTH = 5
MAX_USERNAME_ATTEMPTS = 5

AVATAR_STYLES = ["notionists-neutral", "adventurer-neutral", "fun-emoji"]


def default_profile_image(seed: str) -> str:
    """Generated avatar for accounts that bring none"""
    style = random.choice(AVATAR_STYLES)
    return f"https://api.dicebear.com/6.x/{style}/svg?seed={seed}"


def format_auth_result(user: User) -> Dict[str, Any]:
    """Token plus the public profile fields of a user"""
    return {
        "access_token": create_access_token(user.id),
        "profile_img": user.profile_img,
        "username": user.username,
        "fullname": user.fullname,
    }


class AuthService:
    """Authentication service - handles authentication logic"""

    def __init__(
        self,
        user_repository: IUserRepository,
        identity_verifier: Optional[GoogleIdentityVerifier] = None
    ):
        self.user_repo = user_repository
        self.identity_verifier = identity_verifier

    async def _create_user(
        self,
        fullname: str,
        email: str,
        password: str,
        google_auth: bool = False,
        profile_img: Optional[str] = None
    ) -> User:
        """
        Insert a user under a username derived from the email

        The unique index on usernames decides collisions; a taken username
        is retried with a random suffix.
        """
        base_username = email.split("@")[0]
        username = base_username

        for _ in range(MAX_USERNAME_ATTEMPTS):
            try:
                return await self.user_repo.create(
                    fullname=fullname,
                    email=email,
                    username=username,
                    password=password,
                    google_auth=google_auth,
                    profile_img=profile_img or default_profile_image(username)
                )
            except DuplicateUsernameError:
                username = base_username + generate_id(USERNAME_SUFFIX_LENGTH)

        logger.error(f"Could not find a free username for {base_username}")
        raise InternalError("Failed to create user")

    async def signup(self, fullname: str, email: str, password: str) -> Dict[str, Any]:
        """
        Register a local account

        Returns:
            Token and public profile fields
        """
        fullname = fullname or ""
        email = email or ""

        if len(fullname) < 3:
            raise ValidationError("Please enter your complete name")

        if not email:
            raise ValidationError("Enter your valid email Id")

        if not validate_email(email):
            raise ValidationError("Email is invalid")

        is_valid, error_msg = validate_password_strength(password)
        if not is_valid:
            raise ValidationError(error_msg)

        user = await self._create_user(fullname, email, hash_password(password))
        logger.info(f"Registered user {user.username}")
        return format_auth_result(user)

    async def signin(self, email: str, password: str) -> Dict[str, Any]:
        """Login with email and password"""
        user = await self.user_repo.find_by_email(email or "")
        if not user:
            raise NotFoundError("No such email found!", status_code=403)

        if not user.has_local_password():
            raise FederatedAccountConflictError(
                "Account already registered. Kindly login with Google"
            )

        if not verify_password(password or "", user.password):
            raise WrongPasswordError()

        return format_auth_result(user)

    async def google_auth(self, assertion: str) -> Dict[str, Any]:
        """Login or register with a Google ID token"""
        if self.identity_verifier is None:
            raise InternalError("Authentication failed")

        identity = await self.identity_verifier.verify(assertion)

        user = await self.user_repo.find_by_email(identity.email)
        if user is None:
            try:
                user = await self._create_user(
                    fullname=identity.name,
                    email=identity.email,
                    password="",
                    google_auth=True,
                    profile_img=identity.picture
                )
                logger.info(f"Registered Google user {user.username}")
            except DuplicateEmailError:
                # Created concurrently by another login with the same token
                user = await self.user_repo.find_by_email(identity.email)
                if user is None:
                    raise InternalError("Authentication failed")

        if not user.google_auth:
            raise FederatedAccountConflictError(
                "Something went wrong, kindly enter email and password"
            )

        return format_auth_result(user)

    async def refresh(self, user_id: str) -> str:
        """Issue a fresh token for a still-valid session"""
        user = await self.user_repo.find_by_id(user_id)
        if not user:
            raise AuthError("Access token is invalid")
        return create_access_token(user.id)


class UserService:
    """User service - handles user-related business logic"""

    def __init__(self, user_repository: IUserRepository):
        self.user_repo = user_repository

    async def search_users(self, query: str) -> List[Dict[str, Any]]:
        return await self.user_repo.search(query or "", settings.USER_SEARCH_LIMIT)

    async def get_profile(self, username: str) -> Dict[str, Any]:
        """Get the public profile of a user"""
        profile = await self.user_repo.find_profile(username or "")
        if not profile:
            raise NotFoundError("User not found")
        return profile


class BlogService:
    """Blog service - publishing, listing and reading blogs"""

    def __init__(self, blog_repository: IBlogRepository, user_repository: IUserRepository):
        self.blog_repo = blog_repository
        self.user_repo = user_repository

    @staticmethod
    def make_blog_id(title: str) -> str:
        """Slug from the title plus a random id"""
        slug = re.sub(r"[^a-zA-Z0-9]", " ", title).strip()
        return re.sub(r"\s+", "-", slug) + generate_id()

    @staticmethod
    def _content_blocks(content: Any) -> List[Any]:
        if isinstance(content, dict):
            return content.get("blocks") or []
        if isinstance(content, list):
            return content
        return []

    def validate_blog(
        self,
        title: str,
        des: str,
        banner: str,
        tags: List[str],
        content: Any,
        draft: bool
    ) -> None:
        """Drafts only need a title; published blogs need everything"""
        if not title:
            raise ValidationError("Kindly provide the title as well")

        if draft:
            return

        if not des or len(des) > settings.BLOG_DESCRIPTION_MAX_LENGTH:
            raise ValidationError("Kindly provide the blog description as well")

        if not banner:
            raise ValidationError("Kindly upload the suitable banner as well")

        if not self._content_blocks(content):
            raise ValidationError("Content can't be empty")

        if not tags or len(tags) > settings.BLOG_MAX_TAGS:
            raise ValidationError("Provide the tags as well for better reach")

    async def create_blog(
        self,
        author_id: str,
        title: str,
        des: str = "",
        banner: str = "",
        tags: Optional[List[str]] = None,
        content: Any = None,
        draft: bool = False,
        blog_id: Optional[str] = None
    ) -> str:
        """
        Create a blog, or update the author's blog when blog_id is given

        Returns:
            Blog slug
        """
        title = title or ""
        des = des or ""
        banner = banner or ""
        tags = tags or []
        content = content if content is not None else {}
        draft = bool(draft)

        self.validate_blog(title, des, banner, tags, content, draft)
        tags = [tag.lower() for tag in tags]

        if blog_id:
            blog = await self.blog_repo.find_by_blog_id(blog_id)
            if not blog:
                raise NotFoundError("Blog not found")
            if not blog.is_owner(author_id):
                raise AuthError("You don't have permission to edit this blog")

            await self.blog_repo.update(blog_id, {
                "title": title,
                "des": des,
                "banner": banner,
                "content": content,
                "tags": tags,
                "draft": draft,
            })
            return blog_id

        blog = await self.blog_repo.create(
            blog_id=self.make_blog_id(title),
            author=author_id,
            title=title,
            des=des,
            banner=banner,
            content=content,
            tags=tags,
            draft=draft
        )

        try:
            await self.user_repo.add_blog(author_id, blog.id, 0 if draft else 1)
        except Exception as e:
            logger.error(f"Failed to link blog {blog.blog_id} to author {author_id}: {e}")
            raise InternalError("Something went wrong while updating the total post numbers")

        logger.info(f"Created blog {blog.blog_id} (draft={draft})")
        return blog.blog_id

    @staticmethod
    def _skip(page: Optional[int], limit: int) -> int:
        return (max(page or 1, 1) - 1) * limit

    async def latest_blogs(self, page: Optional[int]) -> List[Dict[str, Any]]:
        limit = settings.LATEST_PAGE_SIZE
        return await self.blog_repo.list_published(BlogQuery(), self._skip(page, limit), limit)

    async def latest_blogs_count(self) -> int:
        return await self.blog_repo.count_published(BlogQuery())

    async def trending_blogs(self) -> List[Dict[str, Any]]:
        return await self.blog_repo.list_trending(settings.TRENDING_LIMIT)

    async def search_blogs(
        self,
        criteria: BlogQuery,
        page: Optional[int],
        limit: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """Search published blogs by tag, title fragment or author"""
        limit = limit if limit and limit > 0 else settings.SEARCH_PAGE_SIZE
        return await self.blog_repo.list_published(criteria, self._skip(page, limit), limit)

    async def search_blogs_count(self, criteria: BlogQuery) -> int:
        return await self.blog_repo.count_published(BlogQuery(
            tag=criteria.tag, query=criteria.query, author=criteria.author
        ))

    async def get_blog(self, blog_id: str, draft: bool = False, mode: Optional[str] = None) -> Dict[str, Any]:
        """
        Fetch a blog for reading or editing

        Reads are counted on the blog and its author unless the blog is
        opened in the editor.
        """
        blog = await self.blog_repo.find_by_blog_id(blog_id or "")
        if not blog:
            raise NotFoundError("Blog not found")

        if blog.draft and not draft:
            raise DraftNotAccessibleError()

        increment = 0 if mode == "edit" else 1
        doc = await self.blog_repo.read(blog.blog_id, increment)
        if not doc:
            raise NotFoundError("Blog not found")

        if increment:
            await self.user_repo.increment_reads(blog.author, increment)

        return doc


class EngagementService:
    """Engagement service - likes and their notifications"""

    def __init__(
        self,
        blog_repository: IBlogRepository,
        notification_repository: INotificationRepository,
        transaction_manager: ITransactionManager
    ):
        self.blog_repo = blog_repository
        self.notification_repo = notification_repository
        self.tx = transaction_manager

    async def toggle_like(self, user_id: str, blog_ref: str, client_liked: Optional[bool] = None) -> bool:
        """
        Flip the like state of a blog for a user

        The stored notification is the source of truth for the current
        state; the like counter only moves when the notification was
        actually created or removed.

        Returns:
            Whether the blog is liked by the user afterwards
        """
        blog = await self.blog_repo.find_by_id(blog_ref)
        if not blog:
            raise NotFoundError("Blog not found")

        try:
            async with self.tx.transaction() as session:
                liked = await self.notification_repo.like_exists(user_id, blog.id, session=session)

                if client_liked is not None and bool(client_liked) != liked:
                    logger.debug(f"Client like state for {blog.blog_id} is stale, using stored state")

                if liked:
                    if await self.notification_repo.delete_like(user_id, blog.id, session=session):
                        await self.blog_repo.increment_likes(blog.id, -1, session=session)
                    return False

                if await self.notification_repo.create_like(user_id, blog.id, blog.author, session=session):
                    await self.blog_repo.increment_likes(blog.id, 1, session=session)
                return True
        except DuplicateLikeError:
            # A concurrent request recorded the like and counted it
            logger.info(f"Like on {blog.blog_id} was recorded concurrently")
            return True

    async def is_liked(self, user_id: str, blog_ref: str) -> bool:
        return await self.notification_repo.like_exists(user_id, blog_ref)
