"""
Repository implementations - Data access layer
"""
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List
import logging
import re

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from blog_service.domain.exceptions import (
    DuplicateEmailError, DuplicateLikeError, DuplicateUsernameError, ValidationError
)
from blog_service.domain.models import User, Blog, BlogQuery, NotificationType
from blog_service.domain.repositories import (
    IUserRepository, IBlogRepository, INotificationRepository
)
from .connection import MongoDB

logger = logging.getLogger(__name__)

AUTHOR_PROJECTION = {
    "author.personal_info.fullname": 1,
    "author.personal_info.username": 1,
    "author.personal_info.profile_img": 1,
}

BLOG_CARD_PROJECTION = {
    "_id": 0,
    "blog_id": 1,
    "title": 1,
    "des": 1,
    "banner": 1,
    "activity": 1,
    "tags": 1,
    "publishedAt": 1,
    **AUTHOR_PROJECTION,
}

TRENDING_PROJECTION = {
    "_id": 0,
    "blog_id": 1,
    "title": 1,
    "publishedAt": 1,
    **AUTHOR_PROJECTION,
}

BLOG_DETAIL_PROJECTION = {
    "title": 1,
    "des": 1,
    "content": 1,
    "banner": 1,
    "activity": 1,
    "publishedAt": 1,
    "blog_id": 1,
    "tags": 1,
    "draft": 1,
    "author": 1,
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_object_id(value: Any) -> ObjectId:
    """Convert a client-supplied id, rejecting malformed ones"""
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        raise ValidationError("Invalid id")
    return ObjectId(value)


def serialize_document(value: Any) -> Any:
    """Replace ObjectIds with their string form, recursively"""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {key: serialize_document(item) for key, item in value.items()}
    if isinstance(value, list):
        return [serialize_document(item) for item in value]
    return value


def duplicate_key_field(error: DuplicateKeyError) -> str:
    """Name of the indexed field that caused a duplicate key error"""
    details = error.details or {}
    key_pattern = details.get("keyPattern") or {}
    if key_pattern:
        return next(iter(key_pattern))
    # Only the index name is reliable; the duplicated value may contain anything
    if "index: personal_info.username_1" in str(error):
        return "personal_info.username"
    return "personal_info.email"


class UserRepository(IUserRepository):
    """User repository implementation using MongoDB"""

    def __init__(self, db: MongoDB):
        self.collection = db.users

    def _doc_to_user(self, doc: Optional[Dict[str, Any]]) -> Optional[User]:
        """Convert database document to User model"""
        if not doc:
            return None
        personal_info = doc.get("personal_info", {})
        account_info = doc.get("account_info", {})
        return User(
            id=str(doc["_id"]),
            fullname=personal_info.get("fullname", ""),
            email=personal_info.get("email", ""),
            username=personal_info.get("username", ""),
            password=personal_info.get("password") or "",
            profile_img=personal_info.get("profile_img"),
            bio=personal_info.get("bio", ""),
            google_auth=doc.get("google_auth", False),
            total_posts=account_info.get("total_posts", 0),
            total_reads=account_info.get("total_reads", 0),
            blogs=[str(ref) for ref in doc.get("blogs", [])],
            joined_at=doc.get("joinedAt"),
        )

    async def create(self, fullname: str, email: str, username: str, password: str,
                     google_auth: bool = False,
                     profile_img: Optional[str] = None) -> User:
        """Create a new user"""
        now = utcnow()
        doc = {
            "personal_info": {
                "fullname": fullname,
                "email": email,
                "password": password,
                "username": username,
                "bio": "",
                "profile_img": profile_img,
            },
            "social_links": {
                "youtube": "",
                "instagram": "",
                "facebook": "",
                "twitter": "",
                "github": "",
                "website": "",
            },
            "account_info": {"total_posts": 0, "total_reads": 0},
            "google_auth": google_auth,
            "blogs": [],
            "joinedAt": now,
            "updatedAt": now,
        }
        try:
            result = await self.collection.insert_one(doc)
        except DuplicateKeyError as e:
            if duplicate_key_field(e) == "personal_info.username":
                raise DuplicateUsernameError()
            raise DuplicateEmailError()

        doc["_id"] = result.inserted_id
        return self._doc_to_user(doc)

    async def find_by_id(self, user_id: str) -> Optional[User]:
        """Find user by ID"""
        if not ObjectId.is_valid(user_id):
            return None
        doc = await self.collection.find_one({"_id": ObjectId(user_id)})
        return self._doc_to_user(doc)

    async def find_by_email(self, email: str) -> Optional[User]:
        """Find user by email"""
        doc = await self.collection.find_one({"personal_info.email": email})
        return self._doc_to_user(doc)

    async def find_profile(self, username: str) -> Optional[Dict[str, Any]]:
        """Find the public profile, without credentials or internal fields"""
        doc = await self.collection.find_one(
            {"personal_info.username": username},
            {"personal_info.password": 0, "google_auth": 0, "updatedAt": 0, "blogs": 0},
        )
        return serialize_document(doc) if doc else None

    async def search(self, query: str, limit: int) -> List[Dict[str, Any]]:
        """Find users by username fragment"""
        cursor = self.collection.find(
            {"personal_info.username": {"$regex": re.escape(query), "$options": "i"}},
            {
                "personal_info.fullname": 1,
                "personal_info.username": 1,
                "personal_info.profile_img": 1,
            },
        ).limit(limit)
        return serialize_document(await cursor.to_list(length=limit))

    async def add_blog(self, user_id: str, blog_ref: str, post_increment: int) -> None:
        """Link a new blog to its author"""
        await self.collection.update_one(
            {"_id": to_object_id(user_id)},
            {
                "$inc": {"account_info.total_posts": post_increment},
                "$push": {"blogs": to_object_id(blog_ref)},
                "$set": {"updatedAt": utcnow()},
            },
        )

    async def increment_reads(self, user_id: str, amount: int) -> None:
        """Bump the author's total reads"""
        await self.collection.update_one(
            {"_id": to_object_id(user_id)},
            {"$inc": {"account_info.total_reads": amount}},
        )


class BlogRepository(IBlogRepository):
    """Blog repository implementation using MongoDB"""

    def __init__(self, db: MongoDB):
        self.collection = db.blogs
        self.users = db.users

    def _doc_to_blog(self, doc: Optional[Dict[str, Any]]) -> Optional[Blog]:
        """Convert database document to Blog model"""
        if not doc:
            return None
        activity = doc.get("activity", {})
        return Blog(
            id=str(doc["_id"]),
            blog_id=doc["blog_id"],
            title=doc.get("title", ""),
            author=str(doc["author"]),
            des=doc.get("des", ""),
            banner=doc.get("banner", ""),
            content=doc.get("content") or {},
            tags=doc.get("tags", []),
            draft=doc.get("draft", False),
            total_likes=activity.get("total_likes", 0),
            total_reads=activity.get("total_reads", 0),
            published_at=doc.get("publishedAt"),
        )

    def _published_filter(self, criteria: BlogQuery) -> Dict[str, Any]:
        """Build the MongoDB filter for a blog search"""
        query: Dict[str, Any] = {"draft": False}
        if criteria.tag:
            query["tags"] = criteria.tag.lower()
            if criteria.eliminate_blog:
                query["blog_id"] = {"$ne": criteria.eliminate_blog}
        elif criteria.query:
            query["title"] = {"$regex": re.escape(criteria.query), "$options": "i"}
        elif criteria.author:
            query["author"] = to_object_id(criteria.author)
        return query

    def _with_author(self, projection: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Pipeline stages populating the author and projecting the result"""
        return [
            {"$lookup": {
                "from": self.users.name,
                "localField": "author",
                "foreignField": "_id",
                "as": "author",
            }},
            {"$unwind": {"path": "$author", "preserveNullAndEmptyArrays": True}},
            {"$project": projection},
        ]

    async def create(self, blog_id: str, author: str, title: str, des: str, banner: str,
                     content: Dict[str, Any], tags: List[str], draft: bool) -> Blog:
        """Create a new blog"""
        now = utcnow()
        doc = {
            "blog_id": blog_id,
            "title": title,
            "banner": banner,
            "des": des,
            "content": content,
            "tags": tags,
            "author": to_object_id(author),
            "activity": {
                "total_likes": 0,
                "total_comments": 0,
                "total_reads": 0,
                "total_parent_comments": 0,
            },
            "comments": [],
            "draft": draft,
            "publishedAt": now,
            "updatedAt": now,
        }
        result = await self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return self._doc_to_blog(doc)

    async def find_by_blog_id(self, blog_id: str) -> Optional[Blog]:
        """Find blog by slug"""
        doc = await self.collection.find_one({"blog_id": blog_id})
        return self._doc_to_blog(doc)

    async def find_by_id(self, blog_ref: str) -> Optional[Blog]:
        """Find blog by document id"""
        doc = await self.collection.find_one({"_id": to_object_id(blog_ref)})
        return self._doc_to_blog(doc)

    async def update(self, blog_id: str, updates: Dict[str, Any]) -> None:
        """Update blog in place"""
        await self.collection.update_one(
            {"blog_id": blog_id},
            {"$set": {**updates, "updatedAt": utcnow()}},
        )

    async def list_published(self, criteria: BlogQuery, skip: int, limit: int) -> List[Dict[str, Any]]:
        """Newest published blogs matching the criteria"""
        pipeline = [
            {"$match": self._published_filter(criteria)},
            {"$sort": {"publishedAt": -1}},
            {"$skip": skip},
            {"$limit": limit},
            *self._with_author(BLOG_CARD_PROJECTION),
        ]
        blogs = await self.collection.aggregate(pipeline).to_list(length=limit)
        return serialize_document(blogs)

    async def count_published(self, criteria: BlogQuery) -> int:
        return await self.collection.count_documents(self._published_filter(criteria))

    async def list_trending(self, limit: int) -> List[Dict[str, Any]]:
        """Most read, then most liked, published blogs"""
        pipeline = [
            {"$match": {"draft": False}},
            {"$sort": {"activity.total_reads": -1, "activity.total_likes": -1, "publishedAt": -1}},
            {"$limit": limit},
            *self._with_author(TRENDING_PROJECTION),
        ]
        blogs = await self.collection.aggregate(pipeline).to_list(length=limit)
        return serialize_document(blogs)

    async def read(self, blog_id: str, read_increment: int) -> Optional[Dict[str, Any]]:
        """Count a read and return the full blog with its author"""
        doc = await self.collection.find_one_and_update(
            {"blog_id": blog_id},
            {"$inc": {"activity.total_reads": read_increment}},
            projection=BLOG_DETAIL_PROJECTION,
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            return None

        doc["author"] = await self.users.find_one(
            {"_id": doc["author"]},
            {
                "personal_info.fullname": 1,
                "personal_info.username": 1,
                "personal_info.profile_img": 1,
            },
        )
        return serialize_document(doc)

    async def increment_likes(self, blog_ref: str, amount: int, session=None) -> None:
        await self.collection.update_one(
            {"_id": to_object_id(blog_ref)},
            {"$inc": {"activity.total_likes": amount}},
            session=session,
        )


class NotificationRepository(INotificationRepository):
    """Notification repository implementation using MongoDB"""

    def __init__(self, db: MongoDB):
        self.collection = db.notifications

    def _like_filter(self, user_id: str, blog_ref: str) -> Dict[str, Any]:
        return {
            "user": to_object_id(user_id),
            "blog": to_object_id(blog_ref),
            "type": NotificationType.LIKE.value,
        }

    async def create_like(self, user_id: str, blog_ref: str, notification_for: str,
                          session=None) -> bool:
        """
        Record a like; False when the pair already has one

        Raises:
            DuplicateLikeError: the pair already has one and the insert ran
                inside a transaction, which the server has aborted
        """
        doc = {
            **self._like_filter(user_id, blog_ref),
            "notification_for": to_object_id(notification_for),
            "seen": False,
            "createdAt": utcnow(),
        }
        try:
            await self.collection.insert_one(doc, session=session)
        except DuplicateKeyError:
            logger.info(f"Like from {user_id} on {blog_ref} already recorded")
            if session is not None:
                raise DuplicateLikeError()
            return False
        return True

    async def delete_like(self, user_id: str, blog_ref: str, session=None) -> bool:
        """Remove a like; False when there was nothing to remove"""
        result = await self.collection.delete_one(self._like_filter(user_id, blog_ref), session=session)
        return result.deleted_count > 0

    async def like_exists(self, user_id: str, blog_ref: str, session=None) -> bool:
        doc = await self.collection.find_one(
            self._like_filter(user_id, blog_ref), {"_id": 1}, session=session
        )
        return doc is not None
