"""
MongoDB connection and utilities
"""
from contextlib import asynccontextmanager
from typing import Optional
import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase, AsyncIOMotorCollection
from pymongo import ASCENDING, DESCENDING

from blog_service.config import settings
from blog_service.domain.models import NotificationType
from blog_service.domain.repositories import ITransactionManager

logger = logging.getLogger(__name__)


class MongoDB(ITransactionManager):
    """MongoDB connection manager"""

    def __init__(self, url: str = settings.MONGODB_URL,
                 database: str = settings.MONGODB_DATABASE,
                 use_transactions: bool = settings.MONGODB_USE_TRANSACTIONS):
        self.url = url
        self.database = database
        self.use_transactions = use_transactions
        self.client: Optional[AsyncIOMotorClient] = None
        self.db: Optional[AsyncIOMotorDatabase] = None

    async def connect(self):
        """Connect to MongoDB"""
        self.client = AsyncIOMotorClient(self.url)
        self.db = self.client[self.database]

        await self.create_indexes()
        logger.info(f"Connected to MongoDB database {self.database}")

    async def disconnect(self):
        """Disconnect from MongoDB"""
        if self.client:
            self.client.close()
            logger.info("MongoDB connection closed")

    @property
    def users(self) -> AsyncIOMotorCollection:
        return self.db["users"]

    @property
    def blogs(self) -> AsyncIOMotorCollection:
        return self.db["blogs"]

    @property
    def notifications(self) -> AsyncIOMotorCollection:
        return self.db["notifications"]

    async def create_indexes(self):
        """Create indexes backing uniqueness and the common queries"""
        await self.users.create_index("personal_info.email", unique=True)
        await self.users.create_index("personal_info.username", unique=True)

        await self.blogs.create_index("blog_id", unique=True)
        await self.blogs.create_index([("draft", ASCENDING), ("publishedAt", DESCENDING)])
        await self.blogs.create_index("tags")
        await self.blogs.create_index("author")

        # One like notification per (user, blog)
        await self.notifications.create_index(
            [("user", ASCENDING), ("blog", ASCENDING), ("type", ASCENDING)],
            unique=True,
            partialFilterExpression={"type": NotificationType.LIKE.value},
        )
        await self.notifications.create_index("notification_for")

        logger.info("MongoDB indexes created")

    @asynccontextmanager
    async def transaction(self):
        """Yield a session bound to a transaction, or None when disabled"""
        if not self.use_transactions:
            yield None
            return

        async with await self.client.start_session() as session:
            async with session.start_transaction():
                yield session
