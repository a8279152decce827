"""
FastAPI dependencies
"""
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional

from blog_service.application.services import (
    AuthService, UserService, BlogService, EngagementService
)
from blog_service.domain.repositories import (
    IUserRepository, IBlogRepository, INotificationRepository, ITransactionManager
)
from blog_service.infrastructure.auth import verify_access_token
from blog_service.infrastructure.database.connection import MongoDB
from blog_service.infrastructure.database.repositories import (
    UserRepository, BlogRepository, NotificationRepository
)
from blog_service.infrastructure.identity import GoogleIdentityVerifier
from blog_service.infrastructure.storage import StorageManager


# Security scheme
security = HTTPBearer(auto_error=False)


def get_mongodb(request: Request) -> MongoDB:
    """MongoDB connection created at startup"""
    return request.app.state.mongodb


def get_identity_verifier(request: Request) -> GoogleIdentityVerifier:
    return request.app.state.identity_verifier


def get_storage(request: Request) -> StorageManager:
    return request.app.state.storage


def get_user_repository(db: MongoDB = Depends(get_mongodb)) -> IUserRepository:
    """Get user repository dependency"""
    return UserRepository(db)


def get_blog_repository(db: MongoDB = Depends(get_mongodb)) -> IBlogRepository:
    """Get blog repository dependency"""
    return BlogRepository(db)


def get_notification_repository(db: MongoDB = Depends(get_mongodb)) -> INotificationRepository:
    """Get notification repository dependency"""
    return NotificationRepository(db)


def get_transaction_manager(db: MongoDB = Depends(get_mongodb)) -> ITransactionManager:
    return db


def get_auth_service(
    user_repo: IUserRepository = Depends(get_user_repository),
    identity_verifier: GoogleIdentityVerifier = Depends(get_identity_verifier)
) -> AuthService:
    """Get auth service dependency"""
    return AuthService(user_repo, identity_verifier)


def get_user_service(user_repo: IUserRepository = Depends(get_user_repository)) -> UserService:
    """Get user service dependency"""
    return UserService(user_repo)


def get_blog_service(
    blog_repo: IBlogRepository = Depends(get_blog_repository),
    user_repo: IUserRepository = Depends(get_user_repository)
) -> BlogService:
    """Get blog service dependency"""
    return BlogService(blog_repo, user_repo)


def get_engagement_service(
    blog_repo: IBlogRepository = Depends(get_blog_repository),
    notification_repo: INotificationRepository = Depends(get_notification_repository),
    tx: ITransactionManager = Depends(get_transaction_manager)
) -> EngagementService:
    """Get engagement service dependency"""
    return EngagementService(blog_repo, notification_repo, tx)


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> str:
    """
    Get the id of the authenticated user from the bearer token

    Raises:
        NoTokenError: no bearer token was sent
        InvalidTokenError: the token is invalid or expired
    """
    return verify_access_token(credentials.credentials if credentials else None)
