"""Global pytest fixtures for the blog service."""

from __future__ import annotations

from typing import Generator

import boto3
from botocore.config import Config
import pytest
from fastapi.testclient import TestClient

from blog_service.api import dependencies
from blog_service.application.services import (
    AuthService,
    BlogService,
    EngagementService,
    UserService,
)
from blog_service.domain.models import FederatedIdentity
from blog_service.infrastructure.storage import StorageManager
from blog_service.main import app
from tests.fakes import (
    GOOGLE_PICTURE,
    InMemoryBlogRepository,
    InMemoryNotificationRepository,
    InMemoryTransactionManager,
    InMemoryUserRepository,
    StubIdentityVerifier,
)


@pytest.fixture()
def user_repo() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture()
def blog_repo(user_repo: InMemoryUserRepository) -> InMemoryBlogRepository:
    return InMemoryBlogRepository(user_repo)


@pytest.fixture()
def notification_repo() -> InMemoryNotificationRepository:
    return InMemoryNotificationRepository()


@pytest.fixture()
def tx() -> InMemoryTransactionManager:
    return InMemoryTransactionManager()


@pytest.fixture()
def identity_verifier() -> StubIdentityVerifier:
    """Two valid Google assertions: a fresh user and one clashing with a local account."""
    return StubIdentityVerifier({
        "google-ada": FederatedIdentity(email="ada@gmail.com", name="Ada Lovelace", picture=GOOGLE_PICTURE),
        "google-jane": FederatedIdentity(email="jane@x.com", name="Jane Doe", picture=GOOGLE_PICTURE),
    })


@pytest.fixture()
def auth_service(user_repo, identity_verifier) -> AuthService:
    return AuthService(user_repo, identity_verifier)


@pytest.fixture()
def user_service(user_repo) -> UserService:
    return UserService(user_repo)


@pytest.fixture()
def blog_service(blog_repo, user_repo) -> BlogService:
    return BlogService(blog_repo, user_repo)


@pytest.fixture()
def engagement_service(blog_repo, notification_repo, tx) -> EngagementService:
    return EngagementService(blog_repo, notification_repo, tx)


@pytest.fixture()
def storage() -> StorageManager:
    """Storage manager over a real boto3 client; presigning needs no network."""
    client = boto3.client(
        "s3",
        region_name="ap-south-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
        config=Config(signature_version="s3v4"),
    )
    return StorageManager(client=client)


@pytest.fixture()
def client(
    user_repo, blog_repo, notification_repo, tx, identity_verifier, storage
) -> Generator[TestClient, None, None]:
    """HTTP client with every external collaborator replaced by an in-memory double."""
    app.dependency_overrides[dependencies.get_user_repository] = lambda: user_repo
    app.dependency_overrides[dependencies.get_blog_repository] = lambda: blog_repo
    app.dependency_overrides[dependencies.get_notification_repository] = lambda: notification_repo
    app.dependency_overrides[dependencies.get_transaction_manager] = lambda: tx
    app.dependency_overrides[dependencies.get_identity_verifier] = lambda: identity_verifier
    app.dependency_overrides[dependencies.get_storage] = lambda: storage
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
