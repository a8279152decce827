"""
Configuration settings for Blog Service
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "Blog Service"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # MongoDB
    MONGODB_URL: str = "mongodb://localhost:27017"
    MONGODB_DATABASE: str = "blog"
    MONGODB_USE_TRANSACTIONS: bool = False  # requires a replica set

    # JWT Settings
    JWT_SECRET_KEY: str = "your-secret-key-change-this-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # Password Settings
    BCRYPT_ROUNDS: int = 10
    PASSWORD_MIN_LENGTH: int = 6
    PASSWORD_MAX_LENGTH: int = 20

    # Google / Firebase identity
    FIREBASE_PROJECT_ID: str = "blog-auth"
    GOOGLE_CERTS_URL: str = (
        "https://www.googleapis.com/service_accounts/v1/jwk/"
        "securetoken@system.gserviceaccount.com"
    )
    GOOGLE_ISSUER_PREFIX: str = "https://securetoken.google.com/"
    IDENTITY_HTTP_TIMEOUT: float = 5.0

    # S3 Storage
    S3_BUCKET_NAME: str = "blog-uploads"
    S3_ENDPOINT_URL: str = ""
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    AWS_REGION: str = "ap-south-1"
    UPLOAD_URL_EXPIRES: int = 1000
    UPLOAD_CONTENT_TYPE: str = "image/jpeg"

    # Pagination
    LATEST_PAGE_SIZE: int = 5
    SEARCH_PAGE_SIZE: int = 2
    TRENDING_LIMIT: int = 8
    USER_SEARCH_LIMIT: int = 50

    # Blog limits
    BLOG_DESCRIPTION_MAX_LENGTH: int = 200
    BLOG_MAX_TAGS: int = 10

    # CORS
    CORS_ORIGINS: List[str] = ["*"]
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: List[str] = ["*"]
    CORS_ALLOW_HEADERS: List[str] = ["*"]

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
