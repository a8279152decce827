"""
Blog Service
Main FastAPI application with MongoDB and JWT authentication
"""
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException
import logging
import time

from blog_service.config import settings
from blog_service.domain.exceptions import BlogServiceError
from blog_service.infrastructure.database.connection import MongoDB
from blog_service.infrastructure.identity import GoogleIdentityVerifier
from blog_service.infrastructure.storage import StorageManager
from blog_service.schemas import ErrorResponse
from blog_service.api.routes import (
    auth_router,
    blogs_router,
    engagement_router,
    uploads_router,
    users_router,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.DEBUG else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    logger.info("Starting Blog Service...")

    app.state.mongodb = MongoDB()
    await app.state.mongodb.connect()

    app.state.identity_verifier = GoogleIdentityVerifier()
    await app.state.identity_verifier.start()

    app.state.storage = StorageManager()
    app.state.storage.start()

    logger.info(f"{settings.APP_NAME} v{settings.APP_VERSION} started")

    yield

    # Shutdown
    logger.info("Shutting down Blog Service...")
    app.state.storage.stop()
    await app.state.identity_verifier.stop()
    await app.state.mongodb.disconnect()


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Blogging platform backend with MongoDB, JWT and Google sign-in",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method, path, status and latency of every request"""
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)")
    return response


@app.exception_handler(BlogServiceError)
async def blog_service_error_handler(request: Request, exc: BlogServiceError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=ErrorResponse(error=exc.message).model_dump())


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=str(exc.detail)).model_dump(),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        field = ".".join(str(part) for part in errors[0].get("loc", []) if part != "body")
        message = f"{field}: {errors[0].get('msg')}" if field else errors[0].get("msg")
    else:
        message = "Invalid request"
    return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content=ErrorResponse(error=message).model_dump())


@app.exception_handler(PyMongoError)
async def database_error_handler(request: Request, exc: PyMongoError):
    logger.error(f"Database error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(error="Internal server error").model_dump(),
    )


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


# add routers
app.include_router(auth_router)
app.include_router(blogs_router)
app.include_router(engagement_router)
app.include_router(uploads_router)
app.include_router(users_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "blog_service.main:app",
        host="0.0.0.0",
        port=3000,
        reload=settings.DEBUG
    )
