from .auth import router as auth_router
from .blogs import router as blogs_router
from .engagement import router as engagement_router
from .uploads import router as uploads_router
from .users import router as users_router


__all__ = [
    # auth.py
    "auth_router",
    # blogs.py
    "blogs_router",
    # engagement.py
    "engagement_router",
    # uploads.py
    "uploads_router",
    # users.py
    "users_router",
]
