"""
Like routes
"""
from fastapi import APIRouter, Depends

from blog_service.schemas import LikeRequest, LikeResponse, IsLikedRequest, IsLikedResponse
from blog_service.application.services import EngagementService
from blog_service.api.dependencies import get_engagement_service, get_current_user_id


router = APIRouter(tags=["Interactions"])


@router.post("/like-blog", response_model=LikeResponse)
async def like_blog(
    request: LikeRequest,
    user_id: str = Depends(get_current_user_id),
    engagement_service: EngagementService = Depends(get_engagement_service)
):
    """
    Like or unlike a blog

    - **_id**: Blog document id
    - **isLikedByUser**: Client view of the current state; the stored state wins
    - Requires authentication
    """
    liked = await engagement_service.toggle_like(user_id, request.id, request.isLikedByUser)
    return LikeResponse(liked_by_user=liked)


@router.post("/isliked-by-user", response_model=IsLikedResponse)
async def is_liked_by_user(
    request: IsLikedRequest,
    user_id: str = Depends(get_current_user_id),
    engagement_service: EngagementService = Depends(get_engagement_service)
):
    return IsLikedResponse(result=await engagement_service.is_liked(user_id, request.id))
