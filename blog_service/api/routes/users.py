"""
User routes
"""
from fastapi import APIRouter, Depends

from blog_service.schemas import UserSearchRequest, UserListResponse, ProfileRequest
from blog_service.application.services import UserService
from blog_service.api.dependencies import get_user_service


router = APIRouter(tags=["Users"])


@router.post("/search-users", response_model=UserListResponse)
async def search_users(
    request: UserSearchRequest,
    user_service: UserService = Depends(get_user_service)
):
    """Users whose username contains the query"""
    return UserListResponse(users=await user_service.search_users(request.query))


@router.post("/get-profile")
async def get_profile(
    request: ProfileRequest,
    user_service: UserService = Depends(get_user_service)
):
    """
    Get a public profile by username

    Password, login provider and blog references are never returned.
    """
    return await user_service.get_profile(request.username)
