"""
Authentication routes
"""
from fastapi import APIRouter, Depends

from blog_service.schemas import (
    SignupRequest, SigninRequest, GoogleAuthRequest, AuthResponse, TokenResponse
)
from blog_service.application.services import AuthService
from blog_service.api.dependencies import get_auth_service, get_current_user_id


router = APIRouter(tags=["Authentication"])


@router.post("/signup", response_model=AuthResponse)
async def signup(
    user_data: SignupRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Register a new user

    - **fullname**: At least 3 characters
    - **email**: Valid email address
    - **password**: 6-20 characters with a digit, a lowercase and an uppercase letter
    """
    return await auth_service.signup(
        fullname=user_data.fullname,
        email=user_data.email,
        password=user_data.password
    )


@router.post("/signin", response_model=AuthResponse)
async def signin(
    credentials: SigninRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Login with email and password"""
    return await auth_service.signin(email=credentials.email, password=credentials.password)


@router.post("/google-auth", response_model=AuthResponse)
async def google_auth(
    request: GoogleAuthRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Login or register with Google

    - **access_token**: ID token issued by Google sign-in
    """
    return await auth_service.google_auth(request.access_token)


@router.post("/refresh-token", response_model=TokenResponse)
async def refresh_token(
    user_id: str = Depends(get_current_user_id),
    auth_service: AuthService = Depends(get_auth_service)
):
    """Exchange a valid access token for a fresh one"""
    return TokenResponse(access_token=await auth_service.refresh(user_id))
