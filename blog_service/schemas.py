"""
Pydantic schemas for request/response validation
"""
from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any, Union


class SignupRequest(BaseModel):
    """Local account registration request"""
    fullname: str = ""
    email: str = ""
    password: str = ""


class SigninRequest(BaseModel):
    """Local account login request"""
    email: str = ""
    password: str = ""


class GoogleAuthRequest(BaseModel):
    """Google login request carrying the provider ID token"""
    access_token: str = ""


class AuthResponse(BaseModel):
    """Token and public profile fields"""
    access_token: str
    profile_img: Optional[str] = None
    username: str
    fullname: str


class TokenResponse(BaseModel):
    access_token: str


class UploadURLResponse(BaseModel):
    uploadURL: str


class PageRequest(BaseModel):
    page: int = Field(1, ge=1)


class BlogCountRequest(BaseModel):
    """Blog search criteria; tag wins over query, query over author"""
    tag: Optional[str] = None
    query: Optional[str] = None
    author: Optional[str] = None


class BlogSearchRequest(BlogCountRequest):
    page: int = Field(1, ge=1)
    limit: Optional[int] = Field(None, ge=1, le=100)
    eliminate_blog: Optional[str] = None


class CountResponse(BaseModel):
    totalDocs: int


class BlogListResponse(BaseModel):
    blogs: List[Dict[str, Any]]


class UserSearchRequest(BaseModel):
    query: str = ""


class UserListResponse(BaseModel):
    users: List[Dict[str, Any]]


class ProfileRequest(BaseModel):
    username: str = ""


class BlogCreateRequest(BaseModel):
    """Blog creation or update request"""
    title: str = ""
    des: str = ""
    banner: str = ""
    tags: List[str] = []
    content: Union[Dict[str, Any], List[Any]] = {}
    draft: bool = False
    id: Optional[str] = None


class BlogIdResponse(BaseModel):
    id: str


class GetBlogRequest(BaseModel):
    blog_id: str = ""
    draft: bool = False
    mode: Optional[str] = None


class BlogResponse(BaseModel):
    blog: Dict[str, Any]


class LikeRequest(BaseModel):
    """Like toggle request"""
    id: str = Field("", alias="_id")
    isLikedByUser: Optional[bool] = None

    class Config:
        populate_by_name = True


class LikeResponse(BaseModel):
    liked_by_user: bool


class IsLikedRequest(BaseModel):
    id: str = Field("", alias="_id")

    class Config:
        populate_by_name = True


class IsLikedResponse(BaseModel):
    result: bool


class ErrorResponse(BaseModel):
    """Error response"""
    error: str
