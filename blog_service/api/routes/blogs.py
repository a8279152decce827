"""
Blog routes
"""
from fastapi import APIRouter, Depends

from blog_service.schemas import (
    PageRequest, BlogSearchRequest, BlogCountRequest, BlogListResponse, CountResponse,
    BlogCreateRequest, BlogIdResponse, GetBlogRequest, BlogResponse
)
from blog_service.application.services import BlogService
from blog_service.domain.models import BlogQuery
from blog_service.api.dependencies import get_blog_service, get_current_user_id


router = APIRouter(tags=["Blogs"])


@router.post("/latest-blogs", response_model=BlogListResponse)
async def latest_blogs(
    request: PageRequest,
    blog_service: BlogService = Depends(get_blog_service)
):
    """Latest published blogs, five per page"""
    return BlogListResponse(blogs=await blog_service.latest_blogs(request.page))


@router.post("/all-latest-blogs-count", response_model=CountResponse)
async def all_latest_blogs_count(blog_service: BlogService = Depends(get_blog_service)):
    return CountResponse(totalDocs=await blog_service.latest_blogs_count())


@router.get("/trending-blogs", response_model=BlogListResponse)
async def trending_blogs(blog_service: BlogService = Depends(get_blog_service)):
    """Most read published blogs"""
    return BlogListResponse(blogs=await blog_service.trending_blogs())


@router.post("/search-blogs", response_model=BlogListResponse)
async def search_blogs(
    request: BlogSearchRequest,
    blog_service: BlogService = Depends(get_blog_service)
):
    """
    Search published blogs

    - **tag**: Exact tag, excluding **eliminate_blog**
    - **query**: Case-insensitive title fragment
    - **author**: Author user id
    - **page** / **limit**: Pagination (limit defaults to 2)
    """
    criteria = BlogQuery(
        tag=request.tag,
        query=request.query,
        author=request.author,
        eliminate_blog=request.eliminate_blog
    )
    blogs = await blog_service.search_blogs(criteria, request.page, request.limit)
    return BlogListResponse(blogs=blogs)


@router.post("/search-blogs-count", response_model=CountResponse)
async def search_blogs_count(
    request: BlogCountRequest,
    blog_service: BlogService = Depends(get_blog_service)
):
    criteria = BlogQuery(tag=request.tag, query=request.query, author=request.author)
    return CountResponse(totalDocs=await blog_service.search_blogs_count(criteria))


@router.post("/create-blog", response_model=BlogIdResponse)
async def create_blog(
    blog_data: BlogCreateRequest,
    user_id: str = Depends(get_current_user_id),
    blog_service: BlogService = Depends(get_blog_service)
):
    """
    Create or update a blog

    - **id**: Slug of an existing blog to update
    - **draft**: Drafts only require a title
    - Requires authentication
    """
    blog_id = await blog_service.create_blog(
        author_id=user_id,
        title=blog_data.title,
        des=blog_data.des,
        banner=blog_data.banner,
        tags=blog_data.tags,
        content=blog_data.content,
        draft=blog_data.draft,
        blog_id=blog_data.id
    )
    return BlogIdResponse(id=blog_id)


@router.post("/get-blog", response_model=BlogResponse)
async def get_blog(
    request: GetBlogRequest,
    blog_service: BlogService = Depends(get_blog_service)
):
    """
    Get a blog by slug

    - **draft**: Must be true to open a draft
    - **mode**: "edit" skips read counting
    """
    blog = await blog_service.get_blog(request.blog_id, draft=request.draft, mode=request.mode)
    return BlogResponse(blog=blog)
