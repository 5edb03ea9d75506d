from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from ..auth import AuthUser
from ..config import settings
from ..dependencies import ensure_db, get_current_user
from ..schemas import BlogCreateRequest, BlogUpdateRequest
from ..services.blog_service import BlogService
from ..services.storage import MediaStorage, get_storage

router = APIRouter(prefix="/api/blogs", tags=["Blogs"], dependencies=[Depends(ensure_db)])


@router.get(
    "",
    response_model=Dict[str, Any],
    summary="List blogs",
    description="Paginated blog listing with optional category filter and text search",
)
async def list_blogs(
    page: int = Query(1, description="Page number", ge=1),
    limit: int = Query(10, description="Items per page", ge=1, le=100),
    category: Optional[str] = Query(None, description="Filter by category id"),
    search: Optional[str] = Query(None, description="Search in title, content and excerpt"),
    sort_by: str = Query("createdAt", alias="sortBy", description="Field to sort by"),
    sort_order: str = Query(
        "desc", alias="sortOrder", pattern="^(asc|desc)$", description="asc or desc"
    ),
):
    blogs, meta = await BlogService.list_blogs(
        page=page,
        limit=limit,
        category=category,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return {"success": True, "data": blogs, "meta": meta}


@router.get("/featured", response_model=Dict[str, Any], summary="Featured blogs")
async def list_featured_blogs():
    return {"success": True, "data": await BlogService.list_featured()}


@router.get(
    "/trending",
    response_model=Dict[str, Any],
    summary="Trending blogs",
    description="Most viewed blogs created within the last 7 or 30 days",
)
async def list_trending_blogs(
    limit: int = Query(5, ge=1, le=50),
    period: str = Query("7d", description="7d or 30d"),
):
    blogs = await BlogService.list_trending(limit=limit, period=period)
    return {"success": True, "data": blogs}


@router.post(
    "/upload-images",
    response_model=Dict[str, Any],
    summary="Upload blog images",
    description="Upload images to the media host; altTexts and captions are JSON-encoded arrays",
)
async def upload_images(
    images: Optional[List[UploadFile]] = File(None),
    alt_texts: Optional[str] = Form(None, alias="altTexts"),
    captions: Optional[str] = Form(None),
    current_user: AuthUser = Depends(get_current_user),
    storage: MediaStorage = Depends(get_storage),
):
    uploaded = await BlogService.upload_images(
        images,
        alt_texts,
        captions,
        storage,
        max_bytes=settings.MAX_IMAGE_SIZE_MB * 1024 * 1024,
    )
    return {"success": True, "data": uploaded}


@router.get("/admin/{blog_id}", response_model=Dict[str, Any], summary="Get blog by id")
async def get_blog_by_id(blog_id: str):
    return {"success": True, "data": await BlogService.get_blog_by_id(blog_id)}


@router.get("/{slug}", response_model=Dict[str, Any], summary="Get blog by slug")
async def get_blog_by_slug(slug: str):
    return {"success": True, "data": await BlogService.get_blog_by_slug(slug)}


@router.post(
    "",
    response_model=Dict[str, Any],
    status_code=status.HTTP_201_CREATED,
    summary="Create blog",
)
async def create_blog(
    blog_data: BlogCreateRequest,
    current_user: AuthUser = Depends(get_current_user),
):
    blog = await BlogService.create_blog(
        blog_data.model_dump(exclude_unset=True), author_id=current_user.id
    )
    return {"success": True, "data": blog}


@router.put("/{blog_id}", response_model=Dict[str, Any], summary="Update blog")
async def update_blog(
    blog_id: str,
    blog_data: BlogUpdateRequest,
    current_user: AuthUser = Depends(get_current_user),
):
    blog = await BlogService.update_blog(blog_id, blog_data.model_dump(exclude_unset=True))
    return {"success": True, "data": blog}


@router.delete("/{blog_id}", response_model=Dict[str, Any], summary="Delete blog")
async def delete_blog(
    blog_id: str,
    current_user: AuthUser = Depends(get_current_user),
    storage: MediaStorage = Depends(get_storage),
):
    failed = await BlogService.delete_blog(blog_id, storage)
    return {"success": True, "data": {"failedImageDeletes": failed}}
