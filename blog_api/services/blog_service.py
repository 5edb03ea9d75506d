"""
Blog service for blog post management operations
"""

import asyncio
import json
import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional, Tuple

from fastapi import UploadFile
from pymongo.errors import DuplicateKeyError

from ..auth import AuthProvider, get_auth_provider
from ..errors import DuplicateKey, NotFound, ValidationError
from ..models.blog import Blog, BlogImage
from ..models.category import Category
from ..models.tag import Tag
from ..utils import (
    add_filter_if_not_none,
    batch_get,
    create_search_filter,
    get_or_404,
    paginate_query,
    parse_object_id,
    slugify,
    utc_now,
)
from .storage import MediaStorage

logger = logging.getLogger(__name__)

# API sort keys -> document fields
SORT_FIELDS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "title": "title",
    "viewsCount": "views_count",
    "likesCount": "likes_count",
}

TRENDING_PERIODS = {
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
}

SEARCH_FIELDS = ["title", "content", "excerpt"]

FEATURED_LIMIT = 5

ALLOWED_IMAGE_TYPES = {
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
}

# Slugs that collide with fixed routes under /api/blogs
RESERVED_SLUGS = {"featured", "trending", "upload-images", "admin"}

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 200


def _reference(document) -> Optional[Dict[str, Any]]:
    if document is None:
        return None
    return {"id": str(document.id), "name": document.name, "slug": document.slug}


def _parse_json_list(raw: Optional[str], field: str) -> List[str]:
    """Decode a JSON-encoded list form field; blank means an empty list"""
    if raw is None or not raw.strip():
        return []
    try:
        values = json.loads(raw)
    except json.JSONDecodeError:
        raise ValidationError(f"{field} must be a JSON-encoded array")
    if not isinstance(values, list):
        raise ValidationError(f"{field} must be a JSON-encoded array")
    return ["" if value is None else str(value) for value in values]


class BlogService:
    """Service class for blog post operations"""

    # Response shaping

    @staticmethod
    def image_to_response(image: BlogImage) -> Dict[str, Any]:
        return {
            "url": image.url,
            "publicId": image.public_id,
            "position": image.position,
            "altText": image.alt_text,
            "caption": image.caption,
        }

    @staticmethod
    def to_response(
        blog: Blog,
        categories: Dict[str, Category],
        tags: Dict[str, Tag],
        provider: AuthProvider,
    ) -> Dict[str, Any]:
        """Serialize a blog with its references already looked up

        Dangling references resolve to None (category) or are left out (tags).
        """
        author = provider.lookup(blog.author)
        return {
            "id": str(blog.id),
            "title": blog.title,
            "slug": blog.slug,
            "content": blog.content,
            "excerpt": blog.excerpt,
            "status": blog.status,
            "category": (
                _reference(categories.get(str(blog.category)))
                if blog.category
                else None
            ),
            "tags": [
                _reference(tags[str(tag_id)])
                for tag_id in blog.tags
                if str(tag_id) in tags
            ],
            "author": {"id": blog.author, "name": author.name if author else None},
            "viewsCount": blog.views_count,
            "likesCount": blog.likes_count,
            "isFeatured": blog.is_featured,
            "images": [BlogService.image_to_response(image) for image in blog.images],
            "createdAt": blog.created_at,
            "updatedAt": blog.updated_at,
        }

    @staticmethod
    async def resolve(blogs: List[Blog]) -> List[Dict[str, Any]]:
        """Resolve category/tag references for a batch of blogs

        One query per referenced collection regardless of the batch size.
        """
        category_ids = [blog.category for blog in blogs if blog.category]
        tag_ids = [tag_id for blog in blogs for tag_id in blog.tags]

        categories = await batch_get(Category, category_ids)
        tags = await batch_get(Tag, tag_ids)
        provider = get_auth_provider()

        return [
            BlogService.to_response(blog, categories, tags, provider)
            for blog in blogs
        ]

    # Validation

    @staticmethod
    def _filter_images(images: List[Dict[str, Any]]) -> List[BlogImage]:
        kept = [image for image in images if image.get("url") and image.get("public_id")]
        if len(kept) != len(images):
            raise ValidationError("Every image requires both url and publicId")
        return [BlogImage(**image) for image in kept]

    @staticmethod
    def validate_fields(data: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
        """
        Validate blog input and map it onto document fields

        Args:
            data: Request payload (snake_case keys)
            partial: When True only the keys present in ``data`` are checked

        Returns:
            Dictionary of document fields to set, including the derived slug
        """
        fields: Dict[str, Any] = {}

        if not partial or "title" in data:
            title = (data.get("title") or "").strip()
            if not title:
                raise ValidationError("Title is required")
            if not TITLE_MIN_LENGTH <= len(title) <= TITLE_MAX_LENGTH:
                raise ValidationError(
                    f"Title must be between {TITLE_MIN_LENGTH} and {TITLE_MAX_LENGTH} characters"
                )
            slug = slugify(title)
            if not slug:
                raise ValidationError("Title must contain letters or digits")
            if slug in RESERVED_SLUGS:
                raise ValidationError(f"Title produces a reserved slug: {slug}")
            fields["title"] = title
            fields["slug"] = slug

        if not partial or "content" in data:
            content = data.get("content")
            if not content or not content.strip():
                raise ValidationError("Content is required")
            fields["content"] = content

        if data.get("images") is not None:
            fields["images"] = BlogService._filter_images(data["images"])

        if "excerpt" in data:
            fields["excerpt"] = data["excerpt"]
        if "category" in data:
            fields["category"] = data["category"]
        if "tags" in data:
            # Tags form a set; keep first-seen order
            fields["tags"] = list(dict.fromkeys(data["tags"] or []))
        if data.get("status") is not None:
            fields["status"] = data["status"]
        if data.get("is_featured") is not None:
            fields["is_featured"] = data["is_featured"]

        return fields

    @staticmethod
    async def _ensure_slug_available(slug: str, exclude_id=None) -> None:
        query: Dict[str, Any] = {"slug": slug}
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        if await Blog.find_one(query):
            raise DuplicateKey(f"A blog with slug '{slug}' already exists")

    # Reads

    @staticmethod
    async def list_blogs(
        page: int = 1,
        limit: int = 10,
        category: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
    ) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        """
        List blogs with filters and pagination

        Returns:
            Tuple of (resolved blogs, pagination meta)
        """
        sort_field = SORT_FIELDS.get(sort_by)
        if sort_field is None:
            raise ValidationError(
                f"sortBy must be one of: {', '.join(SORT_FIELDS)}"
            )

        query_filters: Dict[str, Any] = {}
        if category:
            category_id = parse_object_id(category)
            if category_id is None:
                raise ValidationError("category must be a valid id")
            add_filter_if_not_none(query_filters, "category", category_id)

        search_filter = create_search_filter(search, SEARCH_FIELDS)
        if search_filter:
            query_filters.update(search_filter)

        blogs, meta = await paginate_query(
            Blog,
            query_filters,
            sort_by=sort_field,
            sort_order=sort_order,
            page=page,
            limit=limit,
        )
        return await BlogService.resolve(blogs), meta

    @staticmethod
    async def _record_view(blog: Blog) -> Dict[str, Any]:
        # Read-modify-write; concurrent readers may lose an increment
        blog.views_count = (blog.views_count or 0) + 1
        await blog.save()
        return (await BlogService.resolve([blog]))[0]

    @staticmethod
    async def get_blog_by_slug(slug: str) -> Dict[str, Any]:
        blog = await Blog.find_one({"slug": slug})
        if not blog:
            raise NotFound("Blog not found")
        return await BlogService._record_view(blog)

    @staticmethod
    async def get_blog_by_id(blog_id: str) -> Dict[str, Any]:
        blog = await get_or_404(Blog, blog_id, "Blog not found")
        return await BlogService._record_view(blog)

    @staticmethod
    async def list_featured() -> List[Dict[str, Any]]:
        blogs = await Blog.find({"is_featured": True}).limit(FEATURED_LIMIT).to_list()
        return await BlogService.resolve(blogs)

    @staticmethod
    async def list_trending(limit: int = 5, period: str = "7d") -> List[Dict[str, Any]]:
        """Most viewed blogs created within the trailing period"""
        window = TRENDING_PERIODS.get(period)
        if window is None:
            raise ValidationError(
                f"period must be one of: {', '.join(TRENDING_PERIODS)}"
            )

        cutoff = utc_now() - window
        blogs = (
            await Blog.find({"created_at": {"$gte": cutoff}})
            .sort([("views_count", -1), ("likes_count", -1)])
            .limit(limit)
            .to_list()
        )
        return await BlogService.resolve(blogs)

    # Writes

    @staticmethod
    async def create_blog(data: Dict[str, Any], author_id: str) -> Dict[str, Any]:
        """
        Create a new blog post

        Args:
            data: Request payload (snake_case keys)
            author_id: Id of the authenticated caller

        Returns:
            The resolved blog
        """
        fields = BlogService.validate_fields(data)
        await BlogService._ensure_slug_available(fields["slug"])

        blog = Blog(**fields, author=author_id)
        try:
            await blog.insert()
        except DuplicateKeyError:
            raise DuplicateKey(f"A blog with slug '{fields['slug']}' already exists")

        logger.info(f"Blog created: {blog.slug} ({blog.id})")
        return (await BlogService.resolve([blog]))[0]

    @staticmethod
    async def update_blog(blog_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Apply a partial update; the slug follows the title"""
        fields = BlogService.validate_fields(data, partial=True)
        blog = await get_or_404(Blog, blog_id, "Blog not found")

        if "slug" in fields and fields["slug"] != blog.slug:
            await BlogService._ensure_slug_available(fields["slug"], exclude_id=blog.id)

        for field, value in fields.items():
            setattr(blog, field, value)
        blog.update_timestamp()

        try:
            await blog.save()
        except DuplicateKeyError:
            raise DuplicateKey(f"A blog with slug '{blog.slug}' already exists")

        return (await BlogService.resolve([blog]))[0]

    @staticmethod
    async def delete_blog(blog_id: str, storage: MediaStorage) -> List[str]:
        """
        Delete a blog, then remove its images from the media host

        Image removal runs after the delete has committed and is best-effort.

        Returns:
            public ids whose removal failed
        """
        blog = await get_or_404(Blog, blog_id, "Blog not found")
        await blog.delete()
        logger.info(f"Blog deleted: {blog.slug} ({blog.id})")

        return await BlogService.cleanup_images(blog.images, storage)

    @staticmethod
    async def cleanup_images(
        images: List[BlogImage], storage: MediaStorage
    ) -> List[str]:
        """Run one delete per image concurrently, collecting failures"""
        if not images:
            return []

        results = await asyncio.gather(
            *(storage.delete_image(image.public_id) for image in images),
            return_exceptions=True,
        )

        failed = []
        for image, result in zip(images, results):
            if isinstance(result, Exception):
                logger.warning(
                    f"Failed to delete image {image.public_id} from media host: {result}"
                )
                failed.append(image.public_id)
        return failed

    @staticmethod
    def validate_image_file(file: UploadFile, content: bytes, max_bytes: int) -> None:
        if file.content_type not in ALLOWED_IMAGE_TYPES:
            raise ValidationError(
                f"Invalid file type for {file.filename}. Allowed types: {', '.join(sorted(ALLOWED_IMAGE_TYPES))}"
            )
        if len(content) > max_bytes:
            raise ValidationError(
                f"File {file.filename} too large. Maximum size: {max_bytes // (1024 * 1024)}MB"
            )

    @staticmethod
    async def upload_images(
        files: Optional[List[UploadFile]],
        alt_texts: Optional[str],
        captions: Optional[str],
        storage: MediaStorage,
        max_bytes: int,
    ) -> List[Dict[str, Any]]:
        """
        Upload images to the media host

        Args:
            files: Uploaded image files, in content order
            alt_texts: JSON-encoded list of alt texts, zipped by index
            captions: JSON-encoded list of captions, zipped by index
            storage: Media host
            max_bytes: Per-file size cap

        Returns:
            One ``{url, publicId, position, altText, caption}`` per file

        Raises:
            ValidationError: no files, bad file, or malformed alt/caption lists
            MediaUploadError: any single upload failed
        """
        if not files:
            raise ValidationError("No images provided")

        alt_list = _parse_json_list(alt_texts, "altTexts")
        caption_list = _parse_json_list(captions, "captions")

        contents = []
        for file in files:
            content = await file.read()
            BlogService.validate_image_file(file, content, max_bytes)
            contents.append(content)

        tasks = [
            asyncio.ensure_future(
                storage.upload_image(content, file.filename or "image", file.content_type)
            )
            for file, content in zip(files, contents)
        ]
        try:
            uploaded = await asyncio.gather(*tasks)
        except Exception:
            # One failure fails the call; stop the uploads still in flight
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        images = [
            BlogImage(
                url=result.url,
                public_id=result.public_id,
                position=index,
                alt_text=alt_list[index] if index < len(alt_list) else "",
                caption=caption_list[index] if index < len(caption_list) else "",
            )
            for index, result in enumerate(uploaded)
        ]
        return [BlogService.image_to_response(image) for image in images]
