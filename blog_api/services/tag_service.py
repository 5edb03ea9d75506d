"""
Tag service for tag management operations
"""

import logging
from typing import Any, Dict, List

from pymongo.errors import DuplicateKeyError

from ..errors import ValidationError
from ..models.tag import Tag
from ..utils import get_or_404, slugify

logger = logging.getLogger(__name__)


class TagService:
    """Service class for tag operations"""

    @staticmethod
    def to_response(tag: Tag) -> Dict[str, Any]:
        return {
            "id": str(tag.id),
            "name": tag.name,
            "slug": tag.slug,
            "createdAt": tag.created_at,
        }

    @staticmethod
    async def _unique_slug(name: str, exclude_id=None) -> str:
        slug = slugify(name)
        if not slug:
            raise ValidationError("Tag name must contain letters or digits")

        query: Dict[str, Any] = {"$or": [{"name": name}, {"slug": slug}]}
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        if await Tag.find_one(query):
            raise ValidationError("Tag with this name already exists")
        return slug

    @staticmethod
    async def list_tags() -> List[Dict[str, Any]]:
        tags = await Tag.find().sort([("name", 1)]).to_list()
        return [TagService.to_response(tag) for tag in tags]

    @staticmethod
    async def create_tag(data: Dict[str, Any]) -> Dict[str, Any]:
        slug = await TagService._unique_slug(data["name"])

        tag = Tag(name=data["name"], slug=slug)
        try:
            await tag.insert()
        except DuplicateKeyError:
            raise ValidationError("Tag with this name already exists")

        logger.info(f"Tag created: {tag.slug}")
        return TagService.to_response(tag)

    @staticmethod
    async def update_tag(tag_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        tag = await get_or_404(Tag, tag_id, "Tag not found")

        if data.get("name") is not None:
            tag.slug = await TagService._unique_slug(data["name"], exclude_id=tag.id)
            tag.name = data["name"]

        try:
            await tag.save()
        except DuplicateKeyError:
            raise ValidationError("Tag with this name already exists")

        return TagService.to_response(tag)

    @staticmethod
    async def delete_tag(tag_id: str) -> None:
        tag = await get_or_404(Tag, tag_id, "Tag not found")
        await tag.delete()
        logger.info(f"Tag deleted: {tag.slug}")
