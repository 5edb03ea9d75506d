"""
Category service for category management operations
"""

import logging
from typing import Any, Dict, List

from pymongo.errors import DuplicateKeyError

from ..errors import ValidationError
from ..models.category import Category
from ..utils import get_or_404, slugify

logger = logging.getLogger(__name__)


class CategoryService:
    """Service class for category operations"""

    @staticmethod
    def to_response(category: Category) -> Dict[str, Any]:
        return {
            "id": str(category.id),
            "name": category.name,
            "slug": category.slug,
            "description": category.description,
            "createdAt": category.created_at,
        }

    @staticmethod
    def _slug_for(name: str) -> str:
        slug = slugify(name)
        if not slug:
            raise ValidationError("Category name must contain letters or digits")
        return slug

    @staticmethod
    async def _ensure_unique(name: str, slug: str, exclude_id=None) -> None:
        query: Dict[str, Any] = {"$or": [{"name": name}, {"slug": slug}]}
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        if await Category.find_one(query):
            raise ValidationError("Category with this name already exists")

    @staticmethod
    async def list_categories() -> List[Dict[str, Any]]:
        categories = await Category.find().sort([("name", 1)]).to_list()
        return [CategoryService.to_response(category) for category in categories]

    @staticmethod
    async def create_category(data: Dict[str, Any]) -> Dict[str, Any]:
        """Create a category; the slug is derived from the name"""
        name = data["name"]
        slug = CategoryService._slug_for(name)
        await CategoryService._ensure_unique(name, slug)

        category = Category(name=name, slug=slug, description=data.get("description"))
        try:
            await category.insert()
        except DuplicateKeyError:
            raise ValidationError("Category with this name already exists")

        logger.info(f"Category created: {category.slug}")
        return CategoryService.to_response(category)

    @staticmethod
    async def update_category(category_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Partial update; a new name regenerates the slug"""
        category = await get_or_404(Category, category_id, "Category not found")

        if data.get("name") is not None:
            slug = CategoryService._slug_for(data["name"])
            await CategoryService._ensure_unique(data["name"], slug, exclude_id=category.id)
            category.name = data["name"]
            category.slug = slug
        if "description" in data:
            category.description = data["description"]

        try:
            await category.save()
        except DuplicateKeyError:
            raise ValidationError("Category with this name already exists")

        return CategoryService.to_response(category)

    @staticmethod
    async def delete_category(category_id: str) -> None:
        # Blogs keep their (now dangling) reference
        category = await get_or_404(Category, category_id, "Category not found")
        await category.delete()
        logger.info(f"Category deleted: {category.slug}")
