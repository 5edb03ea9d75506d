from typing import List, Dict, Any, Optional, Tuple
from datetime import datetime, timezone
import re

from beanie import PydanticObjectId
from bson.errors import InvalidId

from .errors import NotFound

_NON_SLUG_CHARS = re.compile(r"[\W_]+")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def slugify(text: str) -> str:
    """Turn a title or name into a lowercase, hyphen-separated URL identifier

    Every run of whitespace, punctuation or underscores collapses to a single
    hyphen; letters and digits of any script are kept. Hyphens at either end
    are trimmed.
    """
    return _NON_SLUG_CHARS.sub("-", text.lower()).strip("-")


def parse_object_id(value: Any) -> Optional[PydanticObjectId]:
    """Parse a document id, returning None when it is not a valid ObjectId"""
    if isinstance(value, PydanticObjectId):
        return value
    try:
        return PydanticObjectId(str(value))
    except (InvalidId, TypeError):
        return None


async def get_or_404(model, id: Any, detail: str = "Item not found"):
    """Get a document by ID or raise NotFound

    An id that cannot be parsed can never match a document, so it is
    reported the same way as a missing one.
    """
    object_id = parse_object_id(id)
    item = await model.get(object_id) if object_id is not None else None
    if not item:
        raise NotFound(detail)
    return item


async def paginate_query(
    model,
    query_filters: dict,
    sort_by: str = "created_at",
    sort_order: str = "desc",
    page: int = 1,
    limit: int = 10,
) -> Tuple[List[Any], Dict[str, Any]]:
    """Skip/limit pagination for a Beanie document model

    Args:
        model: The Beanie document model to query
        query_filters: Dictionary of query filters
        sort_by: Field to sort by (default: created_at)
        sort_order: "asc" or "desc" (default: desc)
        page: Page number, 1-based (default: 1)
        limit: Items per page (default: 10)

    Returns:
        Tuple of (documents, pagination_info)
    """
    skip = (page - 1) * limit
    sort_direction = 1 if sort_order == "asc" else -1

    items = (
        await model.find(query_filters)
        .sort([(sort_by, sort_direction)])
        .skip(skip)
        .limit(limit)
        .to_list()
    )

    total_items = await model.find(query_filters).count()
    total_pages = (total_items + limit - 1) // limit if limit > 0 else 1

    pagination_info = {
        "total": total_items,
        "page": page,
        "limit": limit,
        "totalPages": total_pages,
    }

    return items, pagination_info


async def batch_get(model, ids: List[PydanticObjectId]) -> Dict[str, Any]:
    """Get multiple documents by ID in a single query

    Returns:
        Dictionary mapping ID strings to documents; ids with no document are
        simply absent
    """
    if not ids:
        return {}

    items = await model.find({"_id": {"$in": list(set(ids))}}).to_list()
    return {str(item.id): item for item in items}


def create_search_filter(
    search_text: Optional[str], fields: List[str]
) -> Optional[Dict]:
    """Create a case-insensitive substring filter over several fields

    The search text is matched literally; regex metacharacters are escaped.
    """
    if not search_text or not search_text.strip():
        return None

    pattern = re.escape(search_text.strip())
    return {
        "$or": [{field: {"$regex": pattern, "$options": "i"}} for field in fields]
    }


def add_filter_if_not_none(filters: Dict, field: str, value: Any) -> Dict:
    """Add a filter condition if the value is not None"""
    if value is not None:
        filters[field] = value
    return filters
