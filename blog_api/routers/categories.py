from fastapi import APIRouter, Depends, status

from ..auth import AuthUser
from ..dependencies import ensure_db, get_current_user
from ..schemas import CategoryCreateRequest, CategoryUpdateRequest
from ..services.category_service import CategoryService

router = APIRouter(
    prefix="/api/categories",
    tags=["Categories"],
    dependencies=[Depends(ensure_db)],
)


@router.get("", summary="List categories sorted by name")
async def list_categories():
    categories = await CategoryService.list_categories()
    return {"success": True, "data": categories}


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a category")
async def create_category(
    category_data: CategoryCreateRequest,
    current_user: AuthUser = Depends(get_current_user),
):
    category = await CategoryService.create_category(category_data.model_dump())
    return {"success": True, "data": category}


@router.put("/{category_id}", summary="Update a category")
async def update_category(
    category_id: str,
    category_data: CategoryUpdateRequest,
    current_user: AuthUser = Depends(get_current_user),
):
    category = await CategoryService.update_category(
        category_id, category_data.model_dump(exclude_unset=True)
    )
    return {"success": True, "data": category}


@router.delete("/{category_id}", summary="Delete a category")
async def delete_category(
    category_id: str,
    current_user: AuthUser = Depends(get_current_user),
):
    await CategoryService.delete_category(category_id)
    return {"success": True, "data": {}}
