from fastapi import APIRouter, Depends, status

from ..auth import AuthUser
from ..dependencies import ensure_db, get_current_user
from ..schemas import TagCreateRequest, TagUpdateRequest
from ..services.tag_service import TagService

router = APIRouter(prefix="/api/tags", tags=["Tags"], dependencies=[Depends(ensure_db)])


@router.get("", summary="List tags sorted by name")
async def list_tags():
    return {"success": True, "data": await TagService.list_tags()}


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a tag")
async def create_tag(
    tag_data: TagCreateRequest,
    current_user: AuthUser = Depends(get_current_user),
):
    return {"success": True, "data": await TagService.create_tag(tag_data.model_dump())}


@router.put("/{tag_id}", summary="Update a tag")
async def update_tag(
    tag_id: str,
    tag_data: TagUpdateRequest,
    current_user: AuthUser = Depends(get_current_user),
):
    tag = await TagService.update_tag(tag_id, tag_data.model_dump(exclude_unset=True))
    return {"success": True, "data": tag}


@router.delete("/{tag_id}", summary="Delete a tag")
async def delete_tag(
    tag_id: str,
    current_user: AuthUser = Depends(get_current_user),
):
    await TagService.delete_tag(tag_id)
    return {"success": True, "data": {}}
