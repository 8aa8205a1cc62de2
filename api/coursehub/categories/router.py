"""Category API endpoints.

Listing is public; create, rename and delete are admin only.
"""

from uuid import UUID

from fastapi import APIRouter, status

from coursehub.auth.dependencies import AdminUser
from coursehub.auth.schemas import MessageResponse
from coursehub.categories.dependencies import CategoryServiceDep
from coursehub.categories.schemas import (
    CategoryListResponse,
    CategoryRequest,
    CategoryResponse,
)


router = APIRouter(prefix="/v1/categories", tags=["categories"])


@router.get("", response_model=CategoryListResponse, summary="List categories")
async def list_categories(service: CategoryServiceDep) -> CategoryListResponse:
    categories = await service.list_categories()
    items = [CategoryResponse.model_validate(c) for c in categories]
    return CategoryListResponse(items=items, total=len(items))


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create category",
)
async def create_category(
    data: CategoryRequest,
    service: CategoryServiceDep,
    _admin: AdminUser,
) -> CategoryResponse:
    category = await service.create_category(data.name)
    return CategoryResponse.model_validate(category)


@router.put(
    "/{category_id}",
    response_model=CategoryResponse,
    summary="Rename category",
)
async def rename_category(
    category_id: UUID,
    data: CategoryRequest,
    service: CategoryServiceDep,
    _admin: AdminUser,
) -> CategoryResponse:
    category = await service.rename_category(category_id, data.name)
    return CategoryResponse.model_validate(category)


@router.delete(
    "/{category_id}",
    response_model=MessageResponse,
    summary="Delete category",
)
async def delete_category(
    category_id: UUID,
    service: CategoryServiceDep,
    _admin: AdminUser,
) -> MessageResponse:
    await service.delete_category(category_id)
    return MessageResponse(message="Category deleted")
