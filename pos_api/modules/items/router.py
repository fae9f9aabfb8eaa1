"""
Items Router - catalog endpoints, projected by caller role.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from pos_api.core.db.engine import get_db_util
from pos_api.core.pagination import PageParams, build_paginated_response, page_params
from pos_api.core.response_interceptor import CustomAPIRoute
from pos_api.modules.audit_logs.router import audit_context
from pos_api.modules.users.auth import TokenData, require_any_role
from .service import ItemService
from .schemas import CreateItemDto, UpdateItemDto
from .views import project_item, project_items, render_items_csv

router = APIRouter(prefix="/items", tags=["items"], route_class=CustomAPIRoute)
public_router = APIRouter(prefix="/public/items", tags=["public"], route_class=CustomAPIRoute)


@router.get("")
async def get_all_items(
    search: Optional[str] = Query(None, description="Terms that must all appear in the name"),
    pages: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_any_role),
):
    """List active items, newest first."""
    items, total = await ItemService.find_all(db, pages.page, pages.page_size, search)
    return build_paginated_response(
        project_items(items, current_user.role), total, pages.page, pages.page_size
    )


@router.get("/export")
async def export_items(
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_any_role),
):
    """Download active items as CSV; columns follow the caller's role."""
    items = await ItemService.find_all_active(db)
    return Response(
        content=render_items_csv(items, current_user.role),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=items.csv"},
    )


@router.post("", status_code=201)
async def create_item(
    dto: CreateItemDto,
    request: Request,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_any_role),
):
    item = await ItemService.create(db, dto, audit_context(request, current_user))
    await db.commit()
    return project_item(item, current_user.role)


@router.post("/bulk", status_code=201)
async def bulk_create_items(
    data: List[CreateItemDto],
    request: Request,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_any_role),
):
    """Create several items in one request (all or nothing)"""
    items = await ItemService.bulk_create(db, data, audit_context(request, current_user))
    await db.commit()
    return project_items(items, current_user.role)


@router.get("/{item_id}")
async def get_item_by_id(
    item_id: int,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_any_role),
):
    item = await ItemService.find_one(db, item_id)
    return project_item(item, current_user.role)


@router.put("/{item_id}")
async def update_item(
    item_id: int,
    dto: UpdateItemDto,
    request: Request,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_any_role),
):
    """Replace an item's editable fields"""
    item = await ItemService.update(db, item_id, dto, audit_context(request, current_user))
    await db.commit()
    return project_item(item, current_user.role)


@router.delete("/{item_id}")
async def delete_item(
    item_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_any_role),
):
    """Soft delete an item"""
    await ItemService.remove(db, item_id, audit_context(request, current_user))
    await db.commit()
    return {"message": "Item deleted successfully"}


@public_router.get("")
async def get_public_items(
    search: Optional[str] = Query(None),
    pages: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db_util),
):
    """Storefront listing, no authentication; cost fields are never shown."""
    items, total = await ItemService.find_all(db, pages.page, pages.page_size, search)
    return build_paginated_response(
        project_items(items, None), total, pages.page, pages.page_size
    )


@public_router.get("/{item_id}")
async def get_public_item(item_id: int, db: AsyncSession = Depends(get_db_util)):
    item = await ItemService.find_one(db, item_id)
    return project_item(item, None)
