"""
ItemService - catalog CRUD with audit rows in the same DB transaction.
"""

import logging
from typing import List, Optional, Tuple
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from pos_api.core.exceptions import ConflictError, NotFoundError
from pos_api.core.pagination import paginate_query
from pos_api.core.utils import utcnow
from pos_api.modules.audit_logs.diff import snapshot
from pos_api.modules.audit_logs.models import AuditAction
from pos_api.modules.audit_logs.service import AuditContext, AuditLogService

from .schemas import CreateItemDto, UpdateItemDto
from .models import Item

logger = logging.getLogger(__name__)

ENTITY_TYPE = "item"

AUDITED_FIELDS = ("name", "description", "stock", "buy_price", "price", "image_url")


def item_snapshot(item: Item) -> dict:
    return snapshot(item, AUDITED_FIELDS)


def contains_pattern(term: str) -> str:
    """LIKE pattern matching term literally, with backslash as the escape."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class ItemService:
    """
    Catalog operations. Services flush but never commit; routers own the
    commit so the audit row and the mutation land together.
    """

    @staticmethod
    async def _ensure_name_available(
        db: AsyncSession, name: str, exclude_id: Optional[int] = None
    ) -> None:
        query = select(Item.id).where(Item.name == name, Item.deleted_at.is_(None))
        if exclude_id is not None:
            query = query.where(Item.id != exclude_id)
        if (await db.execute(query.limit(1))).scalar_one_or_none() is not None:
            raise ConflictError(f"Item with name '{name}' already exists")

    @staticmethod
    async def find_all(
        db: AsyncSession,
        page: int,
        page_size: int,
        search: Optional[str] = None,
    ) -> Tuple[List[Item], int]:
        """
        Paginated active items, newest first.

        Args:
            search: Whitespace-separated terms; every term must appear in the
                name (case-insensitive)
        """
        query = select(Item).where(Item.deleted_at.is_(None))

        if search:
            for term in search.split():
                query = query.where(Item.name.ilike(contains_pattern(term), escape="\\"))

        query = query.order_by(Item.created_at.desc(), Item.id.desc())
        return await paginate_query(db, query, page, page_size)

    @staticmethod
    async def find_all_active(db: AsyncSession) -> List[Item]:
        """Every active item ordered by id, for export."""
        result = await db.execute(
            select(Item).where(Item.deleted_at.is_(None)).order_by(Item.id)
        )
        return list(result.scalars().all())

    @staticmethod
    async def find_one(db: AsyncSession, item_id: int) -> Item:
        """
        Raises:
            NotFoundError: If item not found or is soft-deleted
        """
        result = await db.execute(
            select(Item).where(Item.id == item_id, Item.deleted_at.is_(None))
        )
        item = result.scalar_one_or_none()
        if not item:
            raise NotFoundError("Item", item_id)
        return item

    @staticmethod
    async def create(db: AsyncSession, dto: CreateItemDto, context: AuditContext) -> Item:
        await ItemService._ensure_name_available(db, dto.name)

        item = Item(**dto.model_dump())
        db.add(item)
        await db.flush()

        AuditLogService.record(
            db,
            ENTITY_TYPE,
            item.id,
            AuditAction.create,
            old=None,
            new=item_snapshot(item),
            context=context,
            description=f"Created item '{item.name}'",
        )
        return item

    @staticmethod
    async def bulk_create(
        db: AsyncSession, data: List[CreateItemDto], context: AuditContext
    ) -> List[Item]:
        """
        Create many items at once, all or nothing.

        Raises:
            ConflictError: If a name repeats within the batch or matches an
                active item
        """
        names = [dto.name for dto in data]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ConflictError(f"Duplicate item names in batch: {', '.join(duplicates)}")

        if names:
            result = await db.execute(
                select(Item.name).where(Item.name.in_(names), Item.deleted_at.is_(None))
            )
            existing = sorted(result.scalars().all())
            if existing:
                raise ConflictError(f"Items already exist: {', '.join(existing)}")

        items = [Item(**dto.model_dump()) for dto in data]
        db.add_all(items)
        await db.flush()

        for item in items:
            AuditLogService.record(
                db,
                ENTITY_TYPE,
                item.id,
                AuditAction.create,
                old=None,
                new=item_snapshot(item),
                context=context,
                description=f"Bulk created item '{item.name}'",
            )
        return items

    @staticmethod
    async def update(
        db: AsyncSession, item_id: int, dto: UpdateItemDto, context: AuditContext
    ) -> Item:
        """
        Replace the editable fields of an item.

        Raises:
            NotFoundError: If item not found
            ConflictError: If another active item already has the new name
        """
        item = await ItemService.find_one(db, item_id)
        await ItemService._ensure_name_available(db, dto.name, exclude_id=item_id)

        old = item_snapshot(item)
        for key, value in dto.model_dump().items():
            setattr(item, key, value)
        await db.flush()

        AuditLogService.record(
            db,
            ENTITY_TYPE,
            item.id,
            AuditAction.update,
            old=old,
            new=item_snapshot(item),
            context=context,
            description=f"Updated item '{item.name}'",
        )
        return item

    @staticmethod
    async def remove(db: AsyncSession, item_id: int, context: AuditContext) -> None:
        """Soft delete an item."""
        item = await ItemService.find_one(db, item_id)
        old = item_snapshot(item)

        item.deleted_at = utcnow()
        await db.flush()

        AuditLogService.record(
            db,
            ENTITY_TYPE,
            item.id,
            AuditAction.delete,
            old=old,
            new=None,
            context=context,
            description=f"Deleted item '{item.name}'",
        )

    @staticmethod
    async def count_active(db: AsyncSession) -> int:
        result = await db.execute(
            select(func.count(Item.id)).where(Item.deleted_at.is_(None))
        )
        return result.scalar() or 0
