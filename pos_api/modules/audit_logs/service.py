"""
AuditLogService - appends audit rows and lists them.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pos_api.core.pagination import paginate_query
from .diff import structural_diff
from .models import AuditLog, AuditAction
from .schemas import AuditLogFilterDto


@dataclass
class AuditContext:
    """Who made a change and from where."""

    user_id: Optional[int] = None
    ip_address: Optional[str] = None


class AuditLogService:
    """
    Audit rows are added to the caller's session and never flushed or
    committed here, so they land in the same DB transaction as the
    mutation they describe.
    """

    @staticmethod
    def record(
        db: AsyncSession,
        entity_type: str,
        entity_id: int,
        action: AuditAction,
        old: Optional[Dict[str, Any]],
        new: Optional[Dict[str, Any]],
        context: AuditContext,
        description: str,
    ) -> AuditLog:
        """
        Add an audit row to the session.

        Args:
            old: Snapshot before the change (None for create)
            new: Snapshot after the change (None for delete)

        Returns:
            The pending AuditLog instance
        """
        log = AuditLog(
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            user_id=context.user_id,
            old_value=old,
            new_value=new,
            changes=structural_diff(old, new) if action == AuditAction.update else None,
            ip_address=context.ip_address,
            description=description,
        )
        db.add(log)
        return log

    @staticmethod
    async def list_logs(
        db: AsyncSession, filters: AuditLogFilterDto, page: int, page_size: int
    ) -> Tuple[List[AuditLog], int]:
        """Newest first, optionally filtered by entity and action."""
        query = select(AuditLog).where(AuditLog.deleted_at.is_(None))

        if filters.entity_type:
            query = query.where(AuditLog.entity_type == filters.entity_type)
        if filters.entity_id:
            query = query.where(AuditLog.entity_id == filters.entity_id)
        if filters.action:
            query = query.where(AuditLog.action == filters.action)

        query = query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        return await paginate_query(db, query, page, page_size)
