"""
AuditLog Router - read access to the audit trail.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from pos_api.core.db.engine import get_db_util
from pos_api.core.pagination import PageParams, build_paginated_response, page_params
from pos_api.core.response_interceptor import CustomAPIRoute
from pos_api.modules.users.auth import TokenData, require_admin
from .service import AuditContext, AuditLogService
from .schemas import AuditLogFilterDto, AuditLogResponse

router = APIRouter(prefix="/audit-logs", tags=["Audit Logs"], route_class=CustomAPIRoute)


def audit_context(request: Request, user: TokenData) -> AuditContext:
    """Build the audit context for the current request."""
    return AuditContext(
        user_id=user.user_id if user else None,
        ip_address=request.client.host if request.client else None,
    )


@router.get("")
async def get_audit_logs(
    filters: AuditLogFilterDto = Depends(),
    pages: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(require_admin),
):
    """
    List audit rows, newest first (Admin only).

    Query parameters:
    - entity_type: 'item' or 'transaction'
    - entity_id: id of the audited record
    - action: create, update, delete, checkout, refund
    """
    logs, total = await AuditLogService.list_logs(db, filters, pages.page, pages.page_size)
    return build_paginated_response(
        [AuditLogResponse.model_validate(log) for log in logs],
        total,
        pages.page,
        pages.page_size,
    )
