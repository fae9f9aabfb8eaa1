"""
AuditLog DTOs - Pydantic schemas for responses and filters.
"""

from pydantic import BaseModel, Field
from typing import Any, Optional
from datetime import datetime

from .models import AuditAction


class AuditLogFilterDto(BaseModel):
    entity_type: Optional[str] = Field(None, description="e.g. 'item' or 'transaction'")
    entity_id: Optional[int] = Field(None, gt=0)
    action: Optional[AuditAction] = None


class AuditLogResponse(BaseModel):
    """Response schema for an audit log row."""

    id: int
    entity_type: str
    entity_id: int
    action: AuditAction
    user_id: Optional[int] = None
    old_value: Optional[Any] = None
    new_value: Optional[Any] = None
    changes: Optional[Any] = None
    ip_address: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}
