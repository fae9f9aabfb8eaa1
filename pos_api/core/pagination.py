"""
Pagination utilities for reusable pagination across all services.

Provides a FastAPI dependency for page parameters plus helpers to paginate
SQLAlchemy queries and format responses.
"""

from dataclasses import dataclass
from typing import Tuple, List, Any, Optional
from fastapi import Query
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.selectable import Select

from pos_api.core.config import config


@dataclass
class PageParams:
    page: int
    page_size: int


def normalize_page(
    page: Optional[int], page_size: Optional[int]
) -> PageParams:
    """
    Clamp raw page parameters instead of rejecting them.

    - page < 1 becomes 1
    - page_size < 1 becomes the default, page_size above the cap is capped
    """
    if page is None or page < 1:
        page = 1
    if page_size is None or page_size < 1:
        page_size = config.default_page_size
    page_size = min(page_size, config.max_page_size)
    return PageParams(page=page, page_size=page_size)


def page_params(
    page: Optional[int] = Query(None, description="Page number (1-indexed)"),
    page_size: Optional[int] = Query(None, description="Items per page"),
    limit: Optional[int] = Query(None, description="Alias of page_size"),
) -> PageParams:
    """FastAPI dependency accepting either page_size or limit."""
    return normalize_page(page, page_size if page_size is not None else limit)


async def paginate_query(
    db: AsyncSession,
    query: Select,
    page: int = 1,
    page_size: int = 10,
) -> Tuple[List[Any], int]:
    """
    Apply offset-based pagination to a SQLAlchemy query.

    IMPORTANT: Query should already have:
    - WHERE clauses (including soft-delete filters)
    - Eager loading (selectinload) to prevent lazy loads in async code
    - ORDER BY clause

    Args:
        db: Async SQLAlchemy session
        query: Base query with filters and ordering already applied
        page: Page number (1-indexed)
        page_size: Items per page

    Returns:
        Tuple of (paginated_items, total_count)
    """
    # Count over a subquery to preserve all WHERE clauses and joins
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = (await db.execute(count_query)).scalar() or 0

    offset = (page - 1) * page_size
    result = await db.execute(query.offset(offset).limit(page_size))
    items = result.scalars().all()

    return list(items), total


def build_paginated_response(
    items: List[Any],
    total: int,
    page: int,
    page_size: int,
) -> dict:
    """
    Build a standardized paginated response dictionary.

    Returns:
        Dict with keys: items, total, page, page_size, total_pages, has_more
    """
    total_pages = (total + page_size - 1) // page_size if total > 0 else 0
    has_more = page < total_pages

    return {
        "items": items,
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": total_pages,
        "has_more": has_more,
    }
