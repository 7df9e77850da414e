"""
Pagination helper for list endpoints.
"""

from typing import Any, List, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 500


async def paginate(db: AsyncSession, query, page: int, page_size: int) -> Tuple[List[Any], int]:
    """
    Run an ordered select for one page.

    Args:
        query: Filtered and ordered select of ORM entities
        page: 1-based page number
        page_size: Items per page

    Returns:
        (items on the page, total matching rows)
    """
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = (await db.execute(count_query)).scalar() or 0

    offset = (page - 1) * page_size
    result = await db.execute(query.offset(offset).limit(page_size))
    return list(result.scalars().all()), total
