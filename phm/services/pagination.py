# phm/services/pagination.py
import math
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Query

from phm.schemas.common import PageParams, Pagination


def total_pages(total: int, page_size: int) -> int:
    return math.ceil(total / page_size) if page_size else 0


def paginate(
    query: Query,
    params: PageParams,
    serialize: Optional[Callable[[Any], Any]] = None,
) -> Dict[str, Any]:
    """
    Run a list query one page at a time.

    ``query`` must already carry its tenant filter and ordering. A page past
    the end yields an empty list; it is not an error.
    """
    total = query.order_by(None).count()
    rows: List[Any] = query.offset(params.offset).limit(params.page_size).all()
    data = [serialize(r) for r in rows] if serialize else rows
    return {
        "data": data,
        "pagination": Pagination(
            page=params.page,
            page_size=params.page_size,
            total=total,
            total_pages=total_pages(total, params.page_size),
        ).model_dump(by_alias=True),
    }
