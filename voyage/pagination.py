import math
from typing import Any, Iterable, List, Tuple

from pydantic import BaseModel
from sqlalchemy import or_
from sqlalchemy.orm import Query

class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int

def search_filter(query: Query, term: str, columns: Iterable[Any]) -> Query:
    """Case-insensitive substring match on any of ``columns``"""
    if not term:
        return query
    return query.filter(or_(*[column.ilike(f"%{term}%") for column in columns]))

def sort_query(query: Query, model: Any, sort_by: str, order: str, allowed: Iterable[str]) -> Query:
    """Order by a whitelisted column, falling back to the primary key"""
    column = getattr(model, sort_by) if sort_by in set(allowed) else model.id
    return query.order_by(column.desc() if order.lower() == "desc" else column.asc())

def paginate(query: Query, page: int, limit: int) -> Tuple[List[Any], PageMeta]:
    """Return one page of results together with its meta block"""
    total = query.count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    meta = PageMeta(
        total=total,
        page=page,
        limit=limit,
        total_pages=math.ceil(total / limit) if limit else 0,
    )
    return items, meta
