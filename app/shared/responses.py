"""
Response envelope shared by every route: `{"success": true, "data": ...}`.
Errors use `{"success": false, "error": "..."}` (see the handlers in main.py).
"""
import math
from typing import Any, Optional, Sequence

from fastapi.encoders import jsonable_encoder


def ok(data: Any = None, message: Optional[str] = None, **extra) -> dict:
    # Documents alias id to _id; clients see plain "id"
    body = {"success": True, "data": jsonable_encoder(data, by_alias=False)}
    if message:
        body["message"] = message
    body.update(extra)
    return body


def paginate(items: Sequence[Any], page: int, limit: int) -> dict:
    """Slice `items` for one page and build the envelope with pagination info."""
    total = len(items)
    start = (page - 1) * limit
    return ok(
        list(items[start:start + limit]),
        pagination={
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": math.ceil(total / limit) if limit else 0,
        },
    )
