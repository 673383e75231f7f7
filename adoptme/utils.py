# adoptme/utils.py
from typing import Any, Dict, Optional
import logging
import math
from bson import ObjectId
from datetime import datetime
from fastapi import HTTPException

def to_id(doc: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Converts _id -> id (str) and every ObjectId to a string.
    Datetimes become ISO strings, nested dicts and lists are walked too.
    Returns {} when doc is None.
    """
    if doc is None:
        return {}
    d = dict(doc)

    if "_id" in d:
        d["id"] = str(d.pop("_id"))

    for key, value in d.items():
        if isinstance(value, ObjectId):
            d[key] = str(value)
        elif isinstance(value, datetime):
            d[key] = value.isoformat()
        elif isinstance(value, dict):
            d[key] = to_id(value)
        elif isinstance(value, list):
            d[key] = [
                str(item) if isinstance(item, ObjectId)
                else item.isoformat() if isinstance(item, datetime)
                else to_id(item) if isinstance(item, dict)
                else item
                for item in value
            ]

    return d

# ==================== Database helpers ====================

def is_object_id(value: Any) -> bool:
    return isinstance(value, ObjectId) or (isinstance(value, str) and ObjectId.is_valid(value))

def to_object_id(value: str, field_name: str = "id") -> ObjectId:
    """
    Converts a string to ObjectId, raising 400 when the format is wrong.
    """
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        raise HTTPException(status_code=400, detail=f"Invalid {field_name}")
    return ObjectId(value)

# ==================== Pagination ====================

def page_window(page: int, limit: int) -> tuple[int, int]:
    """Returns (skip, limit) for a 1-based page number."""
    page = max(1, page)
    limit = max(1, limit)
    return (page - 1) * limit, limit

def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0

# ==================== Logging ====================

def log_business_event(
    logger: logging.Logger,
    event: str,
    data: Optional[Dict[str, Any]] = None,
    user_id: Optional[str] = None,
) -> None:
    """Logs a domain event with its payload attached as `extra`."""
    payload = dict(data or {})
    if user_id:
        payload["user_id"] = user_id
    logger.info(f"[event] {event} {payload}", extra={"event": event, "event_data": payload})
