import math
from typing import Any, Dict, List, Optional, Tuple

from .config import settings


def success_response(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"status": "success"}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return body


def normalize_pagination(page: Optional[int], limit: Optional[int]) -> Tuple[int, int]:
    page = page if page and page > 0 else 1
    limit = limit if limit and limit > 0 else settings.DEFAULT_PAGE_SIZE
    return page, min(limit, settings.MAX_PAGE_SIZE)


def sort_documents(docs: List[dict], field: str, descending: bool = False) -> List[dict]:
    """Sort documents by ``field``; documents missing it always go last."""
    present = [doc for doc in docs if doc.get(field) is not None]
    missing = [doc for doc in docs if doc.get(field) is None]
    try:
        present.sort(key=lambda doc: doc[field], reverse=descending)
    except TypeError:
        present.sort(key=lambda doc: str(doc[field]), reverse=descending)
    return present + missing


def matches_search(doc: dict, term: Optional[str], fields: List[str]) -> bool:
    """Case-insensitive substring match over ``fields``."""
    if not term:
        return True
    needle = term.strip().lower()
    return any(needle in str(doc.get(field) or "").lower() for field in fields)


def paginate(items: List[Any], page: Optional[int], limit: Optional[int]) -> Tuple[List[Any], Dict[str, Any]]:
    """Slice an already-sorted list and build the pagination block."""
    page, limit = normalize_pagination(page, limit)
    total_count = len(items)
    total_pages = math.ceil(total_count / limit) if total_count else 0
    start = (page - 1) * limit
    pagination = {
        "current_page": page,
        "total_pages": total_pages,
        "total_count": total_count,
        "limit": limit,
        "has_next_page": page < total_pages,
        "has_previous_page": page > 1,
    }
    return items[start:start + limit], pagination
