"""Search, sort and paging over already-fetched collections."""

import dataclasses
import math
from typing import List, Optional, Sequence, Set, TypeVar

from ..core.exceptions import ValidationError
from ..schemas.common import Page

T = TypeVar("T")

MAX_PAGE_SIZE = 100


def filter_by_substring(items: Sequence[T], field: str, term: Optional[str]) -> List[T]:
    """
    Keep items whose ``field`` contains ``term``, case-insensitively.

    A blank term keeps everything. Items whose field is None never match.
    """
    if not term:
        return list(items)

    needle = term.lower()
    return [
        item for item in items
        if getattr(item, field, None) is not None and needle in str(getattr(item, field)).lower()
    ]


def _data_fields(item) -> Set[str]:
    """Names of the declared data fields of a pydantic model or dataclass row."""
    model_fields = getattr(type(item), "model_fields", None)
    if model_fields is not None:
        return set(model_fields)
    if dataclasses.is_dataclass(item):
        return {f.name for f in dataclasses.fields(item)}
    return {name for name in vars(item) if not name.startswith("_")}


def sort_items(items: Sequence[T], field: Optional[str], order: str = "asc") -> List[T]:
    """
    Sort by an attribute name, returning a new list.

    Raises:
        ValidationError: If ``order`` is not asc/desc or ``field`` is not a
            declared data field of the items
    """
    if order not in ("asc", "desc"):
        raise ValidationError(
            detail=f"Unknown sort order '{order}'",
            errors={"order": "must be 'asc' or 'desc'"}
        )

    if not field:
        return list(items)

    if items and field not in _data_fields(items[0]):
        raise ValidationError(
            detail=f"Cannot sort by unknown field '{field}'",
            errors={"sort": f"unknown field '{field}'"}
        )

    def key(item):
        value = getattr(item, field)
        return (value is not None, value if value is not None else 0)

    # None sorts first ascending, last descending
    return sorted(items, key=key, reverse=order == "desc")


def paginate(items: Sequence[T], page: int = 1, page_size: int = 10) -> Page[T]:
    """
    Slice one 1-based page out of ``items``.

    A page past the end is returned empty rather than as an error.

    Raises:
        ValidationError: If ``page`` < 1 or ``page_size`` is outside 1..100
    """
    if page < 1:
        raise ValidationError(detail="page must be at least 1", errors={"page": page})
    if not 1 <= page_size <= MAX_PAGE_SIZE:
        raise ValidationError(
            detail=f"page_size must be between 1 and {MAX_PAGE_SIZE}",
            errors={"page_size": page_size}
        )

    total = len(items)
    start = (page - 1) * page_size
    return Page(
        items=list(items[start:start + page_size]),
        page=page,
        page_size=page_size,
        total=total,
        total_pages=math.ceil(total / page_size),
    )
