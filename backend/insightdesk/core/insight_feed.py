from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Iterable

ALL = "all"


@dataclass
class InsightFilter:
    search: str | None = None
    severity: str | None = None
    type: str | None = None
    category: str | None = None


def _value(v: Any) -> Any:
    return v.value if isinstance(v, enum.Enum) else v


def _active(v: str | None) -> bool:
    return bool(v) and v != ALL


def filter_insights(insights: Iterable[Any], filters: InsightFilter) -> list[Any]:
    """Apply free-text search, then exact severity, type and category filters.

    Dimensions are AND-combined; the search term matches title OR description
    case-insensitively. ``None``/``"all"`` disables a dimension.
    """
    result = list(insights)

    if filters.search:
        term = filters.search.lower()
        result = [
            i
            for i in result
            if term in (i.title or "").lower() or term in (i.description or "").lower()
        ]
    if _active(filters.severity):
        result = [i for i in result if _value(i.severity) == filters.severity]
    if _active(filters.type):
        result = [i for i in result if _value(i.type) == filters.type]
    if _active(filters.category):
        result = [i for i in result if _value(i.category) == filters.category]

    return result
