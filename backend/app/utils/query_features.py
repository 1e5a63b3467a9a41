"""
Natours Backend — List Query Features
=======================================

What:  Translates list-endpoint query strings into SQLAlchemy clauses.
Who:   TourService.list_tours (and the top-5-cheap alias).

Query language:
    ?difficulty=easy                 equality filter
    ?price[gte]=500&duration[lt]=7   comparison filter (gte, gt, lte, lt)
    ?sort=-price,ratingsAverage      comma list, leading '-' = descending
    ?fields=name,price               projection (or -summary,-description to exclude)
    ?page=2&limit=10                 pagination (defaults: page 1, limit 100)

Only fields listed in the resource's field map can be filtered or sorted.
Unknown keys are ignored; values that cannot be coerced to the column type
raise ValidationError (400).
"""

import operator
import re
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Set, Tuple

from sqlalchemy import Select, asc, desc
from sqlalchemy.orm import InstrumentedAttribute

from app.exceptions import ValidationError

RESERVED_PARAMS = {"page", "sort", "limit", "fields"}

COMPARISONS: Dict[str, Callable[[Any, Any], Any]] = {
    "gte": operator.ge,
    "gt": operator.gt,
    "lte": operator.le,
    "lt": operator.lt,
}

_COMPARISON_KEY = re.compile(r"^(?P<field>\w+)\[(?P<op>gte|gt|lte|lt)\]$")

DEFAULT_LIMIT = 100
MAX_LIMIT = 1000


def _coerce(column: InstrumentedAttribute, name: str, raw: str) -> Any:
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return raw

    try:
        if python_type is bool:
            lowered = raw.lower()
            if lowered not in {"true", "false", "1", "0"}:
                raise ValueError(raw)
            return lowered in {"true", "1"}
        if python_type is datetime:
            return datetime.fromisoformat(raw)
        if python_type in (int, float):
            return float(raw) if python_type is float else int(raw)
    except ValueError:
        raise ValidationError(message=f"Invalid value '{raw}' for {name}", field=name)
    return raw


def _positive_int(params: Mapping[str, str], key: str, default: int) -> int:
    raw = params.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValidationError(message=f"Invalid value '{raw}' for {key}", field=key)
    if value < 1:
        raise ValidationError(message=f"{key} must be at least 1", field=key)
    return value


class QueryFeatures:
    """
    Parsed list options for one request.

    Args:
        params:        Query parameters (starlette QueryParams or a plain dict)
        field_map:     API field name (camelCase) → ORM column
        default_sort:  Sort expression used when ?sort= is absent
    """

    def __init__(
        self,
        params: Mapping[str, str],
        field_map: Dict[str, InstrumentedAttribute],
        default_sort: str = "-createdAt",
    ):
        self.params = params
        self.field_map = field_map
        self.default_sort = default_sort

    # ── Filtering ─────────────────────────────────────────────────────────
    def filters(self) -> List[Any]:
        clauses = []
        for key, raw in self.params.items():
            if key in RESERVED_PARAMS:
                continue

            match = _COMPARISON_KEY.match(key)
            if match:
                name, op = match.group("field"), COMPARISONS[match.group("op")]
            else:
                name, op = key, operator.eq

            column = self.field_map.get(name)
            if column is None:
                continue
            clauses.append(op(column, _coerce(column, name, raw)))
        return clauses

    # ── Sorting ───────────────────────────────────────────────────────────
    def order_by(self) -> List[Any]:
        expression = self.params.get("sort") or self.default_sort
        clauses = []
        for part in expression.split(","):
            part = part.strip()
            if not part:
                continue
            descending = part.startswith("-")
            column = self.field_map.get(part.lstrip("-"))
            if column is None:
                continue
            clauses.append(desc(column) if descending else asc(column))
        return clauses

    # ── Projection ────────────────────────────────────────────────────────
    def projection(self) -> Tuple[Optional[Set[str]], Set[str]]:
        """
        Returns (include, exclude) sets of API field names.
        include is None when every field should be returned.
        """
        raw = self.params.get("fields")
        if not raw:
            return None, set()
        names = [n.strip() for n in raw.split(",") if n.strip()]
        excluded = {n[1:] for n in names if n.startswith("-")}
        included = {n for n in names if not n.startswith("-")}
        return (included or None), excluded

    # ── Pagination ────────────────────────────────────────────────────────
    def page_window(self) -> Tuple[int, int]:
        """(offset, limit) computed from ?page= and ?limit=."""
        page = _positive_int(self.params, "page", 1)
        limit = min(_positive_int(self.params, "limit", DEFAULT_LIMIT), MAX_LIMIT)
        return (page - 1) * limit, limit

    def apply(self, stmt: Select) -> Select:
        """Filter, sort and paginate a SELECT statement."""
        for clause in self.filters():
            stmt = stmt.where(clause)
        ordering = self.order_by()
        if ordering:
            stmt = stmt.order_by(*ordering)
        offset, limit = self.page_window()
        return stmt.offset(offset).limit(limit)
