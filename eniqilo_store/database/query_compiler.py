# eniqilo_store/database/query_compiler.py
"""Translate listing criteria into a parameterized SQL fragment.

Only the columns named in the builder tables below ever reach the query
text. Every caller-supplied value is passed as a ``$n`` bound parameter,
numbered from ``$1`` on each call, so the same criteria always produce the
same text and the same values.
"""
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Tuple

from ..models.filter import FilterCriteria
from ..models.product import PRODUCT_CATEGORIES

@dataclass(frozen=True)
class CompiledQuery:
    predicates: Tuple[str, ...]
    order: Tuple[str, ...]
    limit: int
    offset: int
    values: Tuple[Any, ...]
    limit_placeholder: str
    offset_placeholder: str

    def render(self) -> str:
        """SQL tail to append after a ``WHERE`` clause"""
        query = ""
        if self.predicates:
            query += "\nAND " + " AND ".join(self.predicates)
        if self.order:
            query += "\nORDER BY " + ", ".join(self.order)
        query += f"\nLIMIT {self.limit_placeholder} OFFSET {self.offset_placeholder}"
        return query

class _Params:
    """Bound values collected during a single compile call"""

    def __init__(self):
        self.values: List[Any] = []

    def bind(self, value: Any) -> str:
        self.values.append(value)
        return f"${len(self.values)}"

def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")

def _name_predicate(value: Optional[str], params: _Params) -> Optional[str]:
    if not value:
        return None
    pattern = "%" + _escape_like(value) + "%"
    return f"name ILIKE {params.bind(pattern)} ESCAPE '\\'"

def _category_predicate(value: Optional[str], params: _Params) -> Optional[str]:
    if value not in PRODUCT_CATEGORIES:
        return None
    return f"category = {params.bind(value)}"

def _in_stock_predicate(value: Optional[bool], params: _Params) -> Optional[str]:
    if value is None:
        return None
    return "stock > 0" if value else "stock = 0"

def _price_order(value: Optional[str]) -> Optional[str]:
    if value == "asc":
        return "price ASC"
    if value == "desc":
        return "price DESC"
    return None

# Emission order is the declaration order here.
PREDICATE_BUILDERS: Tuple[Tuple[str, Callable[[Any, _Params], Optional[str]]], ...] = (
    ("name", _name_predicate),
    ("category", _category_predicate),
    ("in_stock", _in_stock_predicate),
)

ORDER_BUILDERS: Tuple[Tuple[str, Callable[[Any], Optional[str]]], ...] = (
    ("price_sort", _price_order),
)

def compile_filter(criteria: FilterCriteria) -> CompiledQuery:
    """Compile criteria into predicates, order clauses and bound values.

    Never raises: values outside the accepted set are dropped.
    """
    params = _Params()

    predicates = []
    for field, build in PREDICATE_BUILDERS:
        predicate = build(getattr(criteria, field), params)
        if predicate is not None:
            predicates.append(predicate)

    order = []
    for field, build in ORDER_BUILDERS:
        clause = build(getattr(criteria, field))
        if clause is not None:
            order.append(clause)

    limit_placeholder = params.bind(criteria.limit)
    offset_placeholder = params.bind(criteria.offset)

    return CompiledQuery(
        predicates=tuple(predicates),
        order=tuple(order),
        limit=criteria.limit,
        offset=criteria.offset,
        values=tuple(params.values),
        limit_placeholder=limit_placeholder,
        offset_placeholder=offset_placeholder,
    )
