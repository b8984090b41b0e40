"""
Filter predicates as plain values.

The permission handlers compile access decisions into a tree of these
models. The tree can be rendered into a SQLAlchemy expression for list
queries (`apply_filters`) or evaluated against a single loaded row
(`matches`), so list and single-target checks share one definition.
"""

from typing import Any, List, Literal, Union
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import and_, or_, true, false
from sqlalchemy.orm.relationships import RelationshipProperty

class FilterBase(BaseModel):
    model_config = ConfigDict(frozen=True)

class FieldFilter(FilterBase):
    field: str
    op: Literal["eq", "is_null", "icontains"]
    value: Any = None

class AndFilter(FilterBase):
    and_: List['FilterSchema'] = Field(default_factory=list)

class OrFilter(FilterBase):
    or_: List['FilterSchema'] = Field(default_factory=list)

class ConstantFilter(FilterBase):
    matches: bool


FilterSchema = Union[FieldFilter, AndFilter, OrFilter, ConstantFilter]

AndFilter.model_rebuild()
OrFilter.model_rebuild()

ALWAYS = ConstantFilter(matches=True)
NEVER = ConstantFilter(matches=False)


def eq(field: str, value: Any) -> FieldFilter:
    return FieldFilter(field=field, op="eq", value=value)

def is_null(field: str) -> FieldFilter:
    return FieldFilter(field=field, op="is_null")

def icontains(field: str, value: str) -> FieldFilter:
    return FieldFilter(field=field, op="icontains", value=value)

def _is_constant(filter: FilterSchema, value: bool) -> bool:
    return isinstance(filter, ConstantFilter) and filter.matches is value

def all_of(*filters: FilterSchema) -> FilterSchema:
    """Conjunction with constant folding and flattening of nested ANDs."""
    parts = []
    for f in filters:
        if _is_constant(f, False):
            return NEVER
        if _is_constant(f, True):
            continue
        if isinstance(f, AndFilter):
            parts.extend(f.and_)
        else:
            parts.append(f)

    if len(parts) == 0:
        return ALWAYS
    if len(parts) == 1:
        return parts[0]
    return AndFilter(and_=parts)

def any_of(*filters: FilterSchema) -> FilterSchema:
    """Disjunction with constant folding and flattening of nested ORs."""
    parts = []
    for f in filters:
        if _is_constant(f, True):
            return ALWAYS
        if _is_constant(f, False):
            continue
        if isinstance(f, OrFilter):
            parts.extend(f.or_)
        else:
            parts.append(f)

    if len(parts) == 0:
        return NEVER
    if len(parts) == 1:
        return parts[0]
    return OrFilter(or_=parts)

def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")

def _column_condition(column, filter: FieldFilter):
    op = filter.op
    value = filter.value

    if op == "eq":
        # NULL never equals anything; an explicit None must not turn into IS NULL
        if value is None:
            return false()
        return column == value
    elif op == "is_null":
        return column.is_(None)
    elif op == "icontains":
        return column.ilike(f"%{_escape_like(str(value))}%", escape="\\")

    raise ValueError(f"Unsupported filter operator: {op}")

def _field_condition(model, filter: FieldFilter):
    head, _, rest = filter.field.partition(".")
    attribute = getattr(model, head)

    if rest:
        if not isinstance(attribute.property, RelationshipProperty):
            raise ValueError(f"{model.__name__}.{head} is not a relationship")
        related_model = attribute.property.mapper.class_
        inner = _field_condition(related_model, filter.model_copy(update={"field": rest}))
        return attribute.has(inner)

    return _column_condition(attribute, filter)

def apply_filters(model, filter: FilterSchema):
    """Render a predicate tree into a SQLAlchemy boolean expression on `model`."""
    if isinstance(filter, ConstantFilter):
        return true() if filter.matches else false()

    if isinstance(filter, AndFilter):
        return and_(*[apply_filters(model, sub_filter) for sub_filter in filter.and_])

    if isinstance(filter, OrFilter):
        return or_(*[apply_filters(model, sub_filter) for sub_filter in filter.or_])

    return _field_condition(model, filter)

def _resolve(obj, path: str):
    value = obj
    for key in path.split("."):
        if value is None:
            return None
        if isinstance(value, dict):
            value = value.get(key)
        else:
            value = getattr(value, key, None)
    return value

def matches(filter: FilterSchema, obj) -> bool:
    """Evaluate a predicate tree against a loaded row, snapshot or dict."""
    if isinstance(filter, ConstantFilter):
        return filter.matches

    if isinstance(filter, AndFilter):
        return all(matches(sub_filter, obj) for sub_filter in filter.and_)

    if isinstance(filter, OrFilter):
        return any(matches(sub_filter, obj) for sub_filter in filter.or_)

    actual = _resolve(obj, filter.field)
    value = filter.value

    if filter.op == "eq":
        return actual is not None and value is not None and actual == value
    elif filter.op == "is_null":
        return actual is None
    elif filter.op == "icontains":
        return actual is not None and str(value).lower() in str(actual).lower()

    raise ValueError(f"Unsupported filter operator: {filter.op}")
