"""Typed listing queries with an explicit allow-list of filter and sort fields."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

from hotel_backend.domain.errors import InvalidInputError


@dataclass(frozen=True)
class ListingSchema:
    """Maps public query names to storage columns for one listing."""

    exact_fields: Mapping[str, str]
    sort_fields: Mapping[str, str]
    default_sort: tuple[tuple[str, bool], ...]
    contains_fields: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ListQuery:
    equals: tuple[tuple[str, str], ...] = ()
    contains: tuple[tuple[str, str], ...] = ()
    order_by: tuple[tuple[str, bool], ...] = ()
    page: int = 1
    limit: int = 25

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def where_clause(self) -> tuple[str, list[str]]:
        clauses: list[str] = []
        params: list[str] = []
        for column, value in self.equals:
            clauses.append(f"{column} = ?")
            params.append(value)
        for column, value in self.contains:
            clauses.append(f"{column} LIKE ? ESCAPE '\\'")
            params.append(f"%{_escape_like(value)}%")
        if not clauses:
            return "", params
        return "WHERE " + " AND ".join(clauses), params

    def order_clause(self) -> str:
        if not self.order_by:
            return ""
        parts = [f"{column} {'DESC' if descending else 'ASC'}" for column, descending in self.order_by]
        return "ORDER BY " + ", ".join(parts)


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _parse_positive(raw: Optional[str], name: str, default: int) -> int:
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise InvalidInputError(f"{name} must be a positive integer") from exc
    if value <= 0:
        raise InvalidInputError(f"{name} must be a positive integer")
    return value


def build_list_query(
    schema: ListingSchema,
    *,
    filters: Mapping[str, str],
    sort: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    default_limit: int = 25,
    max_limit: int = 100,
) -> ListQuery:
    """Translate raw query parameters into a ``ListQuery``.

    Filter names outside the schema are rejected rather than ignored, so a
    typo never silently returns an unfiltered listing.
    """
    equals: list[tuple[str, str]] = []
    contains: list[tuple[str, str]] = []
    for name, value in filters.items():
        if name in schema.contains_fields:
            contains.append((schema.contains_fields[name], value))
        elif name in schema.exact_fields:
            equals.append((schema.exact_fields[name], value))
        else:
            raise InvalidInputError(f"Unsupported filter field: {name}")

    order_by: list[tuple[str, bool]] = []
    if sort:
        for token in (item.strip() for item in sort.split(",")):
            if not token:
                continue
            descending = token.startswith("-")
            name = token.lstrip("-")
            if name not in schema.sort_fields:
                raise InvalidInputError(f"Unsupported sort field: {name}")
            order_by.append((schema.sort_fields[name], descending))
    if not order_by:
        order_by = list(schema.default_sort)

    resolved_limit = min(_parse_positive(limit, "limit", default_limit), max_limit)
    return ListQuery(
        equals=tuple(equals),
        contains=tuple(contains),
        order_by=tuple(order_by),
        page=_parse_positive(page, "page", 1),
        limit=resolved_limit,
    )


HOTEL_LISTING = ListingSchema(
    exact_fields={
        "province": "province",
        "district": "district",
        "postalcode": "postalcode",
    },
    contains_fields={"name": "name"},
    sort_fields={
        "name": "name",
        "province": "province",
        "district": "district",
        "createdAt": "created_at",
    },
    default_sort=(("created_at", True), ("id", True)),
)

USER_LISTING = ListingSchema(
    exact_fields={"role": "role", "email": "email"},
    contains_fields={"name": "name"},
    sort_fields={"name": "name", "email": "email", "createdAt": "created_at"},
    default_sort=(("created_at", True), ("id", True)),
)
