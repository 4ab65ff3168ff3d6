"""Paginated, filtered listing over an abstract record collection.

A :class:`ListingQuery` turns untrusted ``page`` / ``limit`` / ``status`` /
``search`` parameters into one deterministic page of records plus paging
metadata. It only talks to a :class:`Collection`, so the same rules apply to
products, orders and craftsmen regardless of how they are stored.

Usage:
    query = ListingQuery(
        resource="orders",
        search_fields=("customer_name", "customer_phone", "customer_address"),
        timestamp_field="order_date",
    )
    page = await query.run(collection, ListingRequest(page="2", limit="50"))
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from pydantic import BaseModel, field_validator

from storefront.core.exceptions import ListingQueryFailed

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 50
MAX_LIMIT = 1000
# Largest page whose offset still fits a signed 64-bit SQL integer.
MAX_PAGE = (2**63 - 1) // MAX_LIMIT
ALL_STATUSES = "all"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_leading_int(value: Any) -> int | None:
    """Parse the leading integer of *value* ("12abc" -> 12, "2.9" -> 2).

    Returns None when there is no leading integer at all.
    """
    if value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    match = _LEADING_INT.match(str(value))
    if match is None:
        return None
    return int(match.group(1))


class ListingRequest(BaseModel):
    """Client paging/filter parameters, sanitised on construction.

    Malformed values never raise: they fall back to the defaults or are
    clamped into range.
    """

    model_config = {"frozen": True}

    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    status_filter: str | None = None
    search_term: str | None = None

    @field_validator("page", mode="before")
    @classmethod
    def _sanitize_page(cls, value: Any) -> int:
        parsed = parse_leading_int(value)
        if parsed is None or parsed < 1:
            return DEFAULT_PAGE
        return min(parsed, MAX_PAGE)

    @field_validator("limit", mode="before")
    @classmethod
    def _sanitize_limit(cls, value: Any) -> int:
        parsed = parse_leading_int(value)
        if parsed is None or parsed < 1:
            return DEFAULT_LIMIT
        return min(parsed, MAX_LIMIT)

    @field_validator("status_filter", mode="before")
    @classmethod
    def _sanitize_status(cls, value: Any) -> str | None:
        if value is None:
            return None
        value = str(value).strip()
        if not value or value == ALL_STATUSES:
            return None
        return value

    @field_validator("search_term", mode="before")
    @classmethod
    def _sanitize_search(cls, value: Any) -> str | None:
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


COMPARISON_OPS = frozenset({"gt", "ge", "le", "ieq"})


@dataclass(frozen=True)
class Comparison:
    """``field <op> value``; ``ieq`` is a case-insensitive equality."""

    field: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in COMPARISON_OPS:
            raise ValueError(f"Unsupported comparison {self.op!r}")


@dataclass(frozen=True)
class ListingFilter:
    """Predicate handed to a Collection.

    All clauses are ANDed: every ``equals`` pair, every ``comparisons``
    entry, the status clause when ``status`` is set, and the search group
    when ``search_term`` is set. The search group matches when any of
    ``search_fields`` contains the term, case-insensitively, as a literal
    substring.
    """

    status: str | None = None
    status_field: str = "status"
    search_term: str | None = None
    search_fields: tuple[str, ...] = ()
    equals: tuple[tuple[str, Any], ...] = ()
    comparisons: tuple[Comparison, ...] = ()


@dataclass(frozen=True)
class SortKey:
    field: str
    descending: bool = True


@dataclass(frozen=True)
class PageResult:
    items: list
    current_page: int
    total_count: int
    limit: int

    @property
    def total_pages(self) -> int:
        return -(-self.total_count // self.limit)

    @property
    def has_next_page(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def has_prev_page(self) -> bool:
        return self.current_page > 1


class Collection(Protocol):
    async def count_matching(self, listing_filter: ListingFilter) -> int: ...

    async def find_matching(
        self,
        listing_filter: ListingFilter,
        sort: Sequence[SortKey],
        skip: int,
        limit: int,
    ) -> Sequence[Any]: ...


class ListingQuery:
    """Newest-first paginated listing for one kind of record."""

    def __init__(
        self,
        *,
        resource: str,
        search_fields: Sequence[str],
        timestamp_field: str,
        id_field: str = "id",
        status_field: str = "status",
        scope: Mapping[str, Any] | None = None,
    ):
        self.resource = resource
        self.search_fields = tuple(search_fields)
        self.status_field = status_field
        self.scope = dict(scope or {})
        # id breaks timestamp ties so paging is stable between requests
        self.sort = (SortKey(timestamp_field), SortKey(id_field))

    def build_filter(
        self,
        request: ListingRequest,
        extra: Mapping[str, Any] | None = None,
        comparisons: Sequence[Comparison] = (),
    ) -> ListingFilter:
        equals = list(self.scope.items())
        for field, value in (extra or {}).items():
            if value is None or (isinstance(value, str) and not value.strip()):
                continue
            equals.append((field, value.strip() if isinstance(value, str) else value))
        return ListingFilter(
            status=request.status_filter,
            status_field=self.status_field,
            search_term=request.search_term if self.search_fields else None,
            search_fields=self.search_fields,
            equals=tuple(equals),
            comparisons=tuple(comparisons),
        )

    async def run(
        self,
        collection: Collection,
        request: ListingRequest,
        extra: Mapping[str, Any] | None = None,
        comparisons: Sequence[Comparison] = (),
    ) -> PageResult:
        listing_filter = self.build_filter(request, extra, comparisons)
        try:
            total = await collection.count_matching(listing_filter)
            items = await collection.find_matching(
                listing_filter, self.sort, request.offset, request.limit
            )
        except Exception as exc:
            logger.warning("Listing %s failed: %r", self.resource, exc)
            raise ListingQueryFailed(exc, resource=self.resource) from exc

        return PageResult(
            items=list(items),
            current_page=request.page,
            total_count=total,
            limit=request.limit,
        )
