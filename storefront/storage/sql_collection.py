from collections.abc import Sequence

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from storefront.core.listing_query import Comparison, ListingFilter, SortKey
from storefront.database import Base

_LIKE_ESCAPE = "\\"


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so *term* only ever matches literally."""
    return (
        term.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )


class SqlCollection:
    """Collection over one ORM model, scoped to a single session."""

    def __init__(self, db: AsyncSession, model: type[Base]):
        self.db = db
        self.model = model

    def _column(self, name: str) -> InstrumentedAttribute:
        column = getattr(self.model, name, None)
        if not isinstance(column, InstrumentedAttribute):
            raise ValueError(f"{self.model.__name__} has no field {name!r}")
        return column

    def _compare(self, comparison: Comparison):
        column = self._column(comparison.field)
        if comparison.op == "gt":
            return column > comparison.value
        if comparison.op == "ge":
            return column >= comparison.value
        if comparison.op == "le":
            return column <= comparison.value
        return func.lower(column) == str(comparison.value).lower()

    def _where(self, listing_filter: ListingFilter):
        conditions = [self._column(field) == value for field, value in listing_filter.equals]
        conditions.extend(self._compare(c) for c in listing_filter.comparisons)

        if listing_filter.status is not None:
            conditions.append(self._column(listing_filter.status_field) == listing_filter.status)

        if listing_filter.search_term and listing_filter.search_fields:
            pattern = f"%{escape_like(listing_filter.search_term)}%"
            conditions.append(or_(*(
                self._column(field).ilike(pattern, escape=_LIKE_ESCAPE)
                for field in listing_filter.search_fields
            )))

        return and_(*conditions) if conditions else None

    async def count_matching(self, listing_filter: ListingFilter) -> int:
        stmt = select(func.count()).select_from(self.model)
        where = self._where(listing_filter)
        if where is not None:
            stmt = stmt.where(where)
        return (await self.db.execute(stmt)).scalar() or 0

    async def find_matching(
        self,
        listing_filter: ListingFilter,
        sort: Sequence[SortKey],
        skip: int,
        limit: int,
    ) -> list:
        stmt = select(self.model)
        where = self._where(listing_filter)
        if where is not None:
            stmt = stmt.where(where)

        order_by = []
        for key in sort:
            column = self._column(key.field)
            order_by.append(column.desc() if key.descending else column.asc())

        stmt = stmt.order_by(*order_by).offset(skip).limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
