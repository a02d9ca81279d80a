from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from registry_search.domain.errors import OperationCancelledError, UnsupportedQueryError
from registry_search.domain.models import PackageRecord
from registry_search.storage.query import PackageQuery


def raise_if_cancelled(cancellation: Optional[asyncio.Event]) -> None:
    if cancellation is not None and cancellation.is_set():
        raise OperationCancelledError("Operation was cancelled")


class PackageStore(ABC):
    """
    Abstract base class for package catalog storage.

    Queries are built from ``packages()`` and executed with ``to_list``;
    each ``to_list`` call is one round trip to the store.
    """

    def __init__(self, supports_bounded_subqueries: bool = True):
        self._supports_bounded_subqueries = supports_bounded_subqueries

    @property
    def supports_bounded_subqueries(self) -> bool:
        """
        True when the store can nest a skip/take query inside another query.
        Fixed for the lifetime of the store.
        """
        return self._supports_bounded_subqueries

    def packages(self) -> PackageQuery:
        """Start a query over every version record in the store."""
        return PackageQuery()

    async def to_list(
        self,
        query: PackageQuery,
        cancellation: Optional[asyncio.Event] = None,
    ) -> List[Any]:
        """
        Execute a query in a single round trip.

        Raises OperationCancelledError if the cancellation event is set before
        the round trip starts, and UnsupportedQueryError if the query nests a
        bounded sub-query the store cannot express.
        """
        raise_if_cancelled(cancellation)

        if not self._supports_bounded_subqueries and any(q.is_bounded for q in query.subqueries()):
            raise UnsupportedQueryError("Store cannot limit rows returned from a sub-query")

        records = await self.get_records()
        return query.evaluate(records)

    @abstractmethod
    async def get_records(self) -> Sequence[PackageRecord]:
        """Current snapshot of every version record."""
        pass


class MemoryPackageStore(PackageStore):
    """
    Store holding its catalog in memory.

    The snapshot is replaced as a whole, so a round trip never observes a
    partially updated catalog.
    """

    def __init__(
        self,
        records: Iterable[PackageRecord] = (),
        supports_bounded_subqueries: bool = True,
    ):
        super().__init__(supports_bounded_subqueries=supports_bounded_subqueries)
        self._records: Tuple[PackageRecord, ...] = tuple(records)

    def replace(self, records: Iterable[PackageRecord]) -> None:
        self._records = tuple(records)

    async def get_records(self) -> Sequence[PackageRecord]:
        # Yield to the loop like a real round trip would.
        await asyncio.sleep(0)
        return self._records
