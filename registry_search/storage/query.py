"""
Lazily evaluated queries over package version records.

A PackageQuery is an immutable list of steps. Building one does no work;
a PackageStore executes it in a single round trip with ``to_list``. Steps
may reference other queries (identity membership, record membership), which
are evaluated against the same snapshot as the outer query.
"""

from __future__ import annotations

from typing import Any, Callable, Iterator, List, NamedTuple, Optional, Sequence, Tuple, Union

from registry_search.domain.models import PackageRecord
from registry_search.domain.predicates import Predicate
from registry_search.domain.search_utils import distinct, fold_case
from registry_search.domain.versions import version_key


class QueryStep(NamedTuple):
    op: str
    arg: Any = None
    descending: bool = False


def record_key(record: PackageRecord) -> Tuple[str, tuple]:
    """(identity, version) key identifying a single version record."""
    return fold_case(record.identity), version_key(record.version)


class PackageQuery:
    def __init__(self, steps: Tuple[QueryStep, ...] = ()):
        self._steps = tuple(steps)

    def __repr__(self) -> str:
        return f"PackageQuery({[s.op for s in self._steps]})"

    @property
    def steps(self) -> Tuple[QueryStep, ...]:
        return self._steps

    def _then(self, op: str, arg: Any = None, descending: bool = False) -> "PackageQuery":
        return PackageQuery(self._steps + (QueryStep(op, arg, descending),))

    # -- builders ---------------------------------------------------------

    def where(self, predicate: Predicate) -> "PackageQuery":
        return self._then("where", predicate)

    def where_identity_in(self, identities: Union[Sequence[str], "PackageQuery"]) -> "PackageQuery":
        """
        Keep records whose identity is in an explicit list, or in the
        identities produced by another query.
        """
        if not isinstance(identities, PackageQuery):
            identities = tuple(identities)
        return self._then("identity_in", identities)

    def where_record_in(self, other: "PackageQuery") -> "PackageQuery":
        """Keep records whose (identity, version) pair is produced by ``other``."""
        return self._then("record_in", other)

    def latest_per_identity(self) -> "PackageQuery":
        """Group by identity and keep only the highest version of each."""
        return self._then("latest")

    def order_by(self, key: Callable[[Any], Any], descending: bool = False) -> "PackageQuery":
        return self._then("order_by", key, descending)

    def select(self, projection: Callable[[Any], Any]) -> "PackageQuery":
        return self._then("select", projection)

    def distinct(self, key: Optional[Callable[[Any], Any]] = None) -> "PackageQuery":
        """Drop repeated items, keeping the first; ``key`` picks what is compared."""
        return self._then("distinct", key)

    def skip(self, count: int) -> "PackageQuery":
        return self._then("skip", count)

    def take(self, count: int) -> "PackageQuery":
        return self._then("take", count)

    # -- inspection -------------------------------------------------------

    @property
    def is_bounded(self) -> bool:
        """True when the query limits the rows it returns."""
        return any(s.op in ("skip", "take") for s in self._steps)

    def subqueries(self) -> Iterator["PackageQuery"]:
        """Every query nested in this one, recursively."""
        for step in self._steps:
            if isinstance(step.arg, PackageQuery):
                yield step.arg
                yield from step.arg.subqueries()

    # -- execution --------------------------------------------------------

    def evaluate(self, source: Sequence[PackageRecord]) -> List[Any]:
        items: List[Any] = list(source)

        for step in self._steps:
            if step.op == "where":
                items = [r for r in items if step.arg.matches(r)]
            elif step.op == "identity_in":
                ids = step.arg.evaluate(source) if isinstance(step.arg, PackageQuery) else step.arg
                wanted = {fold_case(i) for i in ids}
                items = [r for r in items if fold_case(r.identity) in wanted]
            elif step.op == "record_in":
                wanted = {record_key(r) for r in step.arg.evaluate(source)}
                items = [r for r in items if record_key(r) in wanted]
            elif step.op == "latest":
                items = _latest_per_identity(items)
            elif step.op == "order_by":
                items = sorted(items, key=step.arg, reverse=step.descending)
            elif step.op == "select":
                items = [step.arg(i) for i in items]
            elif step.op == "distinct":
                items = distinct(items, key=step.arg)
            elif step.op == "skip":
                items = items[step.arg:]
            elif step.op == "take":
                items = items[: step.arg]
            else:
                raise ValueError(f"Unknown query step: {step.op}")

        return items


def _latest_per_identity(records: List[PackageRecord]) -> List[PackageRecord]:
    latest = {}
    for record in records:
        key = fold_case(record.identity)
        current = latest.get(key)
        if current is None or version_key(record.version) > version_key(current.version):
            latest[key] = record
    return list(latest.values())
