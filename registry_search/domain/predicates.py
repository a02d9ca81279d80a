"""
Composable record predicates.

A predicate is a tree of tagged clauses ``{kind, field, value}`` joined by
explicit AllOf / AnyOf combinators. Every case-insensitive comparison goes
through ``fold_case``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Tuple, Union

from registry_search.domain.models import PackageRecord
from registry_search.domain.search_utils import (
    any_contains_text,
    contains_text,
    equals_text,
    fold_case,
)


class ClauseKind(str, Enum):
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    HAS_MEMBER = "has_member"
    HAS_ANY_MEMBER = "has_any_member"


def _field_value(record: PackageRecord, field: str) -> Any:
    try:
        return getattr(record, field)
    except AttributeError:
        raise ValueError(f"Unknown record field: {field}") from None


def _equals(actual: Any, expected: Any) -> bool:
    if isinstance(actual, str) and isinstance(expected, str):
        return equals_text(actual, expected)
    return actual == expected


@dataclass(frozen=True)
class Clause:
    kind: ClauseKind
    field: str
    value: Any

    def matches(self, record: PackageRecord) -> bool:
        actual = _field_value(record, self.field)

        if self.kind is ClauseKind.EQUALS:
            return _equals(actual, self.value)
        if self.kind is ClauseKind.NOT_EQUALS:
            return not _equals(actual, self.value)
        if self.kind is ClauseKind.CONTAINS:
            if isinstance(actual, (list, tuple, set)):
                return any_contains_text(actual, self.value)
            return contains_text(actual, self.value)
        if self.kind is ClauseKind.HAS_MEMBER:
            target = fold_case(self.value)
            return any(fold_case(v) == target for v in actual or ())
        if self.kind is ClauseKind.HAS_ANY_MEMBER:
            wanted = {fold_case(v) for v in self.value}
            return any(fold_case(v) in wanted for v in actual or ())

        raise ValueError(f"Unsupported clause kind: {self.kind}")


@dataclass(frozen=True)
class AllOf:
    parts: Tuple["Predicate", ...] = ()

    def matches(self, record: PackageRecord) -> bool:
        return all(p.matches(record) for p in self.parts)


@dataclass(frozen=True)
class AnyOf:
    parts: Tuple["Predicate", ...] = ()

    def matches(self, record: PackageRecord) -> bool:
        return any(p.matches(record) for p in self.parts)


Predicate = Union[Clause, AllOf, AnyOf]

MATCH_ALL = AllOf()


def all_of(*predicates: Predicate) -> Predicate:
    """
    Conjoin predicates, flattening nested AllOf nodes.
    """
    parts = []
    for p in predicates:
        if isinstance(p, AllOf):
            parts.extend(p.parts)
        else:
            parts.append(p)
    if len(parts) == 1:
        return parts[0]
    return AllOf(tuple(parts))


def any_of(*predicates: Predicate) -> Predicate:
    if len(predicates) == 1:
        return predicates[0]
    return AnyOf(tuple(predicates))
