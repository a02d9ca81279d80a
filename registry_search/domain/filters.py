from __future__ import annotations

from typing import Iterable, List, Optional

from registry_search.domain.models import SemVerLevel
from registry_search.domain.predicates import Clause, ClauseKind, Predicate, all_of


def build_search_filter(
    include_prerelease: bool,
    include_semver2: bool,
    package_type: Optional[str] = None,
    frameworks: Optional[Iterable[str]] = None,
) -> Predicate:
    """
    Structural filter shared by every view of a search.

    The same predicate decides both which records match and which record is
    an identity's latest version, so the two can never disagree. Listed is
    always required. A frameworks value of None means "no constraint"; an
    empty collection matches nothing.
    """
    clauses: List[Predicate] = []

    if not include_prerelease:
        clauses.append(Clause(ClauseKind.EQUALS, "is_prerelease", False))

    if not include_semver2:
        clauses.append(Clause(ClauseKind.NOT_EQUALS, "sem_ver_level", SemVerLevel.SEMVER2))

    if package_type:
        clauses.append(Clause(ClauseKind.HAS_MEMBER, "package_types", package_type))

    if frameworks is not None:
        clauses.append(Clause(ClauseKind.HAS_ANY_MEMBER, "target_frameworks", tuple(frameworks)))

    clauses.append(Clause(ClauseKind.EQUALS, "listed", True))
    return all_of(*clauses)
