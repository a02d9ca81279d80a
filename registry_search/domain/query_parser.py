from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from registry_search.domain.predicates import (
    MATCH_ALL,
    Clause,
    ClauseKind,
    Predicate,
    all_of,
    any_of,
)

logger = logging.getLogger(__name__)

# Query field -> (clause kind, record field)
SEARCH_FIELDS: Dict[str, Tuple[ClauseKind, str]] = {
    "packageid": (ClauseKind.EQUALS, "identity"),
    "version": (ClauseKind.EQUALS, "version"),
    "title": (ClauseKind.CONTAINS, "title"),
    "tags": (ClauseKind.CONTAINS, "tags"),
    "author": (ClauseKind.CONTAINS, "authors"),
    "description": (ClauseKind.CONTAINS, "description"),
    "summary": (ClauseKind.CONTAINS, "summary"),
}

IDENTITY_FIELD = "id"


def parse_search_query(query: Optional[str]) -> Predicate:
    """
    Turn a free-text search query into a record predicate.

    The query is lower-cased and split on whitespace. Each token is either a
    bare term or ``field:term`` (split at the first colon). Bare terms and
    ``id:`` terms are OR-ed together as identity substring matches; every
    other recognized field adds an AND-ed clause. Unrecognized fields are
    ignored.

    An empty or missing query matches every record.
    """
    if not query:
        return MATCH_ALL

    identity_terms: List[str] = []
    clauses: List[Predicate] = []

    for token in query.lower().split():
        field, sep, term = token.partition(":")
        if not sep:
            identity_terms.append(token)
            continue

        if field == IDENTITY_FIELD:
            identity_terms.append(term)
            continue

        rule = SEARCH_FIELDS.get(field)
        if rule is None:
            logger.debug("Ignoring unrecognized search field %r", field)
            continue

        kind, record_field = rule
        clauses.append(Clause(kind, record_field, term))

    if identity_terms:
        clauses.append(
            any_of(*(Clause(ClauseKind.CONTAINS, "identity", t) for t in identity_terms))
        )

    if not clauses:
        return MATCH_ALL
    return all_of(*clauses)
