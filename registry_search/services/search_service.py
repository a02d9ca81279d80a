from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional

from registry_search.domain.filters import build_search_filter
from registry_search.domain.models import (
    AutocompleteRequest,
    AutocompleteResponse,
    DependentsRequest,
    DependentsResponse,
    PackageDependent,
    PackageRecord,
    PackageRegistration,
    SearchRequest,
    SearchResponse,
    VersionsRequest,
)
from registry_search.domain.predicates import Clause, ClauseKind
from registry_search.domain.query_parser import parse_search_query
from registry_search.domain.search_utils import fold_case
from registry_search.domain.versions import version_key
from registry_search.services.frameworks import FrameworkCompatibilityService
from registry_search.services.response_builder import SearchResponseBuilder
from registry_search.storage.store import PackageStore, raise_if_cancelled

logger = logging.getLogger(__name__)

DEFAULT_DEPENDENTS_LIMIT = 20


class PackageSearchService:
    """
    Answers search, autocomplete, version listing and dependents queries
    against a package store.

    Every operation is a read; the service keeps no per-request state and
    can be shared by concurrent requests. Each operation accepts an optional
    ``cancellation`` event that is checked before every store round trip.
    """

    def __init__(
        self,
        store: PackageStore,
        frameworks: FrameworkCompatibilityService,
        response_builder: SearchResponseBuilder,
        dependents_limit: int = DEFAULT_DEPENDENTS_LIMIT,
    ):
        if store is None:
            raise ValueError("A package store is required")
        if frameworks is None:
            raise ValueError("A framework compatibility service is required")
        if response_builder is None:
            raise ValueError("A search response builder is required")

        self.store = store
        self.frameworks = frameworks
        self.response_builder = response_builder
        self.dependents_limit = dependents_limit

    async def search(
        self,
        request: SearchRequest,
        cancellation: Optional[asyncio.Event] = None,
    ) -> SearchResponse:
        bounded_subqueries = self.store.supports_bounded_subqueries
        frameworks = self._get_compatible_frameworks_or_none(request.framework)
        search_filter = build_search_filter(
            request.include_prerelease,
            request.include_semver2,
            request.package_type,
            frameworks,
        )

        matches = self.store.packages().where(parse_search_query(request.query)).where(search_filter)

        # The text query is applied to each package's latest version only,
        # otherwise older versions with out-of-date metadata could match.
        # "Latest" is decided under the same filter, never the text query.
        latest = self.store.packages().where(search_filter).latest_per_identity()

        package_ids = (
            matches.where_record_in(latest)
            .select(lambda p: p.identity)
            .distinct(key=fold_case)
            .order_by(lambda identity: identity)
            .skip(request.skip)
            .take(request.take)
        )

        # All versions of every matched package are fetched, otherwise the
        # response could not list a package's other versions.
        if bounded_subqueries:
            logger.debug("Search %r: fetching page in a single round trip", request.query)
            fetch = self.store.packages().where_identity_in(package_ids)
        else:
            logger.debug("Search %r: fetching page in two round trips", request.query)
            package_id_results = await self.store.to_list(package_ids, cancellation)
            raise_if_cancelled(cancellation)
            fetch = self.store.packages().where_identity_in(package_id_results)

        fetch = fetch.where(search_filter)
        results = await self.store.to_list(fetch, cancellation)

        registrations = _group_by_identity(results)
        logger.debug("Search %r returned %d packages", request.query, len(registrations))
        return self.response_builder.build_search(registrations)

    async def autocomplete(
        self,
        request: AutocompleteRequest,
        cancellation: Optional[asyncio.Event] = None,
    ) -> AutocompleteResponse:
        search_filter = build_search_filter(
            request.include_prerelease,
            request.include_semver2,
            request.package_type,
            frameworks=None,
        )

        query = (
            self.store.packages()
            .where(parse_search_query(request.query))
            .where(search_filter)
            .order_by(lambda p: p.downloads, descending=True)
            .select(lambda p: p.identity)
            .distinct(key=fold_case)
            .skip(request.skip)
            .take(request.take)
        )

        package_ids = await self.store.to_list(query, cancellation)
        return self.response_builder.build_autocomplete(package_ids)

    async def list_package_versions(
        self,
        request: VersionsRequest,
        cancellation: Optional[asyncio.Event] = None,
    ) -> AutocompleteResponse:
        """
        Versions of one package, ascending by version order.
        """
        search_filter = build_search_filter(
            request.include_prerelease,
            request.include_semver2,
            package_type=None,
            frameworks=None,
        )

        query = (
            self.store.packages()
            .where(Clause(ClauseKind.EQUALS, "identity", request.package_id))
            .where(search_filter)
            .select(lambda p: p.version)
            .distinct()
            .order_by(version_key)
        )

        versions = await self.store.to_list(query, cancellation)
        return self.response_builder.build_autocomplete(versions)

    async def find_dependents(
        self,
        request: DependentsRequest,
        cancellation: Optional[asyncio.Event] = None,
    ) -> DependentsResponse:
        query = (
            self.store.packages()
            .where(Clause(ClauseKind.EQUALS, "listed", True))
            .where(Clause(ClauseKind.HAS_MEMBER, "dependencies", request.package_id))
            .order_by(lambda p: p.downloads, descending=True)
            .select(
                lambda p: PackageDependent(
                    identity=p.identity,
                    description=p.description,
                    total_downloads=p.downloads,
                )
            )
            .take(self.dependents_limit)
            .distinct()
        )

        dependents = await self.store.to_list(query, cancellation)
        return self.response_builder.build_dependents(dependents)

    def _get_compatible_frameworks_or_none(self, framework: Optional[str]) -> Optional[List[str]]:
        if not framework:
            return None
        return self.frameworks.find_all_compatible_frameworks(framework)


def _group_by_identity(records: List[PackageRecord]) -> List[PackageRegistration]:
    """
    Group records into registrations in page order.

    The page was ordered by the spelling of each identity's latest record
    under the search filter, and the records here passed that same filter,
    so registrations sort on their latest record's identity.
    """
    groups: Dict[str, List[PackageRecord]] = {}
    for record in records:
        groups.setdefault(fold_case(record.identity), []).append(record)

    registrations = [
        PackageRegistration(identity=packages[0].identity, packages=packages)
        for packages in groups.values()
    ]
    registrations.sort(key=lambda r: r.latest.identity)
    return registrations
