from __future__ import annotations

from typing import Iterable, List

from registry_search.domain.models import (
    AutocompleteResponse,
    DependentsResponse,
    PackageDependent,
    PackageRegistration,
    SearchResponse,
    SearchResult,
    SearchResultVersion,
)
from registry_search.domain.versions import version_key


class SearchResponseBuilder:
    """
    Turns grouped query results into protocol responses.
    """

    def build_search(self, registrations: Iterable[PackageRegistration]) -> SearchResponse:
        results: List[SearchResult] = [self._to_search_result(r) for r in registrations]
        return SearchResponse(total_hits=len(results), data=results)

    def build_autocomplete(self, values: Iterable[str]) -> AutocompleteResponse:
        data = list(values)
        return AutocompleteResponse(total_hits=len(data), data=data)

    def build_dependents(self, entries: Iterable[PackageDependent]) -> DependentsResponse:
        data = list(entries)
        return DependentsResponse(total_hits=len(data), data=data)

    def _to_search_result(self, registration: PackageRegistration) -> SearchResult:
        latest = registration.latest
        ordered = sorted(registration.packages, key=lambda p: version_key(p.version))

        return SearchResult(
            identity=latest.identity,
            version=latest.version,
            title=latest.title,
            description=latest.description,
            summary=latest.summary,
            authors=latest.authors,
            tags=latest.tags,
            icon_url=latest.icon_url,
            license_url=latest.license_url,
            project_url=latest.project_url,
            package_types=latest.package_types,
            total_downloads=sum(p.downloads for p in registration.packages),
            versions=[SearchResultVersion(version=p.version, downloads=p.downloads) for p in ordered],
        )
