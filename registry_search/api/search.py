"""
NuGet v3 style query endpoints.

Translates query-string parameters into engine requests and store faults
into HTTP failures. All result shaping happens in the response builder.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Awaitable, Optional, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from registry_search.core.dependencies import get_search_service, get_settings
from registry_search.domain.errors import OperationCancelledError, StoreUnavailableError
from registry_search.domain.models import (
    AutocompleteRequest,
    AutocompleteResponse,
    DependentsRequest,
    DependentsResponse,
    SearchRequest,
    SearchResponse,
    SearchSettings,
    VersionsRequest,
)
from registry_search.domain.versions import parse_version
from registry_search.services.search_service import PackageSearchService

logger = logging.getLogger(__name__)
router = APIRouter()

T = TypeVar("T")

DISCONNECT_POLL_SECONDS = 0.1


def _include_semver2(sem_ver_level: Optional[str]) -> bool:
    """
    Clients opt into SemVer 2.0.0 packages with semVerLevel=2.0.0.
    """
    if not sem_ver_level:
        return False
    try:
        return parse_version(sem_ver_level).release[0] >= 2
    except ValueError:
        return False


def _page_size(take: Optional[int], settings: SearchSettings) -> int:
    if take is None:
        return settings.default_take
    return min(take, settings.max_take)


async def request_cancellation(request: Request) -> AsyncIterator[asyncio.Event]:
    """
    Cancellation signal for one request, set once the client disconnects.
    """
    cancellation = asyncio.Event()

    async def _watch_disconnect() -> None:
        while not await request.is_disconnected():
            await asyncio.sleep(DISCONNECT_POLL_SECONDS)
        cancellation.set()

    watcher = asyncio.create_task(_watch_disconnect())
    try:
        yield cancellation
    finally:
        watcher.cancel()


async def _execute(operation: Awaitable[T]) -> T:
    try:
        return await operation
    except StoreUnavailableError as e:
        logger.error("Package store unavailable: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Package store unavailable",
        )
    except OperationCancelledError:
        logger.info("Request cancelled by client disconnect")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Request was cancelled",
        )


# ---------------------------------------------------------------------------
# 1. GET /v3/search
# ---------------------------------------------------------------------------

@router.get("/v3/search", response_model=SearchResponse)
async def search(
    q: Optional[str] = Query(default=None),
    skip: int = Query(default=0, ge=0),
    take: Optional[int] = Query(default=None, ge=0),
    prerelease: bool = Query(default=False),
    sem_ver_level: Optional[str] = Query(default=None, alias="semVerLevel"),
    package_type: Optional[str] = Query(default=None, alias="packageType"),
    framework: Optional[str] = Query(default=None),
    service: PackageSearchService = Depends(get_search_service),
    settings: SearchSettings = Depends(get_settings),
    cancellation: asyncio.Event = Depends(request_cancellation),
) -> SearchResponse:
    request = SearchRequest(
        query=q,
        framework=framework,
        include_prerelease=prerelease,
        include_semver2=_include_semver2(sem_ver_level),
        package_type=package_type,
        skip=skip,
        take=_page_size(take, settings),
    )
    return await _execute(service.search(request, cancellation))


# ---------------------------------------------------------------------------
# 2. GET /v3/autocomplete
# ---------------------------------------------------------------------------

@router.get("/v3/autocomplete", response_model=AutocompleteResponse)
async def autocomplete(
    q: Optional[str] = Query(default=None),
    package_id: Optional[str] = Query(default=None, alias="id"),
    skip: int = Query(default=0, ge=0),
    take: Optional[int] = Query(default=None, ge=0),
    prerelease: bool = Query(default=False),
    sem_ver_level: Optional[str] = Query(default=None, alias="semVerLevel"),
    package_type: Optional[str] = Query(default=None, alias="packageType"),
    service: PackageSearchService = Depends(get_search_service),
    settings: SearchSettings = Depends(get_settings),
    cancellation: asyncio.Event = Depends(request_cancellation),
) -> AutocompleteResponse:
    """
    Autocomplete package identities, or list one package's versions when
    ``id`` is given.
    """
    include_semver2 = _include_semver2(sem_ver_level)

    if package_id:
        versions_request = VersionsRequest(
            package_id=package_id,
            include_prerelease=prerelease,
            include_semver2=include_semver2,
        )
        return await _execute(service.list_package_versions(versions_request, cancellation))

    request = AutocompleteRequest(
        query=q,
        include_prerelease=prerelease,
        include_semver2=include_semver2,
        package_type=package_type,
        skip=skip,
        take=_page_size(take, settings),
    )
    return await _execute(service.autocomplete(request, cancellation))


# ---------------------------------------------------------------------------
# 3. GET /v3/dependents
# ---------------------------------------------------------------------------

@router.get("/v3/dependents", response_model=DependentsResponse)
async def dependents(
    package_id: str = Query(alias="packageId", min_length=1),
    service: PackageSearchService = Depends(get_search_service),
    cancellation: asyncio.Event = Depends(request_cancellation),
) -> DependentsResponse:
    return await _execute(service.find_dependents(DependentsRequest(package_id=package_id), cancellation))
