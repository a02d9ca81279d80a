"""
Pydantic models for the registry search engine.

This module defines all data models used throughout the application, including:
- Package version records as stored in the catalog
- Search, autocomplete, versions and dependents request models
- Response models returned by the response builder
- Search engine settings

All models use Pydantic for validation, serialization, and type safety.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from registry_search.domain.versions import (
    is_prerelease_version,
    is_semver2_version,
    max_version,
    normalize_version,
    version_key,
)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class SearchSettings(BaseModel):
    """
    Top-level configuration for the search engine.

    Persisted at: <DATA_DIR>/search.json
    """

    supports_bounded_subqueries: bool = Field(
        default=True,
        description="If True, the store can nest a skip/take query inside another query, so search runs in one round trip.",
    )
    dependents_limit: int = Field(
        default=20,
        ge=1,
        description="Maximum number of dependents returned for a package.",
    )
    default_take: int = Field(
        default=20,
        ge=0,
        description="Page size used by the HTTP API when the client does not send 'take'.",
    )
    max_take: int = Field(
        default=1000,
        ge=1,
        description="Upper bound the HTTP API clamps 'take' to.",
    )
    refresh_interval_seconds: int = Field(
        default=3600,
        ge=60,
        description="How often (in seconds) the catalog is reloaded from disk. Minimum: 60 seconds.",
    )
    frameworks_file: str = Field(
        default="frameworks.yaml",
        description="Framework compatibility table, relative to the data directory.",
    )


# ---------------------------------------------------------------------------
# Catalog Models
# ---------------------------------------------------------------------------


class SemVerLevel(str, Enum):
    SEMVER1 = "SemVer1"
    SEMVER2 = "SemVer2"


class PackageRecord(BaseModel):
    """
    One released version of a package identity.

    Many records share one identity. The version is stored in its normalized
    form; prerelease and SemVer level are derived from the version string
    when the catalog does not state them.

    Persisted in: <DATA_DIR>/packages/<identity>/<version>/version.json
    """

    identity: str = Field(
        min_length=1,
        description="Package identifier, compared case-insensitively.",
    )
    version: str = Field(
        description="Normalized version string.",
    )
    listed: bool = Field(
        default=True,
        description="Unlisted versions never appear in query results.",
    )
    is_prerelease: bool = Field(default=False)
    sem_ver_level: SemVerLevel = Field(default=SemVerLevel.SEMVER1)

    package_types: List[str] = Field(default_factory=lambda: ["Dependency"])
    target_frameworks: List[str] = Field(default_factory=list)
    dependencies: List[str] = Field(
        default_factory=list,
        description="Identities this version depends on.",
    )
    downloads: int = Field(default=0, ge=0)

    title: Optional[str] = None
    description: Optional[str] = None
    summary: Optional[str] = None
    authors: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)

    icon_url: Optional[str] = None
    license_url: Optional[str] = None
    project_url: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _derive_version_flags(cls, data):
        if not isinstance(data, dict) or not isinstance(data.get("version"), str):
            return data
        data = dict(data)
        raw = data["version"]
        if "is_prerelease" not in data:
            data["is_prerelease"] = is_prerelease_version(raw)
        if "sem_ver_level" not in data:
            data["sem_ver_level"] = SemVerLevel.SEMVER2 if is_semver2_version(raw) else SemVerLevel.SEMVER1
        return data

    @field_validator("version")
    @classmethod
    def _normalize_version(cls, value: str) -> str:
        normalized = normalize_version(value)
        version_key(normalized)
        return normalized


class PackageRegistration(BaseModel):
    """
    All records of one identity that survived the active filters.

    Built per request while assembling search results; never persisted.
    """

    identity: str
    packages: List[PackageRecord] = Field(default_factory=list)

    @property
    def latest(self) -> PackageRecord:
        top = max_version(p.version for p in self.packages)
        return next(p for p in self.packages if p.version == top)


class PackageDependent(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    identity: str = Field(alias="id")
    description: Optional[str] = None
    total_downloads: int = Field(default=0, alias="totalDownloads")


# ---------------------------------------------------------------------------
# Request Models
# ---------------------------------------------------------------------------


class SearchRequest(BaseModel):
    query: Optional[str] = None
    framework: Optional[str] = None
    include_prerelease: bool = False
    include_semver2: bool = False
    package_type: Optional[str] = None
    skip: int = Field(default=0, ge=0)
    take: int = Field(default=20, ge=0)


class AutocompleteRequest(BaseModel):
    """
    Same shape as SearchRequest without a framework; a framework sent by a
    client is ignored.
    """

    query: Optional[str] = None
    include_prerelease: bool = False
    include_semver2: bool = False
    package_type: Optional[str] = None
    skip: int = Field(default=0, ge=0)
    take: int = Field(default=20, ge=0)


class VersionsRequest(BaseModel):
    package_id: str
    include_prerelease: bool = False
    include_semver2: bool = False


class DependentsRequest(BaseModel):
    package_id: str


# ---------------------------------------------------------------------------
# Response Models
# ---------------------------------------------------------------------------


class _ResponseModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class SearchResultVersion(_ResponseModel):
    version: str
    downloads: int


class SearchResult(_ResponseModel):
    identity: str = Field(alias="id")
    version: str
    title: Optional[str] = None
    description: Optional[str] = None
    summary: Optional[str] = None
    authors: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    icon_url: Optional[str] = Field(default=None, alias="iconUrl")
    license_url: Optional[str] = Field(default=None, alias="licenseUrl")
    project_url: Optional[str] = Field(default=None, alias="projectUrl")
    package_types: List[str] = Field(default_factory=list, alias="packageTypes")
    total_downloads: int = Field(default=0, alias="totalDownloads")
    versions: List[SearchResultVersion] = Field(default_factory=list)


class SearchResponse(_ResponseModel):
    total_hits: int = Field(alias="totalHits")
    data: List[SearchResult] = Field(default_factory=list)


class AutocompleteResponse(_ResponseModel):
    total_hits: int = Field(alias="totalHits")
    data: List[str] = Field(default_factory=list)


class DependentsResponse(_ResponseModel):
    total_hits: int = Field(alias="totalHits")
    data: List[PackageDependent] = Field(default_factory=list)
