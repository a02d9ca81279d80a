"""Shared fixtures for the search engine tests."""

from __future__ import annotations

from typing import Iterable

import pytest

from registry_search.domain.models import PackageRecord
from registry_search.services.frameworks import FrameworkCompatibilityService
from registry_search.services.response_builder import SearchResponseBuilder
from registry_search.services.search_service import PackageSearchService
from registry_search.storage.store import MemoryPackageStore


class RecordingStore(MemoryPackageStore):
    """Memory store that counts round trips reaching the catalog."""

    def __init__(self, records: Iterable[PackageRecord] = (), supports_bounded_subqueries: bool = True):
        super().__init__(records, supports_bounded_subqueries=supports_bounded_subqueries)
        self.round_trips = 0

    async def get_records(self):
        self.round_trips += 1
        return await super().get_records()


def _make_record(identity: str, version: str, **fields) -> PackageRecord:
    return PackageRecord(identity=identity, version=version, **fields)


@pytest.fixture
def make_record():
    return _make_record


@pytest.fixture
def make_service():
    def _make(records: Iterable[PackageRecord], supports_bounded_subqueries: bool = True, **kwargs):
        store = RecordingStore(records, supports_bounded_subqueries=supports_bounded_subqueries)
        return PackageSearchService(
            store=store,
            frameworks=FrameworkCompatibilityService(),
            response_builder=SearchResponseBuilder(),
            **kwargs,
        )

    return _make


@pytest.fixture
def foo_bar_records():
    """Foo.Bar with a stable and a prerelease version."""
    return [
        _make_record("Foo.Bar", "1.0.0", description="Foo bar library", downloads=100),
        _make_record("Foo.Bar", "2.0.0-beta", description="Foo bar library", downloads=5),
    ]


@pytest.fixture
def catalog():
    """A small mixed catalog used across search tests."""
    return [
        _make_record("Foo.Bar", "1.0.0", title="Foo Bar", authors=["Jane"], downloads=100,
                     target_frameworks=["net6.0"]),
        _make_record("Foo.Bar", "2.0.0-beta", title="Foo Bar", authors=["Jane"], downloads=5,
                     target_frameworks=["net8.0"]),
        _make_record("Foo.Baz", "0.9.0", title="Foo Baz", authors=["John"], downloads=40,
                     tags=["json", "parser"], target_frameworks=["netstandard2.0"]),
        _make_record("Foo.Baz", "1.0.0", title="Foo Baz", authors=["John"], downloads=60,
                     tags=["json", "parser"], target_frameworks=["netstandard2.0"]),
        _make_record("Bar.Core", "3.1.0", title="Bar core", authors=["Jane", "John"], downloads=300,
                     package_types=["Dependency"], target_frameworks=["net8.0"]),
        _make_record("Bar.Tool", "1.2.0", title="Bar tool", downloads=20,
                     package_types=["DotnetTool"], target_frameworks=["net8.0"]),
        _make_record("Hidden.Pkg", "1.0.0", title="Hidden", listed=False, downloads=1000),
        _make_record("SemVer2.Pkg", "1.0.0+build.5", title="Metadata", downloads=7),
        _make_record("Zeta.Lib", "1.0.0", title="Zeta", downloads=3),
        _make_record("alpha.lib", "1.0.0", title="alpha", downloads=2),
    ]
