"""Tests for the structural search filter."""

import itertools

import pytest

from registry_search.domain.filters import build_search_filter
from registry_search.domain.models import SemVerLevel


class TestBuildSearchFilter:
    def test_unlisted_is_always_excluded(self, make_record):
        record = make_record("Foo", "1.0.0-beta.1", listed=False)
        permissive = build_search_filter(include_prerelease=True, include_semver2=True)
        assert not permissive.matches(record)

    def test_prerelease_flag(self, make_record):
        record = make_record("Foo", "1.0.0-beta")
        assert record.is_prerelease
        assert not build_search_filter(False, True).matches(record)
        assert build_search_filter(True, True).matches(record)

    def test_semver2_flag(self, make_record):
        record = make_record("Foo", "1.0.0+build")
        assert record.sem_ver_level is SemVerLevel.SEMVER2
        assert not build_search_filter(True, False).matches(record)
        assert build_search_filter(True, True).matches(record)

    def test_explicit_flags_override_derived_ones(self, make_record):
        record = make_record("Foo", "1.0.0", is_prerelease=True, sem_ver_level="SemVer2")
        assert not build_search_filter(False, True).matches(record)
        assert not build_search_filter(True, False).matches(record)

    def test_package_type_membership(self, make_record):
        tool = make_record("Foo", "1.0.0", package_types=["DotnetTool"])
        library = make_record("Bar", "1.0.0")
        only_tools = build_search_filter(False, False, package_type="dotnettool")
        assert only_tools.matches(tool)
        assert not only_tools.matches(library)

    def test_empty_package_type_is_no_constraint(self, make_record):
        assert build_search_filter(False, False, package_type="").matches(make_record("Foo", "1.0.0"))

    def test_frameworks_require_any_compatible_moniker(self, make_record):
        record = make_record("Foo", "1.0.0", target_frameworks=["netstandard2.0", "net472"])
        assert build_search_filter(False, False, frameworks=["net8.0", "NETSTANDARD2.0"]).matches(record)
        assert not build_search_filter(False, False, frameworks=["net8.0"]).matches(record)

    def test_no_frameworks_means_no_constraint_but_empty_set_matches_nothing(self, make_record):
        record = make_record("Foo", "1.0.0")
        assert build_search_filter(False, False, frameworks=None).matches(record)
        assert not build_search_filter(False, False, frameworks=[]).matches(record)

    @pytest.mark.parametrize(
        "include_prerelease, include_semver2, package_type",
        list(itertools.product([False, True], [False, True], [None, "Dependency", "DotnetTool"])),
    )
    def test_listed_stable_semver1_dependency_passes_when_types_agree(
        self, make_record, include_prerelease, include_semver2, package_type
    ):
        record = make_record("Foo", "1.0.0")
        expected = package_type in (None, "Dependency")
        assert build_search_filter(include_prerelease, include_semver2, package_type).matches(record) is expected
