"""Tests for version parsing, normalization and ordering."""

import pytest

from registry_search.domain.versions import (
    is_prerelease_version,
    is_semver2_version,
    max_version,
    normalize_version,
    version_key,
)


class TestNormalizeVersion:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("1", "1.0.0"),
            ("1.2", "1.2.0"),
            ("1.2.3", "1.2.3"),
            ("1.2.3.0", "1.2.3"),
            ("1.2.3.4", "1.2.3.4"),
            ("1.0.0-Beta.1", "1.0.0-Beta.1"),
            ("1.0.0+sha.abc", "1.0.0"),
            (" 2.0.0 ", "2.0.0"),
        ],
    )
    def test_normalizes(self, raw, expected):
        assert normalize_version(raw) == expected

    @pytest.mark.parametrize("raw", ["", "v1.0.0", "1.0.0-", "1..0", "abc", "1.0.0-beta..1"])
    def test_rejects_invalid_versions(self, raw):
        with pytest.raises(ValueError):
            normalize_version(raw)


class TestVersionOrdering:
    def test_release_is_greater_than_its_prereleases(self):
        assert version_key("2.0.0-beta") < version_key("2.0.0")
        assert version_key("1.0.0") < version_key("2.0.0-beta")

    def test_numeric_parts_compare_numerically(self):
        assert version_key("1.9.0") < version_key("1.10.0")
        assert version_key("1.0.0-beta.2") < version_key("1.0.0-beta.10")

    def test_revision_number_is_ordered(self):
        assert version_key("1.0.0") < version_key("1.0.0.1")
        assert version_key("1.0.0.1-beta") > version_key("1.0.0")

    def test_prerelease_labels_compare_case_insensitively(self):
        assert version_key("1.0.0-BETA") == version_key("1.0.0-beta")
        assert version_key("1.0.0-alpha") < version_key("1.0.0-Beta")

    def test_build_metadata_does_not_affect_order(self):
        assert version_key("1.0.0+a") == version_key("1.0.0+b")

    def test_max_version(self):
        assert max_version(["1.0.0", "2.0.0-rc.1", "1.10.0", "2.0.0-beta"]) == "2.0.0-rc.1"


class TestVersionFlags:
    def test_prerelease_detection(self):
        assert is_prerelease_version("1.0.0-beta")
        assert not is_prerelease_version("1.0.0")

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("1.0.0", False),
            ("1.0.0-beta", False),
            ("1.0.0-beta.1", True),
            ("1.0.0+build", True),
        ],
    )
    def test_semver2_detection(self, raw, expected):
        assert is_semver2_version(raw) is expected
