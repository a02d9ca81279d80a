"""Tests for framework compatibility lookups."""

import pytest

from registry_search.services.frameworks import FrameworkCompatibilityService


@pytest.fixture
def service():
    return FrameworkCompatibilityService()


def test_framework_is_compatible_with_itself_first(service):
    compatible = service.find_all_compatible_frameworks("net8.0")
    assert compatible[0] == "net8.0"
    assert len(compatible) == len(set(compatible))


def test_modern_runtime_consumes_older_runtimes_and_netstandard(service):
    compatible = service.find_all_compatible_frameworks("net8.0")
    for moniker in ("net6.0", "netcoreapp3.1", "netstandard2.1", "netstandard2.0", "netstandard1.0"):
        assert moniker in compatible
    assert "net9.0" not in compatible
    assert "net48" not in compatible


def test_net_framework_supports_netstandard20_only(service):
    compatible = service.find_all_compatible_frameworks("net472")
    assert "net45" in compatible
    assert "netstandard2.0" in compatible
    assert "netstandard2.1" not in compatible


def test_lookup_is_case_insensitive(service):
    assert service.find_all_compatible_frameworks("NET8.0") == service.find_all_compatible_frameworks("net8.0")


def test_unknown_moniker_resolves_to_itself(service):
    assert service.find_all_compatible_frameworks("Tizen40") == ["tizen40"]


def test_yaml_table_adds_and_overrides_entries(tmp_path):
    path = tmp_path / "frameworks.yaml"
    path.write_text("tizen40: [netstandard2.0]\nnet8.0: [netstandard2.0]\n", encoding="utf-8")

    service = FrameworkCompatibilityService.from_yaml(path)

    assert service.find_all_compatible_frameworks("tizen40") == ["tizen40", "netstandard2.0"]
    assert service.find_all_compatible_frameworks("net8.0") == ["net8.0", "netstandard2.0"]
    assert "netstandard2.0" in service.find_all_compatible_frameworks("net6.0")


def test_missing_yaml_uses_defaults(tmp_path):
    service = FrameworkCompatibilityService.from_yaml(tmp_path / "missing.yaml")
    assert "netstandard2.0" in service.find_all_compatible_frameworks("net6.0")


def test_yaml_must_be_a_mapping(tmp_path):
    path = tmp_path / "frameworks.yaml"
    path.write_text("- net8.0\n", encoding="utf-8")

    with pytest.raises(ValueError):
        FrameworkCompatibilityService.from_yaml(path)


def test_yaml_entry_must_be_a_list(tmp_path):
    path = tmp_path / "frameworks.yaml"
    path.write_text("mytfm: netstandard2.0\n", encoding="utf-8")

    with pytest.raises(ValueError, match="mytfm"):
        FrameworkCompatibilityService.from_yaml(path)


def test_yaml_empty_entry_is_compatible_with_itself_only(tmp_path):
    path = tmp_path / "frameworks.yaml"
    path.write_text("mytfm:\n", encoding="utf-8")

    service = FrameworkCompatibilityService.from_yaml(path)

    assert service.find_all_compatible_frameworks("mytfm") == ["mytfm"]
