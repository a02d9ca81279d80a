"""
Framework compatibility lookups.

Maps a requested target framework moniker to every moniker whose packages
a project targeting it can consume. The built-in table covers the common
.NET monikers; a YAML file in the data directory can add or override entries:

    net8.0: [net7.0, net6.0, netstandard2.1, netstandard2.0]
    mycustomtfm: [netstandard2.0]
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from registry_search.domain.search_utils import distinct, fold_case

logger = logging.getLogger(__name__)


_NETSTANDARD = [
    "netstandard1.0",
    "netstandard1.1",
    "netstandard1.2",
    "netstandard1.3",
    "netstandard1.4",
    "netstandard1.5",
    "netstandard1.6",
    "netstandard2.0",
    "netstandard2.1",
]

_NETCORE = [
    "netcoreapp1.0",
    "netcoreapp1.1",
    "netcoreapp2.0",
    "netcoreapp2.1",
    "netcoreapp2.2",
    "netcoreapp3.0",
    "netcoreapp3.1",
    "net5.0",
    "net6.0",
    "net7.0",
    "net8.0",
    "net9.0",
]

# Highest netstandard version each runtime implements.
_NETSTANDARD_SUPPORT = {
    "netcoreapp1.0": "netstandard1.6",
    "netcoreapp1.1": "netstandard1.6",
    "netcoreapp2.0": "netstandard2.0",
    "netcoreapp2.1": "netstandard2.0",
    "netcoreapp2.2": "netstandard2.0",
    "net45": "netstandard1.1",
    "net451": "netstandard1.2",
    "net452": "netstandard1.2",
    "net46": "netstandard1.3",
    "net461": "netstandard2.0",
    "net462": "netstandard2.0",
    "net47": "netstandard2.0",
    "net471": "netstandard2.0",
    "net472": "netstandard2.0",
    "net48": "netstandard2.0",
}

_NETFRAMEWORK = ["net45", "net451", "net452", "net46", "net461", "net462", "net47", "net471", "net472", "net48"]


def _build_default_table() -> Dict[str, List[str]]:
    table: Dict[str, List[str]] = {}

    for i, moniker in enumerate(_NETSTANDARD):
        table[moniker] = list(reversed(_NETSTANDARD[: i + 1]))

    for chain in (_NETCORE, _NETFRAMEWORK):
        for i, moniker in enumerate(chain):
            standard = _NETSTANDARD_SUPPORT.get(moniker, "netstandard2.1")
            table[moniker] = list(reversed(chain[: i + 1])) + table[standard]

    return table


DEFAULT_COMPATIBILITY_TABLE = _build_default_table()


class FrameworkCompatibilityService:
    def __init__(self, table: Optional[Dict[str, List[str]]] = None):
        merged = dict(DEFAULT_COMPATIBILITY_TABLE)
        for moniker, compatible in (table or {}).items():
            merged[fold_case(moniker)] = [fold_case(m) for m in compatible or []]
        self._table = merged

    @classmethod
    def from_yaml(cls, path: Path) -> "FrameworkCompatibilityService":
        """
        Load extra table entries from a YAML mapping. A missing file means
        the built-in table only.
        """
        if not path.exists():
            return cls()

        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"Framework table {path} must be a mapping of moniker to list of monikers")

        table: Dict[str, List[str]] = {}
        for moniker, compatible in raw.items():
            if compatible is None:
                compatible = []
            if not isinstance(compatible, list):
                raise ValueError(f"Framework table {path}: entry {moniker!r} must be a list of monikers")
            table[str(moniker)] = [str(m) for m in compatible]

        logger.info("Loaded %d framework compatibility entries from %s", len(table), path)
        return cls(table)

    def find_all_compatible_frameworks(self, framework: str) -> List[str]:
        """
        Every moniker compatible with ``framework``, the framework itself
        first. Unknown monikers are compatible only with themselves.
        """
        moniker = fold_case(framework)
        return distinct([moniker, *self._table.get(moniker, [])])
