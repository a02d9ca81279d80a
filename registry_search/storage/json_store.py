from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import List, Optional, Sequence

import aiofiles
from pydantic import ValidationError

from registry_search.domain.errors import StoreUnavailableError
from registry_search.domain.models import PackageRecord
from registry_search.domain.search_utils import strip_nulls
from registry_search.storage.store import MemoryPackageStore

logger = logging.getLogger(__name__)

PACKAGES_DIR_NAME = "packages"
VERSION_FILE_NAME = "version.json"


class JsonPackageStore(MemoryPackageStore):
    """
    Catalog read from JSON files on disk.

    Layout: <DATA_DIR>/packages/<identity>/<version>/version.json, one
    PackageRecord per file. The folder names are only hints: they fill in
    ``identity`` and ``version`` when the JSON does not carry them.
    """

    def __init__(self, data_dir: Path, supports_bounded_subqueries: bool = True):
        super().__init__(supports_bounded_subqueries=supports_bounded_subqueries)
        self._data_dir = data_dir
        self._loaded = False

    @property
    def packages_dir(self) -> Path:
        return self._data_dir / PACKAGES_DIR_NAME

    async def get_records(self) -> Sequence[PackageRecord]:
        if not self._loaded:
            await self.load()
        return await super().get_records()

    async def load(self) -> None:
        """
        Crawl the packages directory and swap in the new catalog snapshot.
        """
        if not self._data_dir.is_dir():
            raise StoreUnavailableError(f"Data directory not found: {self._data_dir}")

        try:
            if self.packages_dir.is_dir():
                version_files = sorted(self.packages_dir.glob(f"*/*/{VERSION_FILE_NAME}"))
            else:
                version_files = []
                logger.info("No packages directory at %s, catalog is empty", self.packages_dir)
        except OSError as e:
            raise StoreUnavailableError(f"Cannot read package catalog: {e}") from e

        records: List[PackageRecord] = []
        for path in version_files:
            record = await self._read_record(path)
            if record is not None:
                records.append(record)

        self.replace(records)
        self._loaded = True
        logger.info("Loaded %d package versions from %s", len(records), self.packages_dir)

    async def _read_record(self, path: Path) -> Optional[PackageRecord]:
        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                raw = json.loads(await f.read())
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Skipping unreadable version file %s: %s", path, e)
            return None

        if not isinstance(raw, dict):
            logger.warning("Skipping version file %s: expected a JSON object", path)
            return None

        raw = strip_nulls(raw)
        version_dir = path.parent
        raw.setdefault("identity", version_dir.parent.name)
        raw.setdefault("version", version_dir.name)

        try:
            return PackageRecord(**raw)
        except ValidationError as e:
            logger.warning("Skipping invalid version file %s: %s", path, e)
            return None


async def reload_periodically(store: JsonPackageStore, interval_seconds: int) -> None:
    """
    Background task that reloads the catalog every interval_seconds.
    """
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await store.load()
        except StoreUnavailableError as e:
            logger.error("Catalog reload failed: %s", e)
