from pathlib import Path
from typing import Optional
import json
import logging
import os

from registry_search.domain.models import SearchSettings
from registry_search.services.frameworks import FrameworkCompatibilityService
from registry_search.services.response_builder import SearchResponseBuilder
from registry_search.services.search_service import PackageSearchService
from registry_search.storage.json_store import JsonPackageStore

logger = logging.getLogger(__name__)

DATA_ROOT_ENV_VAR = "REGISTRY_SEARCH_DATA_DIR"
_REPO_ROOT = Path(__file__).resolve().parents[2]
_DEFAULT_DATA_DIR = _REPO_ROOT / "data"

_settings: Optional[SearchSettings] = None
_store: Optional[JsonPackageStore] = None
_search_service: Optional[PackageSearchService] = None


def get_data_dir() -> Path:
    env_path = os.environ.get(DATA_ROOT_ENV_VAR)
    if env_path:
        d = Path(env_path).expanduser()
    else:
        d = _DEFAULT_DATA_DIR
    d.mkdir(parents=True, exist_ok=True)
    return d


def load_settings(data_dir: Path) -> SearchSettings:
    """
    Load search.json, merging with defaults for any missing fields,
    and write it back so any new fields are persisted.
    """
    path = data_dir / "search.json"
    if path.exists():
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            settings = SearchSettings(**raw)
        except Exception as e:
            # If parsing fails, fall back to defaults and overwrite file.
            logger.warning("Invalid %s, using defaults: %s", path, e)
            settings = SearchSettings()
    else:
        settings = SearchSettings()

    path.write_text(settings.model_dump_json(indent=2), encoding="utf-8")
    return settings


def get_settings() -> SearchSettings:
    global _settings
    if _settings is None:
        _settings = load_settings(get_data_dir())
    return _settings


def get_store() -> JsonPackageStore:
    global _store
    if _store is None:
        _store = JsonPackageStore(
            get_data_dir(),
            supports_bounded_subqueries=get_settings().supports_bounded_subqueries,
        )
    return _store


def get_search_service() -> PackageSearchService:
    global _search_service
    if _search_service is None:
        settings = get_settings()
        _search_service = PackageSearchService(
            store=get_store(),
            frameworks=FrameworkCompatibilityService.from_yaml(get_data_dir() / settings.frameworks_file),
            response_builder=SearchResponseBuilder(),
            dependents_limit=settings.dependents_limit,
        )
    return _search_service


def reset() -> None:
    """Drop the cached singletons (used when the data directory changes)."""
    global _settings, _store, _search_service
    _settings = None
    _store = None
    _search_service = None
