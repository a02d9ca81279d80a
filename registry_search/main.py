import asyncio
import logging

from fastapi import FastAPI

from registry_search.api.search import router as search_router
from registry_search.core.dependencies import get_search_service, get_settings, get_store
from registry_search.storage.json_store import reload_periodically

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


app = FastAPI(
    title="Package Registry Search",
    version="0.1.0",
    description="Search, autocomplete, version listing and dependents lookups over a package catalog.",
)

_RELOAD_TASK = None


@app.on_event("startup")
async def startup_event() -> None:
    """
    Wire the search service (failing fast on a bad configuration), load the
    catalog and start the periodic reload.
    """
    global _RELOAD_TASK

    get_search_service()
    store = get_store()
    await store.load()

    if _RELOAD_TASK is None:
        _RELOAD_TASK = asyncio.create_task(
            reload_periodically(store, get_settings().refresh_interval_seconds)
        )


@app.get("/health")
async def health() -> dict:
    """
    Lightweight health check endpoint.
    """
    return {"status": "ok"}


app.include_router(search_router, tags=["search"])
logger.info("Successfully loaded search router")


if __name__ == "__main__":
    """
    Allow running `python registry_search/main.py` to start the Uvicorn
    development server.
    """
    import uvicorn

    uvicorn.run(
        "registry_search.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
