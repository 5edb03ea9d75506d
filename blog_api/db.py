# blog_api/db.py
import asyncio
import logging
import time
from typing import Optional
from urllib.parse import urlparse

from beanie import init_beanie
from pymongo import AsyncMongoClient

from .config import settings
from .models import DOCUMENT_MODELS

logger = logging.getLogger(__name__)

# Globals (one client + one beanie-init flag per process)
_global_client: Optional[AsyncMongoClient] = None
_beanie_initialized = False
_beanie_lock = asyncio.Lock()


def get_db_name() -> str:
    parsed = urlparse(settings.MONGO_URI)
    return parsed.path.lstrip("/") or "blog_cms"


def get_db_client() -> AsyncMongoClient:
    """
    Return the process-wide MongoDB client, creating it on first use.
    """
    global _global_client

    if _global_client is None:
        _global_client = AsyncMongoClient(
            settings.MONGO_URI,
            serverSelectionTimeoutMS=5000,
            connectTimeoutMS=5000,
            maxPoolSize=10,
            appname="blog-cms-api",
            retryWrites=True,
            retryReads=True,
            tz_aware=True,
        )
    return _global_client


async def init_beanie_if_needed() -> None:
    """
    Initialize Beanie exactly once per process.
    """
    global _beanie_initialized

    # Fast path - already initialized
    if _beanie_initialized:
        return

    async with _beanie_lock:
        # Double-check after acquiring lock
        if _beanie_initialized:
            return

        start_time = time.time()
        client = get_db_client()
        await init_beanie(
            database=client.get_database(get_db_name()),
            document_models=DOCUMENT_MODELS,
            allow_index_dropping=False,
        )

        _beanie_initialized = True
        logger.info(
            f"Beanie models initialized in {time.time() - start_time:.2f}s"
        )


async def init_db() -> None:
    await init_beanie_if_needed()


async def close_client() -> None:
    """
    Close and drop the process-global client (used at shutdown and in tests).
    """
    global _global_client, _beanie_initialized
    if _global_client is not None:
        await _global_client.close()
    _global_client = None
    _beanie_initialized = False
