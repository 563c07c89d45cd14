from __future__ import annotations

import importlib
from typing import Any

import bittensor as bt
from sqlalchemy import text

_REQUIREMENTS = (
    "sqlalchemy",
    "pydantic",
    "httpx",
    "bittensor",
)

_DRIVERS = {
    "postgresql": "asyncpg",
    "sqlite": "aiosqlite",
}


def check_python_requirements(database_url: str | None = None) -> None:
    """Log availability and versions of critical runtime dependencies."""
    modules = list(_REQUIREMENTS)
    if database_url:
        scheme = database_url.split(":", 1)[0].split("+", 1)[0]
        driver = _DRIVERS.get(scheme)
        if driver:
            modules.append(driver)

    for module_name in modules:
        try:
            module = importlib.import_module(module_name)
            version = getattr(module, "__version__", None) or "unknown"
            bt.logging.info(
                {
                    "indexer_startup": {
                        "step": "dependency_check",
                        "module": module_name,
                        "status": "ok",
                        "version": version,
                    }
                }
            )
        except ImportError as exc:
            bt.logging.warning(
                {
                    "indexer_startup": {
                        "step": "dependency_check",
                        "module": module_name,
                        "status": "error",
                        "error": str(exc),
                    }
                }
            )


async def ping_database(dbm: Any) -> bool:
    """Execute a simple read to confirm the database is reachable."""
    try:
        await dbm.read(text("select 1"))
        bt.logging.info({"indexer_startup": {"step": "database_ping", "status": "ok"}})
        return True
    except Exception as exc:
        bt.logging.error(
            {
                "indexer_startup": {
                    "step": "database_ping",
                    "status": "error",
                    "error": str(exc),
                }
            }
        )
        return False
