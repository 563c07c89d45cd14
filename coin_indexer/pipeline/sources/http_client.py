"""HTTP-based CheckpointSource for remote checkpoint stores.

Fetches ``{base_url}/{sequence_number}.json`` and retries transport errors
with exponential backoff. A 404 means the checkpoint has not been
published yet.
"""

from __future__ import annotations

import asyncio

import bittensor as bt
import httpx

from coin_indexer.types.objects import CheckpointData


class HTTPCheckpointSource:
    """Read-only client for a remote checkpoint store."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        max_retries: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)
        self._max_retries = max_retries

    async def close(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str) -> httpx.Response:
        """GET with retry on transport errors."""
        for attempt in range(self._max_retries):
            try:
                return await self._client.get(f"{self.base_url}{path}")
            except httpx.TransportError as e:
                if attempt == self._max_retries - 1:
                    raise
                wait = 2 ** attempt
                bt.logging.warning({"checkpoint_http_client": {"retry": attempt, "wait": wait, "error": str(e)}})
                await asyncio.sleep(wait)
        raise ConnectionError("Max retries exceeded")

    async def get_checkpoint(self, sequence_number: int) -> CheckpointData | None:
        resp = await self._get(f"/{sequence_number}.json")
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        return CheckpointData(**resp.json())


__all__ = ["HTTPCheckpointSource"]
