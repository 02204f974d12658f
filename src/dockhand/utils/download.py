"""HTTP downloads for packages and signing keys."""

import hashlib
import logging
from pathlib import Path

import httpx


logger = logging.getLogger(__name__)


async def download_file(url: str, destination: Path, timeout: float = 120.0) -> str:
    """Stream url to destination and return its SHA256 hex digest."""
    digest = hashlib.sha256()
    destination.parent.mkdir(parents=True, exist_ok=True)
    partial = destination.with_name(destination.name + ".part")

    logger.info(f"Downloading {url}")
    async with httpx.AsyncClient(follow_redirects=True, timeout=timeout) as client:
        async with client.stream("GET", url) as response:
            response.raise_for_status()
            with partial.open("wb") as handle:
                async for chunk in response.aiter_bytes():
                    handle.write(chunk)
                    digest.update(chunk)

    partial.replace(destination)
    return digest.hexdigest()
