# src/cache/asset_reader.py — v1
"""Storage readers for SVG assets."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from pathlib import Path

from svginline.core.errors import AssetReadError

logger = logging.getLogger(__name__)


class BaseAssetReader(ABC):
    """Unified interface for asset storage backends."""

    @abstractmethod
    async def read(self, path: str) -> bytes:
        """Return the raw bytes of the asset at ``path``.

        Raises:
            AssetReadError: If the asset cannot be read.
        """


class FileAssetReader(BaseAssetReader):
    """Reads assets from the local filesystem in a worker thread."""

    async def read(self, path: str) -> bytes:
        try:
            data = await asyncio.to_thread(Path(path).read_bytes)
        except FileNotFoundError as e:
            raise AssetReadError(path, f"SVG file not found: {path}") from e
        except OSError as e:
            raise AssetReadError(path, f"Unable to read SVG file {path}: {e}") from e
        logger.debug("Read %d bytes from %s", len(data), path)
        return data
