# src/cache/models.py — v2
"""Cache domain models: CacheEntry, CacheStats, ResolvedAssets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from svginline.core.errors import AssetError
from svginline.core.models import AssetIdentity, CacheEfficiency


@dataclass
class CacheEntry:
    """Content slot for one asset identity.

    Created as a ``pending`` placeholder when an identity is claimed and
    filled exactly once by the read-and-optimize task.
    """

    path: AssetIdentity
    content: str = ""
    size: int = 0
    state: Literal["pending", "ready"] = "pending"

    @property
    def ready(self) -> bool:
        return self.state == "ready"


# Counters are exposed as the public efficiency model.
CacheStats = CacheEfficiency


@dataclass
class ResolvedAssets:
    """Result of one AssetCache.resolve() call."""

    entries: dict[AssetIdentity, CacheEntry] = field(default_factory=dict)
    failures: dict[AssetIdentity, AssetError] = field(default_factory=dict)

    @property
    def sizes(self) -> dict[AssetIdentity, int]:
        return {path: entry.size for path, entry in self.entries.items()}
