# src/core/models.py — v2
"""Shared Pydantic domain models used across modules.

No module redefines these types; all imports come from core.models.
"""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Absolute, normalized filesystem path of one physical SVG file.
AssetIdentity = str


class PolicyThresholds(BaseModel):
    """Inlining limits, immutable for the lifetime of an engine.

    ``math.inf`` means no limit. Comparisons are strict, so a value equal
    to a threshold passes, except that a threshold of zero rejects every
    group.
    """

    model_config = ConfigDict(frozen=True)

    max_image_size: float = 3000
    max_occurrences: float = math.inf
    max_total_size: float = 10000

    @field_validator("max_image_size", "max_occurrences", "max_total_size")
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if math.isnan(v) or v < 0:
            raise ValueError("thresholds must be >= 0")
        return v


class CacheEfficiency(BaseModel):
    """Cumulative cache counters reported after a document is processed."""

    model_config = ConfigDict(frozen=True)

    hits: int = 0
    misses: int = 0

    @property
    def total(self) -> int:
        return self.hits + self.misses

    @property
    def hit_ratio(self) -> float:
        """Fraction of occurrences served without a read (0.0 when idle)."""
        return self.hits / self.total if self.total else 0.0


class InlineReport(BaseModel):
    """Outcome of processing one document."""

    document_path: str
    references: int = 0
    inlined: list[AssetIdentity] = Field(default_factory=list)
    rejected: list[AssetIdentity] = Field(default_factory=list)
    failed: dict[AssetIdentity, str] = Field(default_factory=dict)

    @property
    def changed(self) -> bool:
        return bool(self.inlined)
