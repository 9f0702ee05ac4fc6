# src/batch/models.py — v2
"""Batch processing models: DocumentResult, BatchResult."""

from __future__ import annotations

from pydantic import BaseModel, Field

from svginline.core.models import CacheEfficiency


class DocumentResult(BaseModel):
    """Outcome for a single HTML file in a batch."""

    source_path: str
    output_path: str | None = None
    inlined: int = 0
    error: str | None = None


class BatchResult(BaseModel):
    """Summary result of a batch run."""

    scan_root: str
    total_files_found: int
    processed: int
    errors: int
    documents: list[DocumentResult] = Field(default_factory=list)
    cache_efficiency: CacheEfficiency = Field(default_factory=CacheEfficiency)
    duration_seconds: float
