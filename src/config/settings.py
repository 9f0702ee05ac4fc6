# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for inlining limits, optimization switches,
batch behaviour and logging.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from svginline.core.models import PolicyThresholds
from svginline.extraction.svg_optimizer import OptimizerConfig


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Inlining limits (bytes / count; "inf" = no limit) ===
    max_image_size: float = 3000
    max_occurrences: float = math.inf
    max_total_size: float = 10000

    # === Optimization ===
    optimize: bool = True
    optimize_remove_comments: bool = True
    optimize_remove_metadata: bool = True
    optimize_remove_editor_data: bool = True
    optimize_remove_title: bool = False
    optimize_remove_desc: bool = False
    optimize_remove_empty_attrs: bool = True
    optimize_collapse_whitespace: bool = True

    # === Failure handling ===
    on_asset_error: Literal["skip", "raise"] = "skip"

    # === Batch ===
    batch_recursive: bool = True
    batch_concurrency: int = 8
    output_encoding: str = "utf-8"

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        for name in ("max_image_size", "max_occurrences", "max_total_size"):
            value = getattr(self, name)
            if math.isnan(value) or value < 0:
                errors.append(f"{name.upper()} must be >= 0")

        if self.batch_concurrency < 1:
            errors.append("BATCH_CONCURRENCY must be >= 1")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def thresholds(self) -> PolicyThresholds:
        return PolicyThresholds(
            max_image_size=self.max_image_size,
            max_occurrences=self.max_occurrences,
            max_total_size=self.max_total_size,
        )

    @property
    def optimizer_config(self) -> OptimizerConfig:
        """Collect the optimize_* fields into an OptimizerConfig."""
        return OptimizerConfig(
            remove_comments=self.optimize_remove_comments,
            remove_metadata=self.optimize_remove_metadata,
            remove_editor_data=self.optimize_remove_editor_data,
            remove_title=self.optimize_remove_title,
            remove_desc=self.optimize_remove_desc,
            remove_empty_attrs=self.optimize_remove_empty_attrs,
            collapse_whitespace=self.optimize_collapse_whitespace,
        )


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
