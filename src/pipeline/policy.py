# src/pipeline/policy.py — v1
"""Inlining policy: decide which SVG files are worth inlining on a page.

A group (every reference to one file on one page) is kept or dropped as
a unit. Limits are strict "greater than" comparisons, except that a
limit of zero rejects every group.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Literal, TypeVar

from svginline.core.models import AssetIdentity, PolicyThresholds

logger = logging.getLogger(__name__)

NodeT = TypeVar("NodeT")

RejectReason = Literal["max_occurrences", "max_image_size", "max_total_size"]


def _exceeds(value: float, limit: float) -> bool:
    return limit == 0 or value > limit


def rejection_reason(
    occurrences: int, size: int, thresholds: PolicyThresholds
) -> RejectReason | None:
    """Return the first limit a group violates, or None if it qualifies."""
    if _exceeds(occurrences, thresholds.max_occurrences):
        return "max_occurrences"
    if _exceeds(size, thresholds.max_image_size):
        return "max_image_size"
    if _exceeds(occurrences * size, thresholds.max_total_size):
        return "max_total_size"
    return None


def filter_groups(
    groups: Mapping[AssetIdentity, list[NodeT]],
    sizes: Mapping[AssetIdentity, int],
    thresholds: PolicyThresholds,
) -> dict[AssetIdentity, list[NodeT]]:
    """Return only the groups that meet every limit, in their input order.

    Groups without a resolved size are dropped.
    """
    kept: dict[AssetIdentity, list[NodeT]] = {}
    for path, nodes in groups.items():
        size = sizes.get(path)
        if size is None:
            continue
        occurrences = len(nodes)
        reason = rejection_reason(occurrences, size, thresholds)
        if reason is not None:
            logger.debug(
                "Not inlining %s (%d bytes x%d): exceeds %s",
                path, size, occurrences, reason,
            )
            continue
        kept[path] = nodes
    return kept
