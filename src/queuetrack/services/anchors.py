"""Infer missing queue anchors for a freshly imported batch."""

from __future__ import annotations

import logging
import math
from typing import Iterable

from ..models import TestRecord

logger = logging.getLogger(__name__)

ANCHOR_ROUNDING = 1000


def infer_anchor(queue_numbers: Iterable[int]) -> int:
    """Round the largest observed queue number up to the next thousand."""

    return math.ceil(max(queue_numbers) / ANCHOR_ROUNDING) * ANCHOR_ROUNDING


def resolve_anchors(batch: list[TestRecord]) -> list[str]:
    """Fill ``queue_anchor`` in place for anchor-less records, per event.

    Only the given batch is considered; previously stored records are never
    revisited. Returns one warning per event whose anchor was inferred.
    """

    missing: dict[str, list[TestRecord]] = {}
    for record in batch:
        if record.queue_anchor is None:
            missing.setdefault(record.event_name, []).append(record)

    warnings: list[str] = []
    for event, records in missing.items():
        anchor = infer_anchor(r.queue_number for r in records)
        for record in records:
            record.queue_anchor = anchor
        warnings.append(f'No anchor for "{event}", using {anchor:,}')
        logger.info(
            "Inferred queue anchor",
            extra={"event_name": event, "anchor": anchor, "records": len(records)},
        )
    return warnings


__all__ = ["ANCHOR_ROUNDING", "infer_anchor", "resolve_anchors"]
