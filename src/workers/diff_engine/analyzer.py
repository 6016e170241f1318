"""
Diff Engine — Detects changes between consecutive page snapshots.

Compares a freshly captured Snapshot against the previous one of the
same page and records TEXT and PRICE Change rows:

  - TEXT: content differs AND (length delta > 20 OR the page went blank)
  - PRICE: serialized pricing lists differ AND at least one is non-empty
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from core.models import Change, ChangeType, Snapshot
from core.repository import WatchRepository

logger = logging.getLogger(__name__)

MIN_LENGTH_DELTA = 20
MAX_STORED_LENGTH = 2000

PRICING_CHANGED_SUMMARY = "Pricing or plans changed on this page."

# Representative change returned to callers that expect a single one
REPRESENTATIVE_ORDER: tuple[ChangeType, ...] = (ChangeType.TEXT, ChangeType.PRICE)


@dataclass(frozen=True, slots=True)
class DetectedChange:
    """A change decided by a policy, not yet persisted."""

    change_type: ChangeType
    field: str
    old_value: str
    new_value: str
    summary: str


def detect_text_change(old_text: str | None, new_text: str | None) -> DetectedChange | None:
    old = old_text or ""
    new = new_text or ""
    if old == new:
        return None

    length_delta = abs(len(new) - len(old))
    # Small edits (whitespace drift, punctuation) are noise; a blank page is not
    if length_delta <= MIN_LENGTH_DELTA and new:
        return None

    return DetectedChange(
        change_type=ChangeType.TEXT,
        field="content",
        old_value=old[:MAX_STORED_LENGTH],
        new_value=new[:MAX_STORED_LENGTH],
        summary=f"Text content changed (length {len(old)} → {len(new)}).",
    )


def _plain_numbers(value: Any) -> Any:
    # 29.0 is written as 29, the way JavaScript clients print JSON numbers
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, list):
        return [_plain_numbers(item) for item in value]
    if isinstance(value, dict):
        return {key: _plain_numbers(item) for key, item in value.items()}
    return value


def serialize_pricing(pricing: Any) -> str:
    """Stable JSON form: object keys sorted, list order kept, whole amounts without a fraction."""
    return json.dumps(_plain_numbers(pricing), sort_keys=True, ensure_ascii=False, separators=(",", ":"))


def detect_pricing_change(old_pricing: Any, new_pricing: Any) -> DetectedChange | None:
    old_serialized = serialize_pricing(old_pricing)
    new_serialized = serialize_pricing(new_pricing)
    if old_serialized == new_serialized:
        return None
    if not old_pricing and not new_pricing:
        return None

    return DetectedChange(
        change_type=ChangeType.PRICE,
        field="pricing",
        old_value=old_serialized[:MAX_STORED_LENGTH],
        new_value=new_serialized[:MAX_STORED_LENGTH],
        summary=PRICING_CHANGED_SUMMARY,
    )


def compare_snapshots(previous: Snapshot, current: Snapshot) -> list[DetectedChange]:
    """Run both policies; TEXT first, PRICE second."""
    if previous.monitored_page_id != current.monitored_page_id:
        raise ValueError(
            f"Cannot compare snapshots of different pages "
            f"({previous.monitored_page_id} != {current.monitored_page_id})"
        )

    detected = [
        detect_text_change(previous.extracted_text, current.extracted_text),
        detect_pricing_change(previous.extracted_pricing, current.extracted_pricing),
    ]
    return [d for d in detected if d is not None]


def select_representative(changes: Iterable[Change]) -> Change | None:
    """First change in REPRESENTATIVE_ORDER, or None."""
    by_type = {}
    for change in changes:
        by_type.setdefault(change.change_type, change)
    for change_type in REPRESENTATIVE_ORDER:
        if change_type in by_type:
            return by_type[change_type]
    return None


async def analyze_changes(
    repo: WatchRepository,
    previous: Snapshot | None,
    current: Snapshot,
) -> Sequence[Change]:
    """
    Compare ``current`` against ``previous`` and persist the resulting
    Change rows (flushed, not committed).
    """
    if previous is None:
        logger.debug("Page %s has no previous snapshot, skipping diff", current.monitored_page_id)
        return []

    events: list[Change] = []
    for detected in compare_snapshots(previous, current):
        change = await repo.create_change(
            current.monitored_page_id,
            old_snapshot_id=previous.id,
            new_snapshot_id=current.id,
            change_type=detected.change_type,
            field=detected.field,
            old_value=detected.old_value,
            new_value=detected.new_value,
            summary=detected.summary,
        )
        events.append(change)

    if events:
        logger.info(
            "Detected %d changes for page_id=%d (%s)",
            len(events),
            current.monitored_page_id,
            ", ".join(e.change_type.value for e in events),
        )

    return events
