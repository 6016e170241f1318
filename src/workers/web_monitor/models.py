"""Data models for the capture pipeline (priced items, scrape and capture results)."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from core.models import Change, Snapshot


class PricingSource(StrEnum):
    """Which input a pricing extraction pass reads."""

    MARKUP = "MARKUP"   # raw HTML, structured product blocks
    TEXT = "TEXT"       # normalized text, loose price patterns


@dataclass(frozen=True, slots=True)
class PricedItem:
    """A (label, amount, currency) fact extracted from a capture."""

    label: str
    amount: float
    currency: str                      # ej: "EUR", "USD"
    sku: str | None = None             # ej: "ST-HEAD-X100"
    availability: str | None = None    # ej: "En stock"
    raw_line: str | None = None        # loose pass only

    def to_json(self) -> dict[str, Any]:
        """JSON-ready dict; absent optional keys are omitted."""
        data: dict[str, Any] = {}
        if self.sku is not None:
            data["sku"] = self.sku
        data["label"] = self.label
        data["amount"] = self.amount
        data["currency"] = self.currency
        if self.availability is not None:
            data["availability"] = self.availability
        if self.raw_line is not None:
            data["raw_line"] = self.raw_line
        return data


@dataclass(frozen=True, slots=True)
class ScrapeResult:
    """Fetched markup plus everything derived from it, before persistence."""

    raw_html: str
    extracted_text: str
    pricing: list[PricedItem] = field(default_factory=list)

    @property
    def pricing_json(self) -> list[dict[str, Any]] | None:
        """Stored form of the pricing list: None when nothing was found."""
        return [item.to_json() for item in self.pricing] or None


@dataclass(slots=True)
class CaptureOutcome:
    """Result of one capture run, as reported to the caller."""

    snapshot: Snapshot
    changes: list[Change] = field(default_factory=list)
    change: Change | None = None       # representative change (TEXT before PRICE)

    @property
    def has_change(self) -> bool:
        return bool(self.changes)

    @property
    def message(self) -> str:
        if self.has_change:
            return "Change detected on the page."
        return "Snapshot created, no major change detected."
