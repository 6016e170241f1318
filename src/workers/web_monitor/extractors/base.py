"""Abstract base class for the pricing extraction passes (Strategy Pattern)."""

from __future__ import annotations

from abc import ABC, abstractmethod

from workers.web_monitor.models import PricedItem, PricingSource

MAX_PRICED_ITEMS = 50


class BaseExtractor(ABC):
    """
    Contract for every "extract priced items" pass.

    The source content is injected via __init__: raw markup or
    normalized text, depending on ``source``. Subclasses return typed
    PricedItem lists — never raw dicts.

    Principles:
    - Deterministic and side-effect free.
    - Unparseable content is omitted, never raised.
    - At most MAX_PRICED_ITEMS items, in document order.
    """

    source: PricingSource

    def __init__(self, content: str | None) -> None:
        self.content = content or ""

    @abstractmethod
    def extract(self) -> list[PricedItem]:
        ...
