"""
ExtractorFactory: Strategy Pattern router.

Decides which pricing extraction pass to instantiate. The two passes
have different inputs and different precision/recall tradeoffs, so the
caller names the one it wants instead of letting them be merged.

Flow:
  Step 1 → Caller picks a PricingSource (MARKUP or TEXT)
  Step 2 → Instantiate the matching extractor with the content
  Step 3 → Return the BaseExtractor instance to the orchestrator

Usage:
    extractor = ExtractorFactory.create(PricingSource.TEXT, extracted_text)
    items = extractor.extract()
"""

from __future__ import annotations

import logging

from workers.web_monitor.extractors.base import BaseExtractor
from workers.web_monitor.extractors.loose_text import LooseTextExtractor
from workers.web_monitor.extractors.product_blocks import ProductBlockExtractor
from workers.web_monitor.models import PricingSource

logger = logging.getLogger(__name__)

# ── Registry: maps PricingSource → concrete extractor class ───────────

_EXTRACTOR_REGISTRY: dict[PricingSource, type[BaseExtractor]] = {
    PricingSource.MARKUP: ProductBlockExtractor,
    PricingSource.TEXT: LooseTextExtractor,
}


class ExtractorFactory:
    """Creates the BaseExtractor for a given pricing source."""

    @staticmethod
    def create(source: PricingSource, content: str | None) -> BaseExtractor:
        extractor_cls = _EXTRACTOR_REGISTRY.get(source)
        if extractor_cls is None:
            raise ValueError(f"No pricing extractor registered for source={source!r}")

        logger.debug("Using %s for source=%s.", extractor_cls.__name__, source)
        return extractor_cls(content)
