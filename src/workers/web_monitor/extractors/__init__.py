"""Pricing extraction passes: structured product blocks and loose text patterns."""

from workers.web_monitor.extractors.base import MAX_PRICED_ITEMS, BaseExtractor
from workers.web_monitor.extractors.loose_text import LooseTextExtractor, extract_pricing_from_text
from workers.web_monitor.extractors.product_blocks import (
    ProductBlockExtractor,
    extract_pricing_from_html,
    parse_price,
)

__all__ = [
    "MAX_PRICED_ITEMS",
    "BaseExtractor",
    "LooseTextExtractor",
    "ProductBlockExtractor",
    "extract_pricing_from_html",
    "extract_pricing_from_text",
    "parse_price",
]
