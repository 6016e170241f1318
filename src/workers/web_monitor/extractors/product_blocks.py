"""
Product Block Extractor — structured pricing from raw markup
=============================================================
Targets catalog markup of the form::

    <article class="product" data-sku="ST-HEAD-X100">
      <h3 class="product-name">Casque X100</h3>
      <p class="product-price" data-price="79.90">79,90 €</p>
      <p class="product-availability">En stock</p>
    </article>

The explicit ``data-price`` attribute wins over the display text.
Blocks without a name or without a price are dropped.
"""

from __future__ import annotations

import logging
import math
import re

from workers.web_monitor.extractors.base import MAX_PRICED_ITEMS, BaseExtractor
from workers.web_monitor.models import PricedItem, PricingSource

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "EUR"

# ── Regex Patterns ─────────────────────────────────────────────────────

_ARTICLE_BLOCK = re.compile(
    r"<article\b[^>]*data-sku=\"([^\"]+)\"[^>]*>([\s\S]*?)</article>",
    re.IGNORECASE,
)
_PRODUCT_NAME = re.compile(
    r"class=\"[^\"]*product-name[^\"]*\"[^>]*>([^<]+)</h[1-6]>",
    re.IGNORECASE,
)
_PRODUCT_PRICE_ATTR = re.compile(
    r"class=\"[^\"]*product-price[^\"]*\"[^>]*data-price=\"([^\"]+)\"",
    re.IGNORECASE,
)
_PRODUCT_PRICE_TEXT = re.compile(
    r"class=\"[^\"]*product-price[^\"]*\"[^>]*>([^<]+)</p>",
    re.IGNORECASE,
)
_PRODUCT_AVAILABILITY = re.compile(
    r"class=\"[^\"]*product-availability[^\"]*\"[^>]*>([^<]+)</p>",
    re.IGNORECASE,
)
_WHITESPACE = re.compile(r"\s")
_NOT_NUMERIC = re.compile(r"[^0-9.,]")


def parse_price(raw: str) -> float | None:
    """
    "79,90 €" → 79.9, "79.90" → 79.9.

    Keeps digits, dots and commas, turns the first comma into a dot.
    Returns None when the result is not a finite number.
    """
    cleaned = _NOT_NUMERIC.sub("", _WHITESPACE.sub("", raw)).replace(",", ".", 1)
    if not cleaned:
        return None
    try:
        value = float(cleaned)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


class ProductBlockExtractor(BaseExtractor):
    """Regex-based extractor for repeated ``<article data-sku>`` product blocks."""

    source = PricingSource.MARKUP

    def extract(self) -> list[PricedItem]:
        items: list[PricedItem] = []

        for article in _ARTICLE_BLOCK.finditer(self.content):
            if len(items) >= MAX_PRICED_ITEMS:
                break

            sku, block = article.group(1), article.group(2)

            name_match = _PRODUCT_NAME.search(block)
            price_attr = _PRODUCT_PRICE_ATTR.search(block)
            price_text = _PRODUCT_PRICE_TEXT.search(block)
            if not name_match or not (price_attr or price_text):
                logger.debug("Skipping incomplete product block sku=%s", sku)
                continue

            raw_price = (price_attr or price_text).group(1)
            price = parse_price(raw_price)
            if price is None:
                logger.debug("Unparseable price %r for sku=%s", raw_price, sku)
                continue

            availability = _PRODUCT_AVAILABILITY.search(block)
            items.append(PricedItem(
                sku=sku,
                label=name_match.group(1).strip(),
                amount=price,
                currency=DEFAULT_CURRENCY,
                availability=availability.group(1).strip() if availability else None,
            ))

        return items


def extract_pricing_from_html(raw_html: str | None) -> list[PricedItem]:
    return ProductBlockExtractor(raw_html).extract()
