"""
Loose Text Extractor — price patterns in normalized text
=========================================================
One item per text line carrying a recognizable price:
"49 €", "49€", "49 EUR", "49 euro", "49$", "$49", "49 USD".
A bare number ("119.00") is not a price. Only ASCII digits count as digits.
"""

from __future__ import annotations

import math
import re

from workers.web_monitor.extractors.base import MAX_PRICED_ITEMS, BaseExtractor
from workers.web_monitor.models import PricedItem, PricingSource

MAX_LABEL_LENGTH = 120

_LINE_SPLIT = re.compile(r"\r?\n")
_PRICE = re.compile(
    r"(?:([0-9]+[.,]?[0-9]*)\s*(€|eur|euro|\$|usd)|(\$)\s*([0-9]+[.,]?[0-9]*))",
    re.IGNORECASE,
)

_CURRENCY_CODES = {
    "€": "EUR",
    "EUR": "EUR",
    "EURO": "EUR",
    "$": "USD",
    "USD": "USD",
}


def normalize_currency(token: str) -> str:
    upper = token.upper()
    return _CURRENCY_CODES.get(upper, upper)


class LooseTextExtractor(BaseExtractor):
    """Line-oriented price matcher over normalized text."""

    source = PricingSource.TEXT

    def extract(self) -> list[PricedItem]:
        items: list[PricedItem] = []
        lines = (line.strip() for line in _LINE_SPLIT.split(self.content))

        for line in lines:
            if len(items) >= MAX_PRICED_ITEMS:
                break
            if not line:
                continue

            match = _PRICE.search(line)
            if not match:
                continue

            if match.group(1) and match.group(2):
                # "49 €" / "49 EUR" form
                amount_str, currency = match.group(1), normalize_currency(match.group(2))
            else:
                # "$49" form
                amount_str, currency = match.group(4), "USD"

            try:
                amount = float(amount_str.replace(",", ".", 1))
            except ValueError:
                continue
            if not math.isfinite(amount):
                continue

            items.append(PricedItem(
                label=line[:MAX_LABEL_LENGTH],
                amount=amount,
                currency=currency,
                raw_line=line,
            ))

        return items


def extract_pricing_from_text(text: str | None) -> list[PricedItem]:
    return LooseTextExtractor(text).extract()
