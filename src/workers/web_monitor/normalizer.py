"""
HTML → text normalizer.

Lossy projection of a page into readable text: good enough to drive
length-delta change detection and to feed the report prompt.
"""

from __future__ import annotations

import re

MAX_TEXT_LENGTH = 15_000

# ── Regex Patterns ─────────────────────────────────────────────────────

_SCRIPT_BLOCK = re.compile(r"<script[\s\S]*?</script>", re.IGNORECASE)
_STYLE_BLOCK = re.compile(r"<style[\s\S]*?</style>", re.IGNORECASE)
_BLOCK_CLOSING_TAG = re.compile(
    r"</(p|div|h[1-6]|li|section|article|header|footer|tr|br)>",
    re.IGNORECASE,
)
_ANY_TAG = re.compile(r"<[^>]+>")
_EXTRA_NEWLINES = re.compile(r"\n{3,}")
_SPACES = re.compile(r"[ \t]+")


def clean_html_to_text(raw_html: str) -> str:
    """Convert raw markup into bounded, whitespace-normalized text."""
    output = _SCRIPT_BLOCK.sub(" ", raw_html)
    output = _STYLE_BLOCK.sub(" ", output)

    # Block-level elements become line breaks
    output = _BLOCK_CLOSING_TAG.sub("\n", output)
    output = _ANY_TAG.sub(" ", output)

    output = output.replace("\r", "")
    output = _EXTRA_NEWLINES.sub("\n\n", output)
    output = _SPACES.sub(" ", output)
    output = output.strip()

    return output[:MAX_TEXT_LENGTH]
