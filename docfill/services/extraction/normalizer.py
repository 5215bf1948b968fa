"""Text normalization for raw document text."""

from __future__ import annotations

from typing import Tuple

from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE


def normalize_lines(text: str | None) -> Tuple[str, ...]:
    """Split raw text into trimmed, non-empty lines, preserving order.

    Control characters a worksheet cannot store are dropped. An empty or
    missing document yields an empty tuple.
    """

    if not text:
        return ()
    stripped = (ILLEGAL_CHARACTERS_RE.sub("", line).strip() for line in text.splitlines())
    return tuple(line for line in stripped if line)
