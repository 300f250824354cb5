"""
Text-to-value rules for cells scraped from the reference tables.

Table formatting on the reference pages is not under our control, so these
never raise: text without usable numbers maps to a sentinel value.
"""
import re

from .models import UNKNOWN_DIMENSION, Dimension

_DIMENSION_RE = re.compile(r"(\d+)\D+(\d+)")
_SCALE_FACTOR_RE = re.compile(r"\D+(\d+)")


def parse_dimension(text: str) -> Dimension:
    match = _DIMENSION_RE.search(text or "")
    if not match:
        return UNKNOWN_DIMENSION
    width, height = int(match.group(1)), int(match.group(2))
    if width < 1 or height < 1:
        return UNKNOWN_DIMENSION
    return Dimension(width, height)


def parse_scale_factor(text: str) -> int:
    match = _SCALE_FACTOR_RE.search(text or "")
    if not match:
        return 1
    return max(int(match.group(1)), 1)
