"""Unit/value normalization for matched attribute text.

This is the single place where unit ambiguity is resolved: heuristics hand
over raw text and never interpret units themselves.

Rules:
    - empty / whitespace -> NA
    - an inch token without a millimetre token -> converted at 25.4 mm/in
      and rendered with two decimals, or NA in metric-only mode
    - anything else (already metric, unit-less counts) -> returned trimmed
"""
import re
from fractions import Fraction
from typing import Optional

from catalog_enricher.models.catalog import NA

MM_PER_INCH = 25.4

_METRIC_RE = re.compile(r"mm\b", re.IGNORECASE)
_INCH_RE = re.compile(r"(?:\d|\s)(?:in|inch|inches)\b\.?|[\"″]", re.IGNORECASE)
# "1 1/2", "1/2", "0.5", "0,5"
_MIXED_FRACTION_RE = re.compile(r"(\d+)\s+(\d+)\s*/\s*(\d+)")
_FRACTION_RE = re.compile(r"(\d+)\s*/\s*(\d+)")
_DECIMAL_RE = re.compile(r"\d+(?:[.,]\d+)?")


def has_metric_unit(text: str) -> bool:
    return bool(_METRIC_RE.search(text))


def has_inch_unit(text: str) -> bool:
    return bool(_INCH_RE.search(text))


def parse_inches(text: str) -> Optional[float]:
    """Parse the leading inch quantity of a value such as '1 1/2 in' or '0,5"'."""
    m = _MIXED_FRACTION_RE.search(text)
    if m and int(m.group(3)) != 0:
        return float(int(m.group(1)) + Fraction(int(m.group(2)), int(m.group(3))))
    m = _FRACTION_RE.search(text)
    if m and int(m.group(2)) != 0:
        return float(Fraction(int(m.group(1)), int(m.group(2))))
    m = _DECIMAL_RE.search(text)
    if m:
        return float(m.group(0).replace(",", "."))
    return None


def normalize_value(raw: Optional[str], metric_only: bool = False) -> str:
    """Convert raw matched text into a canonical measurement string.

    Args:
        raw: Text captured by a heuristic (e.g. "10.00 mm", "0.5 in", "4")
        metric_only: Discard non-metric values instead of converting them

    Returns:
        Canonical value, or the NA sentinel
    """
    if raw is None or not raw.strip():
        return NA
    value = raw.strip()

    if has_inch_unit(value) and not has_metric_unit(value):
        if metric_only:
            return NA
        inches = parse_inches(value)
        if inches is None:
            return value
        return f"{inches * MM_PER_INCH:.2f} mm"

    return value
