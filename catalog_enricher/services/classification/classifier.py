"""Supplier and tool-type classification.

Supplier identity is derived from the free-text procurement channel by
case-insensitive substring match against known supplier names. Tool type is
an exact (case-insensitive, whitespace-trimmed) lookup in a fixed vocabulary:
unknown labels are unsupported rather than guessed, so "Facemill" or
"Insert Endmill" never reach a supplier strategy.

Example:
    classify("Solid Drill", "Seco Tools GmbH")
    # (SupplierId.SECO, ToolType.SOLID_DRILL)
"""
import re
from typing import Dict, Tuple

from catalog_enricher.models.catalog import SupplierId, ToolType


# Checked in order; the first name contained in the channel wins.
SUPPLIER_NAMES: Tuple[Tuple[str, SupplierId], ...] = (
    ("SECO", SupplierId.SECO),
    ("KENNAMETAL", SupplierId.KENNAMETAL),
    ("SANDVIK", SupplierId.SANDVIK),
    ("WALTER", SupplierId.WALTER),
)

TOOL_TYPE_VOCABULARY: Dict[str, ToolType] = {
    "ENDMILL": ToolType.ENDMILL,
    "END MILL": ToolType.ENDMILL,
    "SOLID ENDMILL": ToolType.SOLID_ENDMILL,
    "SOLID END MILL": ToolType.SOLID_ENDMILL,
    "DRILL": ToolType.DRILL,
    "SOLID DRILL": ToolType.SOLID_DRILL,
}

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_supplier(channel: str | None) -> SupplierId:
    """Map a procurement channel to a supplier identity."""
    upper = (channel or "").upper()
    for name, supplier in SUPPLIER_NAMES:
        if name in upper:
            return supplier
    return SupplierId.UNRECOGNIZED


def normalize_tool_type(label: str | None) -> ToolType:
    """Map a type label to the strict tool-type vocabulary."""
    key = _WHITESPACE_RE.sub(" ", (label or "").strip()).upper()
    return TOOL_TYPE_VOCABULARY.get(key, ToolType.UNSUPPORTED)


def classify(type_label: str | None, channel: str | None) -> Tuple[SupplierId, ToolType]:
    """Classify a record's text fields. Pure function, no side effects."""
    return normalize_supplier(channel), normalize_tool_type(type_label)
