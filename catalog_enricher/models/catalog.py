"""Closed identity sets shared by the classifier, strategies and decoder."""
from enum import Enum


NA = "#NA"
"""Sentinel for "attribute sought but not found"; exported verbatim."""

NOT_APPLICABLE = "-"
"""Marker for a slot that has no meaning for the tool family (drill corner radius)."""

DRILL_EDGE_COUNT = "2"
"""Peripheral cutting edge count fixed for drilling tools."""

# Generic slot order shared by SpecResult, the strategies and the decoder.
SLOT_FIELDS: tuple[str, ...] = (
    "tool_diameter",        # DC / D1 / Dc
    "cutting_length",       # APMX / LU / Lc
    "corner_radius",        # RE / R
    "edge_count",           # Z / ZEFP / PCEDC
    "overall_length",       # OAL / LF / l1
    "shank_bore_diameter",  # DMM / DCONMS / d1
)


class SupplierId(str, Enum):
    """Supported supplier identities."""
    SECO = "SECO"
    KENNAMETAL = "KENNAMETAL"
    SANDVIK = "SANDVIK"
    WALTER = "WALTER"
    UNRECOGNIZED = "UNRECOGNIZED"


class ToolFamily(str, Enum):
    """Slot semantics group for a tool type."""
    MILLING = "milling"
    DRILLING = "drilling"


class ToolType(str, Enum):
    """Strict tool-type vocabulary."""
    ENDMILL = "ENDMILL"
    SOLID_ENDMILL = "SOLID_ENDMILL"
    DRILL = "DRILL"
    SOLID_DRILL = "SOLID_DRILL"
    UNSUPPORTED = "UNSUPPORTED"

    @property
    def family(self) -> "ToolFamily | None":
        if self in (ToolType.ENDMILL, ToolType.SOLID_ENDMILL):
            return ToolFamily.MILLING
        if self in (ToolType.DRILL, ToolType.SOLID_DRILL):
            return ToolFamily.DRILLING
        return None

    @property
    def is_supported(self) -> bool:
        return self is not ToolType.UNSUPPORTED
