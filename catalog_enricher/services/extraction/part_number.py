"""Part-number pattern decoder (offline fallback).

Supplier part numbers encode dimensions at known positions, e.g.

    SECO drill      SD1103-1000-035-10R1     -> 10.0 mm dia, 35 mm OAL, 10 mm shank
    SECO endmill    JS534060D1B.0Z4-NXT      -> 6.0 mm dia, Z4, 1 mm corner
    KENNAMETAL      H1TE4RA0400N006HBR025M   -> 4.0 mm dia, 6 mm shank, 0.25 corner
    SANDVIK drill   462.1-0803-024A1         -> 8.03 mm dia, 24 mm OAL
    WALTER endmill  H3094718-6-100           -> 6 mm dia, 100 mm OAL

The decoder never touches the network and always reports success: it is a
best-effort enrichment, not a verifiable source. It is a separately callable
stage (see ``apply_pattern_fallback`` in the orchestrator), never chained
silently behind a supplier strategy.
"""
import re
from typing import Callable, Dict, List, Optional, Tuple

import structlog

from catalog_enricher.models.catalog import NA, SLOT_FIELDS, SupplierId, ToolFamily
from catalog_enricher.models.record import ToolRecord
from catalog_enricher.models.spec_result import SpecResult

logger = structlog.get_logger(__name__)

Slots = Dict[str, str]


def _scaled(n: int, threshold: int, divisor: float, decimals: int = 1) -> str:
    """Render an encoded integer: values >= threshold are scaled down."""
    if n >= threshold:
        return f"{n / divisor:.{decimals}f} mm"
    return f"{n} mm"


# =============================================================================
# Milling tools
# =============================================================================


def _seco_endmill(desc: str, slots: Slots) -> None:
    m = re.search(r"JS\d{3}(\d{2,3})", desc, re.IGNORECASE)
    if m:
        slots["tool_diameter"] = _scaled(int(m.group(1)), 10, 10.0)
    m = re.search(r"Z-?(\d)", desc, re.IGNORECASE)
    if m:
        slots["edge_count"] = m.group(1)
    # D1B = 1 mm corner radius, D2B = 2 mm; "D0B.5" encodes 0.5 after the dot
    m = re.search(r"D(\d)B(?:\.\d)?", desc, re.IGNORECASE)
    if m and int(m.group(1)) > 0:
        slots["corner_radius"] = f"{int(m.group(1))} mm"
    else:
        m = re.search(r"D\dB\.(\d)", desc, re.IGNORECASE)
        if m and m.group(1) != "0":
            slots["corner_radius"] = f"{m.group(1)} mm"


def _kennametal_endmill(desc: str, slots: Slots) -> None:
    m = re.search(r"H1TE4RA(\d{4})", desc, re.IGNORECASE)
    if m:
        slots["tool_diameter"] = _scaled(int(m.group(1)), 100, 100.0)
    m = re.search(r"(?:HAR|HBR)(\d{2,3})", desc, re.IGNORECASE)
    if m:
        slots["corner_radius"] = f"{int(m.group(1)) / 100.0:.2f} mm"
    m = re.search(r"N0?(\d{1,3})\D", desc, re.IGNORECASE)
    if m and 3 <= int(m.group(1)) <= 32:
        slots["shank_bore_diameter"] = f"{int(m.group(1))} mm"
    m = re.search(r"[LN]0?(\d{2,3})", desc, re.IGNORECASE)
    if m and 20 <= int(m.group(1)) <= 200:
        slots["overall_length"] = f"{int(m.group(1))} mm"


def _sandvik_endmill(desc: str, slots: Slots) -> None:
    m = re.search(r"1K\d{3}-(\d{3,4})", desc, re.IGNORECASE)
    if m:
        slots["tool_diameter"] = _scaled(int(m.group(1)), 100, 100.0)
    m = re.search(r"-(\d{2,3})-", desc)
    if m and int(m.group(1)) >= 20:
        slots["overall_length"] = f"{int(m.group(1))} mm"


def _walter_endmill(desc: str, slots: Slots) -> None:
    m = re.search(r"-(\d{1,2})-(\d{2,3})(?:-|$|\.)", desc)
    if m:
        diameter, length = int(m.group(1)), int(m.group(2))
        if 1 <= diameter <= 50:
            slots["tool_diameter"] = f"{diameter} mm"
        if 20 <= length <= 300:
            slots["overall_length"] = f"{length} mm"
    m = re.search(r"[Zz]-?(\d)", desc)
    if m:
        slots["edge_count"] = m.group(1)


# =============================================================================
# Drilling tools
# =============================================================================


def _seco_drill(desc: str, slots: Slots) -> None:
    m = re.search(r"SD\d+-(\d{3,4})-(\d{2,3})", desc, re.IGNORECASE)
    if m:
        slots["tool_diameter"] = _scaled(int(m.group(1)), 100, 100.0)
        if int(m.group(2)) >= 10:
            slots["overall_length"] = f"{int(m.group(2))} mm"
    m = re.search(r"-(\d{1,2})R\d", desc, re.IGNORECASE)
    if m and 3 <= int(m.group(1)) <= 32:
        slots["shank_bore_diameter"] = f"{int(m.group(1))} mm"


def _kennametal_drill(desc: str, slots: Slots) -> None:
    m = re.search(r"\d{2}F(\d{2})\d{3}", desc, re.IGNORECASE)
    if m:
        slots["tool_diameter"] = f"{int(m.group(1))} mm"


def _sandvik_drill(desc: str, slots: Slots) -> None:
    m = re.search(r"(\d{4})-(\d{2,3})", desc)
    if m:
        slots["tool_diameter"] = f"{int(m.group(1)) / 100.0:.2f} mm"
        if 10 <= int(m.group(2)) <= 200:
            slots["overall_length"] = f"{int(m.group(2))} mm"


def _walter_drill(desc: str, slots: Slots) -> None:
    m = re.search(r"DC\d+-(\d{2})-(\d{2})", desc, re.IGNORECASE)
    if m:
        slots["tool_diameter"] = f"{int(m.group(1))} mm"
        length = f"{int(m.group(2))} mm"
        slots["cutting_length"] = length
        slots["overall_length"] = length


# =============================================================================
# Generic
# =============================================================================

_NUMBER_TOKEN_RE = re.compile(r"(?<![\d.,])(\d{1,3}(?:[.,]\d{1,2})?)(?![\d])")


def _first_in_range(
    numbers: List[float], lo: float, hi: float, used: set
) -> Optional[Tuple[int, float]]:
    for i, n in enumerate(numbers):
        if i not in used and lo <= n <= hi:
            return i, n
    return None


def _format_number(n: float, decimals: int) -> str:
    return f"{n:.{decimals}f} mm"


def decode_generic(desc: str, slots: Slots) -> None:
    """Numeric heuristic for suppliers without a known encoding.

    First number in 1-50 is the diameter, the first other number in 20-300
    the overall length, the first other number in 0.1-5 the corner radius.
    """
    numbers = [float(t.replace(",", ".")) for t in _NUMBER_TOKEN_RE.findall(desc)]
    numbers = [n for n in numbers if n > 0]
    used: set = set()

    hit = _first_in_range(numbers, 1, 50, used)
    if hit:
        used.add(hit[0])
        slots["tool_diameter"] = _format_number(hit[1], 1)
    hit = _first_in_range(numbers, 20, 300, used)
    if hit:
        used.add(hit[0])
        slots["overall_length"] = _format_number(hit[1], 0)
    hit = _first_in_range(numbers, 0.1, 5, used)
    if hit:
        used.add(hit[0])
        slots["corner_radius"] = _format_number(hit[1], 1)


Decoder = Callable[[str, Slots], None]

DECODERS: Dict[Tuple[SupplierId, ToolFamily], Decoder] = {
    (SupplierId.SECO, ToolFamily.MILLING): _seco_endmill,
    (SupplierId.KENNAMETAL, ToolFamily.MILLING): _kennametal_endmill,
    (SupplierId.SANDVIK, ToolFamily.MILLING): _sandvik_endmill,
    (SupplierId.WALTER, ToolFamily.MILLING): _walter_endmill,
    (SupplierId.SECO, ToolFamily.DRILLING): _seco_drill,
    (SupplierId.KENNAMETAL, ToolFamily.DRILLING): _kennametal_drill,
    (SupplierId.SANDVIK, ToolFamily.DRILLING): _sandvik_drill,
    (SupplierId.WALTER, ToolFamily.DRILLING): _walter_drill,
}


class PartNumberDecoder:
    """Infer the six slots from a record's encoded part number."""

    def __init__(self, decoders: Optional[Dict[Tuple[SupplierId, ToolFamily], Decoder]] = None):
        self._decoders = decoders if decoders is not None else DECODERS
        self._log = logger.bind(component="PartNumberDecoder")

    @staticmethod
    def family_for(record: ToolRecord) -> ToolFamily:
        """Tool family, inferred leniently when the type is outside the vocabulary."""
        if record.tool_family is not None:
            return record.tool_family
        if "DRILL" in record.type_of_tool.upper():
            return ToolFamily.DRILLING
        return ToolFamily.MILLING

    def decode(self, record: ToolRecord) -> SpecResult:
        slots: Slots = {name: NA for name in SLOT_FIELDS}
        desc = record.tool_description or ""
        family = self.family_for(record)

        decoder = self._decoders.get((record.supplier, family), decode_generic)
        decoder(desc, slots)

        result = SpecResult(success=True, **slots)
        self._log.debug(
            "part_number_decoded",
            description=desc,
            supplier=record.supplier.value,
            family=family.value,
            decoder=getattr(decoder, "__name__", "custom"),
            slots=result.slots(),
        )
        return result


def decode_part_number(record: ToolRecord) -> SpecResult:
    """Convenience function using the default decoder table."""
    return PartNumberDecoder().decode(record)
