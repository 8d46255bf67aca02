"""Layered extraction heuristics for supplier product pages.

No supplier page keeps a stable schema, so attributes are located through an
ordered pipeline of independent heuristics, each a pure function
``(document, query) -> Optional[str]``. The first heuristic that produces a
value surviving normalization wins:

    a. structured table rows (alias cell + measurement cell, any width)
    b. two-column rows (label first, value second or first measurement)
    c. definition lists (dt/dd)
    d. class-hinted label/value elements
    e. alias immediately followed by a number
    f. alias followed by a number+unit within a wide window
    g. count-like attributes: 1-2 digit integer in a narrow window
    h. shank-like attributes: relaxed compound-label pattern

Rendered pages are handled by the text scanners at the bottom of the module
(``find_code_value``, ``find_tab_row_value``): they read the page's visible
text and anchor on short attribute codes rather than DOM selectors.
"""
import re
from dataclasses import dataclass
from functools import cached_property
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

import structlog
from bs4 import BeautifulSoup, Tag

from catalog_enricher.models.catalog import NA
from catalog_enricher.services.extraction.normalizer import normalize_value

logger = structlog.get_logger(__name__)


# =============================================================================
# Patterns
# =============================================================================

NUMBER = r"\d+[,.]?\d*"
METRIC_UNIT = r"mm"
ANY_UNIT = r"(?:mm|inch(?:es)?|in\b|\"|″)"

MEASUREMENT_RE = re.compile(rf"{NUMBER}\s*{ANY_UNIT}", re.IGNORECASE)
METRIC_MEASUREMENT_RE = re.compile(rf"{NUMBER}\s*{METRIC_UNIT}\b", re.IGNORECASE)
BARE_COUNT_RE = re.compile(r"^\s*(\d{1,2})\s*(?:EA|pcs)?\s*$", re.IGNORECASE)
BARE_NUMBER_RE = re.compile(rf"^\s*{NUMBER}\s*$")

PROXIMITY_WINDOW = 300
COUNT_WINDOW = 40
CODE_WINDOW = 120
COUNT_RANGE = (1, 24)

COUNT_ALIASES = frozenset({
    "z", "zn", "zefp", "pcedc", "teeth", "tooth", "number of teeth",
    "flute count", "number of flutes", "edge count", "cutting edge count",
    "peripheral effective cutting edge count", "peripheral cutting edge count",
})

SHANK_KEYWORDS: Tuple[str, ...] = (
    "DMM", "shank", "bore", "DCONMS", "Connection diameter machine side",
    "Adapter / Shank / Bore Diameter", "Shank diameter", "Connection diameter",
    "Shank diameter (h6)", "Adapter", "Bore Diameter",
)

RELAXED_SHANK_RE = re.compile(
    r"(?:DMM|DCONMS|Connection diameter machine side|"
    r"Adapter\s*/\s*Shank\s*/\s*Bore\s*Diameter|Shank diameter(?:\s*\(h6\))?|"
    r"Connection diameter|Bore Diameter|shank|bore|Adapter)"
    r"\s+(?:[A-Za-z()]+\s+){0,6}?(\d+[,.]?\d*)\s*(mm|in\b|inch)?",
    re.IGNORECASE,
)

LABEL_CLASS_RE = re.compile(r"label|name|spec|property|attribute", re.IGNORECASE)
VALUE_CLASS_RE = re.compile(r"value|val\b", re.IGNORECASE)

_TOKEN_SPLIT_RE = re.compile(r"[^A-Za-z0-9]+")


# =============================================================================
# Document and query
# =============================================================================


class Document:
    """Parsed markup with non-visible content removed.

    Wraps a BeautifulSoup tree built from static or rendered HTML.
    """

    def __init__(self, soup: BeautifulSoup, url: Optional[str] = None):
        for node in soup(["script", "style", "noscript", "template"]):
            node.decompose()
        self.soup = soup
        self.url = url

    @classmethod
    def from_html(cls, html: str, url: Optional[str] = None) -> "Document":
        return cls(BeautifulSoup(html, "html.parser"), url=url)

    @cached_property
    def text(self) -> str:
        """Visible text, one block per line."""
        return self.soup.get_text(separator="\n")

    def table_rows(self) -> List[List[str]]:
        rows = []
        for table in self.soup.find_all("table"):
            for tr in table.find_all("tr"):
                cells = [_clean(c.get_text(" ")) for c in tr.find_all(["td", "th"])]
                if len(cells) >= 2:
                    rows.append(cells)
        return rows

    def links(self) -> List[Tuple[str, str]]:
        """(href, text) pairs for every anchor with an href."""
        return [
            (a.get("href", ""), _clean(a.get_text(" ")))
            for a in self.soup.find_all("a", href=True)
        ]


@dataclass(frozen=True)
class AttributeQuery:
    """What to look for and how strictly.

    Attributes:
        aliases: Candidate labels, most specific first
        metric_only: Accept millimetre values only
        count_like: Attribute is an edge/flute count (bare integer accepted)
        shank_like: Attribute is a shank/bore diameter (relaxed label pattern)
    """
    aliases: Tuple[str, ...]
    metric_only: bool = False
    count_like: bool = False
    shank_like: bool = False

    @classmethod
    def for_aliases(
        cls,
        aliases: Iterable[str],
        metric_only: bool = False,
        count_like: Optional[bool] = None,
        shank_like: Optional[bool] = None,
    ) -> "AttributeQuery":
        """Build a query, inferring count/shank kind from the alias vocabulary."""
        aliases = tuple(aliases)
        if count_like is None:
            count_like = any(a.strip().lower() in COUNT_ALIASES for a in aliases)
        if shank_like is None:
            shank_like = any(
                k.lower() in a.lower() or a.lower() == k.lower()
                for a in aliases
                for k in SHANK_KEYWORDS
            )
        return cls(aliases, metric_only, count_like, shank_like)

    @property
    def measurement_re(self) -> re.Pattern:
        return METRIC_MEASUREMENT_RE if self.metric_only else MEASUREMENT_RE

    @property
    def unit_pattern(self) -> str:
        return METRIC_UNIT if self.metric_only else ANY_UNIT


Heuristic = Callable[[Document, AttributeQuery], Optional[str]]


# =============================================================================
# Helpers
# =============================================================================


def _clean(text: str) -> str:
    return re.sub(r"\s+", " ", text or "").strip()


def label_matches(label: str, alias: str) -> bool:
    """Case-insensitive alias match.

    Aliases of three characters or fewer ("DC", "Z", "RE") must appear as a
    whole token so that e.g. "RE" does not match "representation".
    """
    alias = alias.strip()
    if not alias or not label:
        return False
    if len(alias) <= 3:
        tokens = {t.upper() for t in _TOKEN_SPLIT_RE.split(label) if t}
        return alias.upper() in tokens
    return alias.upper() in label.upper()


def alias_pattern(alias: str) -> str:
    """Regex for an alias that does not start or end inside a word."""
    return rf"(?<![A-Za-z0-9]){re.escape(alias.strip())}(?![A-Za-z])"


def _accept(raw: Optional[str], query: AttributeQuery) -> Optional[str]:
    """Normalize a candidate; None when it carries no usable value."""
    if raw is None or not re.search(r"\d", raw):
        return None
    value = normalize_value(raw, metric_only=query.metric_only)
    return None if value == NA else value


def _accept_cell(raw: Optional[str], query: AttributeQuery) -> Optional[str]:
    """Value from a whole cell: a measurement inside it, or a bare number.

    Counts must be a bare in-range integer.
    """
    if raw is None:
        return None
    if query.count_like:
        return _count_in_range(raw)
    m = query.measurement_re.search(raw)
    if m:
        return _accept(m.group(0), query)
    if BARE_NUMBER_RE.match(raw):
        return _accept(raw, query)
    return None


def _count_in_range(text: str) -> Optional[str]:
    m = BARE_COUNT_RE.match(text)
    if not m:
        return None
    n = int(m.group(1))
    lo, hi = COUNT_RANGE
    return str(n) if lo <= n <= hi else None


def _measurement_in(text: str, query: AttributeQuery) -> Optional[str]:
    if query.count_like:
        return _count_in_range(text)
    m = query.measurement_re.search(text)
    return m.group(0) if m else None


# =============================================================================
# Heuristics (document-based)
# =============================================================================


def from_structured_rows(doc: Document, query: AttributeQuery) -> Optional[str]:
    """(a) Alias in one cell, measurement in another cell of the same row.

    Handles both <tr><td>DC</td><td>10 mm</td></tr> and three-column layouts
    such as <tr><td>APMXS</td><td>Depth of cut max</td><td>18.00 mm</td></tr>.
    """
    rows = doc.table_rows()
    for alias in query.aliases:
        for cells in rows:
            for i, cell in enumerate(cells):
                if not label_matches(cell, alias):
                    continue
                for j, sibling in enumerate(cells):
                    if j == i:
                        continue
                    value = _accept_cell(_measurement_in(sibling, query), query)
                    if value:
                        return value
    return None


def from_two_column_rows(doc: Document, query: AttributeQuery) -> Optional[str]:
    """(b) Label in the first cell; value in the second or first measurement cell."""
    rows = doc.table_rows()
    for alias in query.aliases:
        for cells in rows:
            if not label_matches(cells[0], alias):
                continue
            candidate = cells[1]
            if len(cells) >= 3:
                for cell in cells[1:]:
                    if _measurement_in(cell, query):
                        candidate = cell
                        break
            value = _accept_cell(candidate, query)
            if value:
                return value
    return None


def from_definition_lists(doc: Document, query: AttributeQuery) -> Optional[str]:
    """(c) <dl><dt>DC</dt><dd>10 mm</dd></dl>."""
    terms = doc.soup.find_all("dt")
    for alias in query.aliases:
        for dt in terms:
            if not label_matches(_clean(dt.get_text(" ")), alias):
                continue
            dd = dt.find_next_sibling("dd")
            if dd is None:
                continue
            value = _accept_cell(_clean(dd.get_text(" ")), query)
            if value:
                return value
    return None


def _value_for_label(label: Tag) -> Optional[str]:
    sibling = label.find_next_sibling()
    if sibling is not None:
        text = _clean(sibling.get_text(" "))
        if text:
            return text
    parent = label.parent
    if parent is not None:
        value_el = parent.find(class_=VALUE_CLASS_RE)
        if value_el is not None and value_el is not label:
            return _clean(value_el.get_text(" "))
    return None


def from_label_value_elements(doc: Document, query: AttributeQuery) -> Optional[str]:
    """(d) Elements whose class hints at a label, paired with a nearby value."""
    labels = []
    for el in doc.soup.find_all(class_=LABEL_CLASS_RE):
        classes = " ".join(el.get("class", []))
        if VALUE_CLASS_RE.search(classes):
            continue
        labels.append(el)

    for alias in query.aliases:
        for el in labels:
            if not label_matches(_clean(el.get_text(" ")), alias):
                continue
            value = _accept_cell(_value_for_label(el), query)
            if value:
                return value
    return None


def from_inline_text(doc: Document, query: AttributeQuery) -> Optional[str]:
    """(e) "DC 10" / "Diameter: 10 mm": alias immediately followed by a number."""
    text = doc.text
    for alias in query.aliases:
        pattern = alias_pattern(alias) + rf"[\s:=]+({NUMBER})\s*({ANY_UNIT})?"
        m = re.search(pattern, text, re.IGNORECASE)
        if not m:
            continue
        number, unit = m.group(1), m.group(2)
        if query.count_like:
            value = None if unit else _count_in_range(number)
        else:
            value = _accept(f"{number} {unit or 'mm'}", query)
        if value:
            return value
    return None


def from_proximity_window(doc: Document, query: AttributeQuery) -> Optional[str]:
    """(f) Alias, then the first number+unit within a wide window.

    Rendered pages interleave unrelated text between a code and its value.
    Not used for counts: a distant measurement is never an edge count.
    """
    if query.count_like:
        return None
    text = doc.text
    for alias in query.aliases:
        pattern = (
            alias_pattern(alias)
            + rf"[\s\S]{{0,{PROXIMITY_WINDOW}}}?({NUMBER})\s*({query.unit_pattern})"
        )
        m = re.search(pattern, text, re.IGNORECASE)
        if m:
            value = _accept(f"{m.group(1)} {m.group(2)}", query)
            if value:
                return value
    return None


def from_count_window(doc: Document, query: AttributeQuery) -> Optional[str]:
    """(g) Flute/teeth/edge counts: a 1-2 digit integer close to the alias."""
    if not query.count_like:
        return None
    text = doc.text
    for alias in query.aliases:
        pattern = alias_pattern(alias) + rf"[\s\S]{{0,{COUNT_WINDOW}}}?(?<![\d.,])(\d{{1,2}})(?![\d.,])"
        for m in re.finditer(pattern, text, re.IGNORECASE):
            value = _count_in_range(m.group(1))
            if value:
                return value
    return None


def from_relaxed_shank(doc: Document, query: AttributeQuery) -> Optional[str]:
    """(h) "Shank diameter h6 tolerance 6.00 mm": filler words before the number."""
    if not query.shank_like:
        return None
    m = RELAXED_SHANK_RE.search(doc.text)
    if not m:
        return None
    return _accept(f"{m.group(1)} {m.group(2) or 'mm'}", query)


HEURISTICS: Tuple[Heuristic, ...] = (
    from_structured_rows,
    from_two_column_rows,
    from_definition_lists,
    from_label_value_elements,
    from_inline_text,
    from_proximity_window,
    from_count_window,
    from_relaxed_shank,
)


def extract_attribute(
    doc: Document,
    query: AttributeQuery,
    heuristics: Sequence[Heuristic] = HEURISTICS,
) -> Optional[str]:
    """Run the heuristic pipeline; first normalized match wins.

    Returns:
        Normalized value, or None when every heuristic misses
    """
    for heuristic in heuristics:
        value = heuristic(doc, query)
        if value:
            logger.debug(
                "attribute_extracted",
                heuristic=heuristic.__name__,
                aliases=list(query.aliases[:3]),
                value=value,
            )
            return value
    return None


def extract_spec(
    doc: Document,
    aliases: Iterable[str],
    metric_only: bool = False,
    count_like: Optional[bool] = None,
) -> Optional[str]:
    """Convenience wrapper building the query from a plain alias list."""
    query = AttributeQuery.for_aliases(aliases, metric_only=metric_only, count_like=count_like)
    return extract_attribute(doc, query)


# =============================================================================
# Rendered text scanners
# =============================================================================


def section_after(text: str, marker: str, required: Optional[str] = None) -> str:
    """Text from ``marker`` onwards, when present (and ``required`` follows it).

    Used to skip navigation/badge noise above a product data block.
    """
    idx = text.lower().find(marker.lower())
    if idx < 0:
        return text
    if required and text.lower().find(required.lower(), idx) < 0:
        return text
    return text[idx:]


def find_code_value(
    text: str,
    code: str,
    metric_only: bool = False,
    count_like: bool = False,
    window: int = CODE_WINDOW,
) -> Optional[str]:
    """Value following a label/code in rendered page text.

    Measurements must carry a unit suffix (mm only in metric-only mode);
    counts are a 1-2 digit integer. Use full labels such as
    "Corner radius(RE)" when the bare code is ambiguous.
    """
    if count_like:
        pattern = alias_pattern(code) + rf"[\s\S]{{0,{window}}}?(?<![\d.,])(\d{{1,2}})(?![\d.,])"
        m = re.search(pattern, text, re.IGNORECASE)
        return _count_in_range(m.group(1)) if m else None

    unit = METRIC_UNIT if metric_only else ANY_UNIT
    pattern = alias_pattern(code) + rf"[\s\S]{{0,{window}}}?({NUMBER})\s*({unit})"
    m = re.search(pattern, text, re.IGNORECASE)
    if not m:
        return None
    value = normalize_value(f"{m.group(1)} {m.group(2)}", metric_only=metric_only)
    return None if value == NA else value


def find_tab_row_value(
    text: str,
    code: str,
    metric_only: bool = False,
    count_like: bool = False,
) -> Optional[str]:
    """Value from a "Description<TAB>Symbol<TAB>Value" row of rendered text."""
    if count_like:
        pattern = rf"^[^\t\n]*\t{re.escape(code)}\t(\d+)\s*(?:EA)?"
        m = re.search(pattern, text, re.MULTILINE)
        return _count_in_range(m.group(1)) if m else None

    pattern = rf"^[^\t\n]*\t{re.escape(code)}\t([\d,.]+\s*(?:mm|inch|in)?)"
    m = re.search(pattern, text, re.MULTILINE)
    if not m:
        return None
    raw = m.group(1).strip()
    if not re.search(r"[a-z]", raw, re.IGNORECASE):
        raw = f"{raw} mm"
    value = normalize_value(raw, metric_only=metric_only)
    return None if value == NA else value
