"""Attribute extraction from supplier pages and part numbers.

Key Components:
    - Document / AttributeQuery: parsed page and what to look for
    - extract_attribute: ranked heuristic pipeline over a Document
    - find_code_value / find_tab_row_value: scanners for rendered page text
    - normalize_value: single place where units are resolved
    - PartNumberDecoder: offline inference from encoded part numbers
"""
from catalog_enricher.services.extraction.heuristics import (
    HEURISTICS,
    AttributeQuery,
    Document,
    extract_attribute,
    extract_spec,
    find_code_value,
    find_tab_row_value,
    section_after,
)
from catalog_enricher.services.extraction.normalizer import normalize_value
from catalog_enricher.services.extraction.part_number import (
    PartNumberDecoder,
    decode_part_number,
)

__all__ = [
    "HEURISTICS",
    "AttributeQuery",
    "Document",
    "extract_attribute",
    "extract_spec",
    "find_code_value",
    "find_tab_row_value",
    "section_after",
    "normalize_value",
    "PartNumberDecoder",
    "decode_part_number",
]
