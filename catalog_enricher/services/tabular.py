"""Spreadsheet import/export for tool catalogs.

Layout (first worksheet, first row is the header, columns by position):

    1 No.                 6 Corner rad
    2 Tool Description    7 Flute / Cutting edge length (APMXS)
    3 Type of Tool        8 Overall length (OAL / LF)
    4 Shank / Bore        9 Peripheral cutting edge count
    5 Tool diameter      10 Procurement channel

Blank attribute cells are read as None and exported as the NA sentinel.
"""
from pathlib import Path
from typing import IO, List, Optional, Union

import pandas as pd
import structlog

from catalog_enricher.errors.exceptions import ImportFormatError
from catalog_enricher.models.catalog import NA
from catalog_enricher.models.record import ToolRecord

logger = structlog.get_logger(__name__)

SHEET_NAME = "Tool Catalog"
FIRST_DATA_ROW = 2

# (header, record field), in column order
COLUMNS = (
    ("No.", "no"),
    ("Tool Description", "tool_description"),
    ("Type of Tool", "type_of_tool"),
    ("Shank Ø (DMM) / Bore Ø (DCB)", "shank_bore_diameter"),
    ("Tool Ø (DC)", "tool_diameter"),
    ("Corner rad", "corner_radius"),
    ("Flute / Cutting edge length (APMXS)", "cutting_length"),
    ("Overall length (OAL / LF)", "overall_length"),
    ("Peripheral cutting edge count", "edge_count"),
    ("Procurement channel", "procurement_channel"),
)
ATTRIBUTE_COLUMNS = frozenset(
    ("shank_bore_diameter", "tool_diameter", "corner_radius",
     "cutting_length", "overall_length", "edge_count")
)

Source = Union[str, Path, IO[bytes]]


def _cell(row: list, index: int) -> str:
    if index >= len(row):
        return ""
    value = row[index]
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    return str(value).strip()


def _to_int(text: str) -> int:
    try:
        return int(float(text))
    except (TypeError, ValueError):
        return 0


def read_records(source: Source) -> List[ToolRecord]:
    """Import tool records from the first worksheet of an .xlsx file.

    Raises:
        ImportFormatError: File missing or not a readable workbook
    """
    log = logger.bind(source=str(source) if isinstance(source, (str, Path)) else "<stream>")
    try:
        df = pd.read_excel(
            source,
            sheet_name=0,
            header=0,
            dtype=str,
            keep_default_na=False,
            engine="openpyxl",
        )
    except FileNotFoundError as e:
        raise ImportFormatError(f"Catalog file not found: {source}") from e
    except Exception as e:
        raise ImportFormatError(f"Failed to read catalog workbook: {e}") from e

    records = []
    for offset, row in enumerate(df.itertuples(index=False, name=None)):
        values = {}
        for index, (_, field_name) in enumerate(COLUMNS):
            text = _cell(list(row), index)
            if field_name == "no":
                values[field_name] = _to_int(text)
            elif field_name in ATTRIBUTE_COLUMNS:
                values[field_name] = text or None
            else:
                values[field_name] = text
        records.append(ToolRecord(row_index=FIRST_DATA_ROW + offset, **values))

    log.info("catalog_imported", records=len(records), columns=len(df.columns))
    return records


def records_to_frame(records: List[ToolRecord]) -> pd.DataFrame:
    rows = []
    for record in records:
        row = {}
        for header, field_name in COLUMNS:
            value = getattr(record, field_name)
            if field_name in ATTRIBUTE_COLUMNS and value is None:
                value = NA
            row[header] = value
        rows.append(row)
    return pd.DataFrame(rows, columns=[header for header, _ in COLUMNS])


def write_records(records: List[ToolRecord], target: Union[str, Path, IO[bytes]]) -> None:
    """Export records to an .xlsx workbook with a single "Tool Catalog" sheet."""
    df = records_to_frame(records)
    with pd.ExcelWriter(target, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=SHEET_NAME, index=False)
    logger.info(
        "catalog_exported",
        target=str(target) if isinstance(target, (str, Path)) else "<stream>",
        records=len(records),
    )


def sample_records() -> List[ToolRecord]:
    """Two-row example catalog for users to fill in."""
    return [
        ToolRecord(
            row_index=2,
            no=1,
            tool_description="SECO FCPM 160404 EPMW H10",
            type_of_tool="Endmill",
            procurement_channel="SECO",
        ),
        ToolRecord(
            row_index=3,
            no=2,
            tool_description="Kennametal KCD 12",
            type_of_tool="Drill",
            procurement_channel="KENNAMETAL",
        ),
    ]


def write_sample(target: Union[str, Path, IO[bytes]], records: Optional[List[ToolRecord]] = None) -> None:
    write_records(records or sample_records(), target)
