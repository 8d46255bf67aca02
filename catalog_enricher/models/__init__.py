"""Pydantic validation models and shared identity enums."""
from catalog_enricher.models.catalog import (
    NA,
    NOT_APPLICABLE,
    DRILL_EDGE_COUNT,
    SLOT_FIELDS,
    SupplierId,
    ToolFamily,
    ToolType,
)
from catalog_enricher.models.spec_result import SpecResult
from catalog_enricher.models.record import ToolRecord, is_absent
from catalog_enricher.models.progress import ProgressSnapshot

__all__ = [
    "NA",
    "NOT_APPLICABLE",
    "DRILL_EDGE_COUNT",
    "SLOT_FIELDS",
    "SupplierId",
    "ToolFamily",
    "ToolType",
    "SpecResult",
    "ToolRecord",
    "is_absent",
    "ProgressSnapshot",
]
