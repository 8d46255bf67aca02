"""Record classification service.

Key Components:
    - normalize_supplier: procurement channel -> SupplierId
    - normalize_tool_type: type label -> ToolType (strict vocabulary)
    - classify: both at once
"""
from catalog_enricher.services.classification.classifier import (
    SUPPLIER_NAMES,
    TOOL_TYPE_VOCABULARY,
    classify,
    normalize_supplier,
    normalize_tool_type,
)

__all__ = [
    "SUPPLIER_NAMES",
    "TOOL_TYPE_VOCABULARY",
    "classify",
    "normalize_supplier",
    "normalize_tool_type",
]
