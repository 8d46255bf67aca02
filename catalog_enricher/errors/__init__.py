"""Error handling module."""
from catalog_enricher.errors.exceptions import (
    EnrichmentError,
    SupplierConnectionError,
    RenderError,
    UnknownSupplierError,
    JobNotFoundError,
    ImportFormatError,
)

__all__ = [
    "EnrichmentError",
    "SupplierConnectionError",
    "RenderError",
    "UnknownSupplierError",
    "JobNotFoundError",
    "ImportFormatError",
]
