"""Custom exception hierarchy for catalog enrichment errors."""


class EnrichmentError(Exception):
    """Base exception for all enrichment errors."""

    def __init__(self, message: str, *args, **kwargs):
        """Initialize error with message."""
        self.message = message
        super().__init__(message, *args, **kwargs)


class SupplierConnectionError(EnrichmentError):
    """Raised when a supplier site cannot be reached (transport failure)."""
    pass


class RenderError(EnrichmentError):
    """Raised when a headless browser session fails."""
    pass


class UnknownSupplierError(EnrichmentError):
    """Raised when no strategy is registered for a supplier identity."""
    pass


class JobNotFoundError(EnrichmentError):
    """Raised when a job id is not present in the registry."""
    pass


class ImportFormatError(EnrichmentError):
    """Raised when a spreadsheet cannot be read as a tool catalog."""
    pass
