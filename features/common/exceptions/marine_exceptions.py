class MarineDataError(Exception):
    """Base exception for marine condition errors."""
    pass

class MissingCoordinatesError(MarineDataError):
    """Raised when a bundle is requested without a usable coordinate."""
    pass

class UpstreamUnavailableError(MarineDataError):
    """Raised when an external data source times out, fails, or returns garbage."""

    def __init__(self, source: str, detail: str):
        self.source = source
        self.detail = detail
        super().__init__(f"{source}: {detail}")

class InsufficientHistoryError(MarineDataError):
    """Raised when a rolling computation lacks enough valid days."""

    def __init__(self, required: int, available: int):
        self.required = required
        self.available = available
        super().__init__(f"need {required} valid days, have {available}")

class UnsupportedNotationError(MarineDataError):
    """Raised when a stage label cannot be interpreted by the flow engine."""

    def __init__(self, notation: object):
        self.notation = notation
        super().__init__(f"unsupported stage notation: {notation!r}")
