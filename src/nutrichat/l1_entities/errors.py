"""Domain error types."""


class GatewayError(Exception):
    """Raised when the analysis service fails or returns an unusable reply."""


class AnalysisParseError(GatewayError):
    """Raised when model output cannot be turned into nutrition items."""
