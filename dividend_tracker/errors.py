"""Domain exceptions shared across the valuation engine, store, and API."""


class DividendTrackerError(Exception):
    """Base exception carrying a human-readable message."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class DataUnavailable(DividendTrackerError):
    """Upstream quote or dividend source unreachable, non-200, or empty."""

    def __init__(self, message: str, symbol: str | None = None) -> None:
        super().__init__(message)
        self.symbol = symbol


class NotFound(DividendTrackerError):
    """Holding id absent or outside the requesting scope."""


class Conflict(DividendTrackerError):
    """Duplicate ticker within a scope."""


class Unauthorized(DividendTrackerError):
    """Bearer token failed verification."""


class KeyNotFound(Unauthorized):
    """No entry in the key set matches the token's key id."""

    def __init__(self, kid: str) -> None:
        super().__init__(f"No signing key found for kid {kid!r}")
        self.kid = kid


class MalformedRecord(DividendTrackerError):
    """A single upstream record could not be parsed."""
