class FeedError(Exception):
    """Base exception for realtime feed failures."""


class FeedUnavailableError(FeedError):
    """Raised when the upstream feed cannot be fetched or returns an error status."""


class FeedDecodeError(FeedError):
    """Raised when feed bytes are not a valid GTFS-Realtime message."""


class StaticDataError(Exception):
    """Raised when a static GTFS archive is missing required files or is corrupt."""
