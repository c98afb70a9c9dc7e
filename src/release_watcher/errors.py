"""Custom exception types for the release watcher."""


class ReleaseWatcherError(Exception):
    """Base exception for all release watcher errors."""


class ConfigurationError(ReleaseWatcherError):
    """Raised when minor-version bounds, limits, or architecture are invalid."""


class FetchError(ReleaseWatcherError):
    """Raised when a release-controller or life-cycle request fails or returns a non-OK status."""


class DecodeError(ReleaseWatcherError):
    """Raised when a fetched document is not valid JSON or has an unexpected shape."""


class ParseError(ReleaseWatcherError):
    """Raised when a stream name, payload name, or timestamp does not match its pattern."""
