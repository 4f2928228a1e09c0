class CityExplorerError(Exception):
    """Base class for failures surfaced to request handlers."""


class NotFoundError(CityExplorerError):
    """A lookup matched nothing (no geocoding result, unknown location id)."""


class UpstreamError(CityExplorerError):
    """A third-party call failed, timed out, or returned an unusable payload."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class StorageError(CityExplorerError):
    """The relational store was unreachable or rejected a write."""
