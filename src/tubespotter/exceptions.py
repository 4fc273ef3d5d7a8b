"""Exceptions raised while loading TubeSpotter data."""

from typing import Optional


class LoadError(Exception):
    """Startup data could not be loaded. The whole load should be retried."""


class MalformedRecord(LoadError):
    """A station, association or status record failed validation."""

    def __init__(self, kind: str, index: int, reason: str):
        self.kind = kind
        self.index = index
        self.reason = reason
        super().__init__(f"Malformed {kind} record at index {index}: {reason}")


class FetchError(LoadError):
    """The live line-status feed could not be fetched or decoded."""

    def __init__(
        self,
        url: str,
        reason: str,
        status_code: Optional[int] = None,
        retryable: bool = True,
    ):
        self.url = url
        self.reason = reason
        self.status_code = status_code
        self.retryable = retryable
        detail = f" (HTTP {status_code})" if status_code is not None else ""
        super().__init__(f"Failed to fetch {url}{detail}: {reason}")
