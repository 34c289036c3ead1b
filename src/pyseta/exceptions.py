"""Custom exception hierarchy for pyseta."""

from __future__ import annotations


class SetaError(Exception):
    """Base exception for all pyseta errors."""


class SetaConfigError(SetaError):
    """Invalid or missing configuration."""


class SetaRuleError(SetaError):
    """Rule store or alias table could not be loaded or validated."""


class SetaTransportError(SetaError):
    """HTTP-level failure (network, timeout, non-200, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class SetaFeedError(SetaError):
    """Upstream payload is valid JSON but not the expected feed shape."""

    def __init__(self, message: str, *, url: str = "") -> None:
        self.url = url
        super().__init__(message)
