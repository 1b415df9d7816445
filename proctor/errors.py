"""Shared exception types for the proctor CLI."""

from __future__ import annotations


class ProctorError(RuntimeError):
    """Base error for proctor CLI operations."""


class OptionParserError(ProctorError):
    """Raised when the command line or an options file holds an invalid option."""

    def __init__(self, detail: str, source: str | None = None) -> None:
        """Initialise the error with the parser detail and its origin."""
        origin = f" (defined in {source})" if source else ""
        super().__init__(
            f"{detail}{origin}\n\nPlease use --help for a listing of valid options"
        )


class ConfigurationFileError(ProctorError):
    """Raised when an options file cannot be interpreted."""

    def __init__(self, path: str) -> None:
        """Initialise the error with the offending file."""
        super().__init__(
            f"Options file {path!r} must contain an 'options' list of CLI tokens."
        )


class DRbConnectionError(ProctorError):
    """Raised when no DRb server is reachable."""

    def __init__(self, url: str) -> None:
        """Initialise the error with the server URL that refused us."""
        super().__init__(f"Unable to connect to a DRb server at {url}.")


class DRbResponseError(ProctorError):
    """Raised when the DRb server answers with an unusable response."""


class BisectFailedError(ProctorError):
    """Raised when bisection cannot isolate a reproduction."""
