"""Exception taxonomy raised by the scanner package."""

from __future__ import annotations


class LinkScannerError(Exception):
    """Base class for every error raised deliberately by the scanner."""


class ConfigurationError(LinkScannerError, ValueError):
    """Invalid settings, most commonly a base URL that is not a URL."""


class ConcurrencyError(LinkScannerError, RuntimeError):
    """Another scan holds the run lock for the same target directory."""


class ExportError(LinkScannerError):
    """Results could not be exported (nothing to export, or unwritable path)."""


class ResultImportError(LinkScannerError):
    """A results file is unreadable or malformed for the requested format."""


class TransportError(LinkScannerError):
    """A single HTTP request failed before producing a response."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"{url}: {message}")
        self.url = url
        self.message = message


__all__ = [
    "ConcurrencyError",
    "ConfigurationError",
    "ExportError",
    "LinkScannerError",
    "ResultImportError",
    "TransportError",
]
