"""Scanner package: config, shared types, and scan engine components."""

from .cache import ResponseCache
from .config import ScanConfig, load_config, save_config
from .errors import (
    ConcurrencyError,
    ConfigurationError,
    ExportError,
    LinkScannerError,
    ResultImportError,
    TransportError,
)
from .exporter import ResultExporter
from .fetcher import Fetcher
from .hooks import ScanHooks
from .importer import ResultImporter
from .link_scanner import LinkScanner
from .lock import RunLock
from .parsers import BodyParser
from .results import ResultSet, ScanSnapshot
from .types import FetchResponse, ScanRecord, is_error_status, is_ok_status, is_redirect_status
from .url import clean, hostname_of, is_external, is_valid_url, normalize, to_absolute

__all__ = [
    "BodyParser",
    "ConcurrencyError",
    "ConfigurationError",
    "ExportError",
    "FetchResponse",
    "Fetcher",
    "LinkScanner",
    "LinkScannerError",
    "ResponseCache",
    "ResultExporter",
    "ResultImportError",
    "ResultImporter",
    "ResultSet",
    "RunLock",
    "ScanConfig",
    "ScanHooks",
    "ScanRecord",
    "ScanSnapshot",
    "TransportError",
    "clean",
    "hostname_of",
    "is_error_status",
    "is_external",
    "is_ok_status",
    "is_redirect_status",
    "is_valid_url",
    "load_config",
    "normalize",
    "save_config",
    "to_absolute",
]
