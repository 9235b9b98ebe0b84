"""Default values shared by config, engine, cache, and CLI."""

from __future__ import annotations

import tempfile
from pathlib import Path


DEFAULT_FULL_BASE_URL = "http://localhost"

DEFAULT_CACHE_ENABLED = True
DEFAULT_EXPORT_ONLY_BAD_RESULTS = False
DEFAULT_EXTERNAL_LINKS_ENABLED = True
DEFAULT_FOLLOW_REDIRECTS = False
DEFAULT_LOCK_ENABLED = True
DEFAULT_MAX_DEPTH = 0

# Template placeholders like `{{url}}` or `a+b` are never real links.
DEFAULT_EXCLUDE_LINK_PATTERNS: tuple[str, ...] = (r"[{}+]",)

DEFAULT_TARGET_DIRECTORY = Path(tempfile.gettempdir()) / "link-scanner"

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_RETRIES = 0
DEFAULT_RETRY_BACKOFF_SECONDS = 1.0
DEFAULT_USER_AGENT = "linkscan/1.0 (+broken-link checker)"

DEFAULT_CACHE_TTL_SECONDS = 24 * 60 * 60
CACHE_SUBDIR = "cache"
LOCK_FILENAME = "link_scanner_lock_file"
LOG_SUBDIR = "logs"

EXPORT_FILENAME_TEMPLATE = "results_{hostname}_{start_time}"
EXPORT_FORMATS: tuple[str, ...] = ("native", "html", "xml")

REDIRECT_STATUS_CODES = frozenset({301, 302, 303, 307, 308})

# Tag name -> attribute holding the link, in lookup order.
LINK_TAGS: dict[str, str] = {
    "a": "href",
    "area": "href",
    "audio": "src",
    "embed": "src",
    "frame": "src",
    "iframe": "src",
    "img": "src",
    "link": "href",
    "script": "src",
    "source": "src",
    "track": "src",
    "video": "src",
}

JSON_INDENT = 2
SUPPORTED_CONFIG_SUFFIXES: tuple[str, ...] = (".json", ".yaml", ".yml")


__all__ = [
    "CACHE_SUBDIR",
    "DEFAULT_CACHE_ENABLED",
    "DEFAULT_CACHE_TTL_SECONDS",
    "DEFAULT_EXCLUDE_LINK_PATTERNS",
    "DEFAULT_EXPORT_ONLY_BAD_RESULTS",
    "DEFAULT_EXTERNAL_LINKS_ENABLED",
    "DEFAULT_FOLLOW_REDIRECTS",
    "DEFAULT_FULL_BASE_URL",
    "DEFAULT_LOCK_ENABLED",
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_RETRIES",
    "DEFAULT_RETRY_BACKOFF_SECONDS",
    "DEFAULT_TARGET_DIRECTORY",
    "DEFAULT_TIMEOUT_SECONDS",
    "DEFAULT_USER_AGENT",
    "EXPORT_FILENAME_TEMPLATE",
    "EXPORT_FORMATS",
    "JSON_INDENT",
    "LINK_TAGS",
    "LOCK_FILENAME",
    "LOG_SUBDIR",
    "REDIRECT_STATUS_CODES",
    "SUPPORTED_CONFIG_SUFFIXES",
]
