"""URL cleaning, hostname extraction, classification, and resolution helpers."""

from __future__ import annotations

import re
from urllib.parse import urljoin, urlsplit, urlunsplit


# Absolute http(s)/ftp URLs and bare `www.` hosts, anchored at the start so
# `mailto:someone@www.example.com` is not mistaken for a link.
VALID_URL_RE = re.compile(
    r"^(?:(?:https?|ftp)://|www\.)[-a-z0-9+&@#/%?=~_|!:,.;]*[-a-z0-9+&@#/%=~_|]",
    re.IGNORECASE,
)
LEADING_WWW_RE = re.compile(r"^((?:https?|ftp)://)?www\.", re.IGNORECASE)


def clean(url: str, remove_www: bool = False, remove_trailing_slash: bool = False) -> str:
    """Remove the fragment and, optionally, a `www.` prefix and one trailing slash."""

    cleaned = url.split("#", maxsplit=1)[0]

    if remove_www:
        cleaned = LEADING_WWW_RE.sub(r"\1", cleaned, count=1)

    if remove_trailing_slash and cleaned.endswith("/"):
        cleaned = cleaned[:-1]

    return cleaned


def strip_www(host: str) -> str:
    host = (host or "").strip().lower()
    if host.startswith("www."):
        host = host[4:]
    return host


def hostname_of(url: str) -> str:
    """Extract the host of an absolute URL without a leading `www.`.

    Relative or unparsable URLs yield an empty string.
    """

    try:
        parsed = urlsplit((url or "").strip())
        host = parsed.hostname
    except ValueError:
        return ""
    return strip_www(host or "")


def is_external(url: str, base_hostname: str) -> bool:
    """Return True when `url` points to a host other than `base_hostname`.

    Relative URLs have no host and are never external.
    """

    host = hostname_of(url)
    if not host:
        return False
    return host != strip_www(base_hostname)


def is_valid_url(value: str) -> bool:
    """Return True for absolute http(s)/ftp URLs and bare `www.` addresses."""

    if not value:
        return False
    return VALID_URL_RE.match(value.strip()) is not None


def to_absolute(base_url: str, link: str) -> str:
    """Resolve `link` against `base_url`.

    A base path whose last segment has no extension is a directory, so
    `http://a.com/docs` + `intro.html` gives `http://a.com/docs/intro.html`.
    A last segment with an extension is a file and is replaced when joining.
    """

    link = link.strip()
    if is_valid_url(link):
        return link

    parsed = urlsplit(base_url)
    last_segment = parsed.path.rsplit("/", maxsplit=1)[-1]
    if "." not in last_segment and not parsed.path.endswith("/"):
        base_url = urlunsplit((parsed.scheme, parsed.netloc, parsed.path + "/", parsed.query, ""))

    return urljoin(base_url, link)


def normalize(url: str) -> str:
    """Canonical form used for visited tracking, cache keys, and records."""

    return clean(url, remove_www=True, remove_trailing_slash=True)


__all__ = [
    "clean",
    "hostname_of",
    "is_external",
    "is_valid_url",
    "normalize",
    "strip_www",
    "to_absolute",
]
