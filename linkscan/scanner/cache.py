"""Filesystem-backed response cache.

Entries live under `<target_directory>/cache/<host>/<sha256(url)>.json` and
carry an absolute expiry time. The cache is best effort: any failure to read
or write an entry is logged and reported as a miss.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
import shutil
import tempfile
import time
from pathlib import Path
from typing import Any, Mapping

from .constants import CACHE_SUBDIR, DEFAULT_CACHE_TTL_SECONDS
from .types import FetchResponse
from .url import hostname_of

LOGGER = logging.getLogger(__name__)


class ResponseCache:
    """Persist `FetchResponse` objects keyed by normalized URL."""

    def __init__(
        self,
        target_directory: str | Path,
        *,
        default_ttl: int = DEFAULT_CACHE_TTL_SECONDS,
    ) -> None:
        self.cache_dir = Path(target_directory) / CACHE_SUBDIR
        self.default_ttl = default_ttl

    @staticmethod
    def _url_host_key(url: str) -> str:
        host = hostname_of(url)
        if not host:
            return "unknown"
        return "".join(char if (char.isalnum() or char in {".", "-", "_"}) else "_" for char in host)

    @staticmethod
    def _url_digest(url: str) -> str:
        return hashlib.sha256(url.encode("utf-8")).hexdigest()

    def path_for(self, url: str) -> Path:
        """Build the deterministic entry path for a URL."""

        return self.cache_dir / self._url_host_key(url) / f"{self._url_digest(url)}.json"

    def get(self, url: str) -> FetchResponse | None:
        path = self.path_for(url)
        try:
            if not path.exists():
                return None
            payload = json.loads(path.read_text(encoding="utf-8"))
            if float(payload["expires_at"]) <= time.time():
                path.unlink(missing_ok=True)
                return None
            return FetchResponse.from_json(payload["response"])
        except (OSError, ValueError, KeyError, TypeError) as exc:
            LOGGER.debug("Cache read failed for %s: %s", url, exc)
            return None

    def set(self, url: str, response: FetchResponse, ttl: int | None = None) -> bool:
        """Store a response; returns False when the write did not happen."""

        ttl = self.default_ttl if ttl is None else ttl
        payload = {
            "url": url,
            "expires_at": time.time() + ttl,
            "response": response.to_json(),
        }
        path = self.path_for(url)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            self._atomic_write_json(path, payload)
        except (OSError, TypeError, ValueError) as exc:
            LOGGER.debug("Cache write failed for %s: %s", url, exc)
            return False
        return True

    def delete(self, url: str) -> None:
        try:
            self.path_for(url).unlink(missing_ok=True)
        except OSError as exc:
            LOGGER.debug("Cache delete failed for %s: %s", url, exc)

    def clear(self) -> None:
        shutil.rmtree(self.cache_dir, ignore_errors=True)

    @staticmethod
    def _atomic_write_json(path: Path, payload: Mapping[str, Any]) -> None:
        content = json.dumps(payload, ensure_ascii=False, sort_keys=True)
        tmp_fd, tmp_path = tempfile.mkstemp(
            dir=str(path.parent),
            prefix=path.name + ".",
            suffix=".tmp",
        )
        try:
            with os.fdopen(tmp_fd, "w", encoding="utf-8") as handle:
                handle.write(content)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, path)
        except Exception:
            try:
                os.unlink(tmp_path)
            except FileNotFoundError:
                pass
            raise


__all__ = ["ResponseCache"]
