"""Recursive link scanning: the crawl engine."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Iterator
from urllib.parse import urljoin

from .cache import ResponseCache
from .config import ScanConfig
from .constants import DEFAULT_FULL_BASE_URL, EXPORT_FILENAME_TEMPLATE
from .errors import ConfigurationError
from .exporter import ResultExporter
from .fetcher import Fetcher
from .hooks import ScanHooks
from .importer import ResultImporter
from .lock import RunLock
from .parsers import BodyParser
from .results import RecordInput, ResultSet, ScanSnapshot
from .types import FetchResponse, ScanRecord
from .url import hostname_of, is_external, is_valid_url, normalize

LOGGER = logging.getLogger(__name__)

# A page whose links are still being walked: (page url, remaining links).
_Frame = tuple[str, Iterator[str]]


class LinkScanner:
    """Scan a site starting from its base URL and collect one record per URL.

    Internal links are followed depth-first; external links are requested
    once but never expanded. Collaborators (fetcher, cache, hooks) can be
    injected, which is how the tests drive the engine without a network.
    """

    def __init__(
        self,
        config: ScanConfig | None = None,
        *,
        fetcher: Fetcher | None = None,
        cache: ResponseCache | None = None,
        hooks: ScanHooks | None = None,
        results: ResultSet | list[RecordInput] | None = None,
        default_full_base_url: str = DEFAULT_FULL_BASE_URL,
    ) -> None:
        self.config = config or ScanConfig()
        self.hooks = hooks or ScanHooks()
        self.results = ResultSet(results or ())
        self.default_full_base_url = default_full_base_url

        self._fetcher = fetcher
        self._owns_fetcher = fetcher is None
        self._cache = cache

        # Per-run state.
        self._run_config = self.config
        self._visited: set[str] = set()
        self.full_base_url: str | None = None
        self.hostname = ""
        self.current_depth = 0
        self.start_time = 0
        self.end_time: int | None = None

    @property
    def fetcher(self) -> Fetcher:
        if self._fetcher is None:
            self._fetcher = Fetcher(self._run_config)
            self._owns_fetcher = True
        return self._fetcher

    @property
    def cache(self) -> ResponseCache:
        if self._cache is None:
            self._cache = ResponseCache(
                self._run_config.target_directory,
                default_ttl=self._run_config.cache_ttl_seconds,
            )
        return self._cache

    @property
    def lock(self) -> RunLock:
        return RunLock(self.config.target_directory, enabled=self.config.lock_enabled)

    def close(self) -> None:
        if self._owns_fetcher and self._fetcher is not None:
            self._fetcher.close()
            self._fetcher = None

    def __enter__(self) -> "LinkScanner":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def can_be_scanned(self, url: str) -> bool:
        """Return False for invalid, already visited, disallowed external, or excluded URLs."""

        if not is_valid_url(url) or url in self._visited:
            return False
        if not self._run_config.external_links_enabled and is_external(url, self.hostname):
            return False
        return not self._run_config.is_excluded(url)

    def scan(self) -> "LinkScanner":
        """Run a complete scan from the base URL and return `self`."""

        config = self.config.copy()
        full_base_url = config.full_base_url or self.default_full_base_url
        if not is_valid_url(full_base_url):
            raise ConfigurationError(f"Invalid full base url `{full_base_url}`")

        lock = RunLock(config.target_directory, enabled=config.lock_enabled)
        lock.acquire()

        self._run_config = config
        self._visited = set()
        self.full_base_url = full_base_url
        self.hostname = hostname_of(full_base_url)
        self.current_depth = 0
        self.results = ResultSet()
        self.start_time = int(time.time())
        self.end_time = None

        try:
            LOGGER.info("Scan started for %s (hostname %s)", full_base_url, self.hostname)
            self.hooks.fire("scan_started", self.start_time, full_base_url)
            self._recursive_scan(full_base_url)
            self.end_time = int(time.time())
            LOGGER.info(
                "Scan completed: %d results in %ds",
                self.results.count(),
                self.end_time - self.start_time,
            )
            self.hooks.fire("scan_completed", self.start_time, self.end_time, self.results)
        finally:
            lock.release()
            self._visited = set()
            self.close()

        return self

    def _recursive_scan(self, url: str, referer: str | None = None) -> None:
        # The innermost frame is always resumed first: depth-first order.
        stack: list[_Frame] = []
        frame = self._expand(url, referer)
        if frame is not None:
            stack.append(frame)

        while stack:
            page_url, links = stack[-1]
            link = next(links, None)
            if link is None:
                stack.pop()
                continue

            # Re-checked lazily: an earlier sibling's subtree may have visited it.
            if not self.can_be_scanned(link):
                continue
            self.hooks.fire("found_link_to_be_scanned", link)

            if is_external(link, self.hostname):
                self._single_scan(link, page_url)
                continue

            frame = self._expand(link, page_url)
            if frame is not None:
                stack.append(frame)

    def _expand(self, url: str, referer: str | None) -> _Frame | None:
        """Scan one page and return its scannable links, or None to stop this branch."""

        response = self._single_scan(url, referer)
        if response is None:
            return None

        # One counter for the whole run, not per path from the root.
        max_depth = self._run_config.max_depth
        self.current_depth += 1
        if max_depth and self.current_depth >= max_depth:
            return None

        # A followed redirect can land on another host; such pages are never expanded.
        if is_external(response.url, self.hostname):
            return None

        if not response.ok:
            self.hooks.fire("response_not_ok", response.url)
            return None

        links = [
            link
            for link in BodyParser(response.body, response.url).extract_links()
            if self.can_be_scanned(link)
        ]
        if not links:
            return None

        self.hooks.fire("found_links_to_be_scanned", len(links))
        return response.url, iter(links)

    def _single_scan(self, url: str, referer: str | None = None) -> FetchResponse | None:
        """Request one URL (following redirects if enabled) and record the outcome."""

        url = normalize(url)
        while True:
            if not self.can_be_scanned(url):
                return None

            self._visited.add(url)
            self.hooks.fire("before_scan_url", url)
            response = self._get_response(url)
            self.hooks.fire("after_scan_url", response)

            if not (response.redirect and self._run_config.follow_redirects):
                break

            location = urljoin(url, response.location)
            if not self.can_be_scanned(location):
                LOGGER.debug("Redirect from %s to %s is not scannable", url, location)
                return None

            self.hooks.fire("found_redirect", location)
            url = normalize(location)
            referer = None

        record = ScanRecord(
            url=url,
            code=response.status_code,
            external=is_external(url, self.hostname),
            type=response.content_type,
            location=response.location or None,
            referer=referer,
        )
        if not (self._run_config.export_only_bad_results and record.is_success()):
            self.results = self.results.append(record)

        return response

    def _get_response(self, url: str) -> FetchResponse:
        config = self._run_config

        if config.cache_enabled:
            cached = self._cache_get(url)
            if cached is not None:
                LOGGER.debug("Cache hit for %s", url)
                return cached

        try:
            response = self.fetcher.fetch(url)
        except AssertionError:
            # Failures raised by test doubles must reach the test runner.
            raise
        except Exception as exc:
            LOGGER.warning("Request to %s failed, recording 404: %s", url, exc)
            return FetchResponse(url=url, status_code=404)

        if config.cache_enabled and (response.ok or response.redirect):
            self._cache_set(url, response)
        return response

    def _cache_get(self, url: str) -> FetchResponse | None:
        try:
            return self.cache.get(url)
        except AssertionError:
            raise
        except Exception as exc:
            LOGGER.debug("Ignoring cache read failure for %s: %s", url, exc)
            return None

    def _cache_set(self, url: str, response: FetchResponse) -> None:
        try:
            self.cache.set(url, response, ttl=self._run_config.cache_ttl_seconds)
        except AssertionError:
            raise
        except Exception as exc:
            LOGGER.debug("Ignoring cache write failure for %s: %s", url, exc)

    def _absolute_path(self, filename: str | Path) -> Path:
        path = Path(filename)
        if path.is_absolute():
            return path
        return Path(self.config.target_directory) / path

    def snapshot(self) -> ScanSnapshot:
        """Structured view of the current results and run metadata."""

        full_base_url = self.full_base_url or self.config.full_base_url or self.default_full_base_url
        end_time = self.end_time if self.end_time is not None else int(time.time())
        return ScanSnapshot(
            full_base_url=full_base_url,
            hostname=self.hostname or hostname_of(full_base_url),
            max_depth=self._run_config.max_depth,
            start_time=self.start_time,
            elapsed_time=max(0, end_time - self.start_time) if self.start_time else 0,
            links=self.results,
        )

    def export(self, filename: str | Path | None = None, fmt: str = "native") -> Path:
        """Export results to `filename` (relative to the target directory unless absolute).

        Without a filename, `results_<hostname>_<start_time>` is used.
        """

        snapshot = self.snapshot()
        if not filename:
            filename = EXPORT_FILENAME_TEMPLATE.format(
                hostname=snapshot.hostname,
                start_time=snapshot.start_time,
            )

        path = ResultExporter(snapshot).write(self._absolute_path(filename), fmt)
        self.hooks.fire("results_exported", path)
        return path

    def import_results(self, filename: str | Path, fmt: str = "native") -> "LinkScanner":
        """Load exported results into a new scanner that shares this one's collaborators."""

        path = self._absolute_path(filename)
        snapshot = ResultImporter().read(path, fmt)

        scanner = LinkScanner(
            snapshot.to_config(self.config),
            fetcher=self._fetcher,
            cache=self._cache,
            hooks=self.hooks,
            results=snapshot.links,
            default_full_base_url=self.default_full_base_url,
        )
        scanner.full_base_url = snapshot.full_base_url
        scanner.hostname = snapshot.hostname
        scanner.start_time = snapshot.start_time
        scanner.end_time = snapshot.start_time + snapshot.elapsed_time

        scanner.hooks.fire("results_imported", path)
        return scanner


__all__ = ["LinkScanner"]
