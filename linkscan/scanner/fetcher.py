"""HTTP transport built on `requests` with retry logic."""

from __future__ import annotations

import logging
import time

import requests

from .config import ScanConfig
from .errors import TransportError
from .types import FetchResponse

LOGGER = logging.getLogger(__name__)


class Fetcher:
    """Perform single GET requests for the scanner.

    Redirects are not followed here: the engine inspects the `Location`
    header itself so it can filter the target and record the hop. The
    request timeout is a property of the fetcher, not of the engine.
    """

    def __init__(
        self,
        config: ScanConfig | None = None,
        *,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config or ScanConfig()
        self._session = session
        self._owns_session = session is None

    @property
    def timeout_seconds(self) -> float:
        return self.config.timeout_seconds

    @timeout_seconds.setter
    def timeout_seconds(self, value: float) -> None:
        self.config = self.config.copy(timeout_seconds=value)

    def fetch(self, url: str) -> FetchResponse:
        """GET `url`, retrying transient failures; raise `TransportError` if none succeed."""

        attempts = max(1, self.config.retries + 1)
        backoff = max(0.0, self.config.retry_backoff_seconds)
        last_error: requests.RequestException | None = None
        response: FetchResponse | None = None

        for attempt in range(1, attempts + 1):
            try:
                response = self._fetch_once(url)
            except requests.RequestException as exc:
                last_error = exc
                LOGGER.debug("Attempt %d/%d for %s failed: %s", attempt, attempts, url, exc)
            else:
                if self._is_terminal(response):
                    return response

            if attempt < attempts and backoff > 0:
                time.sleep(backoff * attempt)

        if response is not None:
            return response

        raise TransportError(url, f"{last_error.__class__.__name__}: {last_error}")

    def close(self) -> None:
        if self._session is not None and self._owns_session:
            self._session.close()
            self._session = None

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @staticmethod
    def _is_terminal(response: FetchResponse) -> bool:
        return not (response.status_code in {408, 429} or response.status_code >= 500)

    def _get_session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
            self._session.headers["User-Agent"] = self.config.user_agent
        return self._session

    def _fetch_once(self, url: str) -> FetchResponse:
        started = time.perf_counter()
        response = self._get_session().get(
            url,
            timeout=self.config.timeout_seconds,
            allow_redirects=False,
        )
        LOGGER.debug(
            "GET %s -> %s in %d ms",
            url,
            response.status_code,
            int((time.perf_counter() - started) * 1000),
        )
        return FetchResponse(
            url=url,
            status_code=response.status_code,
            content_type=response.headers.get("Content-Type", ""),
            location=response.headers.get("Location", ""),
            body=response.text or "",
        )


__all__ = ["Fetcher"]
