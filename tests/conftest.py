"""Shared fixtures: an in-memory fetcher and small HTML site builders."""

from __future__ import annotations

from pathlib import Path

import pytest

from linkscan.scanner import FetchResponse, ScanConfig, TransportError


def html_page(url: str, *links: str, status_code: int = 200) -> FetchResponse:
    anchors = "".join(f'<a href="{link}">{link}</a>' for link in links)
    return FetchResponse(
        url=url,
        status_code=status_code,
        content_type="text/html; charset=UTF-8",
        body=f"<html><head><title>{url}</title></head><body>{anchors}</body></html>",
    )


def redirect(url: str, location: str, status_code: int = 301) -> FetchResponse:
    return FetchResponse(url=url, status_code=status_code, location=location)


class StubFetcher:
    """Serve canned responses by URL and remember every request."""

    def __init__(self, responses: dict[str, FetchResponse | BaseException] | None = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[str] = []
        self.closed = False

    def fetch(self, url: str) -> FetchResponse:
        self.calls.append(url)
        response = self.responses.get(url)
        if response is None:
            raise TransportError(url, "no route to host")
        if isinstance(response, BaseException):
            raise response
        return response

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def stub_fetcher() -> StubFetcher:
    return StubFetcher()


@pytest.fixture
def scan_config(tmp_path: Path) -> ScanConfig:
    return ScanConfig(
        full_base_url="http://localhost",
        target_directory=tmp_path,
        cache_enabled=False,
    )
