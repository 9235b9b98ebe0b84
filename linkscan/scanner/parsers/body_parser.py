"""Link discovery in response bodies."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

from ..constants import LINK_TAGS
from ..url import clean, to_absolute


MARKUP_RE = re.compile(r"<!--.*?-->|<[^>]*>", re.DOTALL)


def is_html(body: str) -> bool:
    """Heuristic: a body is HTML if stripping markup changes it."""

    return MARKUP_RE.sub("", body).lower() != body.lower()


class BodyParser:
    """Extract absolute, cleaned, de-duplicated links from one body.

    Links come out grouped by tag in `LINK_TAGS` order, document order within
    each tag. The result is computed once per instance.
    """

    def __init__(self, body: str | bytes, url: str) -> None:
        self.body = self._coerce_text(body)
        self.url = url
        self._extracted_links: list[str] | None = None

    def is_html(self) -> bool:
        return is_html(self.body)

    def extract_links(self) -> list[str]:
        if self._extracted_links is not None:
            return list(self._extracted_links)

        links: list[str] = []
        if self.is_html():
            soup = BeautifulSoup(self.body, "lxml")
            seen: set[str] = set()

            for tag, attribute in LINK_TAGS.items():
                for element in soup.find_all(tag):
                    value = element.get(attribute)
                    if not value or not str(value).strip():
                        continue

                    link = clean(to_absolute(self.url, str(value)), remove_www=True, remove_trailing_slash=True)
                    if link in seen:
                        continue
                    seen.add(link)
                    links.append(link)

        self._extracted_links = links
        return list(links)

    @staticmethod
    def _coerce_text(body: str | bytes) -> str:
        if isinstance(body, bytes):
            return body.decode("utf-8", errors="replace")
        return body or ""


__all__ = ["BodyParser", "is_html"]
