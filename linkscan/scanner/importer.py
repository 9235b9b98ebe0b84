"""Decode native (JSON), HTML, and XML result files back into snapshots."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from bs4 import BeautifulSoup
from lxml import etree

from .constants import EXPORT_FORMATS
from .errors import ResultImportError
from .exporter import HTML_LABELS, XML_LINK_FIELDS, XML_METADATA_FIELDS
from .results import ScanSnapshot

LOGGER = logging.getLogger(__name__)

# Imported files get no entity expansion and no network access.
XML_PARSER_OPTIONS = {"resolve_entities": False, "no_network": True}


def _build_snapshot(payload: dict[str, Any]) -> ScanSnapshot:
    try:
        return ScanSnapshot.from_json(payload)
    except (KeyError, TypeError, ValueError) as exc:
        raise ResultImportError(f"Invalid data: {exc}") from exc


def decode_native(content: str) -> ScanSnapshot:
    try:
        payload = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ResultImportError(f"Invalid data: {exc}") from exc

    if not isinstance(payload, dict) or not payload:
        raise ResultImportError("Invalid data: expected a non-empty JSON object")
    return _build_snapshot(payload)


def decode_html(content: str) -> ScanSnapshot:
    soup = BeautifulSoup(content, "lxml")

    payload: dict[str, Any] = {}
    for paragraph in soup.find_all("p"):
        label, separator, value = paragraph.get_text().partition(": ")
        key = HTML_LABELS.get(label.strip().rstrip(":"))
        if separator and key:
            payload[key] = value.strip()

    missing = [key for key in HTML_LABELS.values() if key not in payload]
    if missing:
        raise ResultImportError(f"Invalid data: missing {', '.join(missing)}")

    tbody = soup.find("tbody")
    if tbody is None:
        raise ResultImportError("Invalid data: results table has no body")

    links: list[dict[str, Any]] = []
    for row in tbody.find_all("tr"):
        cells = [cell.get_text() for cell in row.find_all("td")]
        if len(cells) < 4:
            raise ResultImportError(f"Invalid data: malformed row {cells!r}")
        cells += [""] * (6 - len(cells))
        url, code, external, content_type, location, referer = cells[:6]
        links.append({
            "url": url,
            "code": code,
            "external": external.strip() == "Yes",
            "type": content_type,
            "location": location,
            "referer": referer,
        })

    if not links:
        raise ResultImportError("Invalid data: results table is empty")

    payload["links"] = links
    return _build_snapshot(payload)


def decode_xml(content: str) -> ScanSnapshot:
    try:
        root = etree.fromstring(content.encode("utf-8"), etree.XMLParser(**XML_PARSER_OPTIONS))
    except etree.XMLSyntaxError as exc:
        raise ResultImportError(f"Invalid data: {exc}") from exc

    payload: dict[str, Any] = {
        key: root.findtext(key) for key in XML_METADATA_FIELDS if root.find(key) is not None
    }

    links_element = root.find("links")
    if links_element is None:
        raise ResultImportError("Invalid data: no links element")

    payload["links"] = [
        {
            key: link.findtext(key) or ""
            for key in XML_LINK_FIELDS
            if link.find(key) is not None
        }
        for link in links_element.findall("link")
    ]
    if not payload["links"]:
        raise ResultImportError("Invalid data: no link entries")

    return _build_snapshot(payload)


DECODERS = {
    "native": decode_native,
    "html": decode_html,
    "xml": decode_xml,
}


class ResultImporter:
    """Read one results file in a chosen format."""

    def read(self, path: str | Path, fmt: str = "native") -> ScanSnapshot:
        if fmt not in EXPORT_FORMATS:
            raise ResultImportError(f"Unsupported import format '{fmt}'. Supported: {EXPORT_FORMATS}")

        in_path = Path(path)
        try:
            content = in_path.read_text(encoding="utf-8").strip()
        except (OSError, UnicodeDecodeError) as exc:
            raise ResultImportError(
                f"Failed to import results from file `{in_path}` with message `{exc}`"
            ) from exc

        if not content:
            raise ResultImportError(f"Failed to import results from file `{in_path}`: file is empty")

        snapshot = DECODERS[fmt](content)
        LOGGER.info("Imported %d results as %s from %s", snapshot.checked_links, fmt, in_path)
        return snapshot


__all__ = [
    "DECODERS",
    "ResultImporter",
    "decode_html",
    "decode_native",
    "decode_xml",
]
