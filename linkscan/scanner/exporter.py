"""Encode scan snapshots to native (JSON), HTML, and XML files."""

from __future__ import annotations

import html
import json
import logging
import os
from pathlib import Path

from lxml import etree

from .constants import EXPORT_FORMATS, JSON_INDENT
from .errors import ExportError
from .results import ScanSnapshot

LOGGER = logging.getLogger(__name__)

# Label shown in the HTML export -> snapshot key. Shared with the importer.
HTML_LABELS: dict[str, str] = {
    "Full base url": "fullBaseUrl",
    "Max depth": "maxDepth",
    "Start time": "startTime",
    "Elapsed time": "elapsedTime",
    "Checked links": "checkedLinks",
}
HTML_COLUMNS: tuple[str, ...] = ("Url", "Code", "External", "Type", "Location", "Referer")
XML_METADATA_FIELDS: tuple[str, ...] = (
    "fullBaseUrl",
    "hostname",
    "maxDepth",
    "startTime",
    "elapsedTime",
    "checkedLinks",
)
XML_LINK_FIELDS: tuple[str, ...] = ("url", "code", "external", "type", "location", "referer")


def encode_native(snapshot: ScanSnapshot) -> str:
    return json.dumps(snapshot.to_json(), ensure_ascii=False, indent=JSON_INDENT) + "\n"


def encode_html(snapshot: ScanSnapshot) -> str:
    metadata = snapshot.to_json()
    lines = [
        f"<p><strong>{label}:</strong> {html.escape(str(metadata[key]))}</p>"
        for label, key in HTML_LABELS.items()
    ]
    lines.append("<table>")
    lines.append("<thead><tr>" + "".join(f"<th>{column}</th>" for column in HTML_COLUMNS) + "</tr></thead>")
    lines.append("<tbody>")
    for record in snapshot.links:
        cells = (
            record.url,
            str(record.code),
            "Yes" if record.external else "No",
            record.type,
            record.location or "",
            record.referer or "",
        )
        lines.append("<tr>" + "".join(f"<td>{html.escape(cell)}</td>" for cell in cells) + "</tr>")
    lines.append("</tbody>")
    lines.append("</table>")
    return "\n".join(lines) + "\n"


def encode_xml(snapshot: ScanSnapshot) -> str:
    metadata = snapshot.to_json()
    root = etree.Element("root")
    for key in XML_METADATA_FIELDS:
        etree.SubElement(root, key).text = str(metadata[key])

    links = etree.SubElement(root, "links")
    for record in snapshot.links:
        link = etree.SubElement(links, "link")
        for key, value in record.to_json().items():
            if isinstance(value, bool):
                value = "true" if value else "false"
            etree.SubElement(link, key).text = str(value)

    return etree.tostring(root, pretty_print=True, xml_declaration=True, encoding="UTF-8").decode("utf-8")


ENCODERS = {
    "native": encode_native,
    "html": encode_html,
    "xml": encode_xml,
}


class ResultExporter:
    """Write one snapshot to disk in a chosen format."""

    def __init__(self, snapshot: ScanSnapshot) -> None:
        self.snapshot = snapshot

    def encode(self, fmt: str = "native") -> str:
        if fmt not in EXPORT_FORMATS:
            raise ExportError(f"Unsupported export format '{fmt}'. Supported: {EXPORT_FORMATS}")
        if self.snapshot.links.is_empty():
            raise ExportError("There is no result to export. Perhaps the scan was not performed?")
        try:
            return ENCODERS[fmt](self.snapshot)
        except ValueError as exc:
            # lxml rejects control characters that cannot appear in XML text.
            raise ExportError(f"Cannot encode results as {fmt}: {exc}") from exc

    def write(self, path: str | Path, fmt: str = "native") -> Path:
        content = self.encode(fmt)
        out_path = Path(path)

        try:
            out_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ExportError(f"File or directory `{out_path.parent}` not writable: {exc}") from exc
        if not os.access(out_path.parent, os.W_OK):
            raise ExportError(f"File or directory `{out_path.parent}` not writable")

        try:
            out_path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise ExportError(f"Failed to export results to `{out_path}`: {exc}") from exc

        LOGGER.info("Exported %d results as %s to %s", self.snapshot.checked_links, fmt, out_path)
        return out_path


__all__ = [
    "ENCODERS",
    "HTML_COLUMNS",
    "HTML_LABELS",
    "ResultExporter",
    "XML_LINK_FIELDS",
    "XML_METADATA_FIELDS",
    "encode_html",
    "encode_native",
    "encode_xml",
]
