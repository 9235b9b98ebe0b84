"""Response and record types shared by the engine, cache, and exporters."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .constants import REDIRECT_STATUS_CODES


JSONPrimitive = str | int | float | bool | None
JSONValue = JSONPrimitive | list["JSONValue"] | dict[str, "JSONValue"]
JSONDict = dict[str, JSONValue]


def is_ok_status(status_code: int) -> bool:
    """Return True for 2xx status codes."""

    return 200 <= status_code < 300


def is_redirect_status(status_code: int) -> bool:
    """Return True for status codes that carry a `Location` to follow."""

    return status_code in REDIRECT_STATUS_CODES


def is_error_status(status_code: int) -> bool:
    """Return True for 4xx/5xx status codes."""

    return status_code >= 400


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes"}
    return bool(value)


def _as_optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text or None


@dataclass(frozen=True, slots=True)
class FetchResponse:
    """Result of one GET request, as seen by the engine and the cache."""

    url: str
    status_code: int
    content_type: str = ""
    location: str = ""
    body: str = ""

    @property
    def ok(self) -> bool:
        return is_ok_status(self.status_code)

    @property
    def redirect(self) -> bool:
        # A redirect without a target cannot be followed.
        return is_redirect_status(self.status_code) and bool(self.location)

    def to_json(self) -> JSONDict:
        return {
            "url": self.url,
            "status_code": self.status_code,
            "content_type": self.content_type,
            "location": self.location,
            "body": self.body,
        }

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "FetchResponse":
        return cls(
            url=str(payload["url"]),
            status_code=int(payload["status_code"]),
            content_type=str(payload.get("content_type") or ""),
            location=str(payload.get("location") or ""),
            body=str(payload.get("body") or ""),
        )


@dataclass(frozen=True, slots=True)
class ScanRecord:
    """Outcome of one resolved URL."""

    url: str
    code: int
    external: bool = False
    type: str = ""
    location: str | None = None
    referer: str | None = None

    def is_success(self) -> bool:
        return is_ok_status(self.code)

    def is_redirect(self) -> bool:
        return is_redirect_status(self.code)

    def is_error(self) -> bool:
        return is_error_status(self.code)

    def get(self, name: str, default: Any = None) -> Any:
        """Mapping-style field access used by `ResultSet.match`/`extract`."""

        return getattr(self, name, default)

    def to_json(self) -> JSONDict:
        payload: JSONDict = {
            "url": self.url,
            "code": self.code,
            "external": self.external,
            "type": self.type,
        }
        if self.location is not None:
            payload["location"] = self.location
        if self.referer is not None:
            payload["referer"] = self.referer
        return payload

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "ScanRecord":
        if "url" not in payload or "code" not in payload:
            raise ValueError(f"Scan record requires 'url' and 'code': {dict(payload)!r}")

        try:
            code = int(payload["code"])
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid status code: {payload['code']!r}") from exc

        return cls(
            url=str(payload["url"]),
            code=code,
            external=_as_bool(payload.get("external", False)),
            type=str(payload.get("type") or ""),
            location=_as_optional_str(payload.get("location")),
            referer=_as_optional_str(payload.get("referer")),
        )


__all__ = [
    "FetchResponse",
    "JSONDict",
    "JSONPrimitive",
    "JSONValue",
    "ScanRecord",
    "is_error_status",
    "is_ok_status",
    "is_redirect_status",
]
