"""Lifecycle callbacks fired by `LinkScanner`."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Callable


Hook = Callable[..., Any]


@dataclass(slots=True)
class ScanHooks:
    """One optional callback per lifecycle point.

    Firing order for one scan:

    - `scan_started(start_time, full_base_url)`
    - per URL: `before_scan_url(url)`, `after_scan_url(response)`, then
      optionally `found_redirect(location)` or `response_not_ok(url)`,
      `found_links_to_be_scanned(count)` and `found_link_to_be_scanned(link)`
    - `scan_completed(start_time, end_time, results)`

    `results_exported(path)` and `results_imported(path)` fire from export
    and import. Callbacks observe only; whatever they raise propagates.
    """

    scan_started: Hook | None = None
    before_scan_url: Hook | None = None
    after_scan_url: Hook | None = None
    found_redirect: Hook | None = None
    response_not_ok: Hook | None = None
    found_links_to_be_scanned: Hook | None = None
    found_link_to_be_scanned: Hook | None = None
    scan_completed: Hook | None = None
    results_exported: Hook | None = None
    results_imported: Hook | None = None

    def fire(self, name: str, *args: Any) -> None:
        callback = getattr(self, name)
        if callback is not None:
            callback(*args)

    @classmethod
    def names(cls) -> list[str]:
        return [item.name for item in fields(cls)]

    @classmethod
    def from_listener(cls, listener: object) -> "ScanHooks":
        """Bind every method of `listener` named after a lifecycle point."""

        return cls(**{
            name: getattr(listener, name)
            for name in cls.names()
            if callable(getattr(listener, name, None))
        })


__all__ = ["Hook", "ScanHooks"]
