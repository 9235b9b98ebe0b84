"""Typed scanner configuration with JSON/YAML load/save helpers."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml  # type: ignore

from .constants import (
    DEFAULT_CACHE_ENABLED,
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_EXCLUDE_LINK_PATTERNS,
    DEFAULT_EXPORT_ONLY_BAD_RESULTS,
    DEFAULT_EXTERNAL_LINKS_ENABLED,
    DEFAULT_FOLLOW_REDIRECTS,
    DEFAULT_LOCK_ENABLED,
    DEFAULT_MAX_DEPTH,
    DEFAULT_RETRIES,
    DEFAULT_RETRY_BACKOFF_SECONDS,
    DEFAULT_TARGET_DIRECTORY,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    JSON_INDENT,
    SUPPORTED_CONFIG_SUFFIXES,
)
from .errors import ConfigurationError
from .types import JSONDict


def _as_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    raise ConfigurationError(f"Invalid bool for '{key}': {value!r}")


def _as_int(value: Any, key: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid int for '{key}': {value!r}") from exc


def _as_float(value: Any, key: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid float for '{key}': {value!r}") from exc


def _as_patterns(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(item) for item in value]


@dataclass(slots=True)
class ScanConfig:
    """Run-wide settings for `LinkScanner`.

    Mutable until `scan()` starts; the engine works on a copy for the
    duration of one run.
    """

    cache_enabled: bool = DEFAULT_CACHE_ENABLED
    export_only_bad_results: bool = DEFAULT_EXPORT_ONLY_BAD_RESULTS
    external_links_enabled: bool = DEFAULT_EXTERNAL_LINKS_ENABLED
    follow_redirects: bool = DEFAULT_FOLLOW_REDIRECTS
    exclude_link_patterns: list[str] = field(
        default_factory=lambda: list(DEFAULT_EXCLUDE_LINK_PATTERNS)
    )
    full_base_url: str | None = None
    max_depth: int = DEFAULT_MAX_DEPTH
    lock_enabled: bool = DEFAULT_LOCK_ENABLED
    target_directory: Path = DEFAULT_TARGET_DIRECTORY

    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    retries: int = DEFAULT_RETRIES
    retry_backoff_seconds: float = DEFAULT_RETRY_BACKOFF_SECONDS
    user_agent: str = DEFAULT_USER_AGENT
    cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS

    _compiled_patterns: list[re.Pattern[str]] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.target_directory = Path(self.target_directory)
        self.exclude_link_patterns = _as_patterns(self.exclude_link_patterns)

        if self.max_depth < 0:
            raise ConfigurationError("max_depth must be >= 0 (0 means unlimited)")
        if self.timeout_seconds <= 0:
            raise ConfigurationError("timeout_seconds must be > 0")
        if self.retries < 0:
            raise ConfigurationError("retries must be >= 0")
        if self.retry_backoff_seconds < 0:
            raise ConfigurationError("retry_backoff_seconds must be >= 0")
        if self.cache_ttl_seconds <= 0:
            raise ConfigurationError("cache_ttl_seconds must be > 0")

        try:
            self._compiled_patterns = [re.compile(pattern) for pattern in self.exclude_link_patterns]
        except re.error as exc:
            raise ConfigurationError(f"Invalid exclude pattern: {exc}") from exc

    def is_excluded(self, url: str) -> bool:
        """Return True when `url` matches any exclude pattern."""

        return any(pattern.search(url) for pattern in self._compiled_patterns)

    def copy(self, **changes: Any) -> "ScanConfig":
        """Return an independent copy, optionally with some fields changed."""

        changes.setdefault("exclude_link_patterns", list(self.exclude_link_patterns))
        return replace(self, **changes)

    def to_dict(self) -> JSONDict:
        """Serialize config for config files and reproducibility."""

        return {
            "cache_enabled": self.cache_enabled,
            "export_only_bad_results": self.export_only_bad_results,
            "external_links_enabled": self.external_links_enabled,
            "follow_redirects": self.follow_redirects,
            "exclude_link_patterns": list(self.exclude_link_patterns),
            "full_base_url": self.full_base_url,
            "max_depth": self.max_depth,
            "lock_enabled": self.lock_enabled,
            "target_directory": str(self.target_directory),
            "timeout_seconds": self.timeout_seconds,
            "retries": self.retries,
            "retry_backoff_seconds": self.retry_backoff_seconds,
            "user_agent": self.user_agent,
            "cache_ttl_seconds": self.cache_ttl_seconds,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ScanConfig":
        """Build config from a parsed dictionary, keeping defaults for absent keys."""

        known = {item.name for item in fields(cls) if item.init}
        unknown = sorted(set(payload) - known)
        if unknown:
            raise ConfigurationError(f"Unknown config keys: {', '.join(unknown)}")

        kwargs: dict[str, Any] = {}
        for key in (
            "cache_enabled",
            "export_only_bad_results",
            "external_links_enabled",
            "follow_redirects",
            "lock_enabled",
        ):
            if key in payload:
                kwargs[key] = _as_bool(payload[key], key)

        for key in ("max_depth", "retries", "cache_ttl_seconds"):
            if key in payload:
                kwargs[key] = _as_int(payload[key], key)

        for key in ("timeout_seconds", "retry_backoff_seconds"):
            if key in payload:
                kwargs[key] = _as_float(payload[key], key)

        if "exclude_link_patterns" in payload:
            kwargs["exclude_link_patterns"] = _as_patterns(payload["exclude_link_patterns"])
        if payload.get("full_base_url") is not None:
            kwargs["full_base_url"] = str(payload["full_base_url"])
        if payload.get("target_directory") is not None:
            kwargs["target_directory"] = Path(str(payload["target_directory"]))
        if payload.get("user_agent") is not None:
            kwargs["user_agent"] = str(payload["user_agent"])

        return cls(**kwargs)


def _load_yaml(path: Path) -> dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"YAML config at {path} must be a mapping at top level")
    return data


def load_config(path: str | Path) -> ScanConfig:
    """Load ScanConfig from JSON/YAML path."""

    config_path = Path(path)
    suffix = config_path.suffix.lower()
    if suffix not in SUPPORTED_CONFIG_SUFFIXES:
        raise ConfigurationError(
            f"Unsupported config suffix '{suffix}'. Supported: {SUPPORTED_CONFIG_SUFFIXES}"
        )

    if suffix == ".json":
        payload = json.loads(config_path.read_text(encoding="utf-8"))
    else:
        payload = _load_yaml(config_path)

    if not isinstance(payload, dict):
        raise ConfigurationError(f"Config at {config_path} must be a mapping")

    return ScanConfig.from_dict(payload)


def save_config(config: ScanConfig, path: str | Path) -> None:
    """Save ScanConfig as JSON or YAML based on file extension."""

    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    suffix = out_path.suffix.lower()
    payload = config.to_dict()

    if suffix == ".json":
        out_path.write_text(
            json.dumps(payload, indent=JSON_INDENT, sort_keys=True) + "\n",
            encoding="utf-8",
        )
        return

    if suffix in {".yaml", ".yml"}:
        out_path.write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")
        return

    raise ConfigurationError(
        f"Unsupported config suffix '{suffix}'. Supported: {SUPPORTED_CONFIG_SUFFIXES}"
    )


__all__ = [
    "ScanConfig",
    "load_config",
    "save_config",
]
