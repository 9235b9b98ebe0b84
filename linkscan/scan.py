"""CLI entrypoint for link scanning."""

from __future__ import annotations

import argparse
import logging
from datetime import datetime
from pathlib import Path
import sys
from typing import Any

from linkscan.scanner import (
    FetchResponse,
    LinkScanner,
    LinkScannerError,
    ResultSet,
    RunLock,
    ScanConfig,
    ScanHooks,
    load_config,
)
from linkscan.scanner.constants import EXPORT_FORMATS, LOG_SUBDIR


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Scan a site for broken links, starting from its base url.",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to JSON/YAML scan config.",
    )
    parser.add_argument(
        "--target-directory",
        type=Path,
        default=None,
        help="Directory for exports, cache, lock file, and logs.",
    )
    parser.add_argument(
        "--full-base-url",
        type=str,
        default=None,
        help="Full base url to start from (default: config value or http://localhost).",
    )
    parser.add_argument("-d", "--max-depth", type=int, default=None, help="Maximum depth of the scan.")
    parser.add_argument(
        "-t",
        "--timeout",
        type=float,
        default=None,
        help="Timeout in seconds for GET requests.",
    )

    parser.add_argument(
        "-e",
        "--export",
        action="store_true",
        help="Export results. The filename will be generated automatically.",
    )
    parser.add_argument(
        "--export-with-filename",
        type=str,
        default=None,
        help="Export results to a relative (to the target directory) or absolute path.",
    )
    parser.add_argument(
        "--export-format",
        choices=list(EXPORT_FORMATS),
        default="native",
        help="Format of the exported file.",
    )
    parser.add_argument(
        "--export-only-bad-results",
        action="store_true",
        help="Keep only results that are not 2xx.",
    )

    parser.add_argument("--follow-redirects", action="store_true", help="Follow redirects.")
    parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Remove a stale lock file before scanning.",
    )
    parser.add_argument("--no-cache", action="store_true", help="Disable the response cache.")
    parser.add_argument(
        "--no-external-links",
        action="store_true",
        help="Do not scan external links.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Print every checked url and enable debug logging.",
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ScanConfig:
    if args.config is not None:
        payload: dict[str, Any] = load_config(args.config).to_dict()
    else:
        payload = {}

    if args.target_directory is not None:
        payload["target_directory"] = str(args.target_directory)
    if args.full_base_url is not None:
        payload["full_base_url"] = args.full_base_url
    if args.max_depth is not None:
        payload["max_depth"] = args.max_depth
    if args.timeout is not None:
        payload["timeout_seconds"] = args.timeout

    if args.export_only_bad_results:
        payload["export_only_bad_results"] = True
    if args.follow_redirects:
        payload["follow_redirects"] = True
    if args.no_cache:
        payload["cache_enabled"] = False
    if args.no_external_links:
        payload["external_links_enabled"] = False

    return ScanConfig.from_dict(payload)


def setup_logging(target_directory: Path, verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO

    log_dir = Path(target_directory) / LOG_SUBDIR
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / "scan.log"

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(log_level)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setLevel(log_level)
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    # urllib3 logs one DEBUG line per connection.
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def _format_time(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")


class ConsoleListener:
    """Print scan progress; per-url lines only in verbose mode."""

    def __init__(self, config: ScanConfig, *, verbose: bool, force: bool) -> None:
        self.config = config
        self.verbose = verbose
        self.force = force

    def _hr(self) -> None:
        if self.verbose:
            print("-" * 63)

    def scan_started(self, start_time: int, full_base_url: str) -> None:
        self._hr()
        print(f"Scan started for {full_base_url} at {_format_time(start_time)}")
        if not self.verbose:
            return

        self._hr()
        if self.config.cache_enabled:
            print(f"The cache is enabled and its duration is {self.config.cache_ttl_seconds}s")
        else:
            print("The cache is disabled")
        print("Force mode is enabled" if self.force else "Force mode is not enabled")
        if self.config.external_links_enabled:
            print("Scanning of external links is enabled")
        else:
            print("Scanning of external links is not enabled")
        print("Redirects will be followed" if self.config.follow_redirects else "Redirects will not be followed")
        if self.config.max_depth > 0:
            print(f"Maximum depth of the scan: {self.config.max_depth}")
        print(f"Timeout in seconds for GET requests: {self.config.timeout_seconds:g}")
        self._hr()

    def before_scan_url(self, url: str) -> None:
        if self.verbose:
            print(f"Checking {url} ...", end=" ")

    def after_scan_url(self, response: FetchResponse) -> None:
        if self.verbose:
            print("OK" if response.ok else str(response.status_code))

    def found_link_to_be_scanned(self, link: str) -> None:
        if self.verbose:
            print(f"Link found: {link}")

    def found_redirect(self, location: str) -> None:
        if self.verbose:
            print(f"Redirect found: {location}")

    def results_exported(self, path: Path) -> None:
        print(f"Results have been exported to {path}")

    def scan_completed(self, start_time: int, end_time: int, results: ResultSet) -> None:
        self._hr()
        print(f"Scan completed at {_format_time(end_time)}")
        print(f"Elapsed time: {end_time - start_time}s")
        print(f"Total scanned links: {results.count()}")
        self._hr()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        config = build_config(args)
    except Exception as exc:
        logging.basicConfig(level=logging.ERROR)
        logging.error("Failed to build config: %s", exc)
        return 2

    setup_logging(config.target_directory, verbose=args.verbose)

    listener = ConsoleListener(config, verbose=args.verbose, force=args.force)
    scanner = LinkScanner(config, hooks=ScanHooks.from_listener(listener))

    try:
        if args.force:
            RunLock(config.target_directory).clear()

        scanner.scan()

        if args.export_with_filename:
            scanner.export(args.export_with_filename, fmt=args.export_format)
        elif args.export:
            scanner.export(None, fmt=args.export_format)
    except KeyboardInterrupt:
        logging.error("Interrupted by user")
        return 130
    except LinkScannerError as exc:
        logging.error("%s", exc)
        return 1
    except Exception:
        logging.exception("Scan failed")
        return 1
    finally:
        scanner.close()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
