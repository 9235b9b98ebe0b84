"""Tests for the linkscan command line entrypoint."""

from __future__ import annotations

import json
import logging
from unittest.mock import patch

import pytest

from linkscan import scan
from linkscan.scanner import ConcurrencyError, FetchResponse, ResultSet, ScanConfig, ScanHooks


@pytest.fixture(autouse=True)
def _restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestBuildConfig:
    def test_flags_override_defaults(self, tmp_path):
        args = scan.parse_args([
            "--target-directory", str(tmp_path),
            "--full-base-url", "http://example.com",
            "-d", "3",
            "-t", "5",
            "--follow-redirects",
            "--no-cache",
            "--no-external-links",
            "--export-only-bad-results",
        ])
        config = scan.build_config(args)

        assert config.target_directory == tmp_path
        assert config.full_base_url == "http://example.com"
        assert config.max_depth == 3
        assert config.timeout_seconds == 5.0
        assert config.follow_redirects is True
        assert config.cache_enabled is False
        assert config.external_links_enabled is False
        assert config.export_only_bad_results is True

    def test_flags_override_config_file(self, tmp_path):
        path = tmp_path / "scan.json"
        path.write_text(
            json.dumps({"full_base_url": "http://from-file.com", "max_depth": 7, "follow_redirects": True}),
            encoding="utf-8",
        )
        config = scan.build_config(scan.parse_args(["--config", str(path), "-d", "2"]))

        assert config.full_base_url == "http://from-file.com"
        assert config.max_depth == 2
        assert config.follow_redirects is True

    def test_export_format_choices(self):
        with pytest.raises(SystemExit):
            scan.parse_args(["--export-format", "csv"])


class TestMain:
    def test_runs_scan_and_exports(self, tmp_path):
        with patch("linkscan.scan.LinkScanner") as scanner_cls:
            code = scan.main(["--target-directory", str(tmp_path), "-e", "--export-format", "xml"])

        assert code == 0
        scanner = scanner_cls.return_value
        scanner.scan.assert_called_once_with()
        scanner.export.assert_called_once_with(None, fmt="xml")
        scanner.close.assert_called_once_with()
        assert (tmp_path / "logs" / "scan.log").exists()

    def test_export_with_filename(self, tmp_path):
        with patch("linkscan.scan.LinkScanner") as scanner_cls:
            code = scan.main(["--target-directory", str(tmp_path), "--export-with-filename", "out.json"])

        assert code == 0
        scanner_cls.return_value.export.assert_called_once_with("out.json", fmt="native")

    def test_no_export_by_default(self, tmp_path):
        with patch("linkscan.scan.LinkScanner") as scanner_cls:
            scan.main(["--target-directory", str(tmp_path)])

        scanner_cls.return_value.export.assert_not_called()

    def test_hooks_come_from_console_listener(self, tmp_path):
        with patch("linkscan.scan.LinkScanner") as scanner_cls:
            scan.main(["--target-directory", str(tmp_path)])

        hooks = scanner_cls.call_args.kwargs["hooks"]
        assert isinstance(hooks, ScanHooks)
        assert hooks.scan_completed is not None
        assert hooks.response_not_ok is None

    def test_invalid_config(self, tmp_path):
        assert scan.main(["--target-directory", str(tmp_path), "-d", "-1"]) == 2

    def test_engine_error(self, tmp_path):
        with patch("linkscan.scan.LinkScanner") as scanner_cls:
            scanner_cls.return_value.scan.side_effect = ConcurrencyError("locked")
            code = scan.main(["--target-directory", str(tmp_path)])

        assert code == 1
        scanner_cls.return_value.close.assert_called_once_with()

    def test_interrupted(self, tmp_path):
        with patch("linkscan.scan.LinkScanner") as scanner_cls:
            scanner_cls.return_value.scan.side_effect = KeyboardInterrupt
            assert scan.main(["--target-directory", str(tmp_path)]) == 130

    def test_force_clears_stale_lock(self, tmp_path):
        lock_file = tmp_path / "link_scanner_lock_file"
        lock_file.write_text("42\n", encoding="utf-8")

        with patch("linkscan.scan.LinkScanner"):
            assert scan.main(["--target-directory", str(tmp_path), "--force"]) == 0

        assert not lock_file.exists()

    def test_without_force_lock_is_kept(self, tmp_path):
        lock_file = tmp_path / "link_scanner_lock_file"
        lock_file.write_text("42\n", encoding="utf-8")

        with patch("linkscan.scan.LinkScanner"):
            scan.main(["--target-directory", str(tmp_path)])

        assert lock_file.exists()


class TestConsoleListener:
    def test_verbose_progress(self, capsys, tmp_path):
        listener = scan.ConsoleListener(ScanConfig(target_directory=tmp_path), verbose=True, force=False)

        listener.before_scan_url("http://a.com")
        listener.after_scan_url(FetchResponse(url="http://a.com", status_code=200))
        listener.before_scan_url("http://a.com/x")
        listener.after_scan_url(FetchResponse(url="http://a.com/x", status_code=404))
        listener.found_redirect("http://a.com/new")

        out = capsys.readouterr().out
        assert "Checking http://a.com ... OK" in out
        assert "Checking http://a.com/x ... 404" in out
        assert "Redirect found: http://a.com/new" in out

    def test_quiet_mode_prints_summary_only(self, capsys, tmp_path):
        listener = scan.ConsoleListener(ScanConfig(target_directory=tmp_path), verbose=False, force=False)

        listener.scan_started(1700000000, "http://a.com")
        listener.before_scan_url("http://a.com")
        listener.scan_completed(1700000000, 1700000005, ResultSet([{"url": "http://a.com", "code": 200}]))

        out = capsys.readouterr().out
        assert "Checking" not in out
        assert "Scan started for http://a.com" in out
        assert "Elapsed time: 5s" in out
        assert "Total scanned links: 1" in out
