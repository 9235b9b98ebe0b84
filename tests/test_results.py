"""Tests for scan records, result sets, and snapshots."""

from __future__ import annotations

import pytest

from linkscan.scanner import ResultSet, ScanConfig, ScanRecord, ScanSnapshot


def _records() -> list[ScanRecord]:
    return [
        ScanRecord(url="http://a.com", code=200, type="text/html"),
        ScanRecord(url="http://a.com/missing", code=404, referer="http://a.com"),
        ScanRecord(url="http://b.com", code=301, external=True, location="http://b.com/new"),
    ]


class TestScanRecord:
    def test_status_helpers(self):
        ok, missing, moved = _records()
        assert ok.is_success() and not ok.is_error() and not ok.is_redirect()
        assert missing.is_error() and not missing.is_success()
        assert moved.is_redirect() and not moved.is_error()

    def test_to_json_omits_absent_location_and_referer(self):
        assert _records()[0].to_json() == {
            "url": "http://a.com",
            "code": 200,
            "external": False,
            "type": "text/html",
        }

    def test_from_json_coerces_text_fields(self):
        record = ScanRecord.from_json(
            {"url": "http://b.com", "code": "301", "external": "true", "type": "", "location": ""}
        )
        assert record == ScanRecord(url="http://b.com", code=301, external=True)

    def test_from_json_requires_url_and_code(self):
        with pytest.raises(ValueError):
            ScanRecord.from_json({"url": "http://a.com"})
        with pytest.raises(ValueError):
            ScanRecord.from_json({"url": "http://a.com", "code": "abc"})


class TestResultSet:
    def test_append_returns_new_set(self):
        original = ResultSet(_records()[:1])
        derived = original.append(_records()[1])

        assert original.count() == 1
        assert derived.count() == 2
        assert derived[1].url == "http://a.com/missing"

    def test_prepend_coerces_mappings(self):
        derived = ResultSet(_records()[:1]).prepend([{"url": "http://first.com", "code": 500}])

        assert isinstance(derived[0], ScanRecord)
        assert derived.extract("url") == ["http://first.com", "http://a.com"]

    def test_match_with_mapping(self):
        results = ResultSet(_records())
        assert results.match({"external": True}).extract("url") == ["http://b.com"]

    def test_match_with_predicate(self):
        results = ResultSet(_records())
        assert results.match(lambda record: record.is_error()).extract("code") == [404]

    def test_equality_and_emptiness(self):
        assert ResultSet(_records()) == ResultSet(_records())
        assert ResultSet().is_empty()
        assert len(ResultSet(_records())) == 3

    def test_rejects_unknown_items(self):
        with pytest.raises(TypeError):
            ResultSet([42])


class TestScanSnapshot:
    def test_hostname_is_derived(self):
        snapshot = ScanSnapshot(full_base_url="https://www.a.com/", max_depth=0, start_time=1, elapsed_time=2)
        assert snapshot.hostname == "a.com"

    def test_json_round_trip(self):
        snapshot = ScanSnapshot(
            full_base_url="http://a.com",
            max_depth=3,
            start_time=1700000000,
            elapsed_time=12,
            links=ResultSet(_records()),
        )
        payload = snapshot.to_json()

        assert payload["checkedLinks"] == 3
        assert payload["fullBaseUrl"] == "http://a.com"
        assert ScanSnapshot.from_json(payload) == snapshot

    def test_to_config_keeps_base_settings(self, tmp_path):
        snapshot = ScanSnapshot(full_base_url="http://a.com", max_depth=4, start_time=1, elapsed_time=0)
        base = ScanConfig(target_directory=tmp_path, follow_redirects=True)

        config = snapshot.to_config(base)

        assert config.full_base_url == "http://a.com"
        assert config.max_depth == 4
        assert config.follow_redirects is True
        assert config.target_directory == tmp_path
        assert base.full_base_url is None
