"""Tests for the filesystem response cache."""

from __future__ import annotations

from linkscan.scanner import FetchResponse, ResponseCache


class TestResponseCache:
    def test_set_then_get(self, tmp_path):
        cache = ResponseCache(tmp_path)
        response = FetchResponse(
            url="http://a.com/page",
            status_code=200,
            content_type="text/html",
            body="<p>ok</p>",
        )

        assert cache.set("http://a.com/page", response) is True
        assert cache.get("http://a.com/page") == response

    def test_entries_are_grouped_by_host(self, tmp_path):
        cache = ResponseCache(tmp_path)
        path = cache.path_for("http://www.a.com/page")

        assert path.parent == tmp_path / "cache" / "a.com"
        assert path.suffix == ".json"

    def test_miss(self, tmp_path):
        assert ResponseCache(tmp_path).get("http://a.com/nothing") is None

    def test_expired_entry_is_dropped(self, tmp_path):
        cache = ResponseCache(tmp_path)
        cache.set("http://a.com", FetchResponse(url="http://a.com", status_code=200), ttl=-1)

        assert cache.get("http://a.com") is None
        assert not cache.path_for("http://a.com").exists()

    def test_corrupt_entry_is_a_miss(self, tmp_path):
        cache = ResponseCache(tmp_path)
        path = cache.path_for("http://a.com")
        path.parent.mkdir(parents=True)
        path.write_text("{not json", encoding="utf-8")

        assert cache.get("http://a.com") is None

    def test_delete_and_clear(self, tmp_path):
        cache = ResponseCache(tmp_path)
        for url in ("http://a.com/1", "http://a.com/2"):
            cache.set(url, FetchResponse(url=url, status_code=200))

        cache.delete("http://a.com/1")
        assert cache.get("http://a.com/1") is None
        assert cache.get("http://a.com/2") is not None

        cache.clear()
        assert not cache.cache_dir.exists()
