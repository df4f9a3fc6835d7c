import io
import json
import urllib.error

import pytest

from transaction_dashboard import seed
from transaction_dashboard.database import count_transactions, query_transactions
from transaction_dashboard.errors import StoreWriteError, UpstreamFetchError


def _fake_urlopen(payload, calls=None):
    def fake(req, timeout=None):
        if calls is not None:
            calls.append((req.full_url, timeout))
        return io.BytesIO(json.dumps(payload).encode("utf-8"))

    return fake


def test_fetch_seed_data(monkeypatch, seed_records):
    calls = []
    monkeypatch.setattr(seed.urllib.request, "urlopen", _fake_urlopen(seed_records, calls))

    data = seed.fetch_seed_data("https://example.test/feed.json", timeout=5)

    assert data == seed_records
    assert calls == [("https://example.test/feed.json", 5)]


def test_fetch_seed_data_network_error(monkeypatch):
    def boom(req, timeout=None):
        raise urllib.error.URLError("connection refused")

    monkeypatch.setattr(seed.urllib.request, "urlopen", boom)
    with pytest.raises(UpstreamFetchError):
        seed.fetch_seed_data("https://example.test/feed.json")


def test_fetch_seed_data_http_error(monkeypatch):
    def unavailable(req, timeout=None):
        raise urllib.error.HTTPError(req.full_url, 503, "Service Unavailable", {}, None)

    monkeypatch.setattr(seed.urllib.request, "urlopen", unavailable)
    with pytest.raises(UpstreamFetchError, match="503"):
        seed.fetch_seed_data("https://example.test/feed.json")


def test_fetch_seed_data_rejects_non_list(monkeypatch):
    monkeypatch.setattr(seed.urllib.request, "urlopen", _fake_urlopen({"items": []}))
    with pytest.raises(UpstreamFetchError):
        seed.fetch_seed_data("https://example.test/feed.json")


def test_fetch_seed_data_rejects_invalid_json(monkeypatch):
    monkeypatch.setattr(
        seed.urllib.request, "urlopen", lambda req, timeout=None: io.BytesIO(b"<html>")
    )
    with pytest.raises(UpstreamFetchError):
        seed.fetch_seed_data("https://example.test/feed.json")


def test_initialize_store_replaces_contents(monkeypatch, tmp_path, seed_records):
    db_path = str(tmp_path / "seed.db")
    monkeypatch.setattr(seed.urllib.request, "urlopen", _fake_urlopen(seed_records))

    first = seed.initialize_store(db_path, "https://example.test/feed.json")
    second = seed.initialize_store(db_path, "https://example.test/feed.json")

    assert first == {"message": "Database initialized with seed data.", "count": len(seed_records)}
    assert second["count"] == len(seed_records)
    rows = query_transactions(db_path)
    assert [tx.title for tx in rows] == [r["title"] for r in seed_records]


def test_initialize_store_bad_record_keeps_existing(monkeypatch, seeded_db, seed_records):
    broken = seed_records + [{"title": "Broken", "price": 1, "dateOfSale": "not a date"}]
    monkeypatch.setattr(seed.urllib.request, "urlopen", _fake_urlopen(broken))

    with pytest.raises(StoreWriteError):
        seed.initialize_store(seeded_db, "https://example.test/feed.json")
    assert count_transactions(seeded_db) == len(seed_records)


def test_initialize_store_fetch_failure_keeps_existing(monkeypatch, seeded_db, seed_records):
    def boom(req, timeout=None):
        raise urllib.error.URLError("timed out")

    monkeypatch.setattr(seed.urllib.request, "urlopen", boom)
    with pytest.raises(UpstreamFetchError):
        seed.initialize_store(seeded_db, "https://example.test/feed.json")
    assert count_transactions(seeded_db) == len(seed_records)
