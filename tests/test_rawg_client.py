from __future__ import annotations

from typing import Any

import requests


class FakeResp:
    def __init__(self, payload: Any, status_code: int = 200):
        self.payload = payload
        self.status_code = status_code
        self.headers: dict[str, str] = {}

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error", response=self)

    def json(self) -> Any:
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


def _client(monkeypatch, handler):
    from archipelago_catalog.clients.rawg_client import RAWGClient

    client = RAWGClient(api_key="k", min_interval_s=0.0, retries=1)
    calls: list[dict[str, Any]] = []

    def fake_get(url, params=None, timeout=None):
        calls.append({"url": url, "params": params, "timeout": timeout})
        return handler(url, params)

    monkeypatch.setattr(client._session, "get", fake_get)
    return client, calls


def test_search_requests_single_top_result(monkeypatch) -> None:
    client, calls = _client(
        monkeypatch,
        lambda url, params: FakeResp({"count": 1, "results": [{"id": 1, "name": "Celeste"}]}),
    )
    best, outcome = client.search("Celeste")
    assert best == {"id": 1, "name": "Celeste"}
    assert outcome == "found"
    assert calls[0]["url"] == "https://api.rawg.io/api/games"
    assert calls[0]["params"] == {"key": "k", "search": "Celeste", "page_size": 1}


def test_enrich_extracts_genres_year_and_multiplayer(monkeypatch) -> None:
    payload = {
        "results": [
            {
                "name": "Portal 2",
                "released": "2011-04-18",
                "genres": [{"name": "Shooter"}, {"name": "Puzzle"}, {"name": ""}],
                "tags": [{"name": "Singleplayer"}, {"name": "Co-op Campaign"}],
            }
        ]
    }
    client, _calls = _client(monkeypatch, lambda url, params: FakeResp(payload))
    e = client.enrich("Portal 2")
    assert e.genres == ("Shooter", "Puzzle")
    assert e.release_year == 2011
    assert e.is_multiplayer is True
    assert e.outcome == "found"


def test_empty_results_yield_not_found(monkeypatch) -> None:
    client, _calls = _client(monkeypatch, lambda url, params: FakeResp({"count": 0, "results": []}))
    e = client.enrich("No Such Game")
    assert e.genres == ()
    assert e.release_year is None
    assert e.is_multiplayer is False
    assert e.outcome == "not_found"
    assert client.stats["not_found"] == 1


def test_api_error_envelope_is_soft_failure(monkeypatch) -> None:
    client, _calls = _client(
        monkeypatch, lambda url, params: FakeResp({"error": "The key parameter is not provided"})
    )
    e = client.enrich("Celeste")
    assert e.outcome == "error"
    assert e.genres == ()
    assert client.stats["api_errors"] == 1


def test_unrecognized_body_is_soft_failure(monkeypatch) -> None:
    client, _calls = _client(monkeypatch, lambda url, params: FakeResp(["not", "an", "envelope"]))
    e = client.enrich("Celeste")
    assert e.outcome == "error"
    assert client.stats["invalid_responses"] == 1


def test_http_error_does_not_raise(monkeypatch) -> None:
    client, calls = _client(monkeypatch, lambda url, params: FakeResp({}, status_code=502))
    e = client.enrich("Celeste")
    assert e.outcome == "error"
    assert len(calls) == 1
    assert client.stats["request_failures"] == 1
    assert client.stats["http_errors"] == 1


def test_undecodable_body_does_not_raise(monkeypatch) -> None:
    client, _calls = _client(monkeypatch, lambda url, params: FakeResp(ValueError("Expecting value")))
    assert client.enrich("Celeste").outcome == "error"


def test_network_error_does_not_raise(monkeypatch) -> None:
    def handler(url, params):
        raise requests.exceptions.ConnectionError("network down")

    client, _calls = _client(monkeypatch, handler)
    assert client.enrich("Celeste").outcome == "error"
    assert client.stats["network_errors"] == 1


def test_transient_failure_is_retried(monkeypatch) -> None:
    from archipelago_catalog.clients.rawg_client import RAWGClient

    monkeypatch.setattr("time.sleep", lambda s: None)
    client = RAWGClient(api_key="k", min_interval_s=0.0, retries=2)
    calls = {"n": 0}

    def fake_get(url, params=None, timeout=None):
        calls["n"] += 1
        if calls["n"] == 1:
            raise requests.exceptions.Timeout("slow")
        return FakeResp({"results": [{"name": "Celeste", "genres": [{"name": "Platformer"}]}]})

    monkeypatch.setattr(client._session, "get", fake_get)
    e = client.enrich("Celeste")
    assert e.genres == ("Platformer",)
    assert calls["n"] == 2
    assert client.stats["retry_attempts"] == 1


def test_multiplayer_keywords() -> None:
    from archipelago_catalog.clients.rawg_client import has_multiplayer_tag

    assert has_multiplayer_tag([{"name": "Co-op Campaign"}]) is True
    assert has_multiplayer_tag([{"name": "Online PvP"}]) is True
    assert has_multiplayer_tag([{"name": "Split Screen"}]) is True
    assert has_multiplayer_tag([{"name": "Singleplayer"}]) is False
    assert has_multiplayer_tag(None) is False
    assert has_multiplayer_tag([]) is False


def test_release_year_extraction() -> None:
    from archipelago_catalog.clients.rawg_client import RAWGClient

    assert RAWGClient.extract_enrichment({"released": "1998-11-21"}).release_year == 1998
    assert RAWGClient.extract_enrichment({"released": None}).release_year is None
    assert RAWGClient.extract_enrichment({}).release_year is None
    assert RAWGClient.extract_enrichment({"released": "TBA"}).release_year is None


def test_missing_genres_and_tags_default_empty() -> None:
    from archipelago_catalog.clients.rawg_client import RAWGClient

    e = RAWGClient.extract_enrichment({"name": "Obscure Game"})
    assert e.genres == ()
    assert e.is_multiplayer is False
