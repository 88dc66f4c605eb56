from __future__ import annotations


def test_with_retries_respects_retry_after(monkeypatch):
    import requests

    from archipelago_catalog.utils.utilities import with_retries

    class Resp:
        status_code = 429
        headers = {"Retry-After": "0.02"}

    sleeps: list[float] = []

    def fake_sleep(s: float):
        sleeps.append(float(s))

    monkeypatch.setattr("time.sleep", fake_sleep)

    calls = {"n": 0}

    def fn():
        calls["n"] += 1
        if calls["n"] == 1:
            e = requests.exceptions.HTTPError("429")
            e.response = Resp()
            raise e
        return "ok"

    stats: dict[str, int] = {}
    out = with_retries(
        fn,
        retries=2,
        base_sleep_s=0.0,
        jitter_s=0.0,
        retry_on=(requests.exceptions.HTTPError,),
        on_fail_return=None,
        context="test",
        retry_stats=stats,
    )
    assert out == "ok"
    assert len(sleeps) == 1
    assert sleeps[0] >= 0.02
    assert stats["http_429"] == 1


def test_with_retries_returns_fail_value_after_last_attempt(monkeypatch):
    from archipelago_catalog.utils.utilities import with_retries

    monkeypatch.setattr("time.sleep", lambda s: None)
    sentinel = object()
    calls = {"n": 0}

    def fn():
        calls["n"] += 1
        raise RuntimeError("boom")

    assert with_retries(fn, retries=3, on_fail_return=sentinel, context="test") is sentinel
    assert calls["n"] == 3
