from __future__ import annotations

from pathlib import Path

from fastapi.testclient import TestClient

from edgetrans.app.stats import PerformanceTracker, SystemSnapshot
from edgetrans.nlp.translator.gemma import GemmaTranslator
from edgetrans.nlp.translator.phrasebook import PhrasebookTranslator
from edgetrans.web.server import ServiceContext, create_app


def _fixed_sampler() -> SystemSnapshot:
    return SystemSnapshot(
        cpu_usage=12.5,
        mem_used_mb=1000.0,
        mem_total_mb=4000.0,
        process_cpu_percent=3.0,
        process_mem_mb=42.0,
    )


def _client(**overrides) -> tuple[TestClient, ServiceContext]:
    ctx = ServiceContext(
        model_path="unused.gguf",
        tracker=PerformanceTracker(capacity=2, sampler=_fixed_sampler),
        translator=overrides.pop("translator", PhrasebookTranslator()),
    )
    return TestClient(create_app(ctx)), ctx


def test_static_assets_are_served() -> None:
    client, _ = _client()
    index = client.get("/")
    assert index.status_code == 200
    assert index.headers["content-type"].startswith("text/html")
    assert "<html" in index.text
    css = client.get("/styles.css")
    assert css.status_code == 200
    assert css.headers["content-type"].startswith("text/css")


def test_translate_success_envelope() -> None:
    client, _ = _client()
    resp = client.post("/translate", json={"direction": "es-en", "text": "hola"})
    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "direction": "es-en", "original": "hola", "translated": "Hello"}


def test_translate_invalid_direction_is_400() -> None:
    client, _ = _client()
    resp = client.post("/translate", json={"direction": "fr-en", "text": "bonjour"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["ok"] is False
    assert "es-en" in body["error"]


def test_translate_malformed_body_is_400() -> None:
    client, _ = _client()
    missing = client.post("/translate", json={"direction": "es-en"})
    assert missing.status_code == 400
    assert missing.json() == {"ok": False, "error": "Invalid request body: text"}
    wrong_type = client.post("/translate", json={"direction": "es-en", "text": 5})
    assert wrong_type.status_code == 400
    assert wrong_type.json()["ok"] is False
    assert "text" in wrong_type.json()["error"]


def test_translate_failure_is_500(tmp_path: Path) -> None:
    client, _ = _client(translator=GemmaTranslator(str(tmp_path / "missing.gguf")))
    resp = client.post("/translate", json={"direction": "en-es", "text": "hello"})
    assert resp.status_code == 500
    body = resp.json()
    assert body["ok"] is False
    assert body["error"].startswith("Translation failed: Gemma model not found")


def test_stats_history_and_reset() -> None:
    client, ctx = _client()
    for _ in range(3):
        body = client.get("/stats").json()
    assert body["cpu_usage"] == 12.5
    assert body["mem_total_mb"] == 4000.0
    assert body["process"] == {"cpu_percent": 3.0, "mem_mb": 42.0}
    assert body["peak"] == {"cpu_percent": 3.0, "mem_mb": 42.0}
    assert len(body["history"]) == 2

    assert client.post("/reset-stats").json() == {"ok": True}
    assert ctx.tracker.snapshot()["history"] == []


def test_context_builds_translator_from_settings(tmp_path: Path) -> None:
    ctx = ServiceContext(
        model_path=str(tmp_path / "m.gguf"),
        n_ctx=1024,
        tracker=PerformanceTracker(sampler=_fixed_sampler),
    )
    tr = ctx.get_translator()
    assert isinstance(tr, GemmaTranslator)
    assert tr.n_ctx == 1024
    assert ctx.get_translator() is tr


def test_create_app_builds_translator_up_front(tmp_path: Path) -> None:
    ctx = ServiceContext(
        model_path=str(tmp_path / "m.gguf"),
        provider="gemma",
        tracker=PerformanceTracker(sampler=_fixed_sampler),
    )
    assert ctx.translator is None
    create_app(ctx)
    assert isinstance(ctx.translator, GemmaTranslator)
