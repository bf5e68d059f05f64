from __future__ import annotations

from pathlib import Path

import pytest

from edgetrans.contracts import TranslationDirection, TranslationRequest
from edgetrans.errors import ExternalTranslatorError, ModelNotFoundError
from edgetrans.nlp.translator import gemma as gemma_mod
from edgetrans.nlp.translator.gemma import GemmaTranslator


class _CountingRunner:
    def __init__(self, result: str | None = None) -> None:
        self.result = result
        self.calls: list[tuple[str, str, int]] = []

    def __call__(self, model_path: str, prompt: str, n_ctx: int) -> str:
        self.calls.append((model_path, prompt, n_ctx))
        if self.result is None:
            raise ExternalTranslatorError("No working llama.cpp executable found")
        return self.result


@pytest.fixture
def model_file(tmp_path: Path) -> str:
    p = tmp_path / "gemma.gguf"
    p.write_bytes(b"GGUF")
    return str(p)


def _req(text: str, direction: TranslationDirection = TranslationDirection.ES_TO_EN) -> TranslationRequest:
    return TranslationRequest(text=text, direction=direction)


@pytest.mark.parametrize("text", ["", "   ", "\n\t "])
def test_blank_input_short_circuits(monkeypatch, text: str) -> None:
    runner = _CountingRunner("x")
    lookups: list[str] = []
    monkeypatch.setattr(gemma_mod, "lookup", lambda t, d: lookups.append(t) or "x")
    # No model file either: the short-circuit comes before the model check.
    tr = GemmaTranslator("/nonexistent/model.gguf", runner=runner)
    out = tr.translate(_req(text))
    assert out.translated_text == ""
    assert runner.calls == []
    assert lookups == []


def test_missing_model_is_an_error(tmp_path: Path) -> None:
    missing = tmp_path / "nope.gguf"
    runner = _CountingRunner("x")
    with pytest.raises(ModelNotFoundError) as exc:
        GemmaTranslator(str(missing), runner=runner).translate(_req("hola"))
    assert str(missing) in str(exc.value)
    assert runner.calls == []


def test_empty_model_path_is_an_error() -> None:
    runner = _CountingRunner("x")
    with pytest.raises(ModelNotFoundError):
        GemmaTranslator("", runner=runner).translate(_req("hola"))
    assert runner.calls == []


def test_backend_output_is_used(model_file: str) -> None:
    runner = _CountingRunner("  Hello, world \n")
    out = GemmaTranslator(model_file, 1024, runner=runner).translate(_req("  hola mundo "))
    assert out.translated_text == "Hello, world"
    assert out.from_backend is True
    assert out.provider == "gemma"
    model_path, prompt, n_ctx = runner.calls[0]
    assert (model_path, n_ctx) == (model_file, 1024)
    assert "<start_of_turn>user\nhola mundo\n<end_of_turn>" in prompt


def test_fallback_when_backend_unavailable(model_file: str) -> None:
    tr = GemmaTranslator(model_file, runner=_CountingRunner(None))
    out = tr.translate(_req("hola"))
    assert out.translated_text == "Hello"
    assert out.from_backend is False
    assert out.provider == "phrasebook"

    out = tr.translate(_req("How are you?", TranslationDirection.EN_TO_ES))
    assert out.translated_text == "¿Cómo estás?"


def test_fallback_when_backend_returns_blank(model_file: str) -> None:
    out = GemmaTranslator(model_file, runner=_CountingRunner("   ")).translate(_req("perro"))
    assert out.translated_text == "[Translation] perro"


def test_default_runner_is_the_llama_adapter(monkeypatch, model_file: str) -> None:
    captured: dict = {}

    def _fake_invoke(model_path, prompt, n_ctx, *, timeout=None):
        captured.update(model_path=model_path, n_ctx=n_ctx, timeout=timeout)
        raise ExternalTranslatorError("none")

    monkeypatch.setattr(gemma_mod, "invoke_external_translator", _fake_invoke)
    out = GemmaTranslator(model_file, 512, timeout=3.0).translate(_req("thank you", TranslationDirection.EN_TO_ES))
    assert out.translated_text == "Gracias"
    assert captured == {"model_path": model_file, "n_ctx": 512, "timeout": 3.0}


def test_module_translate_helper(monkeypatch, model_file: str) -> None:
    monkeypatch.setattr(
        gemma_mod,
        "invoke_external_translator",
        lambda *a, **k: (_ for _ in ()).throw(ExternalTranslatorError("none")),
    )
    out = gemma_mod.translate(_req("buenas noches"), model_file, 2048)
    assert out.translated_text == "Good night"
