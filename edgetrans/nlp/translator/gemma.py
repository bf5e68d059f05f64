from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from edgetrans.contracts import TranslationRequest, TranslationResult
from edgetrans.errors import ExternalTranslatorError, ModelNotFoundError

from .base import Translator
from .llama_cli import build_prompt, invoke_external_translator
from .phrasebook import lookup

logger = logging.getLogger(__name__)

ExternalRunner = Callable[[str, str, int], str]


class GemmaTranslator(Translator):
    """
    Spanish/English translation with a GGUF Gemma model driven through the
    llama.cpp command line. Any backend failure falls back to the phrasebook;
    only a missing model file is an error.
    """

    def __init__(
        self,
        model_path: str,
        n_ctx: int = 2048,
        *,
        timeout: Optional[float] = None,
        runner: Optional[ExternalRunner] = None,
    ) -> None:
        self.model_path = str(model_path)
        self.n_ctx = int(n_ctx)
        self.timeout = timeout
        self._runner = runner

    @property
    def name(self) -> str:
        return "gemma"

    def _run_external(self, prompt: str) -> str:
        if self._runner is not None:
            return self._runner(self.model_path, prompt, self.n_ctx)
        return invoke_external_translator(self.model_path, prompt, self.n_ctx, timeout=self.timeout)

    def translate(self, req: TranslationRequest) -> TranslationResult:
        if not req.text.strip():
            return TranslationResult(source_text=req.text, translated_text="", provider="empty")

        if not self.model_path or not Path(self.model_path).exists():
            raise ModelNotFoundError(self.model_path)

        logger.info("translate_start", extra={"direction": req.direction.value, "chars": len(req.text)})
        prompt = build_prompt(req.direction, req.text)
        try:
            out = self._run_external(prompt).strip()
        except ExternalTranslatorError as e:
            logger.debug("translate_backend_unavailable", extra={"error": str(e)})
            out = ""

        if out:
            logger.info("translate_done", extra={"provider": self.name, "chars": len(out)})
            return TranslationResult(
                source_text=req.text,
                translated_text=out,
                provider=self.name,
                from_backend=True,
            )

        logger.warning("translate_fallback", extra={"direction": req.direction.value})
        translated = lookup(req.text, req.direction)
        logger.info("translate_done", extra={"provider": "phrasebook", "chars": len(translated)})
        return TranslationResult(
            source_text=req.text,
            translated_text=translated,
            provider="phrasebook",
        )


def translate(
    request: TranslationRequest,
    model_path: str,
    context_size: int = 2048,
) -> TranslationResult:
    return GemmaTranslator(model_path, context_size).translate(request)

