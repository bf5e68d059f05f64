from __future__ import annotations
import os
from typing import Optional
from .base import Translator
from .gemma import GemmaTranslator
from .phrasebook import PhrasebookTranslator

def get_translator(
    provider: str | None = None,
    *,
    model_path: str = "",
    n_ctx: int = 2048,
    timeout: Optional[float] = None,
) -> Translator:
    provider = (provider or os.getenv("EDGETRANS_TRANSLATOR", "gemma")).lower().strip()

    if provider == "gemma":
        return GemmaTranslator(model_path, n_ctx, timeout=timeout)
    if provider == "phrasebook":
        return PhrasebookTranslator()

    raise ValueError(f"Unknown translator provider: {provider}")
