from __future__ import annotations

import logging
import time
from typing import Any

from edgetrans.audio.mic import with_temp_wav
from edgetrans.audio.wav import load_wav
from edgetrans.contracts import (
    TranscriptionResult,
    TranslationDirection,
    TranslationRequest,
    TranslationResult,
)

from edgetrans.app.services import PipelineServices


def _log_event(logger: logging.Logger | None, level: int, event: str, **fields: Any) -> None:
    if logger is None:
        return
    logger.log(level, event, extra=fields)


def transcribe_input(
    args: Any,
    services: PipelineServices,
    logger: logging.Logger | None = None,
) -> TranscriptionResult:
    t0 = time.perf_counter()
    if args.wav is not None:
        result = services.transcriber.transcribe(load_wav(args.wav))
        source = str(args.wav)
    else:
        clip = services.mic.record(float(args.realtime))
        result = with_temp_wav(clip, services.transcriber.transcribe)
        source = "mic"
    _log_event(
        logger,
        logging.INFO,
        "transcript_ready",
        source=source,
        provider=result.provider,
        text=result.text,
        ms=round((time.perf_counter() - t0) * 1000.0, 2),
    )
    return result


def translate_transcript(
    text: str,
    direction: TranslationDirection,
    services: PipelineServices,
    logger: logging.Logger | None = None,
) -> TranslationResult:
    t0 = time.perf_counter()
    res = services.translator.translate(TranslationRequest(text=text, direction=direction))
    _log_event(
        logger,
        logging.INFO,
        "translation_ready",
        direction=direction.value,
        provider=res.provider,
        from_backend=res.from_backend,
        ms=round((time.perf_counter() - t0) * 1000.0, 2),
    )
    return res
