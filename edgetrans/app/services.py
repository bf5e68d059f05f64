from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from edgetrans.asr.base import Transcriber
from edgetrans.asr.whisper_http import WhisperHTTPTranscriber
from edgetrans.audio.mic import SoundDeviceMicSource
from edgetrans.nlp.translator.base import Translator
from edgetrans.nlp.translator.factory import get_translator


@dataclass(frozen=True)
class PipelineServices:
    mic: SoundDeviceMicSource
    transcriber: Transcriber
    translator: Translator


def build_translator(args: Any) -> Translator:
    return get_translator(
        str(args.translator),
        model_path=str(args.gemma_model or ""),
        n_ctx=int(args.gemma_ctx),
        timeout=args.gemma_timeout,
    )


def build_pipeline_services(args: Any) -> PipelineServices:
    mic = SoundDeviceMicSource(sample_rate=int(args.sr), channels=1, device=args.device)
    transcriber = WhisperHTTPTranscriber(
        use_local=bool(args.local),
        api_key=args.api_key,
        timeout=args.asr_timeout,
    )
    return PipelineServices(mic=mic, transcriber=transcriber, translator=build_translator(args))
