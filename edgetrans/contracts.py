from __future__ import annotations

import io
import wave
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from edgetrans.errors import InvalidDirectionError


class TranslationDirection(str, Enum):
    ES_TO_EN = "es-en"
    EN_TO_ES = "en-es"

    @classmethod
    def parse(cls, token: str) -> "TranslationDirection":
        for member in cls:
            if member.value == token:
                return member
        raise InvalidDirectionError(token)

    @property
    def source_lang(self) -> str:
        return self.value.split("-")[0]

    @property
    def target_lang(self) -> str:
        return self.value.split("-")[1]


@dataclass(frozen=True)
class AudioClip:
    """
    Raw PCM16 audio loaded from a WAV file or captured from the microphone.
    pcm16: little-endian signed 16-bit PCM bytes (interleaved if channels > 1).
    """
    pcm16: bytes
    sample_rate: int
    channels: int
    source_path: Optional[str] = None

    @property
    def duration(self) -> float:
        frames = len(self.pcm16) // (2 * max(1, self.channels))
        return frames / self.sample_rate if self.sample_rate > 0 else 0.0

    def wav_bytes(self) -> bytes:
        buf = io.BytesIO()
        with wave.open(buf, "wb") as wf:
            wf.setnchannels(self.channels)
            wf.setsampwidth(2)
            wf.setframerate(self.sample_rate)
            wf.writeframes(self.pcm16)
        return buf.getvalue()


@dataclass(frozen=True)
class TranscriptionResult:
    text: str
    provider: str


@dataclass(frozen=True)
class TranslationRequest:
    text: str
    direction: TranslationDirection = TranslationDirection.ES_TO_EN


@dataclass(frozen=True)
class TranslationResult:
    source_text: str
    translated_text: str
    provider: str
    # True when the text came from the model rather than the phrasebook.
    from_backend: bool = False


@dataclass(frozen=True)
class PerformanceSample:
    timestamp: float
    cpu_percent: float
    mem_mb: float
