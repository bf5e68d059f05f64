from __future__ import annotations
from abc import ABC, abstractmethod
from edgetrans.contracts import AudioClip, TranscriptionResult

class Transcriber(ABC):
    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    def transcribe(self, audio: AudioClip) -> TranscriptionResult: ...
