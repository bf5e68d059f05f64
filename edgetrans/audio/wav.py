from __future__ import annotations

import logging
import wave
from pathlib import Path

from edgetrans.contracts import AudioClip

logger = logging.getLogger(__name__)


def load_wav(path: str | Path) -> AudioClip:
    p = Path(path)
    try:
        with wave.open(str(p), "rb") as wf:
            channels = wf.getnchannels()
            sample_rate = wf.getframerate()
            sampwidth = wf.getsampwidth()
            pcm16 = wf.readframes(wf.getnframes())
    except wave.Error as e:
        raise ValueError(f"not a PCM WAV file: {p} ({e})") from e
    if sampwidth != 2:
        raise ValueError(f"expected 16-bit PCM WAV, got {sampwidth * 8}-bit: {p}")
    logger.info(
        "wav_loaded",
        extra={"path": str(p), "channels": channels, "sample_rate": sample_rate},
    )
    return AudioClip(pcm16=pcm16, sample_rate=sample_rate, channels=channels, source_path=str(p))


def write_pcm16_wav(path: str | Path, pcm16: bytes, sample_rate: int, channels: int) -> None:
    with wave.open(str(path), "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(2)
        wf.setframerate(sample_rate)
        wf.writeframes(pcm16)
