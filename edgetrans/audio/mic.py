from __future__ import annotations

import contextlib
import logging
import os
import tempfile
import threading
import time
from typing import Any, Callable, Iterator, List, Optional, TypeVar

import numpy as np

from edgetrans.audio.wav import load_wav, write_pcm16_wav
from edgetrans.contracts import AudioClip
from edgetrans.errors import MicError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def float_to_pcm16(samples: np.ndarray) -> bytes:
    clipped = np.clip(samples.astype(np.float32).reshape(-1), -1.0, 1.0)
    return (clipped * 32767.0).astype("<i2").tobytes()


class SoundDeviceMicSource:
    """
    Fixed-duration microphone capture using the `sounddevice` package (PortAudio).

    The PortAudio callback runs on its own thread and appends float32 blocks to a
    shared buffer under a lock. The calling thread sleeps for the full duration.
    """

    def __init__(
        self,
        *,
        sample_rate: int = 16000,
        channels: int = 1,
        device: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if sample_rate <= 0:
            raise ValueError("sample_rate must be > 0")
        if channels != 1:
            raise ValueError("channels must be 1 (transcription needs mono audio)")

        self.sample_rate = int(sample_rate)
        self.channels = int(channels)
        self.device = device
        self._sleep = sleep
        self._lock = threading.Lock()
        self._blocks: List[np.ndarray] = []

    @staticmethod
    def list_devices() -> str:
        try:
            import sounddevice as sd
        except ImportError as e:
            raise MicError(
                "sounddevice is not installed. Install with: python -m pip install sounddevice"
            ) from e
        return str(sd.query_devices())

    def _on_block(self, indata: Any, frames: int, time_info: Any, status: Any) -> None:
        if status:
            logger.warning("mic_stream_status", extra={"status": str(status)})
        with self._lock:
            self._blocks.append(np.array(indata, dtype=np.float32, copy=True))

    def _drain(self) -> np.ndarray:
        with self._lock:
            blocks = self._blocks
            self._blocks = []
        if not blocks:
            return np.zeros(0, dtype=np.float32)
        return np.concatenate([b.reshape(-1) for b in blocks])

    @contextlib.contextmanager
    def _open_stream(self) -> Iterator[Any]:
        try:
            import sounddevice as sd
        except ImportError as e:
            raise MicError(
                "sounddevice is not installed. Install with: python -m pip install sounddevice"
            ) from e

        try:
            stream = sd.InputStream(
                samplerate=self.sample_rate,
                channels=self.channels,
                dtype="float32",
                device=self.device,
                callback=self._on_block,
            )
        except Exception as e:
            raise MicError(
                "Failed to open microphone stream (no mono 16k input?). "
                "Try --list-devices and select a device id with --device."
            ) from e

        with stream:
            yield stream

    def record(self, seconds: float) -> AudioClip:
        if seconds <= 0:
            raise ValueError("seconds must be > 0")
        self._drain()
        print(f"Recording for {seconds:g} seconds...")
        with self._open_stream():
            self._sleep(float(seconds))
        samples = self._drain()
        print("Recording complete. Processing...")
        logger.info(
            "mic_record_done",
            extra={"seconds": float(seconds), "samples": int(samples.shape[0])},
        )
        return AudioClip(
            pcm16=float_to_pcm16(samples),
            sample_rate=self.sample_rate,
            channels=self.channels,
        )


def with_temp_wav(clip: AudioClip, consume: Callable[[AudioClip], T]) -> T:
    """Write `clip` to a temporary WAV, hand the re-read clip to `consume`, then delete it."""
    fd, tmp_path = tempfile.mkstemp(suffix=".wav", prefix="edgetrans_rec_")
    os.close(fd)
    try:
        write_pcm16_wav(tmp_path, clip.pcm16, sample_rate=clip.sample_rate, channels=clip.channels)
        return consume(load_wav(tmp_path))
    finally:
        try:
            os.remove(tmp_path)
        except OSError:
            pass
