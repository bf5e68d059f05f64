from __future__ import annotations

import json
import logging
from typing import Any, Optional, Sequence, Tuple

import httpx

from edgetrans.contracts import AudioClip, TranscriptionResult
from edgetrans.errors import (
    ConfigError,
    EmptySpeechError,
    NoLocalBackendError,
    RemoteApiError,
    ResponseFormatError,
)
from edgetrans.probing import AllCandidatesFailed, first_success

from .base import Transcriber

logger = logging.getLogger(__name__)

OPENAI_TRANSCRIPTIONS_URL = "https://api.openai.com/v1/audio/transcriptions"
LOCAL_ENDPOINTS: Tuple[str, ...] = (
    "http://localhost:8000/transcribe",
    "http://localhost:5000/transcribe",
    "http://127.0.0.1:8000/transcribe",
)
WHISPER_MODEL = "whisper-1"
UPLOAD_FILENAME = "audio.wav"
UPLOAD_MIME = "audio/wav"


class _BadLocalResponse(Exception):
    pass


def _file_part(audio_bytes: bytes, mime: str = UPLOAD_MIME) -> Tuple[Any, ...]:
    # An empty MIME type still uploads; the part just goes out untagged.
    if mime:
        return (UPLOAD_FILENAME, audio_bytes, mime)
    return (UPLOAD_FILENAME, audio_bytes)


def parse_whisper_response(body: str) -> str:
    try:
        payload = json.loads(body)
    except ValueError as e:
        raise ResponseFormatError(f"Failed to parse transcription response: {e}") from e
    if not isinstance(payload, dict) or not isinstance(payload.get("text"), str):
        raise ResponseFormatError("Failed to parse transcription response: missing string field 'text'")
    return payload["text"]


class WhisperHTTPTranscriber(Transcriber):
    """
    Whisper speech-to-text over HTTP: the hosted OpenAI endpoint, or a fixed list
    of local Whisper-compatible servers tried in order.
    """

    def __init__(
        self,
        *,
        use_local: bool = False,
        api_key: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        timeout: Optional[float] = None,
        hosted_url: str = OPENAI_TRANSCRIPTIONS_URL,
        local_endpoints: Sequence[str] = LOCAL_ENDPOINTS,
        mime: str = UPLOAD_MIME,
    ) -> None:
        self.use_local = bool(use_local)
        self.api_key = api_key or None
        self.hosted_url = hosted_url
        self.local_endpoints = tuple(local_endpoints)
        self.mime = mime
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout

    @property
    def name(self) -> str:
        return "whisper-local" if self.use_local else "openai"

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=self._timeout)
        return self._client

    def close(self) -> None:
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def transcribe(self, audio: AudioClip) -> TranscriptionResult:
        if audio.channels != 1:
            raise ValueError(f"transcription needs mono audio, got {audio.channels} channels")
        logger.info(
            "asr_start",
            extra={
                "backend": self.name,
                "channels": audio.channels,
                "sample_rate": audio.sample_rate,
                "seconds": round(audio.duration, 2),
            },
        )
        audio_bytes = audio.wav_bytes()
        if self.use_local:
            text, provider = self._call_local(audio_bytes)
        else:
            text, provider = self._call_hosted(audio_bytes), "openai"

        text = text.strip()
        if not text:
            raise EmptySpeechError("No speech detected in audio file")
        logger.info("asr_done", extra={"provider": provider, "chars": len(text)})
        return TranscriptionResult(text=text, provider=provider)

    def _call_hosted(self, audio_bytes: bytes) -> str:
        if not self.api_key:
            raise ConfigError(
                "OpenAI API key required. Set OPENAI_API_KEY environment variable or pass --api-key"
            )
        try:
            resp = self._get_client().post(
                self.hosted_url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                data={"model": WHISPER_MODEL, "response_format": "json"},
                files={"file": _file_part(audio_bytes, self.mime)},
            )
        except httpx.HTTPError as e:
            raise RemoteApiError(f"Failed to send request to OpenAI: {e}") from e

        if not resp.is_success:
            raise RemoteApiError(
                f"OpenAI API error ({resp.status_code}): {resp.text}",
                status=resp.status_code,
                body=resp.text,
            )
        return parse_whisper_response(resp.text)

    def _try_local(self, endpoint: str, audio_bytes: bytes) -> str:
        logger.info("local_asr_try", extra={"endpoint": endpoint})
        resp = self._get_client().post(endpoint, files={"file": _file_part(audio_bytes, self.mime)})
        if not resp.is_success:
            raise _BadLocalResponse(f"status {resp.status_code}")
        try:
            return parse_whisper_response(resp.text)
        except ResponseFormatError as e:
            raise _BadLocalResponse(str(e)) from e

    def _call_local(self, audio_bytes: bytes) -> Tuple[str, str]:
        def _log_failure(endpoint: str, err: Exception) -> None:
            if isinstance(err, httpx.TransportError):
                logger.debug("local_asr_unreachable", extra={"endpoint": endpoint, "error": str(err)})
            else:
                logger.warning("local_asr_rejected", extra={"endpoint": endpoint, "error": str(err)})

        try:
            found = first_success(
                self.local_endpoints,
                lambda endpoint: self._try_local(endpoint, audio_bytes),
                on_failure=_log_failure,
            )
        except AllCandidatesFailed as e:
            raise NoLocalBackendError(self.local_endpoints) from e
        logger.info("local_asr_selected", extra={"endpoint": found.candidate})
        return found.value, found.candidate


def transcribe(
    audio: AudioClip,
    use_local: bool,
    api_key: Optional[str] = None,
    **kwargs: Any,
) -> TranscriptionResult:
    tr = WhisperHTTPTranscriber(use_local=use_local, api_key=api_key, **kwargs)
    try:
        return tr.transcribe(audio)
    finally:
        tr.close()
