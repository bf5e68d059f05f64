from __future__ import annotations

from typing import Optional, Sequence


class EdgeTransError(RuntimeError):
    pass


class ConfigError(EdgeTransError):
    pass


class RemoteApiError(EdgeTransError):
    def __init__(self, message: str, *, status: Optional[int] = None, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class ResponseFormatError(EdgeTransError):
    pass


class NoLocalBackendError(EdgeTransError):
    def __init__(self, endpoints: Sequence[str]) -> None:
        self.endpoints = tuple(endpoints)
        super().__init__(
            f"No local Whisper API found. Tried: {list(self.endpoints)}\n"
            "To use local API, start a Whisper server on one of these endpoints."
        )


class EmptySpeechError(EdgeTransError):
    pass


class ModelNotFoundError(ConfigError):
    def __init__(self, path: str) -> None:
        self.path = str(path)
        super().__init__(f"Gemma model not found at: {self.path}. Please download the model first.")


class InvalidDirectionError(EdgeTransError, ValueError):
    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"Invalid direction {token!r}. Use 'es-en' or 'en-es'")


class ExternalTranslatorError(EdgeTransError):
    """No candidate executable produced usable output. Absorbed by the translator."""


class MicError(EdgeTransError):
    pass
