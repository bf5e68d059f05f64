from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from edgetrans.contracts import TranslationDirection, TranslationRequest, TranslationResult

from .base import Translator

ES_TO_EN: Mapping[str, str] = MappingProxyType(
    {
        "hola": "Hello",
        "adiós": "Goodbye",
        "adios": "Goodbye",
        "gracias": "Thank you",
        "por favor": "Please",
        "lo siento": "I'm sorry",
        "sí": "Yes",
        "si": "Yes",
        "no": "No",
        "buenos días": "Good morning",
        "buenos dias": "Good morning",
        "buenas noches": "Good night",
        "¿cómo estás?": "How are you?",
        "como estas": "How are you?",
    }
)

EN_TO_ES: Mapping[str, str] = MappingProxyType(
    {
        "hello": "Hola",
        "hi": "Hola",
        "goodbye": "Adiós",
        "bye": "Adiós",
        "thank you": "Gracias",
        "thanks": "Gracias",
        "please": "Por favor",
        "sorry": "Lo siento",
        "i'm sorry": "Lo siento",
        "yes": "Sí",
        "no": "No",
        "good morning": "Buenos días",
        "good night": "Buenas noches",
        "how are you?": "¿Cómo estás?",
        "how are you": "¿Cómo estás?",
    }
)

_TABLES: Mapping[TranslationDirection, Mapping[str, str]] = MappingProxyType(
    {
        TranslationDirection.ES_TO_EN: ES_TO_EN,
        TranslationDirection.EN_TO_ES: EN_TO_ES,
    }
)

_MISS_TAGS: Mapping[TranslationDirection, str] = MappingProxyType(
    {
        TranslationDirection.ES_TO_EN: "[Translation] ",
        TranslationDirection.EN_TO_ES: "[Traducción] ",
    }
)


def normalize_phrase(text: str) -> str:
    return text.strip().lower()


def lookup(text: str, direction: TranslationDirection) -> str:
    """Table value for a known phrase; otherwise the original text behind the direction's tag."""
    hit = _TABLES[direction].get(normalize_phrase(text))
    if hit is not None:
        return hit
    return _MISS_TAGS[direction] + text


class PhrasebookTranslator(Translator):
    @property
    def name(self) -> str:
        return "phrasebook"

    def translate(self, req: TranslationRequest) -> TranslationResult:
        if not req.text.strip():
            return TranslationResult(source_text=req.text, translated_text="", provider="empty")
        return TranslationResult(
            source_text=req.text,
            translated_text=lookup(req.text, req.direction),
            provider=self.name,
        )
