"""
English <-> Bahasa Malaysia translation backed by an OpenAI chat model.
"""

import logging
from typing import Any, Dict, Optional

from openai import OpenAI, APIError

from core.outcome import Err, Ok

logger = logging.getLogger(__name__)

LANGUAGE_NAMES = {
    "en": "English",
    "ms": "Bahasa Malaysia",
}


class TranslationError(Exception):
    pass


def infer_source_language(target_lang: str) -> str:
    return "en" if target_lang == "ms" else "ms"


class Translator:
    """Formatting-preserving translation of proposal and tender text."""

    def __init__(self, api_key: Optional[str], model: str = "gpt-4o-mini"):
        self.model = model
        self.client = OpenAI(api_key=api_key) if api_key else None

    @classmethod
    def from_settings(cls, settings) -> "Translator":
        return cls(settings.translation_api_key, settings.translation_model)

    @property
    def is_available(self) -> bool:
        return self.client is not None

    def _translate_text(self, text: str, source_lang: str, target_lang: str) -> str:
        source_name = LANGUAGE_NAMES.get(source_lang, source_lang)
        target_name = LANGUAGE_NAMES.get(target_lang, target_lang)
        response = self.client.chat.completions.create(
            model=self.model,
            temperature=0,
            messages=[
                {
                    "role": "system",
                    "content": (
                        f"You translate government tender documents from {source_name} to {target_name}. "
                        "Preserve markdown structure, numbers, names, registration numbers and certificate codes "
                        "exactly. Output only the translation."
                    ),
                },
                {"role": "user", "content": text},
            ],
        )
        translated = (response.choices[0].message.content or "").strip()
        if not translated:
            raise TranslationError("Empty translation returned")
        return translated

    def translate(self, text: str, target_lang: str):
        """
        Translate ``text`` into ``target_lang`` ('en' or 'ms').

        Returns ``Ok(payload)`` or ``Err(cause)``; translation has no
        degraded fallback.
        """
        if not self.is_available:
            return Err("Translation service is not configured")

        source_lang = infer_source_language(target_lang)
        logger.info(f"[Translation] {source_lang} -> {target_lang}: {text[:100]}...")

        try:
            translated = self._translate_text(text, source_lang, target_lang)
        except (APIError, TranslationError) as e:
            logger.error(f"[Translation] failed: {e}")
            return Err(str(e))

        payload: Dict[str, Any] = {
            "translatedText": translated,
            "sourceLanguage": source_lang,
            "targetLanguage": target_lang,
            "originalLength": len(text),
            "translatedLength": len(translated),
        }
        return Ok(payload)
