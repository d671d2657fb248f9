"""Translation providers and the cache-or-translate-or-fallback decision."""
from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import httpx
from deep_translator import GoogleTranslator

from .cache import TranslationCache
from .config import (
    GOOGLE_TRANSLATE_API_KEY,
    GOOGLE_TRANSLATE_URL,
    SOURCE_LANG,
    TRANSLATE_PROVIDER,
    TRANSLATE_TIMEOUT,
)
from .utils import _build_async_client

logger = logging.getLogger(__name__)


class TranslationError(Exception):
    """The provider could not produce a translation."""


class TranslationProvider(ABC):
    name = "provider"

    @abstractmethod
    async def translate(self, text: str, target_lang: str) -> str:
        """Return ``text`` translated to ``target_lang`` or raise."""


class GoogleCloudTranslator(TranslationProvider):
    """Google Cloud Translation v2 over REST, authenticated by API key."""

    name = "google-cloud"

    def __init__(
        self,
        api_key: str,
        source_lang: str = SOURCE_LANG,
        url: str = GOOGLE_TRANSLATE_URL,
        timeout: float = TRANSLATE_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.source_lang = source_lang
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def translate(self, text: str, target_lang: str) -> str:
        params = {"q": text, "target": target_lang, "key": self.api_key, "format": "text"}
        if self.source_lang and self.source_lang != "auto":
            params["source"] = self.source_lang
        try:
            async with _build_async_client(self.timeout, self._transport) as client:
                response = await client.post(self.url, params=params)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise TranslationError(
                f"provider returned {exc.response.status_code}: {exc.response.text[:200]}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise TranslationError(str(exc) or type(exc).__name__) from exc

        try:
            translated = payload["data"]["translations"][0]["translatedText"]
        except (KeyError, IndexError, TypeError) as exc:
            raise TranslationError("malformed provider response") from exc
        if not isinstance(translated, str) or not translated:
            raise TranslationError("provider returned no text")
        return translated


class DeepTranslatorProvider(TranslationProvider):
    """Free Google Translate backend via deep_translator; needs no credentials."""

    name = "deep-translator"

    def __init__(self, source_lang: str = SOURCE_LANG) -> None:
        self.source_lang = source_lang or "auto"

    def _translate_blocking(self, text: str, target_lang: str) -> str:
        return GoogleTranslator(source=self.source_lang, target=target_lang).translate(text[:4500])

    async def translate(self, text: str, target_lang: str) -> str:
        try:
            translated = await asyncio.to_thread(self._translate_blocking, text, target_lang)
        except Exception as exc:
            raise TranslationError(str(exc) or type(exc).__name__) from exc
        if not isinstance(translated, str) or not translated:
            raise TranslationError("provider returned no text")
        return translated


def build_provider(
    kind: str = TRANSLATE_PROVIDER,
    api_key: Optional[str] = GOOGLE_TRANSLATE_API_KEY,
    source_lang: str = SOURCE_LANG,
    timeout: float = TRANSLATE_TIMEOUT,
) -> Optional[TranslationProvider]:
    """Provider selected by configuration, or ``None`` when it lacks credentials."""
    kind = (kind or "").strip().lower()
    if kind == DeepTranslatorProvider.name:
        return DeepTranslatorProvider(source_lang=source_lang)
    if kind != GoogleCloudTranslator.name:
        logger.warning("Unknown translation provider %r; falling back to %s", kind, GoogleCloudTranslator.name)
    if not api_key:
        return None
    return GoogleCloudTranslator(api_key, source_lang=source_lang, timeout=timeout)


@dataclass(frozen=True)
class TranslationOutcome:
    source_text: str
    translated_text: str
    cache_hit: bool
    attempted: bool


class TranslationOrchestrator:
    """Best-effort translation of search keywords.

    ``resolve`` never raises for translation problems. A live cache entry wins;
    otherwise the provider is called under a timeout and a successful result is
    cached. A missing provider, a timeout or any provider failure yields the
    original text.
    """

    def __init__(
        self,
        cache: TranslationCache,
        provider: Optional[TranslationProvider] = None,
        timeout: float = TRANSLATE_TIMEOUT,
    ) -> None:
        self.cache = cache
        self.provider = provider
        self.timeout = timeout

    async def resolve(self, source_text: str, target_lang: str) -> TranslationOutcome:
        cached = self.cache.get(source_text)
        if cached is not None:
            logger.info('Translation cache hit for "%s" -> "%s"', source_text, cached)
            return TranslationOutcome(source_text, cached, cache_hit=True, attempted=False)

        if self.provider is None:
            logger.warning("Translation provider not configured; using original keywords")
            return TranslationOutcome(source_text, source_text, cache_hit=False, attempted=False)

        try:
            translated = await asyncio.wait_for(
                self.provider.translate(source_text, target_lang), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.error(
                "Translation timed out after %.1fs, forwarding original keywords", self.timeout
            )
            return TranslationOutcome(source_text, source_text, cache_hit=False, attempted=True)
        except Exception as exc:
            logger.error("Translation failed, forwarding original keywords: %s", exc)
            return TranslationOutcome(source_text, source_text, cache_hit=False, attempted=True)

        if not isinstance(translated, str) or not translated.strip():
            logger.error("Translation provider returned no usable text, forwarding original keywords")
            return TranslationOutcome(source_text, source_text, cache_hit=False, attempted=True)

        self.cache.put(source_text, translated)
        logger.info('Translated "%s" -> "%s" (cached)', source_text, translated)
        return TranslationOutcome(source_text, translated, cache_hit=False, attempted=True)
