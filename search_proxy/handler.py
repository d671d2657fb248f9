from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Protocol

from .config import INTERNAL_ERROR_BODY, KEYWORDS_PARAM, TARGET_LANG
from .forwarder import UpstreamResponse
from .translation import TranslationOrchestrator, TranslationOutcome
from .utils import QueryValue, header_safe, usable_keywords

logger = logging.getLogger(__name__)


class Forwarder(Protocol):
    url: str

    async def forward(self, params: Mapping[str, QueryValue]) -> UpstreamResponse:
        ...


@dataclass(frozen=True)
class ProxyResponse:
    status_code: int
    body: bytes
    media_type: str = "application/json"
    headers: Dict[str, str] = field(default_factory=dict)


def diagnostic_headers(outcome: TranslationOutcome) -> Dict[str, str]:
    return {
        "X-Translate-Attempted": "1" if outcome.attempted else "0",
        "X-Translate-Cached": "1" if outcome.cache_hit else "0",
        "X-Source-Keywords": header_safe(outcome.source_text),
        "X-Translated-Keywords": header_safe(outcome.translated_text),
    }


def internal_error() -> ProxyResponse:
    return ProxyResponse(500, json.dumps(INTERNAL_ERROR_BODY).encode("utf-8"))


class RequestHandler:
    def __init__(
        self,
        orchestrator: TranslationOrchestrator,
        forwarder: Forwarder,
        target_lang: str = TARGET_LANG,
    ) -> None:
        self.orchestrator = orchestrator
        self.forwarder = forwarder
        self.target_lang = target_lang

    async def handle(self, params: Mapping[str, QueryValue]) -> ProxyResponse:
        try:
            forward_params = dict(params)
            keywords = usable_keywords(forward_params.get(KEYWORDS_PARAM))
            outcome: Optional[TranslationOutcome] = None

            if keywords is None:
                forward_params.pop(KEYWORDS_PARAM, None)
                logger.info("No keywords provided. Forwarding request without translation.")
            else:
                outcome = await self.orchestrator.resolve(keywords, self.target_lang)
                forward_params[KEYWORDS_PARAM] = outcome.translated_text

            upstream = await self.forwarder.forward(forward_params)
        except Exception:
            logger.exception("Error while proxying search request")
            return internal_error()

        headers = diagnostic_headers(outcome) if outcome is not None else {}
        return ProxyResponse(upstream.status_code, upstream.body, upstream.media_type, headers)
