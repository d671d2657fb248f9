"""FastAPI front end of the translating search proxy."""
from __future__ import annotations

import asyncio
import logging
import os
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from search_proxy.cache import TranslationCache
from search_proxy.config import (
    CACHE_MAX_ENTRIES,
    CACHE_TTL,
    CORS_ALLOW_ORIGINS,
    INTERNAL_ERROR_BODY,
    PORT,
    TARGET_LANG,
    TARGET_SEARCH_URL,
    TRANSLATE_TIMEOUT,
)
from search_proxy.forwarder import SearchForwarder
from search_proxy.handler import Forwarder, RequestHandler
from search_proxy.log import new_request_id, request_id_ctx, setup_logger
from search_proxy.translation import TranslationOrchestrator, build_provider
from search_proxy.utils import collapse_query

log = setup_logger("search_proxy")
http_log = logging.getLogger("search_proxy.http")

_UNSET = object()


# ─── App Factory ───────────────────────────────────────────────────────────────
def create_app(
    cache: Optional[TranslationCache] = None,
    provider=_UNSET,
    forwarder: Optional[Forwarder] = None,
    target_lang: str = TARGET_LANG,
    translate_timeout: float = TRANSLATE_TIMEOUT,
) -> FastAPI:
    """Wire the proxy; ``provider=None`` means no translation credentials."""
    if cache is None:
        cache = TranslationCache(capacity=CACHE_MAX_ENTRIES, ttl=CACHE_TTL)
    if provider is _UNSET:
        provider = build_provider()
    if forwarder is None:
        forwarder = SearchForwarder()
    target_url = forwarder.url

    orchestrator = TranslationOrchestrator(cache, provider, timeout=translate_timeout)
    handler = RequestHandler(orchestrator, forwarder, target_lang=target_lang)

    app = FastAPI(title="Translating search proxy")
    app.state.cache = cache
    app.state.provider = provider
    app.state.handler = handler

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ALLOW_ORIGINS,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Accept"],
        expose_headers=[
            "Content-Length",
            "X-Translate-Attempted",
            "X-Translate-Cached",
            "X-Source-Keywords",
            "X-Translated-Keywords",
        ],
        allow_credentials=False,
        max_age=600,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        rid = request.headers.get("X-Request-ID") or new_request_id()
        request_id_ctx.set(rid)
        start = time.perf_counter()
        extra = {"method": request.method, "path": request.url.path}
        try:
            response = await call_next(request)
        except Exception:
            extra["dur_ms"] = round((time.perf_counter() - start) * 1000, 2)
            http_log.exception("http_request_failed", extra={**extra, "status": 500})
            response = JSONResponse(INTERNAL_ERROR_BODY, status_code=500)
        else:
            extra["dur_ms"] = round((time.perf_counter() - start) * 1000, 2)
            http_log.info("http_request", extra={**extra, "status": response.status_code})
        response.headers["X-Request-ID"] = rid
        return response

    # ─── Routes ────────────────────────────────────────────────────────────────
    @app.get("/search")
    async def search(request: Request) -> Response:
        params = collapse_query(request.query_params.multi_items())
        result = await handler.handle(params)
        return Response(
            content=result.body,
            status_code=result.status_code,
            media_type=result.media_type,
            headers=result.headers,
        )

    @app.get("/translate")
    @app.get("/translate-pt")
    async def translate(
        request: Request, text: Optional[str] = None, target: Optional[str] = None
    ) -> JSONResponse:
        if not text or not text.strip():
            return JSONResponse({"error": "Text parameter is required."}, status_code=400)
        if provider is None:
            return JSONResponse({"error": "Translation provider is not configured."}, status_code=503)
        target = target or target_lang
        try:
            translated = await asyncio.wait_for(
                provider.translate(text, target), timeout=translate_timeout
            )
        except Exception:
            log.exception("Error in %s endpoint", request.url.path)
            return JSONResponse(INTERNAL_ERROR_BODY, status_code=500)
        log.info('Translated "%s" to "%s"', text, translated)
        return JSONResponse({"originalText": text, "translatedText": translated, "target": target})

    @app.get("/healthz")
    def healthz() -> dict:
        return {"status": "ok", "target": target_url, "cache": cache.stats()}

    return app


app = create_app()


if __name__ == "__main__":  # pragma: no cover
    import uvicorn

    log.info("Search proxy server running on port %s, target %s", PORT, TARGET_SEARCH_URL)
    uvicorn.run("app:app", host="0.0.0.0", port=int(os.getenv("PORT", PORT)), reload=False)
