from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from edgetrans.app.stats import PerformanceTracker
from edgetrans.contracts import TranslationDirection, TranslationRequest
from edgetrans.errors import InvalidDirectionError
from edgetrans.nlp.translator.base import Translator
from edgetrans.nlp.translator.factory import get_translator

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"


@dataclass
class ServiceContext:
    """Process-wide state for the web front end, built once at startup."""

    model_path: str
    n_ctx: int = 2048
    provider: str = "gemma"
    timeout: Optional[float] = None
    tracker: PerformanceTracker = field(default_factory=PerformanceTracker)
    translator: Optional[Translator] = None

    def get_translator(self) -> Translator:
        if self.translator is None:
            self.translator = get_translator(
                self.provider,
                model_path=self.model_path,
                n_ctx=self.n_ctx,
                timeout=self.timeout,
            )
        return self.translator


class TranslateBody(BaseModel):
    direction: str
    text: str


def _static(name: str, media_type: str) -> Response:
    return Response(content=(STATIC_DIR / name).read_bytes(), media_type=media_type)


def create_app(context: ServiceContext) -> FastAPI:
    app = FastAPI(title="edgetrans")
    app.state.context = context
    context.get_translator()

    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        fields = sorted({".".join(str(p) for p in err.get("loc", ())[1:]) or "body" for err in exc.errors()})
        return JSONResponse(
            status_code=400,
            content={"ok": False, "error": f"Invalid request body: {', '.join(fields)}"},
        )

    @app.get("/")
    def index() -> Response:
        return _static("index.html", "text/html; charset=utf-8")

    @app.get("/styles.css")
    def styles() -> Response:
        return _static("styles.css", "text/css; charset=utf-8")

    @app.get("/stats")
    def stats() -> dict:
        return context.tracker.record()

    @app.post("/reset-stats")
    def reset_stats() -> dict:
        context.tracker.reset()
        logger.info("stats_reset")
        return {"ok": True}

    @app.post("/translate")
    def translate(body: TranslateBody) -> JSONResponse:
        try:
            direction = TranslationDirection.parse(body.direction)
        except InvalidDirectionError as e:
            return JSONResponse(status_code=400, content={"ok": False, "error": str(e)})

        try:
            res = context.get_translator().translate(
                TranslationRequest(text=body.text, direction=direction)
            )
        except Exception as e:
            logger.exception("translate_request_failed", extra={"direction": direction.value})
            return JSONResponse(
                status_code=500,
                content={"ok": False, "error": f"Translation failed: {e}"},
            )

        logger.info(
            "translate_request_done",
            extra={"direction": direction.value, "provider": res.provider},
        )
        return JSONResponse(
            content={
                "ok": True,
                "direction": body.direction,
                "original": body.text,
                "translated": res.translated_text,
            }
        )

    return app


def run(context: ServiceContext, *, host: str = "0.0.0.0", port: int = 8080, verbose: bool = False) -> None:
    uvicorn.run(create_app(context), host=host, port=port, log_level="debug" if verbose else "info")
