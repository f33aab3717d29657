"""
Shopbot - API Route Definitions
================================
    - POST /chat    → answer one stateless chat message
    - GET  /health  → liveness + knowledge-base load state

Each handler is a thin controller: it validates the request, delegates
to ``ChatEngine`` and maps domain errors onto HTTP status codes.  Error
bodies are always ``{"error": ...}``:

    missing credential        → 500  (checked before the message)
    blank / missing message   → 400
    upstream failure          → 502  (+ ``"upstream"`` body)
    anything unexpected       → 500
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from shopbot.src.api.schemas import ChatRequest, ChatResponse, HealthResponse
from shopbot.src.core.chat_engine import ChatEngine
from shopbot.src.core.llm_client import ConfigurationError, UpstreamError
from shopbot.src.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()

MISSING_KEY_MESSAGE = "Missing OPENROUTER_API_KEY"
MESSAGE_REQUIRED = "Message is required"


def error_response(status_code: int, error: object, upstream: object = None) -> JSONResponse:
    content: dict[str, object] = {"error": error}
    if upstream is not None:
        content["upstream"] = upstream
    return JSONResponse(status_code=status_code, content=content)


@router.post("/chat", response_model=ChatResponse, response_model_exclude_none=True)
async def chat(body: ChatRequest, request: Request):
    """Answer one user message from the shop knowledge base."""
    engine: ChatEngine = request.app.state.engine
    if not request.app.state.settings.has_api_key:
        return error_response(500, MISSING_KEY_MESSAGE)

    message = body.message.strip()
    if not message:
        return error_response(400, MESSAGE_REQUIRED)

    try:
        result = await engine.reply(message)
    except ConfigurationError as exc:
        return error_response(500, str(exc))
    except UpstreamError as exc:
        logger.error("[API] Upstream failure (status=%s): %s", exc.status_code, exc)
        return error_response(502, str(exc), upstream=exc.body if exc.body is not None else exc.status_code)
    except Exception as exc:
        logger.exception("[API] /chat failed")
        return error_response(500, str(exc) or exc.__class__.__name__)

    return ChatResponse(reply=result.reply, images=list(result.images) or None)


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    engine: ChatEngine = request.app.state.engine
    cfg = request.app.state.settings
    return HealthResponse(
        retrieval=cfg.RETRIEVAL_STRATEGY,
        reload_mode=cfg.KB_RELOAD_MODE,
        knowledge_base=engine.knowledge.health(),
    )
