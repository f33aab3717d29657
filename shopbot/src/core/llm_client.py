"""
Shopbot - Upstream LLM Clients
===============================
Thin async wrappers around the OpenAI-compatible upstream API
(OpenRouter by default), built on LangChain chat / embedding models.

``EmbeddingClient``
    Batched embeddings.  Upstream failures **degrade** to ``None``
    vectors so retrieval treats them as "no match" instead of aborting
    the request.

``CompletionClient``
    Single chat completion (system + user message).  Upstream failures
    **surface** as ``UpstreamError`` carrying the status code and the
    upstream error body, which the API layer reports as a 502.

Both clients run with ``max_retries=0`` and a bounded timeout: a failed
call is reported immediately instead of being retried.

Usage:
    from shopbot.src.core.llm_client import CompletionClient, EmbeddingClient
    embedder   = EmbeddingClient()
    completion = CompletionClient()
    vectors = await embedder.embed(["# Menu ...", "# Hours ..."])
    text    = await completion.complete(system_prompt, "What's on the menu?", temperature=0.0)
"""

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable

import openai
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI, OpenAIEmbeddings

from shopbot.config.settings import Settings, settings as default_settings
from shopbot.src.utils.logger import get_logger

logger = get_logger(__name__)

# ── Type aliases ───────────────────────────────────────────────────────
Vector = list[float]


# ══════════════════════════════════════════════════════════════════════
#  ERRORS
# ══════════════════════════════════════════════════════════════════════


class ShopbotError(Exception):
    """Base class for errors scoped to a single chat request."""


class ConfigurationError(ShopbotError):
    """Required configuration (e.g. the upstream credential) is missing."""


class UpstreamError(ShopbotError):
    """The completion endpoint failed (non-2xx, timeout, connection)."""

    def __init__(self, message: str, status_code: int | None = None, body: object = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


# ══════════════════════════════════════════════════════════════════════
#  PROTOCOLS
# ══════════════════════════════════════════════════════════════════════


@runtime_checkable
class Embedder(Protocol):
    """Anything that can embed texts, one (possibly failed) vector per input."""

    async def embed(self, texts: list[str]) -> list[Vector | None]: ...


@runtime_checkable
class Completer(Protocol):
    """Anything that can turn a system prompt + user message into text."""

    async def complete(self, system_prompt: str, user_message: str, temperature: float, max_tokens: int | None = None) -> str: ...


def _attribution_headers(cfg: Settings) -> dict[str, str]:
    """OpenRouter app-attribution headers."""
    origins = cfg.allowed_origins
    return {"HTTP-Referer": origins[0] if origins else "http://127.0.0.1:5500", "X-Title": cfg.APP_TITLE}


def _require_key(cfg: Settings) -> str:
    if not cfg.has_api_key:
        raise ConfigurationError("Missing OPENROUTER_API_KEY")
    return cfg.OPENROUTER_API_KEY.get_secret_value()  # type: ignore[union-attr]


# ══════════════════════════════════════════════════════════════════════
#  EMBEDDINGS
# ══════════════════════════════════════════════════════════════════════


class EmbeddingClient:
    """
    Embeddings via ``OpenAIEmbeddings`` against ``UPSTREAM_BASE_URL``.

    Parameters
    ----------
    cfg
        Settings override; defaults to the process-wide ``settings``.
    model
        Optional pre-built LangChain embeddings object (tests inject one).
    """

    __slots__ = ("_cfg", "_model")

    def __init__(self, cfg: Settings | None = None, model: object | None = None) -> None:
        self._cfg = cfg or default_settings
        self._model = model


    def _get_model(self) -> object:
        """Build the embeddings model on first use, so a missing key degrades each request instead of failing startup."""
        if self._model is None:
            self._model = OpenAIEmbeddings(
                model=self._cfg.EMBEDDING_MODEL,
                api_key=_require_key(self._cfg),
                base_url=self._cfg.UPSTREAM_BASE_URL,
                timeout=self._cfg.UPSTREAM_TIMEOUT,
                max_retries=0,
                default_headers=_attribution_headers(self._cfg),
                check_embedding_ctx_length=False,
            )
            logger.info("Embedding model initialised: %s", self._cfg.EMBEDDING_MODEL)
        return self._model


    async def embed(self, texts: list[str]) -> list[Vector | None]:
        """
        Embed *texts* in one upstream call, order preserved.

        Returns
        -------
        list[Vector | None]
            One entry per input.  On any upstream failure every entry is
            ``None``; a short response pads the missing tail with ``None``.
        """
        if not texts:
            return []

        t_start = time.perf_counter()
        try:
            vectors = await self._get_model().aembed_documents(texts)  # type: ignore[attr-defined]
        except ConfigurationError:
            logger.error("[EMBED] No upstream credential — %d text(s) left unembedded.", len(texts))
            return [None] * len(texts)
        except Exception:
            logger.exception("[EMBED] Upstream embedding call failed for %d text(s).", len(texts))
            return [None] * len(texts)

        result: list[Vector | None] = [list(v) if v else None for v in vectors[: len(texts)]]
        if len(result) < len(texts):
            logger.warning("[EMBED] Upstream returned %d vector(s) for %d input(s).", len(result), len(texts))
            result.extend([None] * (len(texts) - len(result)))

        logger.debug("[EMBED] %d text(s) embedded in %.1fms", len(texts), (time.perf_counter() - t_start) * 1000)
        return result


# ══════════════════════════════════════════════════════════════════════
#  CHAT COMPLETION
# ══════════════════════════════════════════════════════════════════════


class CompletionClient:
    """
    Chat completion via ``ChatOpenAI`` against ``UPSTREAM_BASE_URL``.

    Temperature and ``max_tokens`` are passed per call so one client
    serves both deterministic (strict) and creative (general) prompts.
    """

    __slots__ = ("_cfg", "_llm")

    def __init__(self, cfg: Settings | None = None, llm: object | None = None) -> None:
        self._cfg = cfg or default_settings
        self._llm = llm


    def _get_llm(self) -> object:
        if self._llm is None:
            self._llm = ChatOpenAI(
                model=self._cfg.CHAT_MODEL,
                api_key=_require_key(self._cfg),
                base_url=self._cfg.UPSTREAM_BASE_URL,
                timeout=self._cfg.UPSTREAM_TIMEOUT,
                max_retries=0,
                default_headers=_attribution_headers(self._cfg),
            )
            logger.info("LLM initialised: %s (timeout=%.0fs)", self._cfg.CHAT_MODEL, self._cfg.UPSTREAM_TIMEOUT)
        return self._llm


    async def complete(self, system_prompt: str, user_message: str, temperature: float, max_tokens: int | None = None) -> str:
        """
        Send one system + user exchange and return the reply text.

        Raises
        ------
        ConfigurationError
            No upstream credential is configured.
        UpstreamError
            Non-2xx status, timeout or connection failure.
        """
        llm = self._get_llm()
        messages = [SystemMessage(content=system_prompt), HumanMessage(content=user_message)]

        t_llm = time.perf_counter()
        try:
            response = await llm.ainvoke(messages, temperature=temperature, max_tokens=max_tokens or self._cfg.MAX_TOKENS)  # type: ignore[attr-defined]
        except openai.APIStatusError as exc:
            logger.error("[LLM] Upstream returned %d: %s", exc.status_code, exc.body)
            raise UpstreamError(f"Upstream returned {exc.status_code}", status_code=exc.status_code, body=exc.body) from exc
        except openai.APIConnectionError as exc:
            logger.error("[LLM] Upstream unreachable: %s", exc)
            raise UpstreamError(f"Upstream unreachable: {exc}", body=str(exc)) from exc

        content = response.content if hasattr(response, "content") else str(response)
        if isinstance(content, list):
            content = "".join(part.get("text", "") if isinstance(part, dict) else str(part) for part in content)

        logger.info("[LLM] Reply in %.1fms (%d chars, temperature=%.1f)", (time.perf_counter() - t_llm) * 1000, len(content), temperature)
        return content
