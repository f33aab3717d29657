"""
Shopbot - Chat Engine
======================
Orchestrates one stateless chat request end to end.

Architecture (OOP)
------------------
``ChatEngine``
    Pipeline orchestrator.  Holds references to the ``KnowledgeBase``
    cache, the upstream clients and the retrievers; keeps no
    request-scoped state, so one instance serves concurrent requests.
    Flow:
        1. Refresh knowledge (request reload mode) → snapshot
        2. Empty knowledge → fixed no-information reply (skip LLM)
        3. Detect language + prompt mode (strict / general)
        4. Retrieve context per ``RETRIEVAL_STRATEGY``
        5. Empty context → fixed no-information reply (skip LLM)
        6. Compose system prompt
        7. Call the completion endpoint (async)
        8. Guard: parse the answer envelope, fallback on NoAnswer
        9. Resolve image links from the context window
        10. Return ``ChatReply``

Usage:
    from shopbot.src.core.chat_engine import ChatEngine
    engine = ChatEngine.from_settings(settings)
    reply = await engine.reply("เปิดกี่โมง")
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from shopbot.config.settings import Settings, settings as default_settings
from shopbot.src.core.knowledge_base import KnowledgeBase, KnowledgeSnapshot
from shopbot.src.core.language import Language, detect, no_info_reply
from shopbot.src.core.llm_client import CompletionClient, Completer, ConfigurationError, Embedder, EmbeddingClient
from shopbot.src.core.prompt_composer import PromptMode, compose, select_mode
from shopbot.src.core.response_guard import Answer, parse_envelope
from shopbot.src.core.retrieval import ContextWindow, EmbeddingRetriever, LexicalRetriever
from shopbot.src.utils.logger import get_logger
from shopbot.src.utils.text_utils import truncate_at_word

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ChatReply:
    """Final reply text plus image URLs found in the grounding context."""

    reply: str
    images: tuple[str, ...] = field(default_factory=tuple)
    mode: PromptMode | None = None
    language: Language = Language.EN
    answered_by_model: bool = False


class ChatEngine:
    """
    Stateless RAG pipeline: knowledge → retrieval → prompt → LLM → guard.

    Parameters
    ----------
    knowledge
        The shared ``KnowledgeBase`` cache (single writer).
    completer
        ``Completer`` for the final chat completion.
    embedder
        ``Embedder`` for query vectors; required by the embedding strategy.
    cfg
        Settings override; defaults to the process-wide ``settings``.
    """

    __slots__ = ("_kb", "_completer", "_cfg", "_embedding_retriever", "_lexical_retriever")

    def __init__(self, knowledge: KnowledgeBase, completer: Completer, embedder: Embedder | None = None, cfg: Settings | None = None) -> None:
        self._kb = knowledge
        self._completer = completer
        self._cfg = cfg or default_settings

        if self._cfg.RETRIEVAL_STRATEGY == "embedding" and embedder is None:
            raise ValueError("RETRIEVAL_STRATEGY='embedding' requires an embedder.")

        self._embedding_retriever = EmbeddingRetriever(embedder, threshold=self._cfg.EMBEDDING_THRESHOLD, limit=self._cfg.EMBEDDING_TOP_K) if embedder is not None else None
        self._lexical_retriever = LexicalRetriever()


    @classmethod
    def from_settings(cls, cfg: Settings | None = None) -> ChatEngine:
        """Wire the production clients and knowledge cache from settings."""
        cfg = cfg or default_settings
        embedder = EmbeddingClient(cfg) if cfg.RETRIEVAL_STRATEGY == "embedding" else None
        knowledge = KnowledgeBase(cfg.KB_PATH, embedder=embedder, debounce_ms=cfg.KB_WATCH_DEBOUNCE_MS)
        return cls(knowledge, CompletionClient(cfg), embedder=embedder, cfg=cfg)


    @property
    def knowledge(self) -> KnowledgeBase:
        return self._kb


    async def reply(self, message: str) -> ChatReply:
        """
        Answer one user message.

        Raises
        ------
        ConfigurationError
            No upstream credential (checked before any upstream call).
        UpstreamError
            The completion endpoint failed.
        """
        t_start = time.perf_counter()
        query = message.strip()

        if not self._cfg.has_api_key:
            raise ConfigurationError("Missing OPENROUTER_API_KEY")

        # ── 1. Knowledge snapshot ─────────────────────────────────────
        if self._cfg.KB_RELOAD_MODE == "request":
            snapshot = await self._kb.ensure_fresh()
        else:
            snapshot = self._kb.snapshot

        # ── 2–3. Language + mode ──────────────────────────────────────
        language = detect(query)
        mode = select_mode(query)
        logger.info("[RAG] language=%s mode=%s query='%s'", language.value, mode.value, query[:50])

        if snapshot.document.is_empty:
            logger.warning("[RAG] Knowledge base empty — no-information reply.")
            return ChatReply(reply=no_info_reply(language), mode=mode, language=language)

        # ── 4–5. Retrieve ─────────────────────────────────────────────
        t_search = time.perf_counter()
        window = await self._retrieve(query, snapshot, mode)
        search_ms = (time.perf_counter() - t_search) * 1000

        if window.is_empty:
            logger.info("[RAG] No relevant context (%.1fms) — skipping LLM.", search_ms)
            return ChatReply(reply=no_info_reply(language), mode=mode, language=language)

        # ── 6. Compose ────────────────────────────────────────────────
        plan = compose(mode, snapshot.meta, window.text, query, language, general_temperature=self._cfg.GENERAL_TEMPERATURE, max_tokens=self._cfg.MAX_TOKENS)

        # ── 7. Call the model ─────────────────────────────────────────
        t_llm = time.perf_counter()
        raw = await self._completer.complete(plan.system_prompt, query, temperature=plan.temperature, max_tokens=plan.max_tokens)
        llm_ms = (time.perf_counter() - t_llm) * 1000

        # ── 8. Guard ──────────────────────────────────────────────────
        result = parse_envelope(raw)
        if not isinstance(result, Answer):
            logger.info("[RAG] Model gave no answer (%s) — no-information reply.", result.reason)
            return ChatReply(reply=no_info_reply(language), mode=mode, language=language)

        # ── 9. Images ─────────────────────────────────────────────────
        images = tuple(self._image_url(ref) for ref in window.images)

        total_ms = (time.perf_counter() - t_start) * 1000
        logger.info("[RAG] Pipeline total: %.1fms (search=%.1f, llm=%.1f)", total_ms, search_ms, llm_ms)
        return ChatReply(reply=result.text, images=images, mode=mode, language=language, answered_by_model=True)


    async def _retrieve(self, query: str, snapshot: KnowledgeSnapshot, mode: PromptMode) -> ContextWindow:
        if self._embedding_retriever is not None and self._cfg.RETRIEVAL_STRATEGY == "embedding":
            return await self._embedding_retriever.retrieve(query, snapshot.chunks)

        document = snapshot.document.content
        if mode is PromptMode.STRICT:
            return self._lexical_retriever.retrieve(query, document, max_chars=self._cfg.CONTEXT_MAX_CHARS, strict=True)
        return ContextWindow(text=truncate_at_word(document, self._cfg.GENERAL_CONTEXT_MAX_CHARS))


    def _image_url(self, ref: str) -> str:
        """Absolute URLs pass through; bare file names live under the image prefix."""
        if "://" in ref or ref.startswith("/"):
            return ref
        return f"{self._cfg.IMAGES_URL_PREFIX.rstrip('/')}/{ref.removeprefix('./')}"
