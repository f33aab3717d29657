"""
Shopbot - Context Retrieval
============================
Selects the slice of the knowledge document handed to the model as
grounding.  Two interchangeable strategies produce a ``ContextWindow``:

``EmbeddingRetriever``
    Cosine similarity between the query vector and the cached chunk
    vectors.  Only chunks scoring *strictly above* the threshold are
    kept (at most ``limit``, best first).  Chunks whose embedding failed
    (``None``) never match.

``LexicalRetriever``
    No upstream calls.  A *heading shortcut* returns a whole section
    verbatim for high-value topics (menu, price list, promotions,
    hours); otherwise lines are scored by folded-token overlap with
    booster / colon / opening-hours bonuses, and the best anchor lines
    expand into 11-line windows.

An empty ``ContextWindow`` means "nothing relevant" and short-circuits
the chat pipeline to the fixed no-information reply.

Usage:
    retriever = EmbeddingRetriever(embedder, threshold=0.75, limit=4)
    window = await retriever.retrieve("What time do you open?", snapshot.chunks)

    lexical = LexicalRetriever()
    window = lexical.retrieve("menu please", snapshot.document.content, max_chars=3000, strict=True)
"""

from __future__ import annotations

import math
import re
import time
from collections.abc import Sequence
from dataclasses import dataclass, field

from shopbot.config.prompt_templates import BOOSTER_TOKENS, SECTION_SHORTCUT_TOPICS
from shopbot.src.core.chunker import Chunk, split_sections
from shopbot.src.core.llm_client import Embedder
from shopbot.src.utils.logger import get_logger
from shopbot.src.utils.text_utils import extract_image_refs, fold_tokens, truncate_at_word

logger = get_logger(__name__)

# ── Scoring constants ──────────────────────────────────────────────────
_COSINE_EPSILON = 1e-8
_BOOSTER_BONUS = 2.0
_COLON_BONUS = 0.5
_HOURS_BONUS = 1.5

_ANCHOR_COUNT = 3
_WINDOW_BEFORE = 5
_WINDOW_AFTER = 6
WINDOW_SEPARATOR = "\n---\n"

# "10:00-20:00", "10.30 – 22.00", "9am - 5pm", "open daily", "เปิด", "ปิด"
_HOURS_LINE_RE = re.compile(
    r"\d{1,2}[:.]\d{2}\s*(?:[-–—~]|to|ถึง)\s*\d{1,2}[:.]\d{2}"
    r"|\d{1,2}\s*(?:am|pm)\s*[-–—~]\s*\d{1,2}\s*(?:am|pm)"
    r"|\b(?:open|opens|opening|close|closes|closed|closing)\b"
    r"|เปิด|ปิด|営業|营业|영업|horario|orari",
    re.IGNORECASE,
)


@dataclass(frozen=True, slots=True)
class ScoredCandidate:
    """A chunk index or anchor line paired with its relevance score."""

    position: int
    score: float


@dataclass(frozen=True, slots=True)
class ContextWindow:
    """The bounded excerpt handed to the model (empty → no context)."""

    text: str = ""
    images: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def of(cls, text: str) -> ContextWindow:
        return cls(text=text, images=tuple(extract_image_refs(text)))

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()


def rank(candidates: Sequence[ScoredCandidate]) -> list[ScoredCandidate]:
    """Sort by score, highest first; ties keep document order."""
    return sorted(candidates, key=lambda c: c.score, reverse=True)


# ══════════════════════════════════════════════════════════════════════
#  COSINE SIMILARITY
# ══════════════════════════════════════════════════════════════════════


def cosine_similarity(a: Sequence[float] | None, b: Sequence[float] | None) -> float | None:
    """
    Dot product over the product of norms (plus a small epsilon).

    Returns ``None`` when either vector is missing, which callers treat
    as "no match".  Zero vectors score 0.0 instead of dividing by zero.
    """
    if a is None or b is None:
        return None
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    return dot / (norm_a * norm_b + _COSINE_EPSILON)


# ══════════════════════════════════════════════════════════════════════
#  EMBEDDING RETRIEVER
# ══════════════════════════════════════════════════════════════════════


class EmbeddingRetriever:
    """
    Vector-similarity retrieval over pre-embedded chunks.

    Parameters
    ----------
    embedder
        ``Embedder`` used for the per-request query vector.
    threshold
        A chunk must score strictly above this to be kept.
    limit
        Maximum number of chunks in the window.
    """

    __slots__ = ("_embedder", "_threshold", "_limit")

    def __init__(self, embedder: Embedder, threshold: float = 0.75, limit: int = 4) -> None:
        self._embedder = embedder
        self._threshold = threshold
        self._limit = limit


    async def retrieve(self, query: str, chunks: Sequence[Chunk]) -> ContextWindow:
        if not chunks:
            return ContextWindow()

        t_search = time.perf_counter()
        [query_vector] = await self._embedder.embed([query])
        if query_vector is None:
            logger.warning("[RETRIEVE] Query embedding unavailable — no context.")
            return ContextWindow()

        top = self.select(query_vector, chunks)
        window = self.render([chunks[c.position] for c in top])

        logger.info("[RETRIEVE] Embedding: %d/%d chunk(s) above %.2f in %.1fms (best=%s)", len(top), len(chunks), self._threshold, (time.perf_counter() - t_search) * 1000, f"{top[0].score:.3f}" if top else "n/a")
        return window


    def select(self, query_vector: Sequence[float], chunks: Sequence[Chunk]) -> list[ScoredCandidate]:
        """Score, threshold-filter and trim *chunks* against *query_vector*."""
        scored: list[ScoredCandidate] = []
        for position, chunk in enumerate(chunks):
            score = cosine_similarity(query_vector, chunk.embedding)
            if score is None or score <= self._threshold:
                continue
            scored.append(ScoredCandidate(position, score))
        return rank(scored)[: self._limit]


    @staticmethod
    def render(chunks: Sequence[Chunk]) -> ContextWindow:
        """Number the chunks ``【1】``, ``【2】`` … and join with blank lines."""
        if not chunks:
            return ContextWindow()
        blocks = [f"【{i}】\n{chunk.text}" for i, chunk in enumerate(chunks, 1)]
        return ContextWindow.of("\n\n".join(blocks))


# ══════════════════════════════════════════════════════════════════════
#  LEXICAL / SECTION RETRIEVER
# ══════════════════════════════════════════════════════════════════════


class LexicalRetriever:
    """
    Heading-shortcut + token-overlap retrieval over the raw document.

    Scoring per line (only lines sharing at least one folded token with
    the query, plus opening-hours lines in strict mode):

        score = overlap
              + 2.0 × overlapping booster tokens
              + 0.5 if the line has a ``key: value`` colon
              + 1.5 if strict and the line states opening hours
    """

    __slots__ = ()

    def retrieve(self, query: str, document: str, max_chars: int, strict: bool = True) -> ContextWindow:
        if not document.strip():
            return ContextWindow()

        query_tokens = fold_tokens(query)

        section = self.heading_shortcut(query_tokens, document)
        if section is not None:
            logger.info("[RETRIEVE] Heading shortcut → '%s' (%d chars)", section.title, len(section.text))
            return ContextWindow.of(truncate_at_word(section.text, max_chars))

        lines = document.split("\n")
        anchors = rank(self.score_lines(query_tokens, lines, strict))[:_ANCHOR_COUNT]
        if not anchors:
            logger.info("[RETRIEVE] Lexical: no line overlaps the query.")
            return ContextWindow()

        windows = ["\n".join(lines[max(0, a.position - _WINDOW_BEFORE) : a.position + _WINDOW_AFTER]).strip() for a in anchors]
        text = truncate_at_word(WINDOW_SEPARATOR.join(windows), max_chars)

        logger.info("[RETRIEVE] Lexical: anchors at lines %s (scores %s)", [a.position for a in anchors], [round(a.score, 2) for a in anchors])
        return ContextWindow.of(text)


    @staticmethod
    def heading_shortcut(query_tokens: set[str], document: str) -> Chunk | None:
        """First section whose heading folds to a shortcut topic the query asks about."""
        wanted = [topic for topic in SECTION_SHORTCUT_TOPICS if topic in query_tokens]
        if not wanted:
            return None

        sections = [c for c in split_sections(document) if c.heading is not None]
        for topic in wanted:
            for section in sections:
                if topic in fold_tokens(section.title):
                    return section
        return None


    @staticmethod
    def score_lines(query_tokens: set[str], lines: Sequence[str], strict: bool) -> list[ScoredCandidate]:
        scored: list[ScoredCandidate] = []
        for position, line in enumerate(lines):
            if not line.strip():
                continue

            overlap = query_tokens & fold_tokens(line)
            score = float(len(overlap))
            if overlap:
                score += _BOOSTER_BONUS * len(overlap & BOOSTER_TOKENS)
                if ":" in line or "：" in line:
                    score += _COLON_BONUS
            if strict and _HOURS_LINE_RE.search(line):
                score += _HOURS_BONUS

            if score > 0:
                scored.append(ScoredCandidate(position, score))
        return scored
