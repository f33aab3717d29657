"""
Shopbot - Knowledge Base Inspection Script
===========================================
Operator CLI for checking a knowledge file before it goes live:
    1. Load settings (fail-fast on an invalid ``.env``).
    2. Load the knowledge file into a snapshot (optionally embedding
       every chunk through the upstream API).
    3. Print the detected shop identity and the chunk outline.
    4. Optionally dry-run retrieval for a query and print the context
       window the model would receive, plus the prompt mode and
       detected language.

Flags:
    --kb PATH      Inspect another knowledge file instead of ``KB_PATH``.
    --query TEXT   Dry-run retrieval for TEXT.
    --embed        Embed chunks (and the query) and use embedding retrieval.
                   Requires ``OPENROUTER_API_KEY``.

Usage:
    python -m shopbot.scripts.inspect_kb
    python -m shopbot.scripts.inspect_kb --query "What time do you open?"
    python -m shopbot.scripts.inspect_kb --embed --query "menu"
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import time
from pathlib import Path

# ── Ensure project root is importable when run directly ────────────────
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


# ── CLI Argument Parsing ───────────────────────────────────────────────

def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="inspect_kb", description="Shopbot — Inspect the knowledge file and dry-run retrieval.")
    parser.add_argument("--kb", type=Path, default=None, help="Knowledge file to inspect (defaults to KB_PATH).")
    parser.add_argument("--query", default=None, help="Dry-run retrieval for this query.")
    parser.add_argument("--embed", action="store_true", default=False, help="Embed chunks and use embedding retrieval (needs OPENROUTER_API_KEY).")
    return parser.parse_args(argv)


# ── Main Orchestration ─────────────────────────────────────────────────

async def run(args: argparse.Namespace) -> int:
    t_start = time.perf_counter()

    # ── 0. Load settings + .env ────────────────────────────────────────
    try:
        from shopbot.config.settings import settings
    except Exception as exc:
        print("\n[FATAL] Configuration error — check your .env file:\n")
        print(f"  {exc}")
        print()
        return 1

    from shopbot.src.core.knowledge_base import KnowledgeBase
    from shopbot.src.core.language import detect
    from shopbot.src.core.llm_client import EmbeddingClient
    from shopbot.src.core.prompt_composer import matched_topics, select_mode
    from shopbot.src.core.retrieval import EmbeddingRetriever, LexicalRetriever
    from shopbot.src.utils.logger import get_logger

    logger = get_logger(__name__)
    kb_path = args.kb or settings.KB_PATH

    # ── 1. Embedder (only with --embed) ────────────────────────────────
    embedder = None
    if args.embed:
        if not settings.has_api_key:
            logger.error("--embed requires OPENROUTER_API_KEY.")
            return 1
        embedder = EmbeddingClient(settings)

    # ── 2. Load snapshot ───────────────────────────────────────────────
    kb = KnowledgeBase(kb_path, embedder=embedder)
    snapshot = await kb.reload()
    load_ms = (time.perf_counter() - t_start) * 1000

    _print_outline(kb_path, snapshot, load_ms)
    if snapshot.document.is_empty:
        return 1

    # ── 3. Dry-run retrieval ───────────────────────────────────────────
    if args.query:
        query = args.query.strip()
        mode = select_mode(query)
        t_search = time.perf_counter()
        if embedder is not None:
            retriever = EmbeddingRetriever(embedder, threshold=settings.EMBEDDING_THRESHOLD, limit=settings.EMBEDDING_TOP_K)
            window = await retriever.retrieve(query, snapshot.chunks)
        else:
            window = LexicalRetriever().retrieve(query, snapshot.document.content, max_chars=settings.CONTEXT_MAX_CHARS)
        search_ms = (time.perf_counter() - t_search) * 1000

        print("=" * 60)
        print(f"  QUERY     : {query}")
        print(f"  Language  : {detect(query).value}")
        print(f"  Mode      : {mode.value}  (topics: {', '.join(sorted(matched_topics(query))) or '-'})")
        print(f"  Retrieval : {'embedding' if embedder is not None else 'lexical'} in {search_ms:.1f}ms")
        print("-" * 60)
        print(window.text if not window.is_empty else "  (no relevant context → no-information reply)")
        if window.images:
            print("-" * 60)
            print(f"  Images    : {', '.join(window.images)}")
        print("=" * 60)
        print()

    return 0


# ── Pretty-print helpers ──────────────────────────────────────────────

def _print_outline(kb_path: Path, snapshot: object, load_ms: float) -> None:
    print()
    print("=" * 60)
    print("  SHOPBOT — Knowledge Base")
    print("=" * 60)
    print(f"  File       : {kb_path}")
    if snapshot.document.is_empty:  # type: ignore[attr-defined]
        print("  Status     : missing or empty")
        print("=" * 60)
        print()
        return

    meta = snapshot.meta  # type: ignore[attr-defined]
    print(f"  Shop       : {meta.name}")
    print(f"  Contact    : {meta.contact or '-'}")
    print(f"  Chunks     : {len(snapshot.chunks)} ({snapshot.embedded_count} embedded)")  # type: ignore[attr-defined]
    print(f"  Load time  : {load_ms:.1f}ms")
    print("-" * 60)
    for chunk in snapshot.chunks:  # type: ignore[attr-defined]
        print(f"  [{chunk.index:>2}] {chunk.title[:44]:<44} {len(chunk.text):>6} chars")
    print("=" * 60)
    print()


# ── Entry point ────────────────────────────────────────────────────────

def main(argv: list[str] | None = None) -> None:
    sys.exit(asyncio.run(run(_parse_args(argv))))


if __name__ == "__main__":
    main()
