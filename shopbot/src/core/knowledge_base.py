"""
Shopbot - Knowledge Base Cache
===============================
Owns the process-wide, read-mostly view of the knowledge file.

Architecture
------------
``KnowledgeDocument``
    Raw UTF-8 content + last-modified timestamp (``mtime``).  An absent
    file is an empty document with ``mtime=None`` — a valid state
    meaning "no facts available".

``KnowledgeSnapshot``
    Immutable bundle of document + chunks (with cached embeddings) +
    ``ShopMeta``.  Built in full on every reload, never edited.

``KnowledgeBase``
    Single-writer cache holding exactly one snapshot reference.
    Readers call ``snapshot`` (or ``ensure_fresh()``) and always see a
    complete old or complete new snapshot: reload builds the new one
    off to the side and swaps the reference in one assignment.
    Reloads serialize on one ``asyncio.Lock`` and re-check the mtime
    after acquiring it, so the per-request check and the directory
    watcher never run two reloads at once.

Reload triggers
---------------
• ``ensure_fresh()`` — stat the file, reload only if the mtime changed.
• ``watch()``        — background task on ``watchfiles.awatch`` over the
  containing directory; bursts of writes inside the debounce window
  coalesce into one reload.

Usage:
    kb = KnowledgeBase(settings.KB_PATH, embedder=EmbeddingClient())
    snapshot = await kb.ensure_fresh()
    task = kb.start_watcher()          # watch mode only
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field, replace
from pathlib import Path

from watchfiles import Change, awatch

from shopbot.src.core.chunker import Chunk, ShopMeta, extract_shop_meta, split_sections
from shopbot.src.core.llm_client import Embedder
from shopbot.src.utils.logger import get_logger
from shopbot.src.utils.text_utils import clean_text

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class KnowledgeDocument:
    """Full text of the knowledge source and the mtime it was read at."""

    content: str = ""
    mtime: float | None = None

    @property
    def is_empty(self) -> bool:
        return not self.content.strip()


@dataclass(frozen=True, slots=True)
class KnowledgeSnapshot:
    """Everything derived from one reading of the knowledge file."""

    document: KnowledgeDocument = field(default_factory=KnowledgeDocument)
    chunks: tuple[Chunk, ...] = ()
    meta: ShopMeta = field(default_factory=ShopMeta)
    loaded_at: float | None = None

    @property
    def embedded_count(self) -> int:
        return sum(1 for c in self.chunks if c.embedding is not None)


EMPTY_SNAPSHOT = KnowledgeSnapshot()


class KnowledgeBase:
    """
    Explicitly owned knowledge cache, passed by reference to the engine.

    Parameters
    ----------
    path
        The markdown knowledge file.
    embedder
        Optional ``Embedder``.  When given, every reload embeds all
        chunks in one batched call; when ``None`` (lexical retrieval),
        chunks carry no vectors and no upstream call is made.
    debounce_ms
        Quiet period used by the directory watcher.
    """

    def __init__(self, path: Path, embedder: Embedder | None = None, debounce_ms: int = 300) -> None:
        self._path = Path(path)
        self._embedder = embedder
        self._debounce_ms = debounce_ms
        self._snapshot: KnowledgeSnapshot = EMPTY_SNAPSHOT
        self._observed_mtime: float | None = None
        self._observed = False
        self._lock = asyncio.Lock()
        self.reload_count = 0


    @property
    def path(self) -> Path:
        return self._path


    @property
    def snapshot(self) -> KnowledgeSnapshot:
        """The current snapshot (a single reference read — never torn)."""
        return self._snapshot

    # ══════════════════════════════════════════════════════════════════
    #  MTIME-CHECKED RELOAD
    # ══════════════════════════════════════════════════════════════════

    def _stat_mtime(self) -> float | None:
        try:
            return self._path.stat().st_mtime
        except FileNotFoundError:
            return None


    def is_stale(self) -> bool:
        """True before the first load and whenever the file's mtime changed."""
        return not self._observed or self._stat_mtime() != self._observed_mtime


    async def ensure_fresh(self) -> KnowledgeSnapshot:
        """
        Return the current snapshot, reloading first if the file changed.

        Unchanged files are neither re-read nor re-embedded.
        """
        if self.is_stale():
            await self.reload()
        return self._snapshot


    async def reload(self, force: bool = False) -> KnowledgeSnapshot:
        """
        Rebuild and swap the snapshot.

        Serialised on the instance lock.  Unless *force* is set, the
        staleness check is repeated after the lock is acquired, so
        callers that queued behind an in-flight reload return at once.
        """
        async with self._lock:
            if not force and not self.is_stale():
                return self._snapshot

            mtime = self._stat_mtime()
            if mtime is None:
                if self._observed_mtime is not None or not self._observed:
                    logger.warning("[KB] not found: %s — answering without knowledge.", self._path)
                self._snapshot = EMPTY_SNAPSHOT
                self._observed_mtime = None
                self._observed = True
                return self._snapshot

            t_start = time.perf_counter()
            logger.info("[KB] Reloading from %s ...", self._path)
            snapshot = await self._build_snapshot(mtime)

            self._snapshot = snapshot
            self._observed_mtime = mtime
            self._observed = True
            self.reload_count += 1

            logger.info("[KB] Reload complete. %d chunk(s), %d embedded, in %.1fms", len(snapshot.chunks), snapshot.embedded_count, (time.perf_counter() - t_start) * 1000)
            return snapshot


    async def _build_snapshot(self, mtime: float) -> KnowledgeSnapshot:
        try:
            raw = await asyncio.to_thread(self._path.read_text, encoding="utf-8")
        except FileNotFoundError:
            logger.warning("[KB] %s vanished while reloading.", self._path)
            return EMPTY_SNAPSHOT

        content = clean_text(raw)
        chunks = split_sections(content)

        if self._embedder is not None and chunks:
            vectors = await self._embedder.embed([c.text for c in chunks])
            chunks = [replace(c, embedding=tuple(v) if v is not None else None) for c, v in zip(chunks, vectors)]

        return KnowledgeSnapshot(document=KnowledgeDocument(content=content, mtime=mtime), chunks=tuple(chunks), meta=extract_shop_meta(content), loaded_at=time.time())

    # ══════════════════════════════════════════════════════════════════
    #  DIRECTORY WATCHER
    # ══════════════════════════════════════════════════════════════════

    def _is_our_file(self, change: Change, path: str) -> bool:
        return Path(path).name == self._path.name


    async def watch(self, stop_event: asyncio.Event | None = None) -> None:
        """
        Reload whenever the knowledge file changes on disk.

        ``awatch`` coalesces bursts of events inside ``debounce_ms`` into
        one batch, so rapid successive saves trigger a single reload.
        Runs until cancelled or *stop_event* is set.
        """
        directory = self._path.parent
        directory.mkdir(parents=True, exist_ok=True)
        logger.info("[KB] Watching %s (debounce=%dms)", directory, self._debounce_ms)

        async for changes in awatch(directory, watch_filter=self._is_our_file, debounce=self._debounce_ms, stop_event=stop_event, recursive=False):
            logger.debug("[KB] Change batch: %s", sorted(c.name for c, _ in changes))
            try:
                await self.reload(force=True)
            except Exception:
                logger.exception("[KB] Reload after change failed — keeping previous snapshot.")


    def start_watcher(self) -> asyncio.Task[None]:
        """Start ``watch()`` as a named background task tied to the caller's lifetime."""
        return asyncio.create_task(self.watch(), name="kb-watcher")


    def health(self) -> dict[str, object]:
        snap = self._snapshot
        return {
            "path": str(self._path),
            "loaded": not snap.document.is_empty,
            "chunks": len(snap.chunks),
            "embedded_chunks": snap.embedded_count,
            "last_modified": snap.document.mtime,
            "loaded_at": snap.loaded_at,
            "shop_name": snap.meta.name,
            "reloads": self.reload_count,
        }
