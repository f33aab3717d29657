"""
Shopbot - Section Chunker
==========================
Splits the knowledge document into heading-delimited chunks and
derives the shop's identity (``ShopMeta``) from its text.

Chunking rule
-------------
A heading is a line that starts with 1–6 ``#`` characters (not followed
by a seventh), optionally followed by a space.  Every chunk starts with
its heading line and runs up to, but not including, the next heading.
Text before the first heading becomes a heading-less *preamble* chunk.
Whitespace-only fragments are dropped, so joining the chunks rebuilds
the document modulo surrounding whitespace.

Usage:
    from shopbot.src.core.chunker import split_sections, extract_shop_meta
    chunks = split_sections(document_text)
    meta   = extract_shop_meta(document_text)
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# Zero-width split in front of every heading line, keeping the heading
# attached to the block it introduces.
_HEADING_SPLIT_PATTERN = re.compile(r"^(?=#{1,6}(?!#))", re.MULTILINE)
_HEADING_LINE_RE = re.compile(r"^#{1,6}(?!#)\s?(.*)$")

# ── Shop identity patterns ─────────────────────────────────────────────
_SHOP_NAME_RE = re.compile(r"^\s*[-*•]?\s*(?:shop name|restaurant name|name|ชื่อร้าน|店名|店名称|상호|nombre|nome)\s*[:：]\s*(.+?)\s*$", re.IGNORECASE | re.MULTILINE)
_LINE_ID_RE = re.compile(r"\bLINE(?:\s*(?:ID|OA))?\s*[:：]?\s*(@[\w.\-]+)", re.IGNORECASE)
_HANDLE_RE = re.compile(r"(?<![\w.])(@[A-Za-z0-9_][\w.\-]{1,})")
_PHONE_RE = re.compile(r"(?:\+?\d[\d\-\s]{7,}\d)")

_DEFAULT_SHOP_NAME = "the shop"


@dataclass(frozen=True, slots=True)
class Chunk:
    """One heading-delimited section of the knowledge document."""

    index: int
    text: str
    heading: str | None = None
    embedding: tuple[float, ...] | None = None


    @property
    def title(self) -> str:
        """Heading text without the ``#`` marker ("" for the preamble)."""
        if self.heading is None:
            return ""
        match = _HEADING_LINE_RE.match(self.heading)
        return match.group(1).strip() if match else self.heading


@dataclass(frozen=True, slots=True)
class ShopMeta:
    """Shop name and contact handle used to personalise prompts."""

    name: str = _DEFAULT_SHOP_NAME
    contact: str | None = None


def is_heading(line: str) -> bool:
    return bool(_HEADING_LINE_RE.match(line))


def split_sections(text: str) -> list[Chunk]:
    """
    Split *text* at heading lines into ordered ``Chunk`` objects.

    Returns
    -------
    list[Chunk]
        Chunks in document order, each holding at most one heading.
        Empty input yields an empty list.
    """
    chunks: list[Chunk] = []
    for block in _HEADING_SPLIT_PATTERN.split(text):
        block = block.strip()
        if not block:
            continue
        first_line = block.split("\n", 1)[0]
        heading = first_line if is_heading(first_line) else None
        chunks.append(Chunk(index=len(chunks), text=block, heading=heading))
    return chunks


def extract_shop_meta(text: str) -> ShopMeta:
    """
    Derive ``ShopMeta`` from the document by pattern matching.

    Name: an explicit ``Name:`` / ``ชื่อร้าน:``-style line wins, then the
    first level-1 heading.  Contact: a ``LINE`` id, then any ``@handle``,
    then the first phone-number-like run.
    """
    name = _DEFAULT_SHOP_NAME
    match = _SHOP_NAME_RE.search(text)
    if match:
        name = match.group(1)
    else:
        for line in text.split("\n"):
            if line.startswith("# "):
                name = line[2:].strip() or name
                break

    contact = None
    for pattern in (_LINE_ID_RE, _HANDLE_RE, _PHONE_RE):
        found = pattern.search(text)
        if found:
            contact = found.group(1) if pattern.groups else found.group(0).strip()
            break

    return ShopMeta(name=name, contact=contact)
