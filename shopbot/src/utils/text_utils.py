"""
Shopbot - Text Utilities
=========================
Helper functions for text cleaning, tokenisation, synonym folding,
word-safe truncation and image-reference extraction.

These utilities are consumed by the chunker, the retrievers and the
chat engine, and should remain stateless and side-effect-free.
"""

from __future__ import annotations

import re
import unicodedata

from shopbot.config.prompt_templates import SYNONYMS

# ── Non-printable character pattern ────────────────────────────────────
# Matches control characters (C0/C1), except \n, \r, \t which we handle
# separately. Also catches BOM, zero-width chars, soft hyphens, etc.
_NON_PRINTABLE_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f\ufeff\u200b\u200c\u200d\u200e\u200f\u00ad\u2060\ufffe]")

# Markdown image reference: ![alt](target "optional title")
_IMAGE_REF_RE = re.compile(r"!\[[^\]]*\]\(\s*<?([^)\s>]+)>?(?:\s+\"[^\"]*\")?\s*\)")

_WHITESPACE_RE = re.compile(r"\s")

TRUNCATION_MARKER = "…"

# Synonym keys split by matching rule (see prompt_templates.SYNONYMS)
_TOKEN_SYNONYMS: dict[str, str] = {k: v for k, v in SYNONYMS.items() if k.isascii() and " " not in k}
_SUBSTRING_SYNONYMS: dict[str, str] = {k: v for k, v in SYNONYMS.items() if k not in _TOKEN_SYNONYMS}


# ── Public API ─────────────────────────────────────────────────────────

def clean_text(text: str) -> str:
    """
    Normalise raw knowledge-file text.

    Steps:
        1. Unicode NFC normalisation (canonical composition) so Thai
           vowel marks and accented Latin letters compare equal.
        2. Strip non-printable / zero-width characters (BOM, soft
           hyphens, directional marks).
        3. Unify line endings to ``\\n``.
        4. Strip trailing whitespace from every line.

    Leading indentation and blank lines are kept so heading detection
    and line windows see the document as written.
    """
    text = unicodedata.normalize("NFC", text)
    text = _NON_PRINTABLE_RE.sub("", text)
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return "\n".join(line.rstrip() for line in text.split("\n"))


def tokenize(text: str) -> list[str]:
    """
    Split *text* into lowercase tokens.

    Any run of characters that are not letters, digits or combining
    marks is a separator.  Combining marks count as token characters
    because Thai vowel and tone marks are category ``Mn``.
    """
    chars = [ch if unicodedata.category(ch)[0] in "LNM" else " " for ch in text.lower()]
    return "".join(chars).split()


def fold_tokens(text: str) -> set[str]:
    """
    Tokenise *text* and add the canonical token of every synonym found.

    ASCII single-word synonyms must match a whole token; other synonyms
    (non-Latin scripts, accented or multi-word terms) match as a
    substring of the lowercased text.

    Example::

        fold_tokens("เมนูแนะนำ")     → {"เมนูแนะนำ", "menu"}
        fold_tokens("Opening hours") → {"opening", "hours"}
    """
    tokens = tokenize(text)
    folded = set(tokens)
    for token in tokens:
        canonical = _TOKEN_SYNONYMS.get(token)
        if canonical:
            folded.add(canonical)

    lowered = text.lower()
    for term, canonical in _SUBSTRING_SYNONYMS.items():
        if term in lowered:
            folded.add(canonical)
    return folded


def truncate_at_word(text: str, max_chars: int) -> str:
    """
    Cut *text* to at most *max_chars* characters (plus marker).

    The cut lands on a whitespace boundary so no word is split, and
    ``TRUNCATION_MARKER`` is appended.  Text without any whitespace in
    range (e.g. unspaced Thai) is cut hard at *max_chars*.
    """
    if len(text) <= max_chars:
        return text

    head = text[:max_chars]
    if not text[max_chars].isspace():
        last_ws = max((m.start() for m in _WHITESPACE_RE.finditer(head)), default=-1)
        if last_ws > 0:
            head = head[:last_ws]

    return head.rstrip() + "\n" + TRUNCATION_MARKER


def extract_image_refs(text: str) -> list[str]:
    """Return markdown image targets in *text*, de-duplicated, in order."""
    seen: dict[str, None] = {}
    for match in _IMAGE_REF_RE.finditer(text):
        seen.setdefault(match.group(1), None)
    return list(seen)


def sample_message(text: str, limit: int = 200) -> str:
    """Single-line excerpt of a user message for embedding in prompts."""
    flat = " ".join(text.split())
    return flat if len(flat) <= limit else flat[:limit].rstrip() + TRUNCATION_MARKER
