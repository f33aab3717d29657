"""
Shopbot - Language Detector
============================
Heuristic, script-first language classification of a user message.

``detect`` is a pure, total function over the closed ``Language`` enum:
it never raises and always returns a code, defaulting to English.

Priority order
--------------
Scripts overlap, so the order below is the tie-break:

    1. Thai script                 → ``th``
    2. Japanese kana               → ``ja``  (before CJK: Japanese text
                                              mixes kana with kanji)
    3. CJK unified ideographs      → ``zh``
    4. Hangul                      → ``ko``
    5. Spanish markers             → ``es``  (ñ ¿ ¡, acute vowels, or two
                                              or more stopwords)
    6. Italian markers             → ``it``  (grave vowels, or two or
                                              more stopwords)
    7. default                     → ``en``
"""

from __future__ import annotations

import re
from enum import Enum

from shopbot.config.prompt_templates import ITALIAN_STOPWORDS, LANGUAGE_NAMES, NO_INFO_RESPONSES, SPANISH_STOPWORDS
from shopbot.src.utils.text_utils import tokenize


class Language(str, Enum):
    TH = "th"
    JA = "ja"
    ZH = "zh"
    KO = "ko"
    ES = "es"
    IT = "it"
    EN = "en"

    @property
    def display_name(self) -> str:
        return LANGUAGE_NAMES[self.value]


# ── Script patterns ────────────────────────────────────────────────────
_THAI_RE = re.compile(r"[\u0E00-\u0E7F]")
_KANA_RE = re.compile(r"[\u3040-\u309F\u30A0-\u30FF\u31F0-\u31FF\uFF66-\uFF9F]")
_CJK_RE = re.compile(r"[\u4E00-\u9FFF\u3400-\u4DBF\uF900-\uFAFF]")
_HANGUL_RE = re.compile(r"[\uAC00-\uD7AF\u1100-\u11FF\u3130-\u318F]")

# ── Latin-language markers ─────────────────────────────────────────────
_SPANISH_ONLY_RE = re.compile(r"[ñÑ¿¡]")
_ACUTE_RE = re.compile(r"[áíóúÁÍÓÚ]")
_GRAVE_RE = re.compile(r"[àèìòùÀÈÌÒÙ]")

# Without an accent, one stopword is not enough ("Las Vegas", "una" in English)
_MIN_STOPWORD_HITS = 2


def detect(text: str) -> Language:
    """
    Classify *text* into a ``Language``.

    Examples::

        detect("สวัสดี")       → Language.TH
        detect("Hello there") → Language.EN
        detect("")            → Language.EN
    """
    if not text:
        return Language.EN

    if _THAI_RE.search(text):
        return Language.TH
    if _KANA_RE.search(text):
        return Language.JA
    if _CJK_RE.search(text):
        return Language.ZH
    if _HANGUL_RE.search(text):
        return Language.KO

    tokens = tokenize(text)
    spanish_hits = sum(1 for t in tokens if t in SPANISH_STOPWORDS)
    italian_hits = sum(1 for t in tokens if t in ITALIAN_STOPWORDS)

    if _SPANISH_ONLY_RE.search(text):
        return Language.ES
    if _ACUTE_RE.search(text) and not _GRAVE_RE.search(text) and spanish_hits >= italian_hits:
        return Language.ES
    if spanish_hits >= _MIN_STOPWORD_HITS and spanish_hits > italian_hits:
        return Language.ES

    if _GRAVE_RE.search(text) or italian_hits >= _MIN_STOPWORD_HITS:
        return Language.IT

    return Language.EN


def no_info_reply(language: Language) -> str:
    """Fixed "no information available" reply in *language*."""
    return NO_INFO_RESPONSES.get(language.value, NO_INFO_RESPONSES[Language.EN.value])
