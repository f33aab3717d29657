"""
Shopbot - Response Guard
=========================
Structured-answer envelope parsing.

The model is instructed to emit only ``{"answer": "..."}`` or
``{"no_answer": true}``.  ``parse_envelope`` maps its raw output onto
two tagged variants:

    Answer(text)  — a non-blank ``answer`` string and no ``no_answer`` flag
    NoAnswer()    — everything else: invalid JSON, a non-object, the
                    ``no_answer`` flag, a missing/blank/non-string answer

Parsing never raises; "I don't know" is a structural outcome rather
than free-form prose.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, ValidationError

from shopbot.src.utils.logger import get_logger

logger = get_logger(__name__)

# ```json ... ``` wrappers some models add despite instructions
_CODE_FENCE_RE = re.compile(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", re.DOTALL | re.IGNORECASE)


class _Envelope(BaseModel):
    model_config = ConfigDict(extra="ignore", strict=True)

    answer: str | None = None
    no_answer: bool = False


@dataclass(frozen=True, slots=True)
class Answer:
    text: str


@dataclass(frozen=True, slots=True)
class NoAnswer:
    reason: str = "no_answer"


GuardResult = Answer | NoAnswer


def parse_envelope(raw: str) -> GuardResult:
    """Parse raw model output into ``Answer`` or ``NoAnswer``."""
    text = (raw or "").strip()
    fenced = _CODE_FENCE_RE.match(text)
    if fenced:
        text = fenced.group(1)

    try:
        envelope = _Envelope.model_validate_json(text)
    except ValidationError:
        logger.warning("[GUARD] Unparsable model output (%d chars): %.80s", len(text), text)
        return NoAnswer(reason="unparsable")

    if envelope.no_answer:
        return NoAnswer()
    if envelope.answer is None or not envelope.answer.strip():
        return NoAnswer(reason="missing_answer")
    return Answer(envelope.answer.strip())

