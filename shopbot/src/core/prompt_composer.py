"""
Shopbot - Prompt Composer
==========================
Assembles the system instruction for one chat request.

Two mutually exclusive modes, chosen by ``select_mode``:

``STRICT``  (query folds to a topic token: hours, menu, price,
            promotion, booking, address, contact)
    Context-only answering, facts translated into the query language
    with names/times/numbers kept verbatim, polite decline when the
    fact is missing, at most two sentences.  Temperature 0.

``GENERAL`` (anything else)
    Free general answers, but shop facts only from the capped document
    view.  Non-zero temperature.

Both modes embed a literal sample of the user's message, forbid mixing
languages, and end with the structured-answer envelope instruction.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from shopbot.config.prompt_templates import ANSWER_ENVELOPE_INSTRUCTION, GENERAL_SYSTEM_TEMPLATE, STRICT_SYSTEM_TEMPLATE, TOPIC_TOKENS
from shopbot.src.core.chunker import ShopMeta
from shopbot.src.core.language import Language
from shopbot.src.utils.text_utils import fold_tokens, sample_message

STRICT_TEMPERATURE = 0.0


class PromptMode(str, Enum):
    STRICT = "strict"
    GENERAL = "general"


@dataclass(frozen=True, slots=True)
class PromptPlan:
    """A composed system prompt plus its sampling parameters."""

    mode: PromptMode
    system_prompt: str
    temperature: float
    max_tokens: int


def matched_topics(query: str) -> set[str]:
    return fold_tokens(query) & TOPIC_TOKENS


def select_mode(query: str) -> PromptMode:
    return PromptMode.STRICT if matched_topics(query) else PromptMode.GENERAL


def compose(mode: PromptMode, meta: ShopMeta, context: str, query: str, language: Language, general_temperature: float = 0.7, max_tokens: int = 400) -> PromptPlan:
    """
    Build the ``PromptPlan`` for *query*.

    Parameters
    ----------
    mode
        ``STRICT`` or ``GENERAL`` (see module docstring).
    meta
        Shop identity for personalisation.
    context
        Rendered context window (strict) or capped document view (general).
    language
        Target reply language.
    """
    template = STRICT_SYSTEM_TEMPLATE if mode is PromptMode.STRICT else GENERAL_SYSTEM_TEMPLATE
    contact_hint = f" ({meta.contact})" if meta.contact else ""

    system_prompt = template.format(
        shop_name=meta.name,
        contact_hint=contact_hint,
        language_name=language.display_name,
        message_sample=sample_message(query),
        context=context,
        envelope=ANSWER_ENVELOPE_INSTRUCTION,
    )
    temperature = STRICT_TEMPERATURE if mode is PromptMode.STRICT else general_temperature
    return PromptPlan(mode=mode, system_prompt=system_prompt, temperature=temperature, max_tokens=max_tokens)
