"""Tests for prompt-mode selection and system-prompt composition."""

from shopbot.src.core.chunker import ShopMeta
from shopbot.src.core.language import Language
from shopbot.src.core.prompt_composer import STRICT_TEMPERATURE, PromptMode, compose, matched_topics, select_mode


class TestSelectMode:
    def test_topic_queries_are_strict(self):
        assert select_mode("What time do you open?") is PromptMode.STRICT
        assert select_mode("ราคาเท่าไหร่") is PromptMode.STRICT
        assert matched_topics("Can I book a table?") == {"booking"}

    def test_other_queries_are_general(self):
        assert select_mode("Tell me a joke") is PromptMode.GENERAL
        assert matched_topics("Tell me a joke") == set()


class TestCompose:
    META = ShopMeta(name="Baan Suan Kitchen", contact="@baansuan")

    def test_strict_prompt(self):
        plan = compose(PromptMode.STRICT, self.META, "Mon-Fri: 10:00-20:00", "เปิดกี่โมง", Language.TH)

        assert plan.temperature == STRICT_TEMPERATURE == 0.0
        assert plan.max_tokens == 400
        assert "Baan Suan Kitchen" in plan.system_prompt
        assert "(@baansuan)" in plan.system_prompt
        assert "Mon-Fri: 10:00-20:00" in plan.system_prompt
        assert "Reply in Thai only" in plan.system_prompt
        assert '"""เปิดกี่โมง"""' in plan.system_prompt
        assert '{"no_answer": true}' in plan.system_prompt

    def test_general_prompt_uses_general_temperature(self):
        plan = compose(PromptMode.GENERAL, ShopMeta(), "whole document", "Tell me a joke", Language.EN, general_temperature=0.5, max_tokens=250)

        assert plan.mode is PromptMode.GENERAL
        assert plan.temperature == 0.5
        assert plan.max_tokens == 250
        assert "the shop" in plan.system_prompt
        assert "whole document" in plan.system_prompt
        assert '{"answer": "<your reply>"}' in plan.system_prompt

    def test_long_message_is_sampled(self):
        plan = compose(PromptMode.GENERAL, ShopMeta(), "ctx", "x" * 1000, Language.EN)

        assert "x" * 1000 not in plan.system_prompt
        assert "x" * 200 in plan.system_prompt
