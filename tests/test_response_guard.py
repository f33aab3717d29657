"""Tests for the structured-answer envelope guard."""

import pytest

from shopbot.src.core.response_guard import Answer, NoAnswer, parse_envelope


class TestParseEnvelope:
    def test_answer_is_returned_trimmed(self):
        assert parse_envelope('{"answer": " 10:00-20:00 "}') == Answer("10:00-20:00")

    def test_no_answer_flag(self):
        assert parse_envelope('{"no_answer": true}') == NoAnswer()

    def test_free_prose_is_unparsable(self):
        result = parse_envelope("I think we open at 10")

        assert isinstance(result, NoAnswer)
        assert result.reason == "unparsable"

    def test_code_fenced_json_is_accepted(self):
        raw = '```json\n{"answer": "Pad Thai 89 THB"}\n```'

        assert parse_envelope(raw) == Answer("Pad Thai 89 THB")

    def test_no_answer_flag_wins_over_answer(self):
        assert isinstance(parse_envelope('{"answer": "maybe", "no_answer": true}'), NoAnswer)

    @pytest.mark.parametrize("raw", ['{"answer": "   "}', "{}", '{"other": "x"}'])
    def test_missing_or_blank_answer(self, raw):
        result = parse_envelope(raw)

        assert isinstance(result, NoAnswer)
        assert result.reason == "missing_answer"

    @pytest.mark.parametrize("raw", ['{"answer": 5}', '["answer"]', '"answer"', "", None])
    def test_wrong_shapes_are_unparsable(self, raw):
        result = parse_envelope(raw)

        assert isinstance(result, NoAnswer)
        assert result.reason == "unparsable"
