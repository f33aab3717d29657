"""Tests for text cleaning, synonym folding and truncation."""

from shopbot.src.utils.text_utils import TRUNCATION_MARKER, clean_text, extract_image_refs, fold_tokens, sample_message, tokenize, truncate_at_word


class TestTruncateAtWord:
    def test_short_text_is_unchanged(self):
        assert truncate_at_word("Pad Thai 89 THB", 100) == "Pad Thai 89 THB"

    def test_never_splits_a_word(self):
        text = "alpha beta gamma delta epsilon"
        result = truncate_at_word(text, 12)

        assert result == "alpha beta\n" + TRUNCATION_MARKER
        body = result.removesuffix("\n" + TRUNCATION_MARKER)
        assert all(word in text.split() for word in body.split())

    def test_cut_exactly_at_a_space_keeps_last_word(self):
        assert truncate_at_word("alpha beta gamma", 10) == "alpha beta\n" + TRUNCATION_MARKER

    def test_text_without_spaces_is_cut_hard(self):
        result = truncate_at_word("ก" * 50, 10)

        assert result == "ก" * 10 + "\n" + TRUNCATION_MARKER


class TestFoldTokens:
    def test_english_synonym_folds_to_canonical(self):
        assert "hours" in fold_tokens("Opening hours?")
        assert "menu" in fold_tokens("What food do you have")

    def test_thai_synonym_matches_inside_unspaced_text(self):
        assert "menu" in fold_tokens("เมนูแนะนำ")
        assert "hours" in fold_tokens("ร้านเปิดกี่โมง")

    def test_ascii_synonyms_match_whole_tokens_only(self):
        assert "hours" not in fold_tokens("timetable")

    def test_multi_word_synonym(self):
        assert "price" in fold_tokens("How much is the khao soi?")

    def test_tokenize_lowercases_and_splits_on_punctuation(self):
        assert tokenize("Pad-Thai, 89THB!") == ["pad", "thai", "89thb"]


class TestCleaning:
    def test_clean_text_strips_bom_and_unifies_newlines(self):
        assert clean_text("\ufeff# Menu  \r\nPad Thai\r\n") == "# Menu\nPad Thai\n"

    def test_extract_image_refs_deduplicates_in_order(self):
        text = "![a](one.jpg) text ![b](two.png)\n![again](one.jpg)"

        assert extract_image_refs(text) == ["one.jpg", "two.png"]

    def test_sample_message_is_single_line_and_bounded(self):
        sample = sample_message("line one\nline two " + "x" * 500, limit=50)

        assert "\n" not in sample
        assert sample.startswith("line one line two")
        assert sample.endswith(TRUNCATION_MARKER)
