"""Tests for llmwire.similarity."""

import pytest

from llmwire.similarity import jaro, similar, suggest


class TestJaro:

    def test_identical(self):
        assert jaro("temperature", "temperature") == 1.0

    def test_empty(self):
        assert jaro("", "abc") == 0.0
        assert jaro("abc", "") == 0.0

    def test_no_common_characters(self):
        assert jaro("abc", "xyz") == 0.0

    @pytest.mark.parametrize("a,b,expected", [
        ("MARTHA", "MARHTA", 0.944),
        ("DWAYNE", "DUANE", 0.822),
        ("DIXON", "DICKSONX", 0.767),
    ])
    def test_reference_values(self, a, b, expected):
        assert jaro(a, b) == pytest.approx(expected, abs=1e-3)

    def test_symmetric(self):
        assert jaro("custon_option", "custom_option") == pytest.approx(
            jaro("custom_option", "custon_option")
        )


class TestSuggest:

    def test_typo_is_suggested(self):
        assert similar("custon_option", "custom_option")
        pairs = suggest(["custon_option"], ["custom_option", "another_option"])
        assert ("custon_option", "custom_option") in pairs

    def test_unrelated_key_not_suggested(self):
        assert suggest(["zzz"], ["custom_option"]) == []
