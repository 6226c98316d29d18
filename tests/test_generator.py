"""
tests/test_generator.py -- Unit tests for core/generator.py.

Covers:
  - Requested length and character classes are honoured
  - Ambiguous characters are excluded on request
  - No character class selected -> NoCharacterTypesSelected
  - Length bounds
  - Strength labels at the scoring thresholds
"""

from __future__ import annotations

import string

import pytest

from core.errors import InvalidRequestError, NoCharacterTypesSelected
from core.generator import AMBIGUOUS, SYMBOLS, build_charset, generate_password, password_strength


class TestGeneratePassword:
    def test_default_length_and_strength(self) -> None:
        generated = generate_password()
        assert len(generated.password) == 16
        assert generated.strength == "strong"

    def test_digits_only(self) -> None:
        generated = generate_password(
            length=64,
            include_uppercase=False,
            include_lowercase=False,
            include_symbols=False,
        )
        assert set(generated.password) <= set(string.digits)

    def test_no_symbols(self) -> None:
        password = generate_password(length=128, include_symbols=False).password
        assert not set(password) & set(SYMBOLS)

    def test_exclude_ambiguous(self) -> None:
        password = generate_password(length=128, include_symbols=False, exclude_ambiguous=True).password
        assert not set(password) & AMBIGUOUS

    def test_no_character_types(self) -> None:
        with pytest.raises(NoCharacterTypesSelected):
            generate_password(
                include_uppercase=False,
                include_lowercase=False,
                include_numbers=False,
                include_symbols=False,
            )

    @pytest.mark.parametrize("length", [0, 3, 129])
    def test_length_out_of_range(self, length: int) -> None:
        with pytest.raises(InvalidRequestError):
            generate_password(length=length)

    def test_two_calls_differ(self) -> None:
        assert generate_password(length=32).password != generate_password(length=32).password


class TestCharset:
    def test_full_charset(self) -> None:
        charset = build_charset()
        assert set(string.ascii_letters + string.digits) <= set(charset)
        assert set(SYMBOLS) <= set(charset)

    def test_empty_when_nothing_selected(self) -> None:
        assert build_charset(False, False, False, False) == ""


class TestStrength:
    @pytest.mark.parametrize(
        "length,classes,expected",
        [
            (4, 1, "weak"),
            (8, 1, "weak"),
            (12, 2, "fair"),
            (12, 3, "good"),
            (16, 3, "good"),
            (16, 4, "strong"),
            (20, 4, "strong"),
            (24, 4, "very_strong"),
        ],
    )
    def test_thresholds(self, length: int, classes: int, expected: str) -> None:
        assert password_strength(length, classes) == expected
