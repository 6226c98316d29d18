"""
core/generator.py -- Random password generation and strength labelling.

generate_password() draws every character independently from the selected
character classes using the `secrets` CSPRNG (secrets.choice, so there is no
modulo bias). Ambiguous glyphs (0 O 1 l I) can be excluded for passwords that
will be read aloud or typed by hand.

Strength is a coarse label derived from length and the number of selected
classes, not an entropy estimate:

  length >= 8, 12, 16, 20, 24   +1 each
  classes >= 2, 3, 4            +1 each

  score <= 1 weak | <= 3 fair | <= 5 good | <= 7 strong | else very_strong
"""

from __future__ import annotations

import secrets
import string
from dataclasses import dataclass

from core.errors import InvalidRequestError, NoCharacterTypesSelected

LOWERCASE = string.ascii_lowercase
UPPERCASE = string.ascii_uppercase
NUMBERS = string.digits
SYMBOLS = "!@#$%^&*()_+-=[]{}|;:,.<>?"
AMBIGUOUS = frozenset("0O1lI")

MIN_LENGTH = 4
MAX_LENGTH = 128


@dataclass
class GeneratedPassword:
    password: str
    strength: str  # "weak" | "fair" | "good" | "strong" | "very_strong"


def build_charset(
    include_uppercase: bool = True,
    include_lowercase: bool = True,
    include_numbers: bool = True,
    include_symbols: bool = True,
    exclude_ambiguous: bool = False,
) -> str:
    charset = ""
    if include_lowercase:
        charset += LOWERCASE
    if include_uppercase:
        charset += UPPERCASE
    if include_numbers:
        charset += NUMBERS
    if include_symbols:
        charset += SYMBOLS
    if exclude_ambiguous:
        charset = "".join(c for c in charset if c not in AMBIGUOUS)
    return charset


def password_strength(length: int, class_count: int) -> str:
    score = sum(1 for threshold in (8, 12, 16, 20, 24) if length >= threshold)
    score += sum(1 for threshold in (2, 3, 4) if class_count >= threshold)
    if score <= 1:
        return "weak"
    if score <= 3:
        return "fair"
    if score <= 5:
        return "good"
    if score <= 7:
        return "strong"
    return "very_strong"


def generate_password(
    length: int = 16,
    include_uppercase: bool = True,
    include_lowercase: bool = True,
    include_numbers: bool = True,
    include_symbols: bool = True,
    exclude_ambiguous: bool = False,
) -> GeneratedPassword:
    """Generate a random password and label its strength.

    Raises NoCharacterTypesSelected when every class is disabled and
    InvalidRequestError when length falls outside MIN_LENGTH..MAX_LENGTH.
    """
    if not MIN_LENGTH <= length <= MAX_LENGTH:
        raise InvalidRequestError(f"Password length must be between {MIN_LENGTH} and {MAX_LENGTH}")
    charset = build_charset(
        include_uppercase=include_uppercase,
        include_lowercase=include_lowercase,
        include_numbers=include_numbers,
        include_symbols=include_symbols,
        exclude_ambiguous=exclude_ambiguous,
    )
    if not charset:
        raise NoCharacterTypesSelected()
    password = "".join(secrets.choice(charset) for _ in range(length))
    class_count = sum([include_uppercase, include_lowercase, include_numbers, include_symbols])
    return GeneratedPassword(password=password, strength=password_strength(length, class_count))
