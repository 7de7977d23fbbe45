from enum import Enum

from jsonmend._core.parsers.chars import (
    is_double_quote,
    is_double_quote_like,
    is_single_quote_like,
)


class QuoteFamily(str, Enum):
    """The family of the quote character that opened the current string."""

    NONE = 'none'
    SINGLE_LIKE = 'single_like'
    DOUBLE_EXACT = 'double_exact'
    DOUBLE_LIKE = 'double_like'

    @classmethod
    def of(cls, char: str) -> 'QuoteFamily':
        """Classify an opening quote character."""
        if is_single_quote_like(char):
            return cls.SINGLE_LIKE
        if is_double_quote(char):
            return cls.DOUBLE_EXACT
        if is_double_quote_like(char):
            return cls.DOUBLE_LIKE
        return cls.NONE


class QuoteMatcher:
    """
    Decides whether a character closes the string that is currently open.

    A string opened with a plain ``"`` only closes on ``"``, so curly quotes
    inside it are kept as content. A string opened with a curly double quote
    closes on any double-quote-like character, which repairs mismatched
    smart-quote pairs such as ``“text”``. Single-quote-like openers close on
    any single-quote-like character and never on ``"``.
    """

    def __init__(self):
        self.family = QuoteFamily.NONE

    def set_start_quote(self, char: str) -> None:
        self.family = QuoteFamily.of(char)

    def is_matching_end_quote(self, char: str) -> bool:
        if self.family is QuoteFamily.SINGLE_LIKE:
            return is_single_quote_like(char)
        if self.family is QuoteFamily.DOUBLE_EXACT:
            return is_double_quote(char)
        if self.family is QuoteFamily.DOUBLE_LIKE:
            return is_double_quote_like(char)
        return False

    def reset(self) -> None:
        self.family = QuoteFamily.NONE
