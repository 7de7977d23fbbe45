"""
Character classification for the repairing parser.

Every predicate takes a single character, or the empty string that the
parser uses as its "past the end of input" sentinel. The sentinel is never
a member of any class, so all predicates return False for it.
"""

from typing import Dict, FrozenSet

WHITESPACE: FrozenSet[str] = frozenset(' \n\t\r')

# Exotic spaces, each repaired to a plain ' '
SPECIAL_WHITESPACE: FrozenSet[str] = frozenset(
    ['\u00a0', '\u202f', '\u205f', '\u3000']
    + [chr(code) for code in range(0x2000, 0x200B)]  # en quad .. hair space
)

DOUBLE_QUOTE = '"'
DOUBLE_QUOTE_LIKE: FrozenSet[str] = frozenset(['"', '\u201c', '\u201d'])  # " “ ”
SINGLE_QUOTE_LIKE: FrozenSet[str] = frozenset(
    ["'", '\u2018', '\u2019', '`', '\u00b4']  # ' ‘ ’ ` ´
)
QUOTES: FrozenSet[str] = DOUBLE_QUOTE_LIKE | SINGLE_QUOTE_LIKE

DIGITS: FrozenSet[str] = frozenset('0123456789')
HEX_DIGITS: FrozenSet[str] = frozenset('0123456789abcdefABCDEF')

DELIMITERS: FrozenSet[str] = frozenset(',:[]{}()\n') | QUOTES

# Raw control characters allowed to appear in a string, mapped to their escape
CONTROL_CHARACTER_ESCAPES: Dict[str, str] = {
    '\b': '\\b',
    '\f': '\\f',
    '\n': '\\n',
    '\r': '\\r',
    '\t': '\\t',
}

# Characters that form a valid JSON escape after a backslash (\u handled apart)
ESCAPE_CHARACTERS: FrozenSet[str] = frozenset('"\\/bfnrt')

UNQUOTED_START_EXTRA: FrozenSet[str] = frozenset('_$')


def is_digit(char: str) -> bool:
    return char in DIGITS


def is_non_zero_digit(char: str) -> bool:
    return char in DIGITS and char != '0'


def is_hex(char: str) -> bool:
    return char in HEX_DIGITS


def is_whitespace(char: str) -> bool:
    """Whitespace JSON itself allows between tokens."""
    return char in WHITESPACE


def is_special_whitespace(char: str) -> bool:
    """Non-breaking and typographic spaces that JSON does not allow."""
    return char in SPECIAL_WHITESPACE


def is_double_quote(char: str) -> bool:
    return char == DOUBLE_QUOTE


def is_double_quote_like(char: str) -> bool:
    return char in DOUBLE_QUOTE_LIKE


def is_single_quote_like(char: str) -> bool:
    return char in SINGLE_QUOTE_LIKE


def is_quote(char: str) -> bool:
    return char in QUOTES


def is_control_character(char: str) -> bool:
    return char in CONTROL_CHARACTER_ESCAPES


def is_valid_string_character(char: str) -> bool:
    """Whether the character may appear unescaped inside a JSON string."""
    return len(char) == 1 and ord(char) >= 0x20


def is_delimiter(char: str) -> bool:
    """Characters that end a bare (unquoted) token."""
    return char in DELIMITERS


def is_start_of_value(char: str) -> bool:
    """Whether a JSON value could begin with this character."""
    return (
        char.isalpha()
        or char.isdigit()
        or char in ('[', '{', '-')
        or char in QUOTES
    )


def is_unquoted_start(char: str) -> bool:
    """Whether a bare token such as a key name or a function name may begin here."""
    return char.isalpha() or char in UNQUOTED_START_EXTRA


def is_unquoted_key_start(char: str) -> bool:
    """Whether a bare object key may begin here; keys may also be numbers."""
    return is_unquoted_start(char) or is_digit(char) or char == '-'
