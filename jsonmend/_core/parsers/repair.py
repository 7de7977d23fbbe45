"""
Single-pass repairing parser.

The parser walks the input once, left to right, and writes a corrected copy
into an output buffer. At every point where the input departs from JSON it
applies a local repair: quoting bare keys, normalizing quote styles,
inserting missing commas, colons and closing brackets, stripping comments and
trailing commas, unwrapping JSONP/MongoDB function calls, converting Python
constants, joining concatenated strings, completing truncated numbers and
wrapping newline-delimited JSON into an array.

Only malformations without a repair rule raise a ``RepairError``.

Example:
    >>> repair_json("{name: 'John', active: True,}")
    '{"name": "John", "active": true}'
"""

import json
import logging
import re
from collections import Counter
from typing import Any, Optional

from jsonmend._core.environment import settings
from jsonmend._core.error import RepairError
from jsonmend._core.logging import get_logger
from jsonmend._core.parsers.buffer import OutputBuffer
from jsonmend._core.parsers.chars import (
    CONTROL_CHARACTER_ESCAPES,
    ESCAPE_CHARACTERS,
    is_control_character,
    is_delimiter,
    is_digit,
    is_double_quote,
    is_hex,
    is_non_zero_digit,
    is_quote,
    is_special_whitespace,
    is_start_of_value,
    is_unquoted_key_start,
    is_unquoted_start,
    is_valid_string_character,
    is_whitespace,
)
from jsonmend._core.parsers.quotes import QuoteMatcher

logger = get_logger(__name__)


# Objects, arrays and function calls nested deeper than this are rejected
# well before the interpreter's recursion limit
MAX_NESTING_DEPTH = 300

WORD_PATTERN = re.compile(r'\w+')

# (input spelling, JSON spelling); Python constants are repaired to JSON
KEYWORDS = (
    ('true', 'true'),
    ('false', 'false'),
    ('null', 'null'),
    ('True', 'true'),
    ('False', 'false'),
    ('None', 'null'),
)


class RepairSession:
    """
    State of one repair call: the input, the cursor, the output buffer and
    the quote matcher. A session is created per call and thrown away after,
    so nothing leaks from one document into the next.
    """

    def __init__(self, text: str):
        self.text = text
        self.index = 0
        self.depth = 0
        self.output = OutputBuffer()
        self.quotes = QuoteMatcher()
        self.stats: Counter = Counter()
        self.log_level = logging._nameToLevel[settings.repair_log_level]

    # Cursor helpers

    def char_at(self, offset: int = 0) -> str:
        """Character at cursor + offset, or '' outside the input."""
        position = self.index + offset
        if 0 <= position < len(self.text):
            return self.text[position]
        return ''

    def at_end(self) -> bool:
        return self.index >= len(self.text)

    def _repaired(self, stat: str, message: str, *args) -> None:
        self.stats[stat] += 1
        logger.log(self.log_level, message, *args)

    # Entry point

    def run(self) -> str:
        """Repair the whole input and return the corrected JSON text."""
        processed = self.parse_value()
        if not processed:
            if self.at_end():
                raise RepairError('Unexpected end of input', len(self.text))
            self._throw_unexpected_character()

        processed_comma = self.parse_character(',')
        if processed_comma:
            self.parse_whitespace_and_skip_comments()

        if (
            is_start_of_value(self.char_at())
            and self.output.ends_with_comma_or_newline()
        ):
            # A new value after the root value: newline delimited JSON
            if not processed_comma:
                self.output.insert_before_last_whitespace(',')
                self._repaired(
                    'commas_inserted',
                    'While parsing the root value we found another value, inserting a comma',
                )
            self.parse_newline_delimited_json()
        elif processed_comma:
            self.output.strip_last_occurrence(',')
            self._repaired(
                'commas_removed',
                'While parsing the root value we found a trailing comma, removing it',
            )

        if not self.at_end():
            self._throw_unexpected_character()

        return str(self.output)

    # Whitespace and comments

    def parse_whitespace_and_skip_comments(self) -> None:
        if self.at_end():
            return

        self.parse_whitespace()
        while self.parse_comment():
            self.parse_whitespace()

    def parse_whitespace(self) -> bool:
        whitespace = []
        while True:
            char = self.char_at()
            if is_whitespace(char):
                whitespace.append(char)
            elif is_special_whitespace(char):
                whitespace.append(' ')
                self._repaired(
                    'whitespace_normalized',
                    'Found special whitespace U+%04X, replacing it with a space',
                    ord(char),
                )
            else:
                break
            self.index += 1

        if not whitespace:
            return False

        self.output.append(''.join(whitespace))
        return True

    def parse_comment(self) -> bool:
        if self.char_at() != '/':
            return False

        if self.char_at(1) == '*':
            end = self.text.find('*/', self.index + 2)
            self.index = len(self.text) if end == -1 else end + 2
        elif self.char_at(1) == '/':
            end = self.text.find('\n', self.index + 2)
            self.index = len(self.text) if end == -1 else end
        else:
            return False

        # Spaces that led up to the comment go with it; a newline stays, it may
        # separate newline delimited values
        self.output.strip_trailing_spaces()
        self._repaired('comments_removed', 'Found a comment, removing it')
        return True

    # Single characters

    def parse_character(self, char: str) -> bool:
        if self.char_at() != char:
            return False
        self.output.append(char)
        self.index += 1
        return True

    def skip_character(self, char: str) -> bool:
        if self.char_at() != char:
            return False
        self.index += 1
        return True

    # Values

    def parse_value(self) -> bool:
        if self.depth >= MAX_NESTING_DEPTH:
            raise RepairError('Maximum nesting depth exceeded', self.index)

        self.depth += 1
        try:
            self.parse_whitespace_and_skip_comments()
            processed = (
                self.parse_object()
                or self.parse_array()
                or self.parse_string()
                or self.parse_number()
                or self.parse_keywords()
                or self.parse_unquoted_string()
            )
            self.parse_whitespace_and_skip_comments()
        finally:
            self.depth -= 1
        return processed

    def parse_object(self) -> bool:
        if self.char_at() != '{':
            return False

        self.output.append('{')
        self.index += 1
        self.parse_whitespace_and_skip_comments()

        initial = True
        while not self.at_end() and self.char_at() != '}':
            if not initial:
                if not self.parse_character(','):
                    self.output.insert_before_last_whitespace(',')
                    self._repaired(
                        'commas_inserted',
                        'While parsing an object we missed a comma between members, inserting one',
                    )
                self.parse_whitespace_and_skip_comments()
            else:
                initial = False

            processed_key = self.parse_string() or self.parse_unquoted_string(key=True)
            if not processed_key:
                if self.at_end() or self.char_at() in ('{', '}', '[', ']'):
                    self.output.strip_last_occurrence(',')
                    self._repaired(
                        'commas_removed',
                        'While parsing an object we found a trailing comma, removing it',
                    )
                else:
                    raise RepairError('Object key expected', self.index)
                break

            self.parse_whitespace_and_skip_comments()
            processed_colon = self.parse_character(':')
            if not processed_colon:
                if not is_start_of_value(self.char_at()):
                    raise RepairError('Colon expected', self.index)
                self.output.insert_before_last_whitespace(':')
                self._repaired(
                    'colons_inserted',
                    'While parsing an object we missed a : after a key, inserting one',
                )

            if self.parse_value():
                continue

            if not processed_colon:
                raise RepairError('Colon expected', self.index)
            self.output.append('null')
            self._repaired(
                'values_inserted',
                'While parsing an object we found a key with a missing value, using null',
            )

        if self.char_at() == '}':
            self.output.append('}')
            self.index += 1
        else:
            self.output.insert_before_last_whitespace('}')
            self._repaired(
                'brackets_closed',
                'While parsing an object we missed the closing }, inserting it',
            )

        return True

    def parse_array(self) -> bool:
        if self.char_at() != '[':
            return False

        self.output.append('[')
        self.index += 1
        self.parse_whitespace_and_skip_comments()

        initial = True
        while not self.at_end() and self.char_at() != ']':
            if not initial:
                if not self.parse_character(','):
                    self.output.insert_before_last_whitespace(',')
                    self._repaired(
                        'commas_inserted',
                        'While parsing an array we missed a comma between items, inserting one',
                    )
            else:
                initial = False

            if self.parse_value():
                continue

            self.output.strip_last_occurrence(',')
            self._repaired(
                'commas_removed',
                'While parsing an array we found a trailing comma, removing it',
            )
            break

        if self.char_at() == ']':
            self.output.append(']')
            self.index += 1
        else:
            self.output.insert_before_last_whitespace(']')
            self._repaired(
                'brackets_closed',
                'While parsing an array we missed the closing ], inserting it',
            )

        return True

    def parse_newline_delimited_json(self) -> None:
        """Parse the remaining root values and wrap them all in an array."""
        initial = True
        processed_value = True
        while processed_value:
            if not initial:
                if not self.parse_character(','):
                    self.output.insert_before_last_whitespace(',')
            else:
                initial = False

            processed_value = self.parse_value()

        # The loop always ends on a comma with no value after it
        self.output.strip_last_occurrence(',')

        self.output.insert(0, '[\n')
        self.output.append('\n]')
        self._repaired(
            'ndjson_wrapped',
            'Found newline delimited JSON, wrapping the values in an array',
        )

    def parse_string(self) -> bool:
        if not self._parse_quoted_string():
            return False
        self.parse_concatenated_string()
        return True

    def _parse_quoted_string(self) -> bool:
        """Parse a single quoted string, without any "+" continuation."""
        skip_escape_chars = False
        if self.char_at() == '\\' and is_quote(self.char_at(1)):
            # The string was escaped once too often: drop this backslash and
            # every backslash placed in front of the following characters
            self.index += 1
            skip_escape_chars = True
            self._repaired(
                'escapes_removed',
                'While parsing a string we found an escaped opening quote, unescaping the string',
            )

        opening = self.char_at()
        if not is_quote(opening):
            return False

        self.quotes.set_start_quote(opening)
        self.output.append('"')
        self.index += 1
        if not is_double_quote(opening):
            self._repaired(
                'quotes_normalized',
                'While parsing a string we found a %s quote, using " instead',
                opening,
            )

        while not self.at_end() and not self.quotes.is_matching_end_quote(
            self.char_at()
        ):
            char = self.char_at()
            if char == '\\':
                following = self.char_at(1)
                if following in ESCAPE_CHARACTERS:
                    self.output.append(self.text[self.index : self.index + 2])
                    self.index += 2
                elif following == 'u':
                    if not all(is_hex(self.char_at(k)) for k in range(2, 6)):
                        self._throw_invalid_unicode_character()
                    self.output.append(self.text[self.index : self.index + 6])
                    self.index += 6
                else:
                    self._repaired(
                        'escapes_removed',
                        'While parsing a string we found an invalid escape \\%s, removing the backslash',
                        following,
                    )
                    self.index += 1
                    if following:
                        self._append_string_character(following)
                        self.index += 1
            else:
                self._append_string_character(char)
                self.index += 1

            if skip_escape_chars:
                self.skip_character('\\')

        if self.at_end():
            self._repaired(
                'quotes_closed',
                'While parsing a string we reached the end of input, closing the string',
            )
        else:
            self.index += 1
        self.output.append('"')
        self.quotes.reset()
        return True

    def _append_string_character(self, char: str) -> None:
        """Write one unescaped input character into the current string."""
        if char == '"':
            # Only reachable inside a string opened with another quote style
            self.output.append('\\"')
            self._repaired(
                'quotes_escaped',
                'While parsing a string we found an unescaped ", escaping it',
            )
        elif is_control_character(char):
            self.output.append(CONTROL_CHARACTER_ESCAPES[char])
            self._repaired(
                'control_chars_escaped',
                'While parsing a string we found a raw control character %r, escaping it',
                char,
            )
        elif not is_valid_string_character(char):
            raise RepairError(f'Invalid character {char!r}', self.index)
        else:
            self.output.append(char)

    def parse_concatenated_string(self) -> None:
        """Join strings written as "a" + "b" into a single string."""
        self.parse_whitespace_and_skip_comments()
        while self.char_at() == '+':
            self.index += 1
            self.parse_whitespace_and_skip_comments()

            # Drop the closing quote of the first string and any whitespace after it
            self.output.strip_last_occurrence('"', strip_remaining=True)
            start = len(self.output)
            if not self._parse_quoted_string():
                self.output.append('"')
                break

            # Drop the opening quote of the second string
            self.output.remove(start)
            self._repaired(
                'strings_concatenated',
                'Found concatenated strings, joining them',
            )
            self.parse_whitespace_and_skip_comments()

    def parse_number(self) -> bool:
        start = self.index
        if self.char_at() == '-':
            self.index += 1
            if self._expect_digit_or_repair(start):
                return True

        if self.char_at() == '0':
            self.index += 1
        elif is_non_zero_digit(self.char_at()):
            self.index += 1
            while is_digit(self.char_at()):
                self.index += 1
        else:
            # No integer part, so this is not a number
            return False

        if self.char_at() == '.':
            self.index += 1
            if self._expect_digit_or_repair(start):
                return True
            while is_digit(self.char_at()):
                self.index += 1

        if self.char_at() in ('e', 'E'):
            self.index += 1
            if self.char_at() in ('-', '+'):
                self.index += 1
            if self._expect_digit_or_repair(start):
                return True
            while is_digit(self.char_at()):
                self.index += 1

        self.output.append(self.text[start : self.index])
        return True

    def _expect_digit_or_repair(self, start: int) -> bool:
        """
        Check that a digit follows a '-', '.' or exponent.

        Returns:
            True when the number was cut off by the end of input and has been
            completed with a '0' and written out; False when a digit follows.
        """
        if self.at_end():
            self.output.append(self.text[start : self.index] + '0')
            self._repaired(
                'numbers_completed',
                'While parsing a number we reached the end of input, appending a 0',
            )
            return True

        if not is_digit(self.char_at()):
            number_so_far = self.text[start : self.index]
            raise RepairError(
                f"Invalid number '{number_so_far}', expecting a digit {self._got()}",
                self.index,
            )
        return False

    def parse_keywords(self) -> bool:
        for name, value in KEYWORDS:
            if self.text.startswith(name, self.index):
                self.output.append(value)
                self.index += len(name)
                if name != value:
                    self._repaired(
                        'keywords_converted',
                        'Found the Python constant %s, using %s instead',
                        name,
                        value,
                    )
                return True
        return False

    def parse_unquoted_string(self, key: bool = False) -> bool:
        """
        Parse a bare token, or a function call such as NumberLong("2") or callback({...});

        Args:
            key: The token is an object key, which may also be a number as in
                a Python dict repr such as {1: 'a'}
        """
        start = self.index
        starts = is_unquoted_key_start if key else is_unquoted_start
        if not starts(self.char_at()):
            return False

        # The token may contain inner whitespace; it ends at the next delimiter
        while not self.at_end() and not is_delimiter(self.char_at()):
            self.index += 1

        if self.char_at() == '(':
            name = self.text[start : self.index].strip()
            self.index += 1
            if not self.parse_value():
                self.output.append('null')
            if self.skip_character(')'):
                self.skip_character(';')
            self._repaired(
                'function_calls_unwrapped',
                'Found the function call %s(...), keeping only its argument',
                name,
            )
            return True

        # Give back the trailing whitespace so it is written as whitespace
        while self.index > start and is_whitespace(self.char_at(-1)):
            self.index -= 1

        symbol = self.text[start : self.index]
        if symbol == 'undefined' and not key:
            self.output.append('null')
            self._repaired('keywords_converted', 'Found undefined, using null instead')
        else:
            self.output.append(json.dumps(symbol, ensure_ascii=False))
            self._repaired(
                'unquoted_strings_quoted',
                'Found the unquoted string %r, adding quotes',
                symbol,
            )
        return True

    # Errors

    def _got(self) -> str:
        char = self.char_at()
        return f"but got '{char}'" if char else 'but reached end of input'

    def _throw_unexpected_character(self) -> None:
        raise RepairError(f'Unexpected character {self.char_at()!r}', self.index)

    def _throw_invalid_unicode_character(self) -> None:
        match = WORD_PATTERN.match(self.text, self.index + 2)
        end = match.end() if match else self.index + 2
        chars = self.text[self.index : end]
        raise RepairError(f'Invalid unicode character "{chars}"', self.index)


class JSONRepair:
    """
    Repairs malformed JSON text into valid JSON.

    The instance only holds configuration; every call to :meth:`repair` runs
    in its own :class:`RepairSession`, so one instance can be reused and
    shared between threads.

    Args:
        throw_on_error: Raise ``RepairError`` on input that cannot be repaired.
            When False, the output repaired up to the failure point is
            returned instead. ``None`` uses ``settings.throw_on_error``.
    """

    def __init__(self, throw_on_error: Optional[bool] = None):
        self.throw_on_error = (
            settings.throw_on_error if throw_on_error is None else throw_on_error
        )

    def repair(self, text: str) -> str:
        """
        Repair a JSON document.

        Args:
            text: The malformed JSON text

        Returns:
            The repaired JSON text
        """
        if not isinstance(text, str):
            raise TypeError(f'Expected str, got {type(text).__name__}')

        session = RepairSession(text)
        with logger.log_operation('repair_json', level=session.log_level):
            try:
                result = session.run()
            except RepairError as e:
                if self.throw_on_error:
                    raise
                logger.warning_highlight(
                    f'{e}; returning the output repaired so far'
                )
                result = str(session.output)

        if session.stats:
            logger.log(session.log_level, 'Repaired JSON. Stats: %s', dict(session.stats))
        return result


def repair_json(text: str, throw_on_error: bool = True) -> str:
    """
    Repair a malformed JSON string.

    Args:
        text: JSON string to repair
        throw_on_error: Raise RepairError on unrepairable input instead of
            returning the partial output

    Returns:
        Repaired JSON string
    """
    return JSONRepair(throw_on_error=throw_on_error).repair(text)


def loads(text: str, throw_on_error: bool = True, **kwargs: Any) -> Any:
    """
    Decode JSON, repairing it first if the standard decoder rejects it.

    Args:
        text: JSON string to decode
        throw_on_error: Passed on to the repair step
        **kwargs: Passed on to ``json.loads``

    Returns:
        The decoded Python value
    """
    try:
        return json.loads(text, **kwargs)
    except json.JSONDecodeError as e:
        logger.debug(f'Initial JSON parsing failed: {e}')

    repaired = repair_json(text, throw_on_error=throw_on_error)
    return json.loads(repaired, **kwargs)
