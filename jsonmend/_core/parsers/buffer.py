from typing import List

from jsonmend._core.parsers.chars import is_whitespace

# Whitespace that does not end a line
INLINE_WHITESPACE = (' ', '\t', '\r')


class OutputBuffer:
    """
    Growable character buffer holding the repaired JSON built so far.

    Besides appending, the parser needs to patch text it already wrote: insert
    a missing comma before trailing whitespace, drop a dangling comma, or
    splice two concatenated strings together. The buffer stores single
    characters so those edits are plain list operations.
    """

    def __init__(self):
        self._chars: List[str] = []

    def __len__(self) -> int:
        return len(self._chars)

    def __str__(self) -> str:
        return ''.join(self._chars)

    def append(self, text: str) -> None:
        self._chars.extend(text)

    def insert(self, offset: int, text: str) -> None:
        self._chars[offset:offset] = list(text)

    def remove(self, start: int, length: int = 1) -> None:
        del self._chars[start : start + length]

    def tail(self, count: int) -> str:
        """Return the last ``count`` characters."""
        if count <= 0:
            return ''
        return ''.join(self._chars[-count:])

    def last_index_of(self, text: str) -> int:
        """Offset of the last occurrence of ``text``, or -1."""
        size = len(text)
        if size == 0:
            return len(self._chars)
        first = text[0]
        for index in range(len(self._chars) - size, -1, -1):
            if self._chars[index] != first:
                continue
            if ''.join(self._chars[index : index + size]) == text:
                return index
        return -1

    def strip_last_occurrence(self, text: str, strip_remaining: bool = False) -> bool:
        """
        Remove the last occurrence of ``text``.

        Args:
            text: Literal to look for, usually a single ',' or '"'.
            strip_remaining: Also remove everything written after the occurrence.

        Returns:
            True if an occurrence was found and removed.
        """
        index = self.last_index_of(text)
        if index == -1:
            return False
        length = len(self._chars) - index if strip_remaining else len(text)
        self.remove(index, length)
        return True

    def trailing_whitespace_start(self) -> int:
        """Offset where the run of trailing whitespace begins."""
        index = len(self._chars)
        while index > 0 and is_whitespace(self._chars[index - 1]):
            index -= 1
        return index

    def insert_before_last_whitespace(self, text: str) -> None:
        """Insert ``text`` before the trailing whitespace, or append if there is none."""
        self.insert(self.trailing_whitespace_start(), text)

    def strip_trailing_spaces(self) -> None:
        """Drop trailing spaces, tabs and CRs. A newline and what precedes it stay."""
        index = len(self._chars)
        while index > 0 and self._chars[index - 1] in INLINE_WHITESPACE:
            index -= 1
        del self._chars[index:]

    def ends_with_comma_or_newline(self) -> bool:
        """True when the buffer ends with ',' or a newline plus optional spaces, tabs or CRs."""
        index = len(self._chars) - 1
        while index >= 0 and self._chars[index] in INLINE_WHITESPACE:
            index -= 1
        return index >= 0 and self._chars[index] in (',', '\n')
