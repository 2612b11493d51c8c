"""
Data model definitions for the USFX to TSV converter.

For now we define:
- VerseNumber: a verse number or verse bridge (e.g. 6 or 6-7)
- VerseRecord: one output row (book, chapter, verse, text)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from .errors import InvalidNumeral

_NUMBER_RE = re.compile(r"[0-9]+")
_VERSE_RE = re.compile(r"([0-9]+)(?:-([0-9]+))?")


def parse_chapter(value: Optional[str]) -> int:
    """
    Parse a chapter attribute into a positive integer.

    Raises InvalidNumeral for anything but plain decimal digits, or for 0.
    """
    raw = (value or "").strip()
    if not _NUMBER_RE.fullmatch(raw):
        raise InvalidNumeral(f"Chapter number {value!r} is not a positive integer")
    number = int(raw)
    if number < 1:
        raise InvalidNumeral(f"Chapter number {value!r} must be at least 1")
    return number


@dataclass(frozen=True)
class VerseNumber:
    """
    A verse number as given by the source.

    start: 1..N
    end  : None for a single verse, or the last printed verse of a bridge
           (kept even when equal to start, so "3-3" round-trips)
    """
    start: int
    end: Optional[int] = None

    @classmethod
    def parse(cls, value: Optional[str]) -> "VerseNumber":
        """
        Parse a verse attribute such as '16' or '6-7'.

        Bridges are kept as one number rather than split, since the source
        does not mark where one printed verse ends inside the merged text.
        """
        raw = (value or "").strip()
        m = _VERSE_RE.fullmatch(raw)
        if not m:
            raise InvalidNumeral(f"Verse number {value!r} is not a number or N-M bridge")

        start = int(m.group(1))
        end = int(m.group(2)) if m.group(2) is not None else None

        if start < 1:
            raise InvalidNumeral(f"Verse number {value!r} must be at least 1")
        if end is not None and end < start:
            raise InvalidNumeral(f"Verse bridge {value!r} ends before it starts")
        return cls(start=start, end=end)

    def __str__(self) -> str:
        if self.end is None:
            return str(self.start)
        return f"{self.start}-{self.end}"


@dataclass(frozen=True)
class VerseRecord:
    """
    Representation of a verse as it is written to the TSV output.
    """
    book: str
    chapter: int
    verse: VerseNumber
    text: str

    def to_fields(self) -> tuple:
        """
        Return the four output columns as strings, in order.
        """
        return (self.book, str(self.chapter), str(self.verse), self.text)
