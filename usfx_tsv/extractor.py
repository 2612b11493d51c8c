"""
Verse extraction: structural events -> VerseRecord stream.

USFX does not repeat book and chapter on each verse. They are implied by
the most recent <book> and <c> markers, and a verse's text runs from its
<v/> milestone up to the next marker (or <ve/>). extract() walks the events
once, keeping that context in a ParseContext, and yields each verse as
soon as it is closed.

Both milestone (<c id="2"/>, <v id="3"/>) and container
(<chapter id="2">...</chapter>) forms are accepted. Which is which is
decided by tag name in the TagTable: the end tag of a milestone closes
nothing, the end tag of a container always closes it, even when empty.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional

from .errors import InvalidAttribute, MissingContext
from .events import EndTag, Event, StartTag, Text
from .model import VerseNumber, VerseRecord, parse_chapter
from .tags import DEFAULT_TAG_TABLE, TagRole, TagTable
from .util import warn

WHITESPACE_RE = re.compile(r"\s+")

ID_ATTR = "id"
BCV_ATTR = "bcv"


class ParseState(enum.Enum):
    IDLE = "idle"
    IN_BOOK = "in_book"
    IN_CHAPTER = "in_chapter"
    IN_VERSE = "in_verse"


def collapse_whitespace(s: str) -> str:
    return WHITESPACE_RE.sub(" ", s)


@dataclass
class PendingVerse:
    book: str
    chapter: int
    verse: VerseNumber
    parts: List[str] = field(default_factory=list)

    def append(self, chunk: str) -> None:
        self.parts.append(collapse_whitespace(chunk))

    def to_record(self) -> VerseRecord:
        text = collapse_whitespace("".join(self.parts)).strip()
        return VerseRecord(book=self.book, chapter=self.chapter, verse=self.verse, text=text)


@dataclass
class ParseContext:
    """
    Running book/chapter/verse state for one document.

    Owned by a single extract() call; never shared between documents.
    """
    book: Optional[str] = None
    chapter: Optional[int] = None
    pending: Optional[PendingVerse] = None
    state: ParseState = ParseState.IDLE
    skip_depth: int = 0

    def flush(self) -> Optional[VerseRecord]:
        """
        Close the pending verse, if any, and return it as a record.
        """
        if self.pending is None:
            return None
        record = self.pending.to_record()
        self.pending = None
        return record

    def open_book(self, attrs: Dict[str, str]) -> Optional[VerseRecord]:
        code = (attrs.get(ID_ATTR) or "").strip()
        if not code or WHITESPACE_RE.search(code):
            raise InvalidAttribute(f"Book marker has no usable {ID_ATTR!r}: {attrs.get(ID_ATTR)!r}")

        record = self.flush()
        self.book = code
        self.chapter = None
        self.state = ParseState.IN_BOOK
        return record

    def open_chapter(self, attrs: Dict[str, str]) -> Optional[VerseRecord]:
        if self.book is None:
            raise MissingContext(
                f"Chapter {attrs.get(ID_ATTR)!r} appears before any book marker"
            )
        chapter = parse_chapter(attrs.get(ID_ATTR))

        record = self.flush()
        self.chapter = chapter
        self.state = ParseState.IN_CHAPTER
        return record

    def open_verse(self, attrs: Dict[str, str]) -> Optional[VerseRecord]:
        if self.book is None or self.chapter is None:
            where = f"book {self.book}" if self.book else "the document"
            raise MissingContext(
                f"Verse {attrs.get(ID_ATTR)!r} appears before any chapter marker in {where}"
            )
        verse = VerseNumber.parse(attrs.get(ID_ATTR))
        self._check_bcv(attrs.get(BCV_ATTR), verse)

        record = self.flush()
        self.pending = PendingVerse(book=self.book, chapter=self.chapter, verse=verse)
        self.state = ParseState.IN_VERSE
        return record

    def close_verse(self) -> Optional[VerseRecord]:
        record = self.flush()
        if self.state is ParseState.IN_VERSE:
            self.state = ParseState.IN_CHAPTER
        return record

    def close_chapter(self) -> Optional[VerseRecord]:
        record = self.flush()
        self.chapter = None
        self.state = ParseState.IN_BOOK
        return record

    def close_book(self) -> Optional[VerseRecord]:
        record = self.flush()
        self.book = None
        self.chapter = None
        self.state = ParseState.IDLE
        return record

    def _check_bcv(self, bcv: Optional[str], verse: VerseNumber) -> None:
        # Some USFX files also spell the full reference on each verse.
        if not bcv:
            return
        parts = bcv.strip().split(".")
        if len(parts) < 2:
            return
        if parts[0] != self.book or parts[1] != str(self.chapter):
            warn(
                f"Verse {self.book}.{self.chapter}.{verse} carries bcv={bcv!r}; "
                "keeping the book/chapter from the enclosing markers."
            )


def _apply_start(ctx: ParseContext, event: StartTag, table: TagTable) -> Optional[VerseRecord]:
    role = table.role(event.name)
    record = None

    if role is TagRole.ANNOTATION:
        ctx.skip_depth = 1
        return None
    if role is TagRole.BOOK:
        record = ctx.open_book(event.attrs)
    elif role is TagRole.CHAPTER:
        record = ctx.open_chapter(event.attrs)
    elif role is TagRole.VERSE:
        record = ctx.open_verse(event.attrs)
    elif role is TagRole.VERSE_END:
        record = ctx.close_verse()

    return record


def _apply_end(ctx: ParseContext, event: EndTag, table: TagTable) -> Optional[VerseRecord]:
    if table.is_milestone(event.name):
        return None
    role = table.role(event.name)
    if role is TagRole.BOOK:
        return ctx.close_book()
    if role is TagRole.CHAPTER:
        return ctx.close_chapter()
    if role is TagRole.VERSE:
        return ctx.close_verse()
    return None


def apply_event(ctx: ParseContext, event: Event, table: TagTable) -> Optional[VerseRecord]:
    """
    Fold one event into the context. Returns a record if this event closed one.
    """
    if ctx.skip_depth:
        if isinstance(event, StartTag):
            ctx.skip_depth += 1
        elif isinstance(event, EndTag):
            ctx.skip_depth -= 1
        return None

    if isinstance(event, StartTag):
        return _apply_start(ctx, event, table)
    if isinstance(event, EndTag):
        return _apply_end(ctx, event, table)
    if isinstance(event, Text):
        if ctx.state is ParseState.IN_VERSE and ctx.pending is not None:
            ctx.pending.append(event.content)
        return None
    raise TypeError(f"Unsupported event: {event!r}")


def extract(events: Iterable[Event], tag_table: Optional[TagTable] = None) -> Iterator[VerseRecord]:
    """
    Yield one VerseRecord per verse marker, in document order.

    Parameters
    ----------
    events:
        StartTag / EndTag / Text events, e.g. from usfx_tsv.events.iter_events.
    tag_table:
        Tag classification; DEFAULT_TAG_TABLE if omitted.

    Raises
    ------
    MissingContext, InvalidNumeral, InvalidAttribute
        On the first structurally inconsistent marker. Records yielded
        before that point have already been handed to the caller.
    """
    table = tag_table or DEFAULT_TAG_TABLE
    ctx = ParseContext()

    for event in events:
        record = apply_event(ctx, event, table)
        if record is not None:
            yield record

    record = ctx.flush()
    if record is not None:
        yield record
