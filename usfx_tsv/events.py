"""
Structural events and the XML tokenizer that produces them.

The extractor only needs something that yields StartTag / EndTag / Text
in document order. iter_events() provides that for a real file by feeding
lxml's parser in chunks with a target object, so a large Bible is never
held in memory as a tree.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import IO, Dict, Iterator, List, Union

from lxml import etree

from .errors import MalformedXml

CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class StartTag:
    name: str
    attrs: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class EndTag:
    name: str


@dataclass(frozen=True)
class Text:
    content: str


Event = Union[StartTag, EndTag, Text]


def localname(tag: str) -> str:
    # strip namespace: {ns}name -> name
    return tag.split("}", 1)[-1]


class _EventCollector:
    """
    lxml parser target: records callbacks as events until drained.
    """

    def __init__(self) -> None:
        self.events: List[Event] = []

    def start(self, tag, attrib) -> None:
        attrs = {localname(k): v for k, v in attrib.items()}
        self.events.append(StartTag(localname(tag), attrs))

    def end(self, tag) -> None:
        self.events.append(EndTag(localname(tag)))

    def data(self, data) -> None:
        self.events.append(Text(data))

    def close(self) -> None:
        return None

    def drain(self) -> List[Event]:
        events, self.events = self.events, []
        return events


def iter_events(stream: IO, chunk_size: int = CHUNK_SIZE) -> Iterator[Event]:
    """
    Yield structural events from an open XML stream (bytes or text).

    The stream is read in chunks and is not closed here; the caller owns it.

    Raises
    ------
    MalformedXml
        If the document is not well-formed XML (including an empty input).
    """
    collector = _EventCollector()
    parser = etree.XMLParser(
        target=collector,
        resolve_entities=False,
        no_network=True,
        huge_tree=True,
    )

    try:
        while True:
            chunk = stream.read(chunk_size)
            if not chunk:
                break
            if isinstance(chunk, str):
                # decoded text goes back to UTF-8 so a declared encoding still matches
                chunk = chunk.encode("utf-8")
            parser.feed(chunk)
            yield from collector.drain()
        parser.close()
    except etree.XMLSyntaxError as e:
        raise MalformedXml(f"Malformed XML: {e}") from e

    yield from collector.drain()
