"""
usfx_tsv - USFX XML to tab-separated verse converter

This package contains:
- config: Project version
- paths: Fixed input locations
- util: Console status output
- errors: Conversion error types
- model: VerseNumber / VerseRecord
- events: Structural XML events and the lxml tokenizer
- tags: USFX tag-role table
- extractor: Book/chapter/verse state machine
- tsv: TSV writer
- convert: File conversion and command-line entry point
"""

from . import config
from .errors import (
    UsfxError,
    MalformedXml,
    MissingContext,
    InvalidNumeral,
    InvalidAttribute,
    InvalidTagTable,
)
from .model import VerseNumber, VerseRecord
from .events import StartTag, EndTag, Text, iter_events
from .tags import TagRole, TagTable, DEFAULT_TAG_TABLE, load_tag_table
from .extractor import extract
from .tsv import write_records
from .convert import convert_file, iter_records

__version__ = config.__version__
__all__ = [
    "config",
    "UsfxError",
    "MalformedXml",
    "MissingContext",
    "InvalidNumeral",
    "InvalidAttribute",
    "InvalidTagTable",
    "VerseNumber",
    "VerseRecord",
    "StartTag",
    "EndTag",
    "Text",
    "iter_events",
    "TagRole",
    "TagTable",
    "DEFAULT_TAG_TABLE",
    "load_tag_table",
    "extract",
    "write_records",
    "convert_file",
    "iter_records",
]
