"""
Exceptions raised while converting a USFX document.

Every error is terminal for the whole conversion: a partially converted
file is worse than none, since the database import assumes completeness.
"""


class UsfxError(Exception):
    """Base class for conversion failures."""


class MalformedXml(UsfxError):
    """The XML tokenizer could not produce well-formed events."""


class MissingContext(UsfxError):
    """A chapter or verse marker appeared outside its enclosing book/chapter."""


class InvalidNumeral(UsfxError):
    """A chapter or verse attribute is not a number (or verse bridge)."""


class InvalidAttribute(UsfxError):
    """A structural marker lacks a usable identifying attribute."""


class InvalidTagTable(UsfxError):
    """The tag-role configuration cannot be used."""
