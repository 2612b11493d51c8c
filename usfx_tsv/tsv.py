"""
TSV output for verse records.

One line per verse: book, chapter, verse, text separated by tabs, no header.
Records are written with the csv module with quoting disabled, so a stray
tab or newline in a field raises csv.Error instead of silently corrupting
the file.
"""

from __future__ import annotations

import csv
from typing import IO, Iterable

from .model import VerseRecord


def make_writer(out: IO[str]):
    return csv.writer(
        out,
        delimiter="\t",
        quoting=csv.QUOTE_NONE,
        quotechar=None,
        lineterminator="\n",
    )


def write_records(records: Iterable[VerseRecord], out: IO[str]) -> int:
    """
    Write records to `out` as they arrive. Returns the number written.
    """
    writer = make_writer(out)
    count = 0
    for record in records:
        writer.writerow(record.to_fields())
        count += 1
    return count
