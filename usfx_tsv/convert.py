"""
USFX -> TSV conversion: file handling and the command-line entry point.

Usage:
    usfx-to-tsv > verses.tsv

Reads xml/source.xml (relative to the working directory) and writes one
tab-separated line per verse to stdout. Status messages go to stderr.
"""

from __future__ import annotations

import argparse
import io
import sys
from pathlib import Path
from typing import IO, Iterator, Optional

from . import config
from .errors import UsfxError
from .events import iter_events
from .extractor import extract
from .model import VerseRecord
from .paths import SOURCE_PATH, TAG_TABLE_PATH
from .tags import TagTable, load_tag_table
from .tsv import write_records
from .util import error, info, ok


def iter_records(stream: IO, tag_table: Optional[TagTable] = None) -> Iterator[VerseRecord]:
    """
    Yield verse records from an open USFX stream.
    """
    return extract(iter_events(stream), tag_table)


def convert_file(
    source_path: Path,
    out: IO[str],
    tag_table: Optional[TagTable] = None,
) -> int:
    """
    Convert one USFX file to TSV on `out`.

    Returns
    -------
    int
        Number of verse records written.

    Raises
    ------
    FileNotFoundError
        If the source file does not exist.
    UsfxError
        On malformed XML or inconsistent book/chapter/verse markup. Lines
        written before the failure stay in `out`.
    """
    source_path = source_path.resolve()
    if not source_path.exists():
        raise FileNotFoundError(f"Source file not found: {source_path}")

    info(f"Reading USFX from: {source_path}")
    with source_path.open("rb") as f:
        return write_records(iter_records(f, tag_table), out)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        description=f"Convert {SOURCE_PATH} (USFX XML) to tab-separated verses on stdout"
    )
    p.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {config.__version__}",
    )
    return p


def _stdout_utf8() -> IO[str]:
    if isinstance(sys.stdout, io.TextIOWrapper):
        sys.stdout.reconfigure(encoding="utf-8", newline="\n")
    return sys.stdout


def main(argv=None, out: Optional[IO[str]] = None) -> int:
    build_parser().parse_args(argv)
    if out is None:
        out = _stdout_utf8()

    try:
        tag_table = load_tag_table(TAG_TABLE_PATH)
        count = convert_file(SOURCE_PATH, out, tag_table)
    except FileNotFoundError as e:
        error(str(e))
        return 2
    except UsfxError as e:
        error(f"{type(e).__name__}: {e}")
        return 1

    out.flush()
    ok(f"Wrote {count} verses.")
    return 0


def run() -> None:
    sys.exit(main())
