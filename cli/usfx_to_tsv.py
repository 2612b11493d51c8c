#!/usr/bin/env python3
"""
Convert xml/source.xml (USFX) to TSV on stdout.

Usage:
    python cli/usfx_to_tsv.py > verses.tsv
"""

import sys

from usfx_tsv.convert import main

if __name__ == "__main__":
    sys.exit(main())
