"""
Utility functions for console output.

Status lines go to stderr: stdout is reserved for TSV records.
"""

import sys


def info(msg: str) -> None:
    """Print an info message."""
    print(f"[info] {msg}", file=sys.stderr)


def warn(msg: str) -> None:
    """Print a warning message."""
    print(f"[warn] {msg}", file=sys.stderr)


def ok(msg: str) -> None:
    """Print a success message."""
    print(f"[ok] {msg}", file=sys.stderr)


def error(msg: str) -> None:
    """Print an error message."""
    print(f"[error] {msg}", file=sys.stderr)
