"""
Path configuration for the USFX to TSV converter.

Both locations are relative to the current working directory, so the
converter can be run from any checkout that has an `xml/` folder.
"""

from pathlib import Path

XML_DIR = Path("xml")
SOURCE_PATH = XML_DIR / "source.xml"
TAG_TABLE_PATH = XML_DIR / "usfx_tags.json"
