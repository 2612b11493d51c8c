"""
Project configuration for usfx-tsv.
"""

__version__ = "0.1.0"
