"""Parsers for the text files of the Linux /proc filesystem."""

__version__ = "0.1.0"