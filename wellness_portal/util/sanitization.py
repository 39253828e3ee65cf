"""Sanitisation helpers.

This module provides simple utilities to strip potentially unsafe
HTML tags from user-supplied text fields and to trim whitespace.
Use these functions before storing free-form notes, reasons or
descriptions, which the client UI renders back to users.
"""
import re

TAG_RE = re.compile(r"<[^>]+>")


def strip_tags(text: str) -> str:
    """Remove HTML tags from the given string.

    Parameters
    ----------
    text: str
        The input string that may contain HTML tags.

    Returns
    -------
    str
        The cleaned string with tags removed and whitespace trimmed.
    """
    if not text:
        return ""
    no_tags = TAG_RE.sub("", text)
    return no_tags.strip()


def clean_optional(value):
    """Strip tags from an optional text value; blank becomes ``None``."""
    if value is None:
        return None
    cleaned = strip_tags(str(value))
    return cleaned or None
