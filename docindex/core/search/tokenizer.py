"""Lowercasing word tokenizer shared by the lexical backends."""

import re

TOKEN_PATTERN = re.compile(r"[\w']+")


def tokenize(text: str) -> list[str]:
    """Lowercase text and return its word tokens in order."""
    return TOKEN_PATTERN.findall(text.lower())
