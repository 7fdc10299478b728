"""
Text normalization shared by the clue validator.
"""

import re

# . , / # ! $ % ^ & * ; : { } = - _ ` ~ ( ) ?
_PUNCTUATION_RE = re.compile(r"[.,/#!$%^&*;:{}=\-_`~()?]")


def normalize(text) -> str:
    """
    Lowercase text and strip the fixed punctuation set.

    Whitespace and alphanumerics are kept, so normalizing already-normalized
    text is a no-op. ``None`` normalizes to the empty string.
    """
    if text is None:
        return ""
    return _PUNCTUATION_RE.sub("", str(text).lower())


def tokenize(text: str, min_length: int = 0):
    """Split normalized text on whitespace, keeping tokens longer than min_length."""
    return [token for token in text.split() if len(token) > min_length]
