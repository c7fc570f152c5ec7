"""Grapheme segmentation and display width of cell symbols."""
from __future__ import annotations

import unicodedata
from typing import List

from wcwidth import wcswidth

_ZWJ = "\u200d"
_JOINING = (_ZWJ, "\ufe0e", "\ufe0f", "\u20e3")


def _is_regional_indicator(ch: str) -> bool:
    return 0x1F1E6 <= ord(ch) <= 0x1F1FF


def _extends(ch: str) -> bool:
    if ch in _JOINING:
        return True
    if 0x1F3FB <= ord(ch) <= 0x1F3FF:  # skin tone modifiers
        return True
    return unicodedata.category(ch) in ("Mn", "Me", "Mc")


def graphemes(text: str) -> List[str]:
    """Split text into grapheme clusters.

    Combining marks, variation selectors and skin tones stay with their base
    character, ZWJ sequences are kept whole and regional indicators pair up
    into flags.
    """
    clusters: List[str] = []
    i = 0
    n = len(text)
    while i < n:
        cluster = text[i]
        i += 1
        if _is_regional_indicator(cluster) and i < n and _is_regional_indicator(text[i]):
            cluster += text[i]
            i += 1
        while i < n:
            ch = text[i]
            if _extends(ch):
                cluster += ch
                i += 1
                if ch == _ZWJ and i < n:
                    cluster += text[i]
                    i += 1
            else:
                break
        clusters.append(cluster)
    return clusters


def symbol_width(symbol: str) -> int:
    """Columns a single grapheme occupies: 0 for empty or unprintable,
    otherwise 1 or 2."""
    if not symbol:
        return 0
    if symbol.isascii():
        return 1 if symbol.isprintable() else 0
    w = wcswidth(symbol)
    if w < 0:
        return 0
    return min(w, 2)


def text_width(text: str) -> int:
    return sum(symbol_width(g) for g in graphemes(text))


__all__ = ["graphemes", "symbol_width", "text_width"]
