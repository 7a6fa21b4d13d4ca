#!/usr/bin/env python3
"""
Glyph input filtering and shape acquisition.

- filter_glyphs: keep only hiragana characters from user text, capped.
- GlyphShapeCache: an explicitly owned cache in front of a shape provider
  (for example a pygame font). It is opened and closed by the application and
  handed to whoever needs shapes; nothing in the physics core touches it.

A provider failure never propagates into the simulation: the cache logs it and
returns None, and the caller leaves the body unready so it is excluded from
force and overlap computation.
"""
import logging
from typing import Any, Dict, List, Optional, Protocol, Tuple

from .constants import MAX_GLYPHS

logger = logging.getLogger(__name__)

VOICED_KANA = "がぎぐげござじずぜぞだぢづでどばびぶべぼぱぴぷぺぽ"
SMALL_KANA = "ぁぃぅぇぉっゃゅょ"


def is_hiragana(ch: str) -> bool:
    return "あ" <= ch <= "ん" or ch in VOICED_KANA or ch in SMALL_KANA


def filter_glyphs(text: Optional[str], limit: Optional[int] = MAX_GLYPHS) -> List[str]:
    """Return the hiragana characters of text, in order, at most limit of them."""
    if not text:
        return []
    glyphs = [ch for ch in text if is_hiragana(ch)]
    if limit is not None:
        glyphs = glyphs[:limit]
    return glyphs


class ShapeProvider(Protocol):
    def open(self) -> None: ...

    def close(self) -> None: ...

    def shape(self, glyph: str, size: int) -> Any: ...


class GlyphShapeCache:
    """Cache of provider shapes keyed by (glyph, size)."""

    def __init__(self, provider: ShapeProvider):
        self.provider = provider
        self._shapes: Dict[Tuple[str, int], Any] = {}
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> "GlyphShapeCache":
        if not self._open:
            self.provider.open()
            self._open = True
        return self

    def close(self) -> None:
        if self._open:
            self._shapes.clear()
            self.provider.close()
            self._open = False

    def __enter__(self) -> "GlyphShapeCache":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def acquire(self, glyph: str, size: float) -> Optional[Any]:
        """Shape for glyph at size, or None if the provider cannot produce it."""
        if not self._open:
            logger.warning("Shape cache used while closed; %r stays unready", glyph)
            return None
        key = (glyph, max(1, int(round(size))))
        if key in self._shapes:
            return self._shapes[key]
        try:
            shape = self.provider.shape(*key)
        except Exception:
            logger.warning("Shape acquisition failed for %r at size %d", glyph, key[1], exc_info=True)
            return None
        if shape is None:
            logger.warning("Shape provider returned nothing for %r", glyph)
            return None
        self._shapes[key] = shape
        return shape
