"""Placement of the live drawing region.

A terminal uses exactly one of three viewports for its whole life:

- ``Fullscreen()``: the whole screen, tracking the backend size.
- ``Inline(height)``: ``height`` rows anchored at the cursor, full width;
  content above it stays in the scrollback.
- ``Fixed(area)``: a fixed rectangle that is never resized automatically.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple, TypeAlias, Union

from .backend import Backend
from .types import Position, Rect, Size, as_rect

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Fullscreen:
    pass


@dataclass(frozen=True)
class Inline:
    height: int

    def __post_init__(self) -> None:
        if self.height < 0:
            raise ValueError(f"inline viewport height must not be negative: {self.height}")


@dataclass(frozen=True)
class Fixed:
    area: Rect

    def __post_init__(self) -> None:
        # accept (x, y, w, h) tuples as well
        object.__setattr__(self, "area", as_rect(self.area))


Viewport: TypeAlias = Union[Fullscreen, Inline, Fixed]


def compute_inline_size(
    backend: Backend,
    height: int,
    size: Size,
    offset_in_previous_viewport: int,
) -> Tuple[Rect, Position]:
    """Place an inline viewport of ``height`` rows at the cursor.

    Blank lines are appended below the cursor so the viewport fits, which
    scrolls existing output up into the scrollback instead of clearing it.
    When re-placing after a resize, ``offset_in_previous_viewport`` is the
    cursor's row inside the old viewport, so the viewport keeps its top row.

    Returns the viewport area and the cursor position read from the backend.
    The area never extends past the bottom of the screen.
    """
    pos = backend.get_cursor_position()
    row = pos.y

    max_height = min(size.height, height)

    lines_after_cursor = max(0, height - offset_in_previous_viewport - 1)
    backend.append_lines(lines_after_cursor)

    available_lines = max(0, size.height - row - 1)
    missing_lines = max(0, lines_after_cursor - available_lines)
    if missing_lines > 0:
        row = max(0, row - missing_lines)
    row = max(0, row - offset_in_previous_viewport)
    # a cursor reported below the screen must not push the viewport off it
    row = min(row, size.height - max_height)

    logger.debug(
        "inline viewport: cursor=%s appended=%d row=%d height=%d",
        pos, lines_after_cursor, row, max_height,
    )
    return Rect(0, row, size.width, max_height), pos


__all__ = [
    "Fullscreen",
    "Inline",
    "Fixed",
    "Viewport",
    "compute_inline_size",
]
