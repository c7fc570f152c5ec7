"""Convenience imports for scripts and REPLs.

Usage:
    from gridterm.prelude import *
"""
from .terminal import Terminal, TerminalOptions, Frame, CompletedFrame, RenderError
from .viewport import Fullscreen, Inline, Fixed
from .buffer import Cell, Buffer
from .backend import ClearType, TestBackend
from .blessed_backend import BlessedBackend
from .style import Style, rgb, color_indexed
from .types import (
    Position, Size, Rect, RectLike,
    Color, Modifier,
)

__all__ = [name for name in globals().keys() if not name.startswith('_')]
