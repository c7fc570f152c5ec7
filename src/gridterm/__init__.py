from .types import (
    MAX_COORD,
    Position,
    Size,
    Rect,
    Color,
    Modifier,
)
from .style import Style, rgb, color_indexed
from .buffer import Cell, Buffer
from .backend import Backend, ClearType, TestBackend
from .viewport import Fullscreen, Inline, Fixed, compute_inline_size
from .terminal import (
    Terminal,
    TerminalOptions,
    Frame,
    CompletedFrame,
    RenderError,
)
from .blessed_backend import BlessedBackend

__version__ = "0.1.0"

__all__ = [
    "MAX_COORD",
    "Position",
    "Size",
    "Rect",
    "Color",
    "Modifier",
    "Style",
    "rgb",
    "color_indexed",
    "Cell",
    "Buffer",
    "Backend",
    "ClearType",
    "TestBackend",
    "Fullscreen",
    "Inline",
    "Fixed",
    "compute_inline_size",
    "Terminal",
    "TerminalOptions",
    "Frame",
    "CompletedFrame",
    "RenderError",
    "BlessedBackend",
]
