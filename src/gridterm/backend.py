"""
Backend abstraction.

Provides:
- ClearType: which part of the screen clear_region() erases
- Backend: abstract base class every terminal driver implements
- TestBackend: in-memory screen used by the test-suite and headless rendering
"""
from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .buffer import Buffer, Cell
from .types import Position, Rect, Size


class ClearType(enum.Enum):
    ALL = "all"
    AFTER_CURSOR = "after_cursor"
    BEFORE_CURSOR = "before_cursor"
    CURRENT_LINE = "current_line"
    UNTIL_NEWLINE = "until_newline"


# ─────────────────────────────────────────────────────────────────────────────
# Backend ABC
# ─────────────────────────────────────────────────────────────────────────────

class Backend(ABC):
    """
    The sink a frame's diff is played against.

    Every method may raise OSError; callers propagate it without retrying.
    """

    @abstractmethod
    def draw(self, content: Iterable[Tuple[int, int, Cell]]) -> None:
        """Draw cells at absolute positions.

        Content arrives in row-major order, so an implementation may skip
        the cursor move when a cell sits right after the previous glyph.
        """

    @abstractmethod
    def hide_cursor(self) -> None:
        """Hide the cursor."""

    @abstractmethod
    def show_cursor(self) -> None:
        """Show the cursor."""

    @abstractmethod
    def get_cursor_position(self) -> Position:
        """Current cursor position."""

    @abstractmethod
    def set_cursor_position(self, position: Position) -> None:
        """Move the cursor."""

    @abstractmethod
    def clear_region(self, clear_type: ClearType) -> None:
        """Erase part of the screen relative to the cursor."""

    @abstractmethod
    def append_lines(self, n: int) -> None:
        """Insert n line breaks at the cursor, scrolling the screen up when
        the cursor is on the last row."""

    @abstractmethod
    def size(self) -> Size:
        """Size of the terminal in cells."""

    @abstractmethod
    def flush(self) -> None:
        """Push buffered output to the terminal."""

    def clear(self) -> None:
        """Erase the whole screen."""
        self.clear_region(ClearType.ALL)


# ─────────────────────────────────────────────────────────────────────────────
# TestBackend: keeps the screen in a Buffer
# ─────────────────────────────────────────────────────────────────────────────

class TestBackend(Backend):
    """
    A backend that renders into memory.

    Lines scrolled off the top by append_lines() are kept in ``scrollback``.
    Every non-empty draw() is logged in ``draw_calls`` as a list of
    ``(x, y, symbol)``.
    """

    __test__ = False  # not a pytest test class

    def __init__(self, width: int, height: int) -> None:
        self.buffer = Buffer.empty(Rect(0, 0, width, height))
        self.scrollback = Buffer.empty(Rect(0, 0, width, 0))
        self.cursor_visible = True
        self.cursor = Position.ORIGIN
        self.draw_calls: List[List[Tuple[int, int, str]]] = []
        self.flush_count = 0
        self._failures: Dict[str, OSError] = {}

    # Failure injection

    def fail_on(self, method: str, error: Optional[OSError] = None) -> None:
        """Make ``method`` raise ``error`` (an OSError by default) until
        clear_failures() is called."""
        self._failures[method] = error or OSError(f"{method} failed")

    def clear_failures(self) -> None:
        self._failures.clear()

    def _check(self, method: str) -> None:
        err = self._failures.get(method)
        if err is not None:
            raise err

    # Backend

    def draw(self, content: Iterable[Tuple[int, int, Cell]]) -> None:
        self._check("draw")
        logged: List[Tuple[int, int, str]] = []
        for x, y, cell in content:
            self.buffer[x, y] = cell.copy()
            owner = self.buffer[x, y]
            for cx in range(x + 1, min(x + owner.width, self.buffer.area.right)):
                self.buffer[cx, y].mark_continuation(owner)
            logged.append((x, y, cell.symbol))
        if logged:
            self.draw_calls.append(logged)

    def hide_cursor(self) -> None:
        self._check("hide_cursor")
        self.cursor_visible = False

    def show_cursor(self) -> None:
        self._check("show_cursor")
        self.cursor_visible = True

    def get_cursor_position(self) -> Position:
        self._check("get_cursor_position")
        return self.cursor

    def set_cursor_position(self, position: Position) -> None:
        self._check("set_cursor_position")
        self.cursor = position

    def clear_region(self, clear_type: ClearType) -> None:
        self._check("clear_region")
        area = self.buffer.area
        content = self.buffer.content
        if clear_type is ClearType.ALL:
            self.buffer.reset()
            return
        x = min(self.cursor.x, max(area.width - 1, 0))
        y = min(self.cursor.y, max(area.height - 1, 0))
        here = y * area.width + x
        row_start = y * area.width
        if clear_type is ClearType.AFTER_CURSOR:
            cells = content[here:]
        elif clear_type is ClearType.BEFORE_CURSOR:
            cells = content[:here + 1]
        elif clear_type is ClearType.CURRENT_LINE:
            cells = content[row_start:row_start + area.width]
        elif clear_type is ClearType.UNTIL_NEWLINE:
            cells = content[here:row_start + area.width]
        else:
            raise ValueError(f"unknown clear type: {clear_type!r}")
        for cell in cells:
            cell.reset()

    def append_lines(self, n: int) -> None:
        self._check("append_lines")
        if n <= 0:
            return
        area = self.buffer.area
        max_y = max(area.height - 1, 0)
        lines_after_cursor = max(max_y - self.cursor.y, 0)
        if n > lines_after_cursor:
            self._scroll_up(n - lines_after_cursor)
        self.cursor = Position(self.cursor.x, min(self.cursor.y + n, max_y))

    def _scroll_up(self, rows: int) -> None:
        area = self.buffer.area
        width = area.width
        moved = min(rows, area.height)
        lines = [
            self.buffer.content[r * width:(r + 1) * width] for r in range(moved)
        ]
        # scrolling more than a screen pushes blank lines through
        lines += [[Cell() for _ in range(width)] for _ in range(rows - moved)]
        self._push_scrollback(lines)
        self.buffer.content = self.buffer.content[moved * width:] + [
            Cell() for _ in range(moved * width)
        ]

    def _push_scrollback(self, lines: Sequence[List[Cell]]) -> None:
        old = self.scrollback
        width = old.area.width
        grown = Buffer.empty(Rect(0, 0, width, old.area.height + len(lines)))
        grown.content[:len(old.content)] = old.content
        offset = len(old.content)
        for i, line in enumerate(lines):
            grown.content[offset + i * width:offset + (i + 1) * width] = line
        self.scrollback = grown

    def size(self) -> Size:
        self._check("size")
        return self.buffer.area.as_size()

    def flush(self) -> None:
        self._check("flush")
        self.flush_count += 1

    # Helpers

    def resize(self, width: int, height: int) -> None:
        """Simulate the user resizing the terminal window."""
        self.buffer.resize(Rect(0, 0, width, height))
        if self.scrollback.area.width != width:
            self.scrollback.resize(Rect(0, 0, width, self.scrollback.area.height))
        self.cursor = Position(
            min(self.cursor.x, max(width - 1, 0)),
            min(self.cursor.y, max(height - 1, 0)),
        )

    def assert_buffer_lines(self, lines: Sequence[str]) -> None:
        actual = self.buffer.lines()
        assert actual == list(lines), f"screen mismatch:\n{actual!r}\n!=\n{list(lines)!r}"

    def assert_scrollback_lines(self, lines: Sequence[str]) -> None:
        actual = self.scrollback.lines()
        assert actual == list(lines), f"scrollback mismatch:\n{actual!r}\n!=\n{list(lines)!r}"


__all__ = ["ClearType", "Backend", "TestBackend"]
