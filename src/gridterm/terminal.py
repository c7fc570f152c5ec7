from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from typing import Any, Callable, List, Optional, Protocol, Tuple, Union

from .backend import Backend, ClearType
from .buffer import Buffer, Cell
from .types import Position, Rect, RectLike, Size, as_position, as_rect
from .viewport import Fixed, Fullscreen, Inline, Viewport, compute_inline_size

logger = logging.getLogger(__name__)

DEFAULT_MAX_GAP = 4
_FRAME_COUNT_MASK = (1 << 64) - 1


def default_max_gap() -> int:
    """Gap threshold for diffing, overridable with GRIDTERM_REDRAW_GAP.

    Re-emitting up to this many unchanged cells between two changes on a
    row is cheaper than a cursor-position sequence (six to ten bytes).
    """
    raw = os.getenv("GRIDTERM_REDRAW_GAP")
    if not raw:
        return DEFAULT_MAX_GAP
    try:
        value = int(raw)
    except ValueError:
        logger.warning("ignoring GRIDTERM_REDRAW_GAP=%r: not an integer", raw)
        return DEFAULT_MAX_GAP
    return max(0, value)


class RenderError(Exception):
    """A render callback failed; nothing was sent to the backend."""


class Widget(Protocol):
    def render(self, area: Rect, buf: Buffer) -> None:
        ...


@dataclass
class TerminalOptions:
    viewport: Viewport = field(default_factory=Fullscreen)
    max_gap: int = field(default_factory=default_max_gap)


class Frame:
    """What a render callback draws into.

    The buffer is only valid for the duration of the callback.
    """

    def __init__(self, buffer: Buffer, area: Rect, count: int) -> None:
        self.buffer = buffer
        self.area = area
        self.count = count
        self.cursor_position: Optional[Position] = None

    def render_widget(self, widget: Widget, area: Optional[RectLike] = None) -> None:
        widget.render(self.area if area is None else as_rect(area), self.buffer)

    def set_cursor_position(self, position: Union[Position, Tuple[int, int]]) -> None:
        """Show the cursor at ``position`` after this frame; without a call
        the cursor is hidden."""
        self.cursor_position = as_position(position)


@dataclass(frozen=True)
class CompletedFrame:
    """The buffer that was just drawn. It is reused by the next draw."""

    buffer: Buffer
    area: Rect
    count: int


class Terminal:
    """Double-buffered renderer on top of a Backend.

    Each draw renders into the current buffer, sends the difference from the
    previous one to the backend and swaps the two. Not safe for concurrent
    use: serialize draw calls.
    """

    def __init__(self, backend: Backend, options: Optional[TerminalOptions] = None) -> None:
        options = options or TerminalOptions()
        viewport = options.viewport
        if isinstance(viewport, Fixed):
            area = viewport.area
        else:
            area = Rect.from_size(Position.ORIGIN, backend.size())
        if isinstance(viewport, Fullscreen):
            viewport_area, cursor_pos = area, Position.ORIGIN
        elif isinstance(viewport, Inline):
            viewport_area, cursor_pos = compute_inline_size(
                backend, viewport.height, area.as_size(), 0
            )
        elif isinstance(viewport, Fixed):
            viewport_area, cursor_pos = viewport.area, viewport.area.as_position()
        else:
            raise TypeError(f"unknown viewport: {viewport!r}")

        self._backend = backend
        self._buffers = [Buffer.empty(viewport_area), Buffer.empty(viewport_area)]
        self._current = 0
        self._hidden_cursor = False
        self._viewport = viewport
        self._viewport_area = viewport_area
        self._last_known_area = area
        self._last_known_cursor_pos = cursor_pos
        self._frame_count = 0
        self._max_gap = max(0, int(options.max_gap))

    # State

    @property
    def backend(self) -> Backend:
        return self._backend

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    @property
    def viewport_area(self) -> Rect:
        return self._viewport_area

    @property
    def last_known_area(self) -> Rect:
        return self._last_known_area

    @property
    def last_known_cursor_pos(self) -> Position:
        return self._last_known_cursor_pos

    @property
    def hidden_cursor(self) -> bool:
        return self._hidden_cursor

    @property
    def frame_count(self) -> int:
        return self._frame_count

    @property
    def current_buffer(self) -> Buffer:
        return self._buffers[self._current]

    @property
    def previous_buffer(self) -> Buffer:
        return self._buffers[1 - self._current]

    def get_frame(self) -> Frame:
        return Frame(self.current_buffer, self._viewport_area, self._frame_count)

    # Drawing

    def flush(self) -> None:
        """Send the difference between the previous and current buffer."""
        updates = self.previous_buffer.diff(self.current_buffer, self._max_gap)
        if not updates:
            return
        x, y, _ = updates[-1]
        self._last_known_cursor_pos = Position(x, y)
        self._backend.draw(updates)

    def draw(self, render: Callable[[Frame], Any]) -> CompletedFrame:
        """Draw one frame.

        ``render`` must paint everything it owns in the frame every time:
        only cell differences reach the backend. If it raises, the exception
        propagates before anything is written and the terminal keeps showing
        the previous frame.
        """
        # Resize first so widgets never render into a stale area.
        self.autoresize()

        frame = self.get_frame()
        try:
            render(frame)
        except BaseException:
            frame.buffer.reset()
            raise
        cursor_position = frame.cursor_position

        self.flush()

        if cursor_position is None:
            self.hide_cursor()
        else:
            self.show_cursor()
            self.set_cursor_position(cursor_position)

        self.swap_buffers()
        self._backend.flush()

        completed = CompletedFrame(
            buffer=self.previous_buffer,
            area=self._last_known_area,
            count=self._frame_count,
        )
        self._frame_count = (self._frame_count + 1) & _FRAME_COUNT_MASK
        return completed

    def try_draw(self, render: Callable[[Frame], Any]) -> CompletedFrame:
        """Like draw(), but a failing callback surfaces as RenderError so it
        can be told apart from a backend OSError."""

        def guarded(frame: Frame) -> None:
            try:
                render(frame)
            except Exception as exc:
                raise RenderError(f"render callback failed: {exc}") from exc

        return self.draw(guarded)

    def swap_buffers(self) -> None:
        """Reset the other buffer and make it the current one."""
        self._buffers[1 - self._current].reset()
        self._current = 1 - self._current

    # Geometry

    def size(self) -> Size:
        return self._backend.size()

    def resize(self, area: RectLike) -> None:
        """Adapt the buffers to a new terminal area and force a full redraw."""
        area = as_rect(area)
        viewport = self._viewport
        if isinstance(viewport, Fullscreen):
            next_area = area
        elif isinstance(viewport, Inline):
            offset = max(0, self._last_known_cursor_pos.y - self._viewport_area.top)
            next_area, _ = compute_inline_size(
                self._backend, viewport.height, area.as_size(), offset
            )
        else:
            next_area = viewport.area
        logger.debug("resize: terminal %s -> viewport %s", area, next_area)
        self._set_viewport_area(next_area)
        self.clear()
        self._last_known_area = area

    def autoresize(self) -> None:
        """Resize when the backend size changed; fixed viewports never do."""
        if isinstance(self._viewport, Fixed):
            return
        area = Rect.from_size(Position.ORIGIN, self.size())
        if area != self._last_known_area:
            self.resize(area)

    def _set_viewport_area(self, area: Rect) -> None:
        self._buffers[self._current].resize(area)
        self._buffers[1 - self._current].resize(area)
        self._viewport_area = area

    def clear(self) -> None:
        """Clear the viewport on screen; the next draw repaints everything."""
        viewport = self._viewport
        if isinstance(viewport, Fullscreen):
            self._backend.clear_region(ClearType.ALL)
        elif isinstance(viewport, Inline):
            self._backend.set_cursor_position(self._viewport_area.as_position())
            self._backend.clear_region(ClearType.AFTER_CURSOR)
        else:
            for y in range(viewport.area.top, viewport.area.bottom):
                self._backend.set_cursor_position(Position(0, y))
                self._backend.clear_region(ClearType.AFTER_CURSOR)
        self._buffers[1 - self._current].reset()

    # Cursor

    def hide_cursor(self) -> None:
        self._backend.hide_cursor()
        self._hidden_cursor = True

    def show_cursor(self) -> None:
        self._backend.show_cursor()
        self._hidden_cursor = False

    def get_cursor_position(self) -> Position:
        return self._backend.get_cursor_position()

    def set_cursor_position(self, position: Union[Position, Tuple[int, int]]) -> None:
        position = as_position(position)
        self._backend.set_cursor_position(position)
        self._last_known_cursor_pos = position

    # Inline viewports

    def insert_before(self, height: int, draw_fn: Callable[[Buffer], Any]) -> None:
        """Insert ``height`` lines above an inline viewport.

        ``draw_fn`` fills a buffer of the viewport's width; its rows are pushed
        into the screen above the viewport, scrolling older output into the
        scrollback, and the viewport moves down as far as the screen allows.
        Does nothing for other viewports.
        """
        if not isinstance(self._viewport, Inline):
            return

        buffer = Buffer.empty(Rect(0, 0, self._viewport_area.width, height))
        draw_fn(buffer)
        cells = buffer.content

        drawn_height = self._viewport_area.top
        buffer_height = height
        viewport_height = self._viewport_area.height
        screen_height = self._last_known_area.height

        while buffer_height > 0 and buffer_height + viewport_height > screen_height:
            # Not everything fits: draw one screenful at most, scrolling up
            # only as far as needed. The scroll amount satisfies
            #   0 <= scroll_up <= drawn_height
            #   drawn_height - scroll_up + to_draw <= screen_height
            #   drawn_height - scroll_up + to_draw >= screen_height - viewport_height
            # so nothing blank enters the scrollback and the viewport never
            # ends up higher than it started.
            to_draw = min(buffer_height, screen_height)
            scroll_up = max(0, drawn_height + to_draw - screen_height)
            self._scroll_up(scroll_up)
            cells = self._draw_lines(drawn_height - scroll_up, to_draw, cells)
            drawn_height += to_draw - scroll_up
            buffer_height -= to_draw

        # The rest fits; scroll so the remainder plus the viewport end at the
        # bottom of the screen, or not at all if the viewport started higher.
        scroll_up = max(0, drawn_height + buffer_height + viewport_height - screen_height)
        self._scroll_up(scroll_up)
        self._draw_lines(drawn_height - scroll_up, buffer_height, cells)
        drawn_height += buffer_height - scroll_up

        self._set_viewport_area(replace(self._viewport_area, y=drawn_height))
        # Only the viewport is cleared, the inserted lines stay.
        self.clear()

    def _draw_lines(self, y_offset: int, lines_to_draw: int, cells: List[Cell]) -> List[Cell]:
        width = self._viewport_area.width
        split = width * lines_to_draw
        to_draw, remainder = cells[:split], cells[split:]
        if lines_to_draw > 0 and to_draw:
            self._backend.draw(
                [
                    (i % width, y_offset + i // width, cell)
                    for i, cell in enumerate(to_draw)
                    if not cell.skip
                ]
            )
            self._backend.flush()
        return remainder

    def _scroll_up(self, lines: int) -> None:
        if lines > 0:
            self.set_cursor_position(Position(0, max(0, self._last_known_area.height - 1)))
            self._backend.append_lines(lines)

    # Teardown

    def close(self) -> None:
        """Make a hidden cursor visible again. Failures are logged, not raised."""
        if getattr(self, "_hidden_cursor", False):
            try:
                self.show_cursor()
            except OSError as exc:
                logger.warning("Failed to show the cursor: %s", exc)

    def __enter__(self) -> "Terminal":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __del__(self):
        try:
            self.close()
        except Exception:
            pass


__all__ = [
    "Terminal",
    "TerminalOptions",
    "Frame",
    "CompletedFrame",
    "Widget",
    "RenderError",
    "default_max_gap",
    "DEFAULT_MAX_GAP",
]
