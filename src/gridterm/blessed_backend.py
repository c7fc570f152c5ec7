"""
Backend that drives a real terminal through blessed.

Output is queued and written in one go on flush(); cursor and clear commands
are written immediately. Putting the terminal into cbreak/fullscreen mode is
left to the caller (``term.fullscreen()``, ``term.cbreak()``).
"""
from __future__ import annotations

from typing import IO, Dict, Iterable, List, Optional, Tuple

import blessed

from .backend import Backend, ClearType
from .buffer import Cell
from .style import index_of_color, is_indexed, is_rgb, rgb_components
from .types import Color, ColorLike, Modifier, Position, Size

# blessed colour names for the named palette; Reset has no sequence of its own
_COLOR_NAMES: Dict[Color, Optional[str]] = {
    Color.Reset: None,
    Color.Black: "black",
    Color.Red: "red",
    Color.Green: "green",
    Color.Yellow: "yellow",
    Color.Blue: "blue",
    Color.Magenta: "magenta",
    Color.Cyan: "cyan",
    Color.Gray: "white",
    Color.DarkGray: "bright_black",
    Color.LightRed: "bright_red",
    Color.LightGreen: "bright_green",
    Color.LightYellow: "bright_yellow",
    Color.LightBlue: "bright_blue",
    Color.LightMagenta: "bright_magenta",
    Color.LightCyan: "bright_cyan",
    Color.White: "bright_white",
}

_MODIFIER_CAPS: Tuple[Tuple[Modifier, str], ...] = (
    (Modifier.BOLD, "bold"),
    (Modifier.DIM, "dim"),
    (Modifier.ITALIC, "italic"),
    (Modifier.UNDERLINED, "underline"),
    (Modifier.SLOW_BLINK, "blink"),
    (Modifier.REVERSED, "reverse"),
    (Modifier.HIDDEN, "invis"),
)

# No terminfo capability exists for these, raw SGR is written instead.
_RAW_MODIFIERS: Tuple[Tuple[Modifier, str], ...] = (
    (Modifier.RAPID_BLINK, "\x1b[6m"),
    (Modifier.CROSSED_OUT, "\x1b[9m"),
)
_UNDERLINE_COLOR_RESET = "\x1b[59m"
_CLEAR_BEFORE_CURSOR = "\x1b[1J"

# palette slot of each named colour, for SGR 58;5
_COLOR_INDEX: Dict[Color, int] = {
    color: i for i, color in enumerate(
        (
            Color.Black, Color.Red, Color.Green, Color.Yellow,
            Color.Blue, Color.Magenta, Color.Cyan, Color.Gray,
            Color.DarkGray, Color.LightRed, Color.LightGreen, Color.LightYellow,
            Color.LightBlue, Color.LightMagenta, Color.LightCyan, Color.White,
        )
    )
}


class BlessedBackend(Backend):
    def __init__(
        self,
        term: Optional[blessed.Terminal] = None,
        stream: Optional[IO[str]] = None,
        timeout: float = 1.0,
    ) -> None:
        if term is None:
            term = blessed.Terminal(stream=stream)
        self._term = term
        self._stream = stream if stream is not None else term.stream
        self._timeout = timeout
        self._queue: List[str] = []

    @property
    def term(self) -> blessed.Terminal:
        return self._term

    # Output

    def _write(self, seq: str) -> None:
        if seq:
            self._queue.append(str(seq))

    def _execute(self, seq: str) -> None:
        self._write(seq)
        self.flush()

    def flush(self) -> None:
        if self._queue:
            data = "".join(self._queue)
            self._queue.clear()
            self._stream.write(data)
        self._stream.flush()

    # Styling

    def _color(self, color: ColorLike, background: bool) -> str:
        term = self._term
        c = int(color)
        if is_rgb(c):
            r, g, b = rgb_components(c)
            return str(term.on_color_rgb(r, g, b) if background else term.color_rgb(r, g, b))
        if is_indexed(c):
            i = index_of_color(c)
            return str(term.on_color(i) if background else term.color(i))
        name = _COLOR_NAMES[Color(c)]
        if name is None:
            return ""
        return str(getattr(term, f"on_{name}" if background else name))

    def _underline_color(self, color: ColorLike) -> str:
        if not self._term.does_styling:
            return ""
        c = int(color)
        if is_rgb(c):
            r, g, b = rgb_components(c)
            return f"\x1b[58;2;{r};{g};{b}m"
        if is_indexed(c):
            return f"\x1b[58;5;{index_of_color(c)}m"
        if Color(c) is Color.Reset:
            return _UNDERLINE_COLOR_RESET
        return f"\x1b[58;5;{_COLOR_INDEX[Color(c)]}m"

    def _modifiers(self, mods: int) -> str:
        out = []
        for flag, cap in _MODIFIER_CAPS:
            if mods & flag:
                out.append(str(getattr(self._term, cap)))
        if self._term.does_styling:
            out.extend(seq for flag, seq in _RAW_MODIFIERS if mods & flag)
        return "".join(out)

    def _transition(
        self,
        fg: ColorLike,
        bg: ColorLike,
        underline: ColorLike,
        modifier: Modifier,
        cell: Cell,
    ) -> str:
        """Sequence taking the pen from (fg, bg, underline, modifier) to
        ``cell``'s style."""
        removed = int(modifier) & ~int(cell.modifier)
        fg_reset = cell.fg == Color.Reset and fg != Color.Reset
        bg_reset = cell.bg == Color.Reset and bg != Color.Reset
        if removed or fg_reset or bg_reset:
            # SGR cannot switch single attributes off portably: start over.
            out = (
                str(self._term.normal)
                + self._modifiers(int(cell.modifier))
                + self._color(cell.fg, background=False)
                + self._color(cell.bg, background=True)
            )
            if cell.underline_color != Color.Reset:
                out += self._underline_color(cell.underline_color)
            return out
        out = self._modifiers(int(cell.modifier) & ~int(modifier))
        if cell.fg != fg:
            out += self._color(cell.fg, background=False)
        if cell.bg != bg:
            out += self._color(cell.bg, background=True)
        if cell.underline_color != underline:
            out += self._underline_color(cell.underline_color)
        return out

    # Backend

    def draw(self, content: Iterable[Tuple[int, int, Cell]]) -> None:
        fg: ColorLike = Color.Reset
        bg: ColorLike = Color.Reset
        underline: ColorLike = Color.Reset
        modifier = Modifier.NONE
        next_pos: Optional[Tuple[int, int]] = None
        wrote = False
        for x, y, cell in content:
            if next_pos != (x, y):
                self._write(self._term.move_xy(x, y))
            if (
                cell.modifier != modifier
                or cell.fg != fg
                or cell.bg != bg
                or cell.underline_color != underline
            ):
                self._write(self._transition(fg, bg, underline, modifier, cell))
                fg, bg, underline = cell.fg, cell.bg, cell.underline_color
                modifier = cell.modifier
            self._write(cell.symbol)
            next_pos = (x + max(cell.width, 1), y)
            wrote = True
        if wrote:
            # sgr0 resets the underline colour too
            self._write(self._term.normal)

    def hide_cursor(self) -> None:
        self._execute(self._term.hide_cursor)

    def show_cursor(self) -> None:
        self._execute(self._term.normal_cursor)

    def get_cursor_position(self) -> Position:
        self.flush()
        row, col = self._term.get_location(timeout=self._timeout)
        if row < 0 or col < 0:
            raise OSError("terminal did not answer the cursor position query")
        return Position(col, row)

    def set_cursor_position(self, position: Position) -> None:
        self._execute(self._term.move_xy(position.x, position.y))

    def clear_region(self, clear_type: ClearType) -> None:
        term = self._term
        if clear_type is ClearType.ALL:
            seq = term.clear
        elif clear_type is ClearType.AFTER_CURSOR:
            seq = term.clear_eos
        elif clear_type is ClearType.BEFORE_CURSOR:
            seq = _CLEAR_BEFORE_CURSOR if term.does_styling else ""
        elif clear_type is ClearType.CURRENT_LINE:
            seq = str(term.clear_bol) + str(term.clear_eol)
        elif clear_type is ClearType.UNTIL_NEWLINE:
            seq = term.clear_eol
        else:
            raise ValueError(f"unknown clear type: {clear_type!r}")
        self._execute(seq)

    def append_lines(self, n: int) -> None:
        if n > 0:
            self._write("\n" * n)
        self.flush()

    def size(self) -> Size:
        return Size(self._term.width, self._term.height)


__all__ = ["BlessedBackend"]
