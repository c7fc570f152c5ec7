from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .style import Style
from .types import (
    ALL_MODIFIERS,
    Color,
    ColorLike,
    MAX_COORD,
    Modifier,
    Position,
    Rect,
    RectLike,
    as_rect,
)
from .width import graphemes, symbol_width, text_width


@dataclass
class Cell:
    """One character cell.

    ``skip`` marks the continuation column of a wide glyph: the symbol is
    empty and the cell is never drawn on its own, the glyph to its left
    covers it.
    """

    symbol: str = " "
    fg: ColorLike = Color.Reset
    bg: ColorLike = Color.Reset
    underline_color: ColorLike = Color.Reset
    modifier: Modifier = Modifier.NONE
    skip: bool = False

    @property
    def width(self) -> int:
        if self.skip:
            return 0
        return symbol_width(self.symbol)

    def set_symbol(self, symbol: str) -> "Cell":
        if not symbol:
            raise ValueError("cell symbol must not be empty")
        self.symbol = symbol
        self.skip = False
        return self

    def set_char(self, ch: str) -> "Cell":
        if len(ch) != 1:
            raise ValueError(f"expected a single character, got {ch!r}")
        return self.set_symbol(ch)

    def set_fg(self, color: ColorLike) -> "Cell":
        self.fg = color
        return self

    def set_bg(self, color: ColorLike) -> "Cell":
        self.bg = color
        return self

    def set_underline_color(self, color: ColorLike) -> "Cell":
        self.underline_color = color
        return self

    def set_style(self, style: Style) -> "Cell":
        if style.fg is not None:
            self.fg = style.fg
        if style.bg is not None:
            self.bg = style.bg
        if style.underline_color is not None:
            self.underline_color = style.underline_color
        mods = (int(self.modifier) | int(style.add_modifier)) & ~int(style.sub_modifier)
        self.modifier = Modifier(mods)
        return self

    def style(self) -> Style:
        return Style(
            fg=self.fg,
            bg=self.bg,
            underline_color=self.underline_color,
            add_modifier=self.modifier,
            sub_modifier=Modifier(int(ALL_MODIFIERS) & ~int(self.modifier)),
        )

    def mark_continuation(self, owner: "Cell") -> "Cell":
        """Turn this cell into the trailing column of ``owner``'s glyph."""
        self.symbol = ""
        self.skip = True
        self.fg = owner.fg
        self.bg = owner.bg
        self.underline_color = owner.underline_color
        self.modifier = owner.modifier
        return self

    def reset(self) -> None:
        self.symbol = " "
        self.fg = Color.Reset
        self.bg = Color.Reset
        self.underline_color = Color.Reset
        self.modifier = Modifier.NONE
        self.skip = False

    def copy(self) -> "Cell":
        return replace(self)


Update = Tuple[int, int, Cell]


class Buffer:
    """A rectangular grid of cells.

    ``content`` is row-major and always holds exactly ``area.width *
    area.height`` cells. Positions are absolute terminal coordinates, so a
    buffer whose area does not start at the origin is indexed with the same
    coordinates the backend uses.
    """

    def __init__(self, area: RectLike, content: Optional[List[Cell]] = None) -> None:
        area = as_rect(area)
        if content is None:
            content = [Cell() for _ in range(area.area)]
        elif len(content) != area.area:
            raise ValueError(
                f"content has {len(content)} cells, area {area} needs {area.area}"
            )
        self.area = area
        self.content = content

    @classmethod
    def empty(cls, area: RectLike) -> "Buffer":
        return cls(area)

    @classmethod
    def filled(cls, area: RectLike, cell: Cell) -> "Buffer":
        area = as_rect(area)
        return cls(area, [cell.copy() for _ in range(area.area)])

    @classmethod
    def with_lines(cls, lines: Sequence[str]) -> "Buffer":
        """Build a buffer at the origin whose rows show ``lines``; handy in tests."""
        height = len(lines)
        width = max((text_width(line) for line in lines), default=0)
        buf = cls.empty(Rect(0, 0, width, height))
        for y, line in enumerate(lines):
            if line:
                buf.set_string(0, y, line)
        return buf

    # Indexing

    def index_of(self, x: int, y: int) -> int:
        area = self.area
        if not (area.x <= x < area.right and area.y <= y < area.bottom):
            raise IndexError(f"position ({x}, {y}) is outside the buffer area {area}")
        return (y - area.y) * area.width + (x - area.x)

    def pos_of(self, i: int) -> Tuple[int, int]:
        if not 0 <= i < len(self.content):
            raise IndexError(f"index {i} is outside the buffer of {len(self.content)} cells")
        width = self.area.width
        return (self.area.x + i % width, self.area.y + i // width)

    def get_mut(self, x: int, y: int) -> Cell:
        """The cell at ``(x, y)``; mutate it in place."""
        return self.content[self.index_of(x, y)]

    def __getitem__(self, pos: Union[Position, Tuple[int, int]]) -> Cell:
        x, y = pos
        return self.get_mut(int(x), int(y))

    def __setitem__(self, pos: Union[Position, Tuple[int, int]], cell: Cell) -> None:
        x, y = pos
        self.content[self.index_of(int(x), int(y))] = cell

    # Writing

    def set_string(self, x: int, y: int, text: str, style: Optional[Style] = None) -> Tuple[int, int]:
        return self.set_stringn(x, y, text, MAX_COORD, style)

    def set_stringn(
        self,
        x: int,
        y: int,
        text: str,
        max_width: int,
        style: Optional[Style] = None,
    ) -> Tuple[int, int]:
        """Write ``text`` starting at ``(x, y)``, using at most ``max_width``
        columns and never past the right edge of the area.

        Wide glyphs that do not fit are dropped whole. Returns the position
        right after the last written column.
        """
        self.index_of(x, y)
        remaining = min(int(max_width), self.area.right - x)
        x_offset = x
        for symbol in graphemes(text):
            w = symbol_width(symbol)
            if w == 0:
                continue
            if w > remaining:
                break
            remaining -= w
            self._put_glyph(x_offset, y, symbol, w, style)
            x_offset += w
        return (x_offset, y)

    def _put_glyph(self, x: int, y: int, symbol: str, w: int, style: Optional[Style]) -> None:
        # Blank the owner of a wide glyph we are about to cut in half.
        if self.get_mut(x, y).skip:
            ox = x - 1
            while ox >= self.area.x and self.get_mut(ox, y).skip:
                self.get_mut(ox, y).set_symbol(" ")
                ox -= 1
            if ox >= self.area.x:
                self.get_mut(ox, y).set_symbol(" ")
        cell = self.get_mut(x, y)
        cell.set_symbol(symbol)
        if style is not None:
            cell.set_style(style)
        for cx in range(x + 1, x + w):
            self.get_mut(cx, y).mark_continuation(cell)
        # Orphaned continuations of a wider glyph we overwrote.
        cx = x + w
        while cx < self.area.right and self.get_mut(cx, y).skip:
            self.get_mut(cx, y).set_symbol(" ")
            cx += 1

    def set_style(self, area: RectLike, style: Style) -> None:
        target = self.area.intersection(as_rect(area))
        for pos in target.positions():
            self.get_mut(pos.x, pos.y).set_style(style)

    # Whole-buffer operations

    def resize(self, area: RectLike) -> None:
        """Change the area; cells inside both the old and new area keep their
        content, every other cell is default."""
        area = as_rect(area)
        content = [Cell() for _ in range(area.area)]
        overlap = self.area.intersection(area)
        for y in range(overlap.top, overlap.bottom):
            src = self.index_of(overlap.left, y)
            dst = (y - area.y) * area.width + (overlap.left - area.x)
            content[dst:dst + overlap.width] = self.content[src:src + overlap.width]
        self.area = area
        self.content = content
        self._repair_wide_glyphs()

    def reset(self) -> None:
        for cell in self.content:
            cell.reset()

    def merge(self, other: "Buffer") -> None:
        """Grow to cover ``other`` as well and copy its cells on top."""
        self.resize(self.area.union(other.area))
        for i, cell in enumerate(other.content):
            x, y = other.pos_of(i)
            self.content[self.index_of(x, y)] = cell.copy()
        self._repair_wide_glyphs()

    def _repair_wide_glyphs(self) -> None:
        # Area changes can split a wide glyph from its continuation columns.
        width = self.area.width
        for row in range(self.area.height):
            start = row * width
            owner_end = start
            for i in range(start, start + width):
                cell = self.content[i]
                if cell.skip:
                    if i >= owner_end:
                        cell.set_symbol(" ")
                    continue
                w = cell.width
                if w > 1 and i + w > start + width:
                    cell.set_symbol(" ")
                    w = 1
                owner_end = i + max(w, 1)

    # Diffing

    def diff(self, other: "Buffer", max_gap: int = 0) -> List[Update]:
        """Cells of ``other`` that must be drawn to turn this buffer's
        on-screen image into ``other``'s.

        Updates come in row-major order with absolute coordinates. Skip cells
        are never emitted; the wide glyph owning them covers them. When a wide
        glyph is replaced by a narrower one, the columns it used to cover are
        emitted again.

        With ``max_gap > 0``, runs of at most ``max_gap`` unchanged columns
        between two changes on the same row are emitted too, so the backend
        can keep writing instead of repositioning the cursor.
        """
        previous = self.content
        current = other.content
        width = self.area.width
        updates: List[Update] = []
        # columns still covered by a wide glyph that was drawn or replaced
        invalidated = 0
        to_skip = 0
        # column just past the last emitted glyph on this row, -1 if none
        last_end = -1
        for i, (cur, prev) in enumerate(zip(current, previous)):
            if width and i % width == 0:
                last_end = -1
                to_skip = 0
                invalidated = 0
            if not cur.skip and to_skip == 0 and (invalidated > 0 or cur != prev):
                if max_gap > 0 and last_end >= 0 and 0 < i - last_end <= max_gap:
                    for j in range(last_end, i):
                        if not current[j].skip:
                            x, y = self.pos_of(j)
                            updates.append((x, y, current[j]))
                x, y = self.pos_of(i)
                updates.append((x, y, cur))
                last_end = i + max(cur.width, 1)
            cur_width = cur.width
            to_skip = max(to_skip - 1, cur_width - 1, 0)
            affected = max(cur_width, prev.width)
            invalidated = max(affected, invalidated, 1) - 1
        return updates

    # Inspection

    def lines(self) -> List[str]:
        width = self.area.width
        return [
            "".join(cell.symbol for cell in self.content[row * width:(row + 1) * width])
            for row in range(self.area.height)
        ]

    def __iter__(self) -> Iterable[Cell]:
        return iter(self.content)

    def __len__(self) -> int:
        return len(self.content)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Buffer):
            return NotImplemented
        return self.area == other.area and self.content == other.content

    def __repr__(self) -> str:
        rows = "\n".join(f"    {line!r}," for line in self.lines())
        return f"Buffer(area={self.area!r}, lines=[\n{rows}\n])"


__all__ = ["Cell", "Buffer", "Update"]
