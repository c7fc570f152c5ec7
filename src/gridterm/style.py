from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .types import ALL_MODIFIERS, Color, ColorLike, Modifier

_RGB_FLAG = 0x80000000
_INDEXED_FLAG = 0x40000000

# Color helpers (fast integer encoding shared by every backend)
def rgb(r: int, g: int, b: int) -> int:
    return _RGB_FLAG | ((int(r) & 0xFF) << 16) | ((int(g) & 0xFF) << 8) | (int(b) & 0xFF)

def color_indexed(i: int) -> int:
    return _INDEXED_FLAG | (int(i) & 0xFF)

def is_rgb(color: ColorLike) -> bool:
    return bool(int(color) & _RGB_FLAG)

def is_indexed(color: ColorLike) -> bool:
    c = int(color)
    return not (c & _RGB_FLAG) and bool(c & _INDEXED_FLAG)

def rgb_components(color: ColorLike) -> Tuple[int, int, int]:
    c = int(color)
    if not is_rgb(c):
        raise ValueError(f"not an rgb color: {c:#x}")
    return ((c >> 16) & 0xFF, (c >> 8) & 0xFF, c & 0xFF)

def index_of_color(color: ColorLike) -> int:
    if not is_indexed(color):
        raise ValueError(f"not an indexed color: {int(color):#x}")
    return int(color) & 0xFF

@dataclass(frozen=True)
class Style:
    """A patch applied to cells.

    Colours left as ``None`` keep whatever the cell already has;
    ``add_modifier`` is OR-ed in and ``sub_modifier`` is removed.
    """

    fg: Optional[ColorLike] = None
    bg: Optional[ColorLike] = None
    underline_color: Optional[ColorLike] = None
    add_modifier: Modifier = Modifier.NONE
    sub_modifier: Modifier = Modifier.NONE

    @classmethod
    def reset(cls) -> "Style":
        """A style that puts a cell back to its default look."""
        return cls(
            fg=Color.Reset,
            bg=Color.Reset,
            underline_color=Color.Reset,
            sub_modifier=ALL_MODIFIERS,
        )

    # Fluent helpers (return a new Style for chaining)
    def with_fg(self, fg: ColorLike) -> "Style":
        return Style(fg, self.bg, self.underline_color, self.add_modifier, self.sub_modifier)

    def with_bg(self, bg: ColorLike) -> "Style":
        return Style(self.fg, bg, self.underline_color, self.add_modifier, self.sub_modifier)

    def with_underline_color(self, color: ColorLike) -> "Style":
        return Style(self.fg, self.bg, color, self.add_modifier, self.sub_modifier)

    def add_mods(self, mods: Union[int, Modifier]) -> "Style":
        m = Modifier(int(mods))
        return Style(
            self.fg, self.bg, self.underline_color,
            self.add_modifier | m, Modifier(int(self.sub_modifier) & ~int(m)),
        )

    def remove_mods(self, mods: Union[int, Modifier]) -> "Style":
        m = Modifier(int(mods))
        return Style(
            self.fg, self.bg, self.underline_color,
            Modifier(int(self.add_modifier) & ~int(m)), self.sub_modifier | m,
        )

    def bold(self) -> "Style":
        return self.add_mods(Modifier.BOLD)

    def italic(self) -> "Style":
        return self.add_mods(Modifier.ITALIC)

    def underlined(self) -> "Style":
        return self.add_mods(Modifier.UNDERLINED)

    def reversed(self) -> "Style":
        return self.add_mods(Modifier.REVERSED)

    def dim(self) -> "Style":
        return self.add_mods(Modifier.DIM)

    def crossed_out(self) -> "Style":
        return self.add_mods(Modifier.CROSSED_OUT)

    def slow_blink(self) -> "Style":
        return self.add_mods(Modifier.SLOW_BLINK)

    def rapid_blink(self) -> "Style":
        return self.add_mods(Modifier.RAPID_BLINK)

    def patch(self, other: "Style") -> "Style":
        """Layer ``other`` on top of this style."""
        add = (int(self.add_modifier) & ~int(other.sub_modifier)) | int(other.add_modifier)
        sub = (int(self.sub_modifier) & ~int(other.add_modifier)) | int(other.sub_modifier)
        return Style(
            fg=self.fg if other.fg is None else other.fg,
            bg=self.bg if other.bg is None else other.bg,
            underline_color=(
                self.underline_color if other.underline_color is None else other.underline_color
            ),
            add_modifier=Modifier(add),
            sub_modifier=Modifier(sub),
        )


__all__ = [
    "Style",
    "rgb",
    "color_indexed",
    "is_rgb",
    "is_indexed",
    "rgb_components",
    "index_of_color",
]
