from __future__ import annotations
from dataclasses import dataclass
from typing import ClassVar, Iterator, Optional, Tuple, TypeAlias, Union
import enum

# Terminals address cells with unsigned 16-bit coordinates.
MAX_COORD = 0xFFFF


def _check_coord(name: str, value: int) -> None:
    if not 0 <= value <= MAX_COORD:
        raise ValueError(f"{name} out of range: {value}")


@dataclass(frozen=True)
class Position:
    x: int
    y: int

    ORIGIN: ClassVar["Position"]

    def __post_init__(self) -> None:
        _check_coord("x", self.x)
        _check_coord("y", self.y)

    def to_tuple(self) -> Tuple[int, int]:
        return (int(self.x), int(self.y))

    def __iter__(self) -> Iterator[int]:
        yield from (int(self.x), int(self.y))


Position.ORIGIN = Position(0, 0)


@dataclass(frozen=True)
class Size:
    width: int
    height: int

    def __post_init__(self) -> None:
        _check_coord("width", self.width)
        _check_coord("height", self.height)

    @property
    def area(self) -> int:
        return int(self.width * self.height)

    def to_tuple(self) -> Tuple[int, int]:
        return (int(self.width), int(self.height))

    def __iter__(self) -> Iterator[int]:
        yield from (int(self.width), int(self.height))


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    def __post_init__(self) -> None:
        _check_coord("x", self.x)
        _check_coord("y", self.y)
        _check_coord("width", self.width)
        _check_coord("height", self.height)
        # keep right/bottom addressable: clamp the extent, not the origin
        object.__setattr__(self, "width", min(self.width, MAX_COORD - self.x))
        object.__setattr__(self, "height", min(self.height, MAX_COORD - self.y))

    @staticmethod
    def from_tuple(t: Tuple[int, int, int, int]) -> "Rect":
        x, y, w, h = t
        return Rect(int(x), int(y), int(w), int(h))

    @staticmethod
    def from_size(position: Position, size: Size) -> "Rect":
        return Rect(position.x, position.y, size.width, size.height)

    def to_tuple(self) -> Tuple[int, int, int, int]:
        return (int(self.x), int(self.y), int(self.width), int(self.height))

    def __iter__(self) -> Iterator[int]:
        yield from (int(self.x), int(self.y), int(self.width), int(self.height))

    @property
    def left(self) -> int:
        return int(self.x)

    @property
    def top(self) -> int:
        return int(self.y)

    @property
    def right(self) -> int:
        return int(self.x + self.width)

    @property
    def bottom(self) -> int:
        return int(self.y + self.height)

    @property
    def area(self) -> int:
        return int(self.width * self.height)

    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def as_position(self) -> Position:
        return Position(self.x, self.y)

    def as_size(self) -> Size:
        return Size(self.width, self.height)

    def inner(self, horizontal: int = 0, vertical: int = 0) -> "Rect":
        """Shrink by a margin on every side; collapses to an empty rect
        instead of going negative."""
        if self.width < 2 * horizontal or self.height < 2 * vertical:
            return Rect(self.x, self.y, 0, 0)
        return Rect(
            self.x + horizontal,
            self.y + vertical,
            self.width - 2 * horizontal,
            self.height - 2 * vertical,
        )

    def union(self, other: "Rect") -> "Rect":
        x1 = min(self.x, other.x)
        y1 = min(self.y, other.y)
        x2 = max(self.right, other.right)
        y2 = max(self.bottom, other.bottom)
        return Rect(x1, y1, x2 - x1, y2 - y1)

    def intersection(self, other: "Rect") -> "Rect":
        x1 = max(self.x, other.x)
        y1 = max(self.y, other.y)
        x2 = min(self.right, other.right)
        y2 = min(self.bottom, other.bottom)
        return Rect(x1, y1, max(0, x2 - x1), max(0, y2 - y1))

    def intersects(self, other: "Rect") -> bool:
        return (
            self.x < other.right
            and self.right > other.x
            and self.y < other.bottom
            and self.bottom > other.y
        )

    def contains(self, position: Position) -> bool:
        return self.x <= position.x < self.right and self.y <= position.y < self.bottom

    def rows(self) -> Iterator["Rect"]:
        for y in range(self.top, self.bottom):
            yield Rect(self.x, y, self.width, 1)

    def positions(self) -> Iterator[Position]:
        for y in range(self.top, self.bottom):
            for x in range(self.left, self.right):
                yield Position(x, y)


RectLike: TypeAlias = Union[Rect, Tuple[int, int, int, int]]


def as_rect(rect: RectLike) -> Rect:
    """Accept either a tuple or a Rect."""
    if isinstance(rect, Rect):
        return rect
    return Rect.from_tuple(rect)


def as_position(pos: Union[Position, Tuple[int, int]]) -> Position:
    if isinstance(pos, Position):
        return pos
    x, y = pos
    return Position(int(x), int(y))


__all__ = [
    "MAX_COORD",
    "Position",
    "Size",
    "Rect",
    "RectLike",
    "as_rect",
    "as_position",
]


# Colours and modifiers. Named colours are small ints; RGB and indexed colours
# are encoded into the same int space by gridterm.style.

class Color(enum.IntEnum):
    Reset = 0
    Black = 1
    Red = 2
    Green = 3
    Yellow = 4
    Blue = 5
    Magenta = 6
    Cyan = 7
    Gray = 8
    DarkGray = 9
    LightRed = 10
    LightGreen = 11
    LightYellow = 12
    LightBlue = 13
    LightMagenta = 14
    LightCyan = 15
    White = 16


class Modifier(enum.IntFlag):
    NONE = 0
    BOLD = 1 << 0
    DIM = 1 << 1
    ITALIC = 1 << 2
    UNDERLINED = 1 << 3
    SLOW_BLINK = 1 << 4
    RAPID_BLINK = 1 << 5
    REVERSED = 1 << 6
    HIDDEN = 1 << 7
    CROSSED_OUT = 1 << 8


ALL_MODIFIERS = Modifier(
    Modifier.BOLD | Modifier.DIM | Modifier.ITALIC | Modifier.UNDERLINED
    | Modifier.SLOW_BLINK | Modifier.RAPID_BLINK | Modifier.REVERSED
    | Modifier.HIDDEN | Modifier.CROSSED_OUT
)

ColorLike: TypeAlias = Union[int, Color]
OptionalColor: TypeAlias = Optional[ColorLike]

__all__ += [
    "Color",
    "Modifier",
    "ALL_MODIFIERS",
    "ColorLike",
    "OptionalColor",
]
