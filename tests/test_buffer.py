import pytest

from gridterm.backend import TestBackend
from gridterm.buffer import Buffer, Cell
from gridterm.style import Style, rgb
from gridterm.types import Color, Modifier, Rect


def play(previous: Buffer, current: Buffer, max_gap: int = 0) -> TestBackend:
    """Show ``previous`` on a fresh screen, then apply the diff to ``current``."""
    area = previous.area
    backend = TestBackend(area.right, area.bottom)
    backend.draw(Buffer.empty(area).diff(previous))
    backend.draw(previous.diff(current, max_gap))
    return backend


def test_single_changed_cell():
    prev = Buffer.with_lines(["wxyz "])
    cur = Buffer.with_lines(["wxyZ "])
    assert prev.diff(cur) == [(3, 0, Cell("Z"))]


def test_identical_buffers_have_no_diff():
    buf = Buffer.with_lines(["abc", "def"])
    assert buf.diff(Buffer.with_lines(["abc", "def"])) == []


def test_diff_uses_absolute_coordinates():
    prev = Buffer.empty(Rect(2, 3, 4, 1))
    cur = Buffer.empty(Rect(2, 3, 4, 1))
    cur.set_string(3, 3, "x")
    assert prev.diff(cur) == [(3, 3, Cell("x"))]


def test_style_change_is_a_change():
    prev = Buffer.with_lines(["ab"])
    cur = Buffer.with_lines(["ab"])
    cur.set_style(Rect(1, 0, 1, 1), Style(fg=Color.Red))
    updates = prev.diff(cur)
    assert [(x, y, c.symbol) for x, y, c in updates] == [(1, 0, "b")]
    assert updates[0][2].fg == Color.Red


def test_wide_glyph_continuation_is_never_emitted():
    prev = Buffer.with_lines(["abcd"])
    cur = Buffer.with_lines(["a你b"])
    updates = prev.diff(cur)
    assert [(x, y, c.symbol) for x, y, c in updates] == [(1, 0, "你"), (3, 0, "b")]


def test_replacing_wide_glyph_redraws_covered_columns():
    prev = Buffer.with_lines(["a你b"])
    cur = Buffer.with_lines(["abcd"])
    updates = prev.diff(cur)
    assert [(x, c.symbol) for x, _, c in updates] == [(1, "b"), (2, "c"), (3, "d")]


@pytest.mark.parametrize(
    "before, after",
    [
        (["hello", "world"], ["hellO", "w rld"]),
        (["a你b"], ["abcd"]),
        (["abcd"], ["a你b"]),
        (["你你"], ["a你 "]),
        (["xxxxxxxx"], ["xXxxxXxx"]),
    ],
)
@pytest.mark.parametrize("max_gap", [0, 2, 4])
def test_applying_diff_reproduces_current(before, after, max_gap):
    prev = Buffer.with_lines(before)
    cur = Buffer.with_lines(after)
    backend = play(prev, cur, max_gap)
    assert backend.buffer == cur
    assert cur.diff(Buffer.with_lines(after)) == []


def test_gap_bridging_fills_short_runs_on_a_row():
    prev = Buffer.with_lines(["abcdefgh"])
    cur = Buffer.with_lines(["XbcYefgh"])
    assert [x for x, _, _ in prev.diff(cur)] == [0, 3]
    assert [x for x, _, _ in prev.diff(cur, max_gap=1)] == [0, 3]
    assert [(x, c.symbol) for x, _, c in prev.diff(cur, max_gap=2)] == [
        (0, "X"), (1, "b"), (2, "c"), (3, "Y"),
    ]


def test_gap_bridging_stops_at_row_end():
    prev = Buffer.with_lines(["abc", "def"])
    cur = Buffer.with_lines(["abX", "Yef"])
    assert [(x, y) for x, y, _ in prev.diff(cur, max_gap=8)] == [(2, 0), (0, 1)]


def test_set_string_clips_at_right_edge():
    buf = Buffer.empty(Rect(0, 0, 5, 1))
    assert buf.set_string(0, 0, "abcdefg") == (5, 0)
    assert buf.lines() == ["abcde"]


def test_set_stringn_respects_max_width():
    buf = Buffer.empty(Rect(0, 0, 5, 1))
    assert buf.set_stringn(0, 0, "abcdef", 3) == (3, 0)
    assert buf.lines() == ["abc  "]


def test_wide_glyph_that_does_not_fit_is_dropped():
    buf = Buffer.empty(Rect(0, 0, 2, 1))
    buf.set_string(0, 0, "a你")
    assert buf.lines() == ["a "]

    buf = Buffer.empty(Rect(0, 0, 3, 1))
    buf.set_string(0, 0, "a你你")
    assert buf.lines() == ["a你"]
    assert buf[2, 0].skip


def test_overwriting_half_a_wide_glyph_blanks_it():
    buf = Buffer.with_lines(["你b"])
    buf.set_string(1, 0, "x")
    assert buf.lines() == [" xb"]

    buf = Buffer.with_lines(["你b"])
    buf.set_string(0, 0, "x")
    assert buf.lines() == ["x b"]
    assert not buf[1, 0].skip


def test_set_string_outside_area_raises():
    buf = Buffer.empty(Rect(0, 0, 3, 1))
    with pytest.raises(IndexError):
        buf.set_string(0, 1, "x")


def test_set_style_only_touches_area():
    buf = Buffer.with_lines(["abc"])
    buf.set_style(Rect(0, 0, 2, 1), Style(fg=Color.Red).bold())
    assert buf[0, 0].fg == Color.Red
    assert buf[1, 0].fg == Color.Red
    assert buf[2, 0].fg == Color.Reset


def test_resize_keeps_overlap_and_defaults_the_rest():
    buf = Buffer.with_lines(["abc", "def"])
    buf.resize(Rect(0, 0, 2, 3))
    assert buf.lines() == ["ab", "de", "  "]
    assert len(buf) == 6


def test_resize_drops_wide_glyph_cut_at_edge():
    buf = Buffer.with_lines(["a你"])
    buf.resize(Rect(0, 0, 2, 1))
    assert buf.lines() == ["a "]


def test_content_length_must_match_area():
    with pytest.raises(ValueError):
        Buffer(Rect(0, 0, 2, 2), [Cell()])


def test_merge_grows_to_cover_both():
    a = Buffer.with_lines(["ab"])
    b = Buffer.empty(Rect(0, 1, 2, 1))
    b.set_string(0, 1, "cd")
    a.merge(b)
    assert a.area == Rect(0, 0, 2, 2)
    assert a.lines() == ["ab", "cd"]


def test_cell_rejects_empty_symbol():
    with pytest.raises(ValueError):
        Cell().set_symbol("")
    cell = Cell().set_symbol("x").set_fg(Color.Blue)
    cell.reset()
    assert cell == Cell()


def test_filled_copies_the_cell():
    buf = Buffer.filled(Rect(0, 0, 2, 2), Cell("x", fg=Color.Red))
    buf[0, 0].set_symbol("y")
    assert buf.lines() == ["yx", "xx"]
    assert buf[1, 1].fg == Color.Red


@pytest.mark.parametrize(
    "before, after",
    [
        (["hello", "world"], ["hellO", "w rld"]),
        (["a你b"], ["abcd"]),
        (["abcd"], ["a你b"]),
        (["你你"], ["a你 "]),
        (["你a "], [" 你a"]),
        (["xxxxxxxx"], ["xXxxxXxx"]),
    ],
)
def test_minimal_diff_never_emits_unchanged_cells(before, after):
    prev = Buffer.with_lines(before)
    cur = Buffer.with_lines(after)
    for x, y, cell in prev.diff(cur):
        assert cell != prev[x, y]


def test_underline_color_only_change_is_a_change():
    prev = Buffer.with_lines(["ab"])
    cur = Buffer.with_lines(["ab"])
    cur.set_style(Rect(0, 0, 1, 1), Style(underline_color=rgb(255, 0, 0)))
    updates = prev.diff(cur)
    assert [(x, c.symbol) for x, _, c in updates] == [(0, "a")]
    assert updates[0][2].underline_color == rgb(255, 0, 0)


def test_modifier_only_change_is_a_change():
    prev = Buffer.with_lines(["ab"])
    cur = Buffer.with_lines(["ab"])
    cur.set_style(Rect(1, 0, 1, 1), Style().bold())
    updates = prev.diff(cur)
    assert [(x, c.symbol) for x, _, c in updates] == [(1, "b")]
    assert updates[0][2].modifier == Modifier.BOLD

    # removing it again is a change too
    assert [x for x, _, _ in cur.diff(prev)] == [1]
