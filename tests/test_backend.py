import pytest

from gridterm.backend import ClearType, TestBackend
from gridterm.buffer import Buffer, Cell
from gridterm.types import Position, Size


def screen(*lines):
    return Buffer.with_lines(list(lines))


def test_draw_logs_calls_and_marks_wide_glyphs():
    backend = TestBackend(4, 1)
    backend.draw([(0, 0, Cell("你")), (2, 0, Cell("x"))])
    assert backend.draw_calls == [[(0, 0, "你"), (2, 0, "x")]]
    assert backend.buffer[1, 0].skip
    backend.assert_buffer_lines(["你x "])


def test_empty_draw_is_not_logged():
    backend = TestBackend(2, 1)
    backend.draw([])
    assert backend.draw_calls == []


def test_append_lines_moves_cursor_when_there_is_room():
    backend = TestBackend(3, 3)
    backend.append_lines(2)
    assert backend.cursor == Position(0, 2)
    assert backend.scrollback.area.height == 0


def test_append_lines_at_bottom_scrolls_into_scrollback():
    backend = TestBackend(3, 2)
    backend.buffer = screen("abc", "def")
    backend.set_cursor_position(Position(1, 1))
    backend.append_lines(1)
    backend.assert_scrollback_lines(["abc"])
    backend.assert_buffer_lines(["def", "   "])
    assert backend.cursor == Position(1, 1)


def test_append_lines_past_a_screenful():
    backend = TestBackend(2, 2)
    backend.buffer = screen("ab", "cd")
    backend.set_cursor_position(Position(0, 1))
    backend.append_lines(3)
    backend.assert_scrollback_lines(["ab", "cd", "  "])
    backend.assert_buffer_lines(["  ", "  "])


@pytest.mark.parametrize(
    "clear_type, expected",
    [
        (ClearType.ALL, ["   ", "   ", "   "]),
        (ClearType.AFTER_CURSOR, ["abc", "d  ", "   "]),
        (ClearType.BEFORE_CURSOR, ["   ", "  f", "ghi"]),
        (ClearType.CURRENT_LINE, ["abc", "   ", "ghi"]),
        (ClearType.UNTIL_NEWLINE, ["abc", "d  ", "ghi"]),
    ],
)
def test_clear_region(clear_type, expected):
    backend = TestBackend(3, 3)
    backend.buffer = screen("abc", "def", "ghi")
    backend.set_cursor_position(Position(1, 1))
    backend.clear_region(clear_type)
    backend.assert_buffer_lines(expected)


def test_clear_is_clear_all():
    backend = TestBackend(2, 1)
    backend.buffer = screen("ab")
    backend.clear()
    backend.assert_buffer_lines(["  "])


def test_cursor_visibility_and_flush_count():
    backend = TestBackend(2, 2)
    backend.hide_cursor()
    assert not backend.cursor_visible
    backend.show_cursor()
    assert backend.cursor_visible
    backend.flush()
    backend.flush()
    assert backend.flush_count == 2


def test_injected_failure_raises_oserror_until_cleared():
    backend = TestBackend(2, 2)
    backend.fail_on("draw")
    with pytest.raises(OSError):
        backend.draw([(0, 0, Cell("x"))])
    backend.clear_failures()
    backend.draw([(0, 0, Cell("x"))])
    backend.assert_buffer_lines(["x ", "  "])


def test_resize_keeps_content_and_clamps_cursor():
    backend = TestBackend(4, 3)
    backend.buffer = screen("abcd", "efgh", "ijkl")
    backend.set_cursor_position(Position(3, 2))
    backend.resize(2, 2)
    assert backend.size() == Size(2, 2)
    backend.assert_buffer_lines(["ab", "ef"])
    assert backend.cursor == Position(1, 1)
