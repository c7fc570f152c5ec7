import time

import blessed

from gridterm import BlessedBackend, Color, Inline, Style, Terminal, TerminalOptions


def main() -> None:
    term = blessed.Terminal()
    terminal = Terminal(BlessedBackend(term), TerminalOptions(viewport=Inline(2)))
    try:
        total = 20
        for done in range(total + 1):
            if done and done % 5 == 0:
                terminal.insert_before(
                    1,
                    lambda buf: buf.set_string(0, 0, f"finished batch {done // 5}",
                                               Style(fg=Color.Green)),
                )

            def render(frame):
                area = frame.area
                width = max(area.width - 2, 1)
                filled = width * done // total
                frame.buffer.set_string(area.x, area.y, f"progress {done}/{total}")
                frame.buffer.set_string(area.x, area.y + 1, "#" * filled + "." * (width - filled),
                                        Style(fg=Color.Cyan))

            terminal.draw(render)
            time.sleep(0.1)
    finally:
        terminal.close()
        print()


if __name__ == "__main__":
    main()
