import blessed

from gridterm import BlessedBackend, Color, Style, Terminal, rgb


def main() -> None:
    term = blessed.Terminal()
    with term.fullscreen(), term.cbreak(), Terminal(BlessedBackend(term)) as terminal:
        count = 0
        while True:
            def render(frame):
                area = frame.area
                frame.buffer.set_string(area.x + 1, area.y + 1, "Hello from gridterm!",
                                        Style(fg=Color.LightCyan).bold())
                frame.buffer.set_string(area.x + 1, area.y + 2, f"frames drawn: {count}",
                                        Style(fg=rgb(255, 128, 0)))
                frame.buffer.set_string(area.x + 1, area.y + 4, "press q to quit")

            terminal.draw(render)
            count += 1
            key = term.inkey(timeout=0.1)
            if key == "q":
                break


if __name__ == "__main__":
    main()
