"""Terminal escape sequences and bordered panes for the status display."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

RESET = "\033[0m"
DEFAULT_NAME = "(Unnamed)"
DEFAULT_COLOR = 239
TITLE_COLOR = 15


def clear_screen() -> str:
    """Sequence clearing the screen and homing the cursor."""
    return "\033[2J\033[H"


def cursor_move(line: int, col: int) -> str:
    """Sequence moving the cursor to a line and column."""
    return f"\033[{line};{col}f"


def cursor_visible(visible: bool) -> str:
    """Sequence showing or hiding the cursor."""
    mode = "h" if visible else "l"
    return f"\033[?25{mode}"


def reset_default() -> str:
    """Sequence restoring default attributes."""
    return RESET


def _fg(color: int) -> str:
    return f"\033[1;38;5;{color}m"


@dataclass
class Pane:
    """A titled, bordered box with a footer line; methods return text to print."""

    row: int
    left: int
    height: int
    width: int
    name: str = DEFAULT_NAME
    border_color: int = DEFAULT_COLOR
    background: Optional[int] = None
    text_color: int = DEFAULT_COLOR

    def rename(self, name: str) -> None:
        """Change the title shown in the top border."""
        self.name = name

    def colors(self) -> str:
        """Sequence selecting the pane's background and text colours."""
        background = RESET if self.background is None else f"\033[48;5;{self.background}m"
        return background + _fg(self.text_color)

    def footer(self, left: int, text: str) -> str:
        """Text placed on the footer line, left columns in."""
        return cursor_move(self.row + self.height + 1, self.left + 1 + left) + self.colors() + text

    def content(self, line: int, left: int, text: str) -> str:
        """Text placed on a content line, left columns in."""
        return cursor_move(self.row + line, self.left + 1 + left) + self.colors() + text

    def top_border(self) -> str:
        border = _fg(self.border_color)
        fill = "─" * max(0, self.width - len(self.name) - 6)
        return (
            f"{self.colors()}{border}┌──┤ {_fg(TITLE_COLOR)}{self.name}"
            f"{border} ├{fill}┐{RESET}"
        )

    def top(self) -> str:
        """The top border with the title."""
        return self.top_border()

    def body(self, height: int) -> str:
        """Empty bordered content lines."""
        row = "│" + " " * self.width + "│\n"
        return _fg(self.border_color) + row * height + RESET

    def bottom(self) -> str:
        """Separator, footer line and bottom border."""
        border = _fg(self.border_color)
        rule = "─" * self.width
        return f"{border}├{rule}┤\n{self.body(1)}{border}└{rule}┘"

    def refresh(self) -> str:
        """The whole pane frame, positioned on screen."""
        return (
            cursor_move(self.row, self.left)
            + self.top()
            + cursor_move(self.row + 1, self.left)
            + self.body(self.height)
            + cursor_move(self.row + self.height, self.left)
            + self.bottom()
        )