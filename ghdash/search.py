"""The search bar shown above each section."""

from __future__ import annotations

from wcwidth import wcswidth, wcwidth

from ghdash.table import fit_cell


def _clip(text: str, width: int) -> str:
    out = []
    used = 0
    for ch in text:
        w = max(wcwidth(ch), 0)
        if used + w > width:
            break
        out.append(ch)
        used += w
    return "".join(out)


def _width(text: str) -> int:
    return max(wcswidth(text), 0)


class SearchBar:
    """A single-line filter input prefixed by ``is:<section type>``."""

    def __init__(self, section_type: str, initial_value: str = ""):
        self.section_type = section_type
        self.initial_value = initial_value
        self.prompt = f" is:{section_type} "
        self.value = initial_value
        self.focused = False
        self.cursor = 0

    def focus(self) -> None:
        self.focused = True
        self.cursor = len(self.value)

    def blur(self) -> None:
        self.focused = False
        self.cursor = 0

    def set_value(self, value: str) -> None:
        self.value = value
        self.cursor = min(self.cursor, len(value))

    def view(self, width: int) -> str:
        """The bar in a rounded box for a content area ``width`` columns wide."""
        input_width = width - _width(self.prompt) - 6
        text = self.value
        if input_width > 0:
            if self.focused:
                text = _clip(text[::-1], input_width)[::-1]
            else:
                text = _clip(text, input_width)

        line = self.prompt + text
        content_width = width - 4
        if content_width > 0:
            line = fit_cell(line, content_width)
        inner = _width(line)
        return "\n".join(
            [
                "╭" + "─" * inner + "╮",
                "│" + line + "│",
                "╰" + "─" * inner + "╯",
            ]
        )