"""A table of rows under a header, scrolled by a list viewport."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from wcwidth import wcswidth, wcwidth

from ghdash.context import ProgramContext
from ghdash.listviewport import ListViewport
from ghdash.messages import Dimensions

Row = list[str]

_SEPARATOR = "─"
_SELECTED_MARK = ">"


@dataclass
class Column:
    title: str = ""
    hidden: Optional[bool] = None
    width: Optional[int] = None
    grow: Optional[bool] = None


def _clip(text: str, width: int) -> tuple[str, int]:
    out = []
    used = 0
    for ch in text:
        w = max(wcwidth(ch), 0)
        if used + w > width:
            break
        out.append(ch)
        used += w
    return "".join(out), used


def _display_width(text: str) -> int:
    return max(wcswidth(text), 0)


def fit_cell(text: str, width: int) -> str:
    """First line of ``text`` cut or padded to exactly ``width`` columns."""
    width = max(width, 0)
    clipped, used = _clip(text.split("\n", 1)[0], width)
    return clipped + " " * (width - used)


def _pad_cell(text: str, width: Optional[int]) -> str:
    line = text.split("\n", 1)[0]
    if width is None or width <= 0:
        return f" {line} "
    return fit_cell(" " + fit_cell(line, max(width - 2, 0)) + " ", width)


def _trunc_div(a: int, b: int) -> int:
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b > 0) else -quotient


class Table:
    """Rows of cells rendered in fixed, natural or growing columns."""

    def __init__(
        self,
        ctx: ProgramContext,
        dimensions: Dimensions,
        last_updated: datetime,
        columns: Sequence[Column],
        rows: Optional[Sequence[Row]] = None,
        item_type_label: str = "",
        empty_state: Optional[str] = None,
    ):
        self.ctx = ctx
        self.columns = list(columns)
        self.rows: Optional[list[Row]] = None if rows is None else list(rows)
        self.empty_state = empty_state
        self.dimensions = dimensions
        item_height = 2 if self._show_separator else 1
        self.rows_viewport = ListViewport(
            dimensions, last_updated, item_type_label, len(self.rows or []), item_height
        )

    @property
    def _show_separator(self) -> bool:
        config = self.ctx.config
        theme = config.theme if config is not None else None
        return bool(theme is not None and theme.ui.table.show_separator)

    @property
    def curr_item(self) -> int:
        return self.rows_viewport.curr_item

    @property
    def last_updated(self) -> datetime:
        return self.rows_viewport.last_updated

    def set_dimensions(self, dimensions: Dimensions) -> None:
        self.dimensions = dimensions
        self.rows_viewport.set_dimensions(dimensions)

    def reset_curr_item(self) -> None:
        self.rows_viewport.reset_curr_item()

    def next_item(self) -> int:
        item = self.rows_viewport.next_item()
        self.sync_viewport_content()
        return item

    def prev_item(self) -> int:
        item = self.rows_viewport.prev_item()
        self.sync_viewport_content()
        return item

    def first_item(self) -> int:
        item = self.rows_viewport.first_item()
        self.sync_viewport_content()
        return item

    def last_item(self) -> int:
        item = self.rows_viewport.last_item()
        self.sync_viewport_content()
        return item

    def set_rows(self, rows: Sequence[Row]) -> None:
        self.rows = list(rows)
        self.rows_viewport.set_num_items(len(self.rows))
        self.sync_viewport_content()

    def sync_viewport_content(self) -> None:
        widths = self.header_widths()
        rendered = [self._render_row(i, row, widths) for i, row in enumerate(self.rows or [])]
        self.rows_viewport.sync_content("\n".join(rendered))

    def shown_columns(self) -> list[Column]:
        return [column for column in self.columns if not column.hidden]

    def header_widths(self) -> list[int]:
        """Display width of each shown column."""
        shown = self.shown_columns()
        widths: list[Optional[int]] = []
        taken = 0
        growing = 0
        for column in shown:
            if column.grow:
                growing += 1
                widths.append(None)
                continue
            if column.width is not None:
                taken += column.width
                widths.append(_display_width(_pad_cell(column.title, column.width)))
                continue
            natural = _display_width(_pad_cell(column.title, None))
            widths.append(natural)
            taken += natural

        if growing:
            grow_width = _trunc_div(self.dimensions.width - taken, growing)
            widths = [
                _display_width(_pad_cell(column.title, grow_width)) if width is None else width
                for column, width in zip(shown, widths)
            ]
        return [w for w in widths if w is not None]

    def _render_header(self) -> str:
        widths = self.header_widths()
        line = "".join(_pad_cell(c.title, w) for c, w in zip(self.shown_columns(), widths))
        width = self.dimensions.width
        if width > 0:
            return fit_cell(line, width) + "\n" + " " * width
        return line + "\n" + " " * _display_width(line)

    def _render_row(self, index: int, row: Row, widths: list[int]) -> str:
        remaining = iter(widths)
        cells = [
            _pad_cell(row[i], next(remaining))
            for i, column in enumerate(self.columns)
            if not column.hidden
        ]
        line = "".join(cells)
        if index == self.rows_viewport.curr_item and line.startswith(" "):
            line = _SELECTED_MARK + line[1:]

        content_width = _display_width(line)
        width = self.dimensions.width
        if width > 0:
            line = _clip(line, width)[0]
            content_width = min(content_width, width)
        if self._show_separator:
            line += "\n" + _SEPARATOR * content_width
        return line

    def _render_body(self) -> str:
        if not self.rows and self.empty_state is not None:
            lines = self.empty_state.split("\n")
            if self.dimensions.width > 0:
                lines = [_clip(line, self.dimensions.width)[0] for line in lines]
            lines += [""] * (self.dimensions.height - len(lines))
            return "\n".join(lines)
        return self.rows_viewport.view()

    def view(self) -> str:
        return self._render_header() + "\n" + self._render_body()

    def update_last_updated(self, t: datetime) -> None:
        self.rows_viewport.last_updated = t

    def update_total_items_count(self, count: int) -> None:
        self.rows_viewport.set_total_items(count)