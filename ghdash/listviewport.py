"""A scrolling viewport and a list cursor that keeps it in step."""

from __future__ import annotations

from datetime import datetime

from wcwidth import wcwidth

from ghdash.messages import Dimensions


def _fit(text: str, width: int) -> str:
    out = []
    used = 0
    for ch in text:
        w = max(wcwidth(ch), 0)
        if used + w > width:
            break
        out.append(ch)
        used += w
    return "".join(out) + " " * (width - used)


class Viewport:
    """A window of ``height`` lines over some text content."""

    def __init__(self, width: int = 0, height: int = 0):
        self.width = width
        self.height = height
        self.y_offset = 0
        self.lines: list[str] = []

    @property
    def max_y_offset(self) -> int:
        return max(0, len(self.lines) - self.height)

    @property
    def at_top(self) -> bool:
        return self.y_offset <= 0

    @property
    def at_bottom(self) -> bool:
        return self.y_offset >= self.max_y_offset

    def _set_y_offset(self, offset: int) -> None:
        self.y_offset = min(max(offset, 0), self.max_y_offset)

    def set_content(self, content: str) -> None:
        self.lines = content.replace("\r\n", "\n").split("\n")
        if self.y_offset > len(self.lines) - 1:
            self.goto_bottom()

    def line_down(self, n: int) -> None:
        if self.at_bottom or n == 0 or not self.lines:
            return
        self._set_y_offset(self.y_offset + n)

    def line_up(self, n: int) -> None:
        if self.at_top or n == 0 or not self.lines:
            return
        self._set_y_offset(self.y_offset - n)

    def goto_top(self) -> None:
        self.y_offset = 0

    def goto_bottom(self) -> None:
        self._set_y_offset(self.max_y_offset)

    def view(self) -> str:
        """The visible lines, padded to the viewport's height and width."""
        if self.height <= 0:
            return ""
        visible = self.lines[self.y_offset:self.y_offset + self.height]
        visible += [""] * (self.height - len(visible))
        if self.width > 0:
            visible = [_fit(line, self.width) for line in visible]
        return "\n".join(visible)


class ListViewport:
    """Tracks the selected item of a list and scrolls a viewport to show it."""

    def __init__(
        self,
        dimensions: Dimensions,
        last_updated: datetime,
        item_type_label: str,
        num_items: int,
        list_item_height: int,
    ):
        self.viewport = Viewport(dimensions.width, dimensions.height)
        self.list_item_height = list_item_height
        self.num_current_items = num_items
        self.num_total_items = 0
        self.last_updated = last_updated
        self.item_type_label = item_type_label
        self.curr_item = 0
        self.top_bound_id = 0
        self.bottom_bound_id = min(num_items - 1, self._items_per_page() - 1)

    def _items_per_page(self) -> int:
        return int(self.viewport.height / self.list_item_height)

    def set_num_items(self, num_items: int) -> None:
        self.num_current_items = num_items
        self.bottom_bound_id = min(num_items - 1, self._items_per_page() - 1)

    def set_total_items(self, total: int) -> None:
        self.num_total_items = total

    def sync_content(self, content: str) -> None:
        self.viewport.set_content(content)

    def reset_curr_item(self) -> None:
        self.curr_item = 0
        self.viewport.goto_top()

    def next_item(self) -> int:
        if self.curr_item >= self.bottom_bound_id:
            self.top_bound_id += 1
            self.bottom_bound_id += 1
            self.viewport.line_down(self.list_item_height)
        self.curr_item = max(min(self.curr_item + 1, self.num_current_items - 1), 0)
        return self.curr_item

    def prev_item(self) -> int:
        if self.curr_item < self.top_bound_id:
            self.top_bound_id -= 1
            self.bottom_bound_id -= 1
            self.viewport.line_up(self.list_item_height)
        self.curr_item = max(self.curr_item - 1, 0)
        return self.curr_item

    def first_item(self) -> int:
        self.curr_item = 0
        self.viewport.goto_top()
        return self.curr_item

    def last_item(self) -> int:
        self.curr_item = self.num_current_items - 1
        self.viewport.goto_bottom()
        return self.curr_item

    def set_dimensions(self, dimensions: Dimensions) -> None:
        self.viewport.height = dimensions.height
        self.viewport.width = dimensions.width

    def view(self) -> str:
        return self.viewport.view()