"""A dashboard section: a search bar over a table of fetched items."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from wcwidth import wcswidth

from ghdash.config import SectionConfig
from ghdash.context import ProgramContext
from ghdash.data import Assignee, PageInfo
from ghdash.messages import WAITING_ICON, Dimensions
from ghdash.search import SearchBar
from ghdash.table import Column, Table

SEARCH_HEIGHT = 3
CONTAINER_PADDING = 1
TABLE_HEADER_HEIGHT = 2

_TIP = (
    " Tip: you can change the search query by pressing  /  "
    "and submitting it with  Enter "
)


def _width(text: str) -> int:
    return max(wcswidth(text), 0)


def _place(width: int, height: int, text: str) -> str:
    """Centre ``text`` in a block of ``width`` by ``height`` cells."""
    lines = text.split("\n")
    block_width = max(_width(line) for line in lines)
    total_width = max(width, block_width)
    centred = []
    for line in lines:
        gap = total_width - _width(line)
        left = gap // 2
        centred.append(" " * left + line + " " * (gap - left))
    if height > len(centred):
        gap = height - len(centred)
        top = gap // 2
        blank = " " * total_width
        centred = [blank] * top + centred + [blank] * (gap - top)
    return "\n".join(centred)


def _pad_block(text: str, padding: int) -> str:
    lines = text.split("\n")
    block_width = max(_width(line) for line in lines)
    side = " " * padding
    return "\n".join(
        side + line + " " * (block_width - _width(line)) + side for line in lines
    )


@dataclass(frozen=True)
class SectionMsg:
    """A message produced on behalf of one section."""

    id: int
    type: str
    internal_msg: Any = None


class Section:
    """State shared by the pull request and issue sections."""

    def __init__(
        self,
        id: int,
        ctx: ProgramContext,
        config: SectionConfig,
        section_type: str,
        columns: Sequence[Column],
        singular_form: str,
        plural_form: str,
        last_updated: datetime,
    ):
        self.id = id
        self.type = section_type
        self.config = config
        self.ctx = ctx
        self.columns = list(columns)
        self.singular_form = singular_form
        self.plural_form = plural_form
        self.search_bar = SearchBar(section_type, config.filters)
        self.search_value = config.filters
        self.is_searching = False
        self.total_count = 0
        self.page_info: Optional[PageInfo] = None
        self.table = Table(
            ctx,
            self.dimensions(),
            last_updated,
            self.columns,
            None,
            singular_form,
            f"No {plural_form} were found that match the given filters",
        )

    def dimensions(self) -> Dimensions:
        return Dimensions(
            width=self.ctx.main_content_width - 2 * CONTAINER_PADDING,
            height=self.ctx.main_content_height - SEARCH_HEIGHT,
        )

    def update_program_context(self, ctx: ProgramContext) -> None:
        old = self.dimensions()
        self.ctx = ctx
        new = self.dimensions()
        self.table.set_dimensions(
            Dimensions(width=new.width, height=new.height - TABLE_HEADER_HEIGHT)
        )
        self.table.ctx = ctx
        if old != new:
            self.table.sync_viewport_content()
            self.search_bar.blur()

    @property
    def last_updated(self) -> datetime:
        return self.table.last_updated

    def update_last_updated(self, t: datetime) -> None:
        self.table.update_last_updated(t)

    def update_total_items_count(self, count: int) -> None:
        self.table.update_total_items_count(count)

    def curr_row_index(self) -> int:
        return self.table.curr_item

    def next_row(self) -> int:
        return self.table.next_item()

    def prev_row(self) -> int:
        return self.table.prev_item()

    def first_item(self) -> int:
        return self.table.first_item()

    def last_item(self) -> int:
        return self.table.last_item()

    def set_is_searching(self, value: bool) -> None:
        self.is_searching = value
        if value:
            self.search_bar.focus()
        else:
            self.search_bar.blur()

    def reset_filters(self) -> None:
        self.search_bar.set_value(self.config.filters)

    def reset_page_info(self) -> None:
        self.page_info = None

    def filters(self) -> str:
        return self.search_bar.value

    def pager_content(self) -> str:
        """Status line with the update time, the cursor position and counts."""
        if self.total_count <= 0:
            return ""
        return (
            f"{WAITING_ICON} {self.last_updated.strftime('%m/%d %H:%M:%S')} • "
            f"{self.singular_form} {self.table.curr_item + 1}/{self.total_count} • "
            f"Fetched {len(self.table.rows or [])}"
        )

    def main_content(self) -> str:
        if self.table.rows is None:
            d = self.dimensions()
            return _place(d.width, d.height, _TIP)
        return self.table.view()

    def view(self) -> str:
        search = self.search_bar.view(self.ctx.main_content_width)
        return _pad_block(search + "\n" + self.main_content(), CONTAINER_PADDING)

    def make_section_cmd(self, cmd: Optional[Callable[[], Any]]) -> Optional[Callable[[], SectionMsg]]:
        """Wrap ``cmd`` so its result comes back addressed to this section."""
        if cmd is None:
            return None

        def run() -> SectionMsg:
            return SectionMsg(id=self.id, type=self.type, internal_msg=cmd())

        return run


def add_assignees(assignees: Sequence[Assignee], added: Sequence[Assignee]) -> list[Assignee]:
    """``assignees`` followed by those of ``added`` not already present."""
    result = list(assignees)
    for assignee in added:
        if assignee not in result:
            result.append(assignee)
    return result


def remove_assignees(assignees: Sequence[Assignee], removed: Sequence[Assignee]) -> list[Assignee]:
    """``assignees`` without any that appear in ``removed``."""
    return [assignee for assignee in assignees if assignee not in removed]