"""The row of section tabs at the top of the dashboard."""

from __future__ import annotations

from dataclasses import dataclass

from wcwidth import wcswidth

from ghdash.context import ProgramContext
from ghdash.table import fit_cell

_TAB_SEPARATOR = "|"
_BOTTOM_BORDER = "━"


@dataclass
class Tabs:
    curr_section_id: int = 1

    def view(self, ctx: ProgramContext) -> str:
        """Tab titles of the current view, the active one in brackets."""
        tabs = [
            f" [{cfg.title}] " if i == self.curr_section_id else f"  {cfg.title}  "
            for i, cfg in enumerate(ctx.view_sections_config())
        ]
        line = _TAB_SEPARATOR.join(tabs)
        width = ctx.screen_width
        if width > 0:
            line = fit_cell(line, width)
        else:
            width = max(wcswidth(line), 0)
        return "\n".join([" " * width, line, _BOTTOM_BORDER * width])