"""Key bindings of the dashboard and its help groupings."""

from __future__ import annotations

from dataclasses import dataclass

from ghdash.config import ViewType


@dataclass(frozen=True)
class Binding:
    keys: tuple[str, ...]
    help_key: str
    help_desc: str

    def matches(self, key: str) -> bool:
        return key in self.keys


@dataclass(frozen=True)
class PRKeyMap:
    assign: Binding
    unassign: Binding
    comment: Binding
    diff: Binding
    checkout: Binding
    close: Binding
    ready: Binding
    reopen: Binding
    merge: Binding


@dataclass(frozen=True)
class IssueKeyMap:
    assign: Binding
    unassign: Binding
    comment: Binding
    close: Binding
    reopen: Binding


PR_KEYS = PRKeyMap(
    assign=Binding(("a",), "a", "assign"),
    unassign=Binding(("A",), "A", "unassign"),
    comment=Binding(("c",), "c", "comment"),
    diff=Binding(("d",), "d", "diff"),
    checkout=Binding(("C",), "C", "checkout"),
    close=Binding(("x",), "x", "close"),
    reopen=Binding(("X",), "X", "reopen"),
    ready=Binding(("w",), "w", "ready for review"),
    merge=Binding(("m",), "m", "merge"),
)

ISSUE_KEYS = IssueKeyMap(
    assign=Binding(("a",), "a", "assign"),
    unassign=Binding(("A",), "A", "unassign"),
    comment=Binding(("c",), "c", "comment"),
    close=Binding(("x",), "x", "close"),
    reopen=Binding(("X",), "X", "reopen"),
)


def pr_full_help() -> list[Binding]:
    k = PR_KEYS
    return [k.assign, k.unassign, k.comment, k.diff, k.checkout, k.close, k.ready, k.reopen, k.merge]


def issue_full_help() -> list[Binding]:
    k = ISSUE_KEYS
    return [k.assign, k.unassign, k.comment, k.close, k.reopen]


@dataclass(frozen=True)
class KeyMap:
    up: Binding
    down: Binding
    first_line: Binding
    last_line: Binding
    toggle_preview: Binding
    open_github: Binding
    refresh: Binding
    refresh_all: Binding
    page_down: Binding
    page_up: Binding
    next_section: Binding
    prev_section: Binding
    switch_view: Binding
    search: Binding
    copy_url: Binding
    copy_number: Binding
    help: Binding
    quit: Binding

    def short_help(self) -> list[Binding]:
        return [self.help]

    def full_help(self, view_type: ViewType) -> list[list[Binding]]:
        additional = pr_full_help() if view_type == ViewType.PRS else issue_full_help()
        return [self.navigation_keys(), self.app_keys(), additional, self.quit_and_help_keys()]

    def navigation_keys(self) -> list[Binding]:
        return [
            self.up,
            self.down,
            self.prev_section,
            self.next_section,
            self.first_line,
            self.last_line,
            self.page_down,
            self.page_up,
        ]

    def app_keys(self) -> list[Binding]:
        return [
            self.refresh,
            self.refresh_all,
            self.switch_view,
            self.toggle_preview,
            self.open_github,
            self.copy_number,
            self.copy_url,
            self.search,
        ]

    def quit_and_help_keys(self) -> list[Binding]:
        return [self.help, self.quit]


KEYS = KeyMap(
    up=Binding(("up", "k"), "↑/k", "move up"),
    down=Binding(("down", "j"), "↓/j", "move down"),
    first_line=Binding(("g", "home"), "g/home", "first item"),
    last_line=Binding(("G", "end"), "G/end", "last item"),
    toggle_preview=Binding(("p",), "p", "open in Preview"),
    open_github=Binding(("o",), "o", "open in GitHub"),
    refresh=Binding(("r",), "r", "refresh"),
    refresh_all=Binding(("R",), "R", "refresh all"),
    page_down=Binding(("ctrl+d",), "Ctrl+d", "preview page down"),
    page_up=Binding(("ctrl+u",), "Ctrl+u", "preview page up"),
    next_section=Binding(("right", "l"), "󰁔/l", "next section"),
    prev_section=Binding(("left", "h"), "󰁍/h", "previous section"),
    switch_view=Binding(("s",), "s", "switch view"),
    search=Binding(("/",), "/", "search"),
    copy_number=Binding(("y",), "y", "copy number"),
    copy_url=Binding(("Y",), "Y", "copy url"),
    help=Binding(("?",), "?", "help"),
    quit=Binding(("q", "esc", "ctrl+c"), "q", "quit"),
)