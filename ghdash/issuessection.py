"""The issue section: fetching, listing and acting on issues."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Callable, Optional

from wcwidth import wcswidth

from ghdash.config import IssuesSectionConfig, merge_column_configs
from ghdash.context import ProgramContext, Task, TaskState
from ghdash.data import (
    Assignee,
    Comment,
    IssueData,
    IssuesResponse,
    PageInfo,
    fetch_issues,
)
from ghdash.keys import ISSUE_KEYS
from ghdash.messages import TaskFinishedMsg
from ghdash.rows import IssueRow
from ghdash.section import Section, add_assignees, remove_assignees
from ghdash.table import Column

SECTION_TYPE = "issue"

UPDATED_AT_CELL_WIDTH = max(wcswidth("2mo ago"), 0)
ISSUE_REPO_CELL_WIDTH = 15
ISSUE_AUTHOR_CELL_WIDTH = 15
ISSUE_ASSIGNEES_CELL_WIDTH = 20
ISSUE_NUM_COMMENTS_CELL_WIDTH = 6

Command = Callable[[], Any]
Fetcher = Callable[[str, int, Optional[PageInfo]], IssuesResponse]
Runner = Callable[..., Any]


@dataclass(frozen=True)
class UpdateIssueMsg:
    """A change to apply to one issue already shown in a section."""

    issue_number: int
    new_comment: Optional[Comment] = None
    is_closed: Optional[bool] = None
    added_assignees: Optional[list[Assignee]] = None
    removed_assignees: Optional[list[Assignee]] = None


@dataclass(frozen=True)
class SectionIssuesFetchedMsg:
    issues: list[IssueData] = field(default_factory=list)
    total_count: int = 0
    page_info: PageInfo = field(default_factory=PageInfo)


def _batch(*cmds: Optional[Command]) -> list[Command]:
    return [cmd for cmd in cmds if cmd is not None]


def _run(runner: Runner, args: list[str]) -> Optional[BaseException]:
    """Run ``args`` and return the error, if any."""
    try:
        result = runner(args, check=False)
    except OSError as exc:
        return exc
    returncode = getattr(result, "returncode", 0)
    if returncode != 0:
        return subprocess.CalledProcessError(returncode, args)
    return None


def section_columns(cfg: IssuesSectionConfig, ctx: ProgramContext) -> list[Column]:
    """Table columns of an issue section, section layout over defaults."""
    d = ctx.config.defaults.layout.issues
    s = cfg.layout

    updated_at = merge_column_configs(d.updated_at, s.updated_at)
    state = merge_column_configs(d.state, s.state)
    repo = merge_column_configs(d.repo, s.repo)
    title = merge_column_configs(d.title, s.title)
    creator = merge_column_configs(d.creator, s.creator)
    assignees = merge_column_configs(d.assignees, s.assignees)
    comments = merge_column_configs(d.comments, s.comments)
    reactions = merge_column_configs(d.reactions, s.reactions)

    return [
        Column(title="", width=updated_at.width, hidden=updated_at.hidden),
        Column(title="", width=state.width, hidden=state.hidden),
        Column(title="", width=repo.width, hidden=repo.hidden),
        Column(title="Title", grow=True, hidden=title.hidden),
        Column(title="Creator", width=creator.width, hidden=creator.hidden),
        Column(title="Assignees", width=assignees.width, hidden=assignees.hidden),
        Column(title="", width=ISSUE_NUM_COMMENTS_CELL_WIDTH, hidden=comments.hidden),
        Column(title="", width=ISSUE_NUM_COMMENTS_CELL_WIDTH, hidden=reactions.hidden),
    ]


class IssuesSection(Section):
    """A section listing the issues that match its filters."""

    def __init__(
        self,
        id: int,
        ctx: ProgramContext,
        cfg: IssuesSectionConfig,
        last_updated: Optional[datetime] = None,
        fetcher: Optional[Fetcher] = None,
        runner: Optional[Runner] = None,
    ):
        super().__init__(
            id,
            ctx,
            cfg.to_section_config(),
            SECTION_TYPE,
            section_columns(cfg, ctx),
            "Issue",
            "Issues",
            last_updated or datetime.now(),
        )
        self.issues: list[IssueData] = []
        self._fetcher: Fetcher = fetcher or (
            lambda query, limit, page_info: fetch_issues(query, limit, page_info)
        )
        self._runner: Runner = runner or subprocess.run

    # -- messages -----------------------------------------------------------

    def update(self, msg: Any) -> list[Command]:
        """Handle a key press (a string) or a message; return commands to run."""
        if isinstance(msg, str):
            return self._handle_key(msg)
        if isinstance(msg, UpdateIssueMsg):
            self._apply_update(msg)
        elif isinstance(msg, SectionIssuesFetchedMsg):
            self._apply_fetched(msg)
        return []

    def _handle_key(self, key: str) -> list[Command]:
        if self.is_searching:
            if key in ("ctrl+c", "esc"):
                self.search_bar.set_value(self.search_value)
                self.set_is_searching(False)
                return []
            if key == "enter":
                self.search_value = self.search_bar.value
                self.set_is_searching(False)
                self.reset_rows()
                return self.fetch_next_page()
            if key == "backspace":
                self.search_bar.set_value(self.search_bar.value[:-1])
            elif len(key) == 1:
                self.search_bar.set_value(self.search_bar.value + key)
            return []

        if ISSUE_KEYS.close.matches(key):
            return self.close()
        if ISSUE_KEYS.reopen.matches(key):
            return self.reopen()
        return []

    def _apply_update(self, msg: UpdateIssueMsg) -> None:
        for i, issue in enumerate(self.issues):
            if issue.number != msg.issue_number:
                continue
            changes: dict[str, Any] = {}
            if msg.is_closed is not None:
                changes["state"] = "CLOSED" if msg.is_closed else "OPEN"
            if msg.new_comment is not None:
                changes["comments"] = [*issue.comments, msg.new_comment]
            assignees = issue.assignees
            if msg.added_assignees is not None:
                assignees = add_assignees(assignees, msg.added_assignees)
            if msg.removed_assignees is not None:
                assignees = remove_assignees(assignees, msg.removed_assignees)
            changes["assignees"] = list(assignees)
            self.issues[i] = replace(issue, **changes)
            self.table.set_rows(self.build_rows())
            break

    def _apply_fetched(self, msg: SectionIssuesFetchedMsg) -> None:
        if self.page_info is not None:
            self.issues = [*self.issues, *msg.issues]
        else:
            self.issues = list(msg.issues)
        self.total_count = msg.total_count
        self.page_info = msg.page_info
        self.table.set_rows(self.build_rows())
        self.update_last_updated(datetime.now())
        self.update_total_items_count(self.total_count)

    # -- rows ---------------------------------------------------------------

    def build_rows(self) -> list[list[str]]:
        return [
            IssueRow(issue).to_table_row(datetime.now(issue.updated_at.tzinfo))
            for issue in self.issues
        ]

    def num_rows(self) -> int:
        return len(self.issues)

    def curr_row(self) -> Optional[IssueData]:
        if not self.issues:
            return None
        return self.issues[self.table.curr_item]

    def fetch_next_page(self) -> list[Command]:
        """Commands that fetch the next page of results, or none at the last page."""
        if self.page_info is not None and not self.page_info.has_next_page:
            return []

        start_cursor = str(datetime.now()) if self.page_info is None else self.page_info.start_cursor
        task_id = f"fetching_issues_{self.id}_{start_cursor}"
        start_cmd = self.ctx.start_task(
            Task(
                id=task_id,
                start_text=f'Fetching issues for "{self.config.title}"',
                finished_text=f'Issues for "{self.config.title}" have been fetched',
                state=TaskState.START,
            )
        )

        def fetch() -> TaskFinishedMsg:
            limit = self.config.limit
            if limit is None:
                limit = self.ctx.config.defaults.issues_limit
            try:
                res = self._fetcher(self.filters(), limit, self.page_info)
            except Exception as exc:  # reported to the user as a failed task
                return TaskFinishedMsg(
                    task_id=task_id, section_id=self.id, section_type=self.type, err=exc
                )
            return TaskFinishedMsg(
                task_id=task_id,
                section_id=self.id,
                section_type=self.type,
                msg=SectionIssuesFetchedMsg(
                    issues=list(res.issues), total_count=res.total_count, page_info=res.page_info
                ),
            )

        return _batch(start_cmd, fetch)

    def reset_rows(self) -> None:
        self.issues = []
        self.table.rows = None
        self.reset_page_info()
        self.table.reset_curr_item()

    # -- actions ------------------------------------------------------------

    def _action(
        self, verb: str, task_id: str, start_text: str, finished_text: str, is_closed: bool
    ) -> list[Command]:
        issue = self.curr_row()
        if issue is None:
            return []
        number = issue.number
        repo = issue.repo_name_with_owner
        start_cmd = self.ctx.start_task(
            Task(id=task_id, start_text=start_text, finished_text=finished_text, state=TaskState.START)
        )

        def run() -> TaskFinishedMsg:
            err = _run(self._runner, ["gh", "issue", verb, str(number), "-R", repo])
            return TaskFinishedMsg(
                task_id=task_id,
                section_id=self.id,
                section_type=SECTION_TYPE,
                err=err,
                msg=UpdateIssueMsg(issue_number=number, is_closed=is_closed),
            )

        return _batch(start_cmd, run)

    def close(self) -> list[Command]:
        issue = self.curr_row()
        if issue is None:
            return []
        n = issue.number
        return self._action(
            "close", f"issue_close_{n}", f"Closing issue #{n}", f"Issue #{n} has been closed", True
        )

    def reopen(self) -> list[Command]:
        issue = self.curr_row()
        if issue is None:
            return []
        n = issue.number
        return self._action(
            "reopen",
            f"issue_reopen_{n}",
            f"Reopening issue #{n}",
            f"Issue #{n} has been reopened",
            False,
        )


def fetch_all_sections(
    ctx: ProgramContext,
    fetcher: Optional[Fetcher] = None,
    runner: Optional[Runner] = None,
) -> tuple[list[IssuesSection], list[Command]]:
    """One section per configured issue section (ids from 1), with their fetch commands."""
    sections: list[IssuesSection] = []
    commands: list[Command] = []
    for i, cfg in enumerate(ctx.config.issues_sections):
        section = IssuesSection(i + 1, ctx, cfg, datetime.now(), fetcher=fetcher, runner=runner)
        sections.append(section)
        commands.extend(section.fetch_next_page())
    return sections, commands