"""The pull request section: fetching, listing and acting on pull requests."""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Sequence

from ghdash.config import PrsSectionConfig, merge_column_configs
from ghdash.context import ProgramContext, Task, TaskState
from ghdash.data import (
    Assignee,
    Comment,
    PageInfo,
    PullRequestData,
    PullRequestsResponse,
    fetch_pull_requests,
)
from ghdash.keys import PR_KEYS
from ghdash.messages import ErrMsg, TaskFinishedMsg
from ghdash.repopath import get_repo_local_path
from ghdash.rows import PullRequestRow
from ghdash.section import Section, add_assignees, remove_assignees
from ghdash.table import Column

SECTION_TYPE = "pr"
CI_CELL_WIDTH = 4
REVIEW_STATUS_CELL_WIDTH = 4

Command = Callable[[], Any]
Fetcher = Callable[[str, int, Optional[PageInfo]], PullRequestsResponse]
Runner = Callable[..., Any]


class RepoPathNotFoundError(LookupError):
    """No local checkout path is configured for a repository."""


@dataclass(frozen=True)
class UpdatePRMsg:
    """A change to apply to one pull request already shown in a section."""

    pr_number: int
    is_closed: Optional[bool] = None
    new_comment: Optional[Comment] = None
    ready_for_review: Optional[bool] = None
    is_merged: Optional[bool] = None
    added_assignees: Optional[list[Assignee]] = None
    removed_assignees: Optional[list[Assignee]] = None


@dataclass(frozen=True)
class SectionPullRequestsFetchedMsg:
    prs: list[PullRequestData] = field(default_factory=list)
    total_count: int = 0
    page_info: PageInfo = field(default_factory=PageInfo)


def _batch(*cmds: Optional[Command]) -> list[Command]:
    return [cmd for cmd in cmds if cmd is not None]


def _as_env(value: Any) -> dict[str, str]:
    if isinstance(value, Mapping):
        return {str(k): str(v) for k, v in value.items()}
    env: dict[str, str] = {}
    for item in value:
        key, _, val = str(item).partition("=")
        env[key] = val
    return env


def _run(runner: Runner, args: list[str], **kwargs: Any) -> tuple[Optional[BaseException], Any]:
    """Run ``args``; return the error, if any, and the completed process."""
    try:
        result = runner(args, check=False, **kwargs)
    except OSError as exc:
        return exc, None
    returncode = getattr(result, "returncode", 0)
    if returncode != 0:
        return subprocess.CalledProcessError(returncode, args), result
    return None, result


def section_columns(cfg: PrsSectionConfig, ctx: ProgramContext) -> list[Column]:
    """Table columns of a pull request section, section layout over defaults."""
    d = ctx.config.defaults.layout.prs
    s = cfg.layout

    updated_at = merge_column_configs(d.updated_at, s.updated_at)
    repo = merge_column_configs(d.repo, s.repo)
    title = merge_column_configs(d.title, s.title)
    author = merge_column_configs(d.author, s.author)
    assignees = merge_column_configs(d.assignees, s.assignees)
    base = merge_column_configs(d.base, s.base)
    review_status = merge_column_configs(d.review_status, s.review_status)
    state = merge_column_configs(d.state, s.state)
    ci = merge_column_configs(d.ci, s.ci)
    lines = merge_column_configs(d.lines, s.lines)

    return [
        Column(title="", width=updated_at.width, hidden=updated_at.hidden),
        Column(title="", hidden=state.hidden),
        Column(title="", width=repo.width, hidden=repo.hidden),
        Column(title="Title", grow=True, hidden=title.hidden),
        Column(title="Author", width=author.width, hidden=author.hidden),
        Column(title="Assignees", width=assignees.width, hidden=assignees.hidden),
        Column(title="Base", width=base.width, hidden=base.hidden),
        Column(title="󰯢", width=REVIEW_STATUS_CELL_WIDTH, hidden=review_status.hidden),
        Column(title="", width=CI_CELL_WIDTH, grow=False, hidden=ci.hidden),
        Column(title="", width=lines.width, hidden=lines.hidden),
    ]


class PrsSection(Section):
    """A section listing the pull requests that match its filters."""

    def __init__(
        self,
        id: int,
        ctx: ProgramContext,
        cfg: PrsSectionConfig,
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
            "PR",
            "PRs",
            last_updated or datetime.now(),
        )
        self.prs: list[PullRequestData] = []
        self._fetcher: Fetcher = fetcher or (
            lambda query, limit, page_info: fetch_pull_requests(query, limit, page_info)
        )
        self._runner: Runner = runner or subprocess.run

    # -- messages -----------------------------------------------------------

    def update(self, msg: Any) -> list[Command]:
        """Handle a key press (a string) or a message; return commands to run."""
        if isinstance(msg, str):
            return self._handle_key(msg)
        if isinstance(msg, UpdatePRMsg):
            self._apply_update(msg)
        elif isinstance(msg, SectionPullRequestsFetchedMsg):
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

        if PR_KEYS.diff.matches(key):
            return _batch(self.diff())
        if PR_KEYS.checkout.matches(key):
            try:
                return self.checkout()
            except RepoPathNotFoundError as exc:
                self.ctx.error = exc
                return []
        if PR_KEYS.close.matches(key):
            return self.close()
        if PR_KEYS.ready.matches(key):
            return self.ready()
        if PR_KEYS.merge.matches(key):
            return self.merge()
        if PR_KEYS.reopen.matches(key):
            return self.reopen()
        return []

    def _apply_update(self, msg: UpdatePRMsg) -> None:
        for i, pr in enumerate(self.prs):
            if pr.number != msg.pr_number:
                continue
            changes: dict[str, Any] = {}
            if msg.is_closed is not None:
                changes["state"] = "CLOSED" if msg.is_closed else "OPEN"
            if msg.new_comment is not None:
                changes["comments"] = [*pr.comments, msg.new_comment]
            assignees = pr.assignees
            if msg.added_assignees is not None:
                assignees = add_assignees(assignees, msg.added_assignees)
            if msg.removed_assignees is not None:
                assignees = remove_assignees(assignees, msg.removed_assignees)
            changes["assignees"] = list(assignees)
            if msg.ready_for_review:
                changes["is_draft"] = False
            if msg.is_merged:
                changes["state"] = "MERGED"
                changes["mergeable"] = ""
            self.prs[i] = replace(pr, **changes)
            self.table.set_rows(self.build_rows())
            break

    def _apply_fetched(self, msg: SectionPullRequestsFetchedMsg) -> None:
        if self.page_info is not None:
            self.prs = [*self.prs, *msg.prs]
        else:
            self.prs = list(msg.prs)
        self.total_count = msg.total_count
        self.page_info = msg.page_info
        self.table.set_rows(self.build_rows())
        self.update_last_updated(datetime.now())
        self.update_total_items_count(self.total_count)

    # -- rows ---------------------------------------------------------------

    def build_rows(self) -> list[list[str]]:
        return [PullRequestRow(pr).to_table_row() for pr in self.prs]

    def num_rows(self) -> int:
        return len(self.prs)

    def curr_row(self) -> Optional[PullRequestData]:
        if not self.prs:
            return None
        return self.prs[self.table.curr_item]

    def fetch_next_page(self) -> list[Command]:
        """Commands that fetch the next page of results, or none at the last page."""
        if self.page_info is not None and not self.page_info.has_next_page:
            return []

        start_cursor = str(datetime.now()) if self.page_info is None else self.page_info.start_cursor
        task_id = f"fetching_prs_{self.id}_{start_cursor}"
        start_cmd = self.ctx.start_task(
            Task(
                id=task_id,
                start_text=f'Fetching PRs for "{self.config.title}"',
                finished_text=f'PRs for "{self.config.title}" have been fetched',
                state=TaskState.START,
            )
        )

        def fetch() -> TaskFinishedMsg:
            limit = self.config.limit
            if limit is None:
                limit = self.ctx.config.defaults.prs_limit
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
                msg=SectionPullRequestsFetchedMsg(
                    prs=list(res.prs), total_count=res.total_count, page_info=res.page_info
                ),
            )

        return _batch(start_cmd, fetch)

    def reset_rows(self) -> None:
        self.prs = []
        self.table.rows = None
        self.reset_page_info()
        self.table.reset_curr_item()

    # -- actions ------------------------------------------------------------

    def _start(self, task_id: str, start_text: str, finished_text: str) -> Any:
        return self.ctx.start_task(
            Task(id=task_id, start_text=start_text, finished_text=finished_text, state=TaskState.START)
        )

    def _simple_action(
        self, verb: str, task_id: str, start_text: str, finished_text: str, update: dict
    ) -> list[Command]:
        pr = self.curr_row()
        if pr is None:
            return []
        number = pr.number
        repo = pr.repo_name_with_owner
        start_cmd = self._start(task_id, start_text, finished_text)

        def run() -> TaskFinishedMsg:
            err, _ = _run(self._runner, ["gh", "pr", verb, str(number), "-R", repo])
            return TaskFinishedMsg(
                task_id=task_id,
                section_id=self.id,
                section_type=SECTION_TYPE,
                err=err,
                msg=UpdatePRMsg(pr_number=number, **update),
            )

        return _batch(start_cmd, run)

    def close(self) -> list[Command]:
        pr = self.curr_row()
        if pr is None:
            return []
        n = pr.number
        return self._simple_action(
            "close", f"pr_close_{n}", f"Closing PR #{n}", f"PR #{n} has been closed",
            {"is_closed": True},
        )

    def reopen(self) -> list[Command]:
        pr = self.curr_row()
        if pr is None:
            return []
        n = pr.number
        return self._simple_action(
            "reopen", f"pr_reopen_{n}", f"Reopening PR #{n}", f"PR #{n} has been reopened",
            {"is_closed": False},
        )

    def ready(self) -> list[Command]:
        pr = self.curr_row()
        if pr is None:
            return []
        n = pr.number
        return self._simple_action(
            "ready",
            f"ready_{n}",
            f"Marking PR #{n} as ready for review",
            f"PR #{n} has been marked as ready for review",
            {"ready_for_review": True},
        )

    def merge(self) -> list[Command]:
        pr = self.curr_row()
        if pr is None:
            return []
        number = pr.number
        args = ["gh", "pr", "merge", str(number), "-R", pr.repo_name_with_owner]
        task_id = f"merge_{number}"
        start_cmd = self._start(task_id, f"Merging PR #{number}", f"PR #{number} has been merged")

        def run() -> TaskFinishedMsg:
            err, _ = _run(self._runner, args)
            return TaskFinishedMsg(
                task_id=task_id,
                section_id=self.id,
                section_type=SECTION_TYPE,
                err=err,
                msg=UpdatePRMsg(pr_number=number, is_merged=err is None),
            )

        return _batch(start_cmd, run)

    def diff(self) -> Optional[Command]:
        """Command that shows the selected pull request's diff in a pager."""
        pr = self.curr_row()
        if pr is None:
            return None
        args = ["gh", "pr", "diff", str(pr.number), "-R", pr.repo_name_with_owner]
        env = _as_env(self.ctx.config.full_screen_diff_pager_env(dict(os.environ)))

        def run() -> Optional[ErrMsg]:
            err, _ = _run(self._runner, args, env=env)
            return ErrMsg(err) if err is not None else None

        return run

    def checkout(self) -> list[Command]:
        """Commands that check the selected pull request out in its local clone.

        Raises RepoPathNotFoundError when no local path is configured.
        """
        pr = self.curr_row()
        if pr is None:
            return []
        repo_name = pr.repo_name_with_owner
        repo_path = get_repo_local_path(repo_name, self.ctx.config.repo_paths)
        if repo_path is None:
            raise RepoPathNotFoundError(
                "Local path to repo not specified, set one in your config.yml under repoPaths"
            )

        number = pr.number
        task_id = f"checkout_{number}"
        start_cmd = self._start(
            task_id,
            f"Checking out PR #{number}",
            f"PR #{number} has been checked out at {repo_path}",
        )

        def run() -> TaskFinishedMsg:
            path = repo_path
            if path.startswith("~"):
                path = path.replace("~", str(Path.home()), 1)
            err, _ = _run(self._runner, ["gh", "pr", "checkout", str(number)], cwd=path)
            return TaskFinishedMsg(task_id=task_id, err=err)

        return _batch(start_cmd, run)


def fetch_all_sections(
    ctx: ProgramContext,
    fetcher: Optional[Fetcher] = None,
    runner: Optional[Runner] = None,
) -> tuple[list[PrsSection], list[Command]]:
    """One section per configured PR section (ids from 1), with their fetch commands."""
    sections: list[PrsSection] = []
    commands: list[Command] = []
    for i, cfg in enumerate(ctx.config.pr_sections):
        section = PrsSection(i + 1, ctx, cfg, datetime.now(), fetcher=fetcher, runner=runner)
        sections.append(section)
        commands.extend(section.fetch_next_page())
    return sections, commands