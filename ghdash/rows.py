"""Table rows for pull requests and issues."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ghdash.data import IssueData, PullRequestData, is_conclusion_a_failure, is_status_waiting
from ghdash.messages import FAILURE_ICON, SUCCESS_ICON, WAITING_ICON
from ghdash.utils import time_elapsed

APPROVED_ICON = "󰄬"
CHANGES_REQUESTED_ICON = "󰌑"

PR_OPEN_ICON = "\uf407"
PR_DRAFT_ICON = "\uf4dd"
PR_CLOSED_ICON = "\uf4dc"
PR_MERGED_ICON = "\uf419"
ISSUE_OPEN_ICON = "\uf41b"
ISSUE_CLOSED_ICON = "\uf41d"


def render_issue_title(state: str, title: str, number: int) -> str:
    """Title cell: the number followed by the title."""
    return f"#{number} {title}"


@dataclass
class PullRequestRow:
    data: PullRequestData

    def status_checks_rollup(self) -> str:
        """Overall check state: ``SUCCESS``, ``PENDING`` or ``FAILURE``."""
        if self.data.mergeable == "CONFLICTING":
            return "FAILURE"
        checks = self.data.commit_checks
        if checks is None:
            return "PENDING"

        status = "SUCCESS"
        for check in checks:
            conclusion = ""
            if check.typename == "CheckRun":
                conclusion = check.check_run.conclusion
                if is_status_waiting(check.check_run.status):
                    status = "PENDING"
            elif check.typename == "StatusContext":
                conclusion = check.status_context.state
                if is_status_waiting(conclusion):
                    status = "PENDING"
            if is_conclusion_a_failure(conclusion):
                return "FAILURE"
        return status

    def render_state(self) -> str:
        """State label with its glyph, as shown in the preview."""
        state = self.data.state
        if state == "OPEN":
            return f"{PR_DRAFT_ICON} Draft" if self.data.is_draft else f"{PR_OPEN_ICON} Open"
        if state == "CLOSED":
            return "󰗨 Closed"
        if state == "MERGED":
            return f"{PR_MERGED_ICON} Merged"
        return ""

    def _state_glyph(self) -> str:
        state = self.data.state
        if state == "OPEN":
            return PR_DRAFT_ICON if self.data.is_draft else PR_OPEN_ICON
        if state == "CLOSED":
            return PR_CLOSED_ICON
        if state == "MERGED":
            return PR_MERGED_ICON
        return "-"

    def _review_status(self) -> str:
        decision = self.data.review_decision
        if decision == "APPROVED":
            return APPROVED_ICON
        if decision == "CHANGES_REQUESTED":
            return CHANGES_REQUESTED_ICON
        return WAITING_ICON

    def _ci_status(self) -> str:
        status = self.status_checks_rollup()
        if status == "SUCCESS":
            return SUCCESS_ICON
        if status == "PENDING":
            return WAITING_ICON
        return FAILURE_ICON

    def _lines(self) -> str:
        return f"{self.data.additions} / -{max(self.data.deletions, 0)}"

    def to_table_row(self, now: Optional[datetime] = None) -> list[str]:
        d = self.data
        return [
            time_elapsed(d.updated_at, now),
            self._state_glyph(),
            d.head_repository_name,
            render_issue_title(d.state, d.title, d.number),
            d.author,
            ",".join(a.login for a in d.assignees),
            d.base_ref_name,
            self._review_status(),
            self._ci_status(),
            self._lines(),
        ]


@dataclass
class IssueRow:
    data: IssueData

    def to_table_row(self, now: Optional[datetime] = None) -> list[str]:
        d = self.data
        return [
            time_elapsed(d.updated_at, now),
            ISSUE_OPEN_ICON if d.state == "OPEN" else ISSUE_CLOSED_ICON,
            d.repository.name,
            render_issue_title(d.state, d.title, d.number),
            d.author,
            ",".join(a.login for a in d.assignees),
            str(d.comments_total_count),
            str(d.reactions_total_count),
        ]