"""GitHub data model and GraphQL queries for issues and pull requests."""

from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, Protocol

log = logging.getLogger(__name__)

_ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


@dataclass
class Assignee:
    login: str = ""


@dataclass
class Repository:
    name: str = ""
    name_with_owner: str = ""
    is_archived: bool = False


@dataclass
class Label:
    color: str = ""
    name: str = ""


@dataclass
class Comment:
    author: str = ""
    body: str = ""
    updated_at: datetime = _ZERO_TIME


@dataclass
class Review:
    author: str = ""
    body: str = ""
    state: str = ""
    updated_at: datetime = _ZERO_TIME


@dataclass
class PageInfo:
    has_next_page: bool = False
    start_cursor: str = ""
    end_cursor: str = ""


@dataclass
class CheckRun:
    name: str = ""
    status: str = ""
    conclusion: str = ""
    creator: str = ""
    workflow_name: str = ""


@dataclass
class StatusContext:
    context: str = ""
    state: str = ""
    creator: str = ""


@dataclass
class StatusCheck:
    """One entry of a commit's status check rollup."""

    typename: str = ""
    check_run: CheckRun = field(default_factory=CheckRun)
    status_context: StatusContext = field(default_factory=StatusContext)


@dataclass
class IssueData:
    number: int = 0
    title: str = ""
    body: str = ""
    state: str = ""
    author: str = ""
    updated_at: datetime = _ZERO_TIME
    url: str = ""
    repository: Repository = field(default_factory=Repository)
    assignees: list[Assignee] = field(default_factory=list)
    comments: list[Comment] = field(default_factory=list)
    comments_total_count: int = 0
    reactions_total_count: int = 0
    labels: list[Label] = field(default_factory=list)

    @property
    def repo_name_with_owner(self) -> str:
        return self.repository.name_with_owner


@dataclass
class PullRequestData:
    number: int = 0
    title: str = ""
    body: str = ""
    author: str = ""
    updated_at: datetime = _ZERO_TIME
    url: str = ""
    state: str = ""
    mergeable: str = ""
    review_decision: str = ""
    additions: int = 0
    deletions: int = 0
    head_ref_name: str = ""
    base_ref_name: str = ""
    head_repository_name: str = ""
    repository: Repository = field(default_factory=Repository)
    assignees: list[Assignee] = field(default_factory=list)
    comments: list[Comment] = field(default_factory=list)
    comments_total_count: int = 0
    latest_reviews: list[Review] = field(default_factory=list)
    is_draft: bool = False
    # Checks of the most recent commit; None when the PR has no commits.
    commit_checks: Optional[list[StatusCheck]] = None

    @property
    def repo_name_with_owner(self) -> str:
        return self.repository.name_with_owner


@dataclass
class IssuesResponse:
    issues: list[IssueData] = field(default_factory=list)
    total_count: int = 0
    page_info: PageInfo = field(default_factory=PageInfo)


@dataclass
class PullRequestsResponse:
    prs: list[PullRequestData] = field(default_factory=list)
    total_count: int = 0
    page_info: PageInfo = field(default_factory=PageInfo)


class _Client(Protocol):
    def query(self, query: str, variables: Optional[Mapping[str, Any]] = None) -> dict: ...


class GhGraphQLClient:
    """Runs GraphQL queries through the ``gh api graphql`` command."""

    def __init__(self, executable: str = "gh", runner: Callable[..., Any] = subprocess.run):
        self.executable = executable
        self._runner = runner

    def query(self, query: str, variables: Optional[Mapping[str, Any]] = None) -> dict:
        body = json.dumps({"query": query, "variables": dict(variables or {})})
        result = self._runner(
            [self.executable, "api", "graphql", "--input", "-"],
            input=body,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            message = (result.stderr or "").strip()
            raise RuntimeError(message or f"{self.executable} exited with status {result.returncode}")
        payload = json.loads(result.stdout or "{}")
        errors = payload.get("errors")
        if errors:
            raise RuntimeError("; ".join(str(e.get("message", e)) for e in errors))
        return payload.get("data") or {}


def is_status_waiting(status: str) -> bool:
    return status in ("PENDING", "QUEUED", "IN_PROGRESS", "WAITING")


def is_conclusion_a_failure(conclusion: str) -> bool:
    return conclusion in ("FAILURE", "TIMED_OUT", "STARTUP_FAILURE")


def make_issues_query(query: str) -> str:
    return f"is:issue {query} sort:updated"


def make_pull_requests_query(query: str) -> str:
    return f"is:pr {query} sort:updated"


_PAGE_INFO_FIELDS = "pageInfo { hasNextPage startCursor endCursor }"

_ISSUE_FIELDS = """
number
title
body
state
author { login }
updatedAt
url
repository { name nameWithOwner isArchived }
assignees(first: 3) { nodes { login } }
comments(first: 15) { nodes { author { login } body updatedAt } totalCount }
reactions(first: 1) { totalCount }
labels(first: 3) { nodes { color name } }
"""

_PR_FIELDS = """
number
title
body
author { login }
updatedAt
url
state
mergeable
reviewDecision
additions
deletions
headRefName
baseRefName
headRepository { name }
headRef { name }
repository { name nameWithOwner isArchived }
assignees(first: 3) { nodes { login } }
comments(last: 5, orderBy: { field: UPDATED_AT, direction: DESC }) {
  nodes { author { login } body updatedAt }
  totalCount
}
latestReviews(last: 3) { nodes { author { login } body state updatedAt } }
isDraft
commits(last: 1) {
  nodes {
    commit {
      deployments(last: 10) { nodes { task description } }
      statusCheckRollup {
        contexts(last: 20) {
          totalCount
          nodes {
            __typename
            ... on CheckRun {
              name
              status
              conclusion
              checkSuite { creator { login } workflowRun { workflow { name } } }
            }
            ... on StatusContext { context state creator { login } }
          }
        }
      }
    }
  }
}
"""


def _search_query(name: str, fragment_type: str, fields_text: str) -> str:
    return (
        f"query {name}($query: String!, $limit: Int!, $endCursor: String) {{\n"
        "  search(type: ISSUE, first: $limit, after: $endCursor, query: $query) {\n"
        f"    nodes {{ ... on {fragment_type} {{ {fields_text} }} }}\n"
        "    issueCount\n"
        f"    {_PAGE_INFO_FIELDS}\n"
        "  }\n"
        "}\n"
    )


_ISSUES_QUERY = _search_query("SearchIssues", "Issue", _ISSUE_FIELDS)
_PULL_REQUESTS_QUERY = _search_query("SearchPullRequests", "PullRequest", _PR_FIELDS)
_VIEWER_QUERY = "query UserCurrent { viewer { login } }"


def _get(node: Any, *path: str) -> Any:
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def _text(node: Any, *path: str) -> str:
    value = _get(node, *path)
    return "" if value is None else str(value)


def _int(node: Any, *path: str) -> int:
    value = _get(node, *path)
    return int(value) if value else 0


def _bool(node: Any, *path: str) -> bool:
    return bool(_get(node, *path))


def _time(value: Any) -> datetime:
    if not value:
        return _ZERO_TIME
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _nodes(node: Any, *path: str) -> list[dict]:
    value = _get(node, *path)
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _repository(node: Any) -> Repository:
    return Repository(
        name=_text(node, "name"),
        name_with_owner=_text(node, "nameWithOwner"),
        is_archived=_bool(node, "isArchived"),
    )


def _comment(node: dict) -> Comment:
    return Comment(
        author=_text(node, "author", "login"),
        body=_text(node, "body"),
        updated_at=_time(node.get("updatedAt")),
    )


def _page_info(node: Any) -> PageInfo:
    return PageInfo(
        has_next_page=_bool(node, "hasNextPage"),
        start_cursor=_text(node, "startCursor"),
        end_cursor=_text(node, "endCursor"),
    )


def _status_check(node: dict) -> StatusCheck:
    typename = _text(node, "__typename")
    check = StatusCheck(typename=typename)
    if typename == "CheckRun":
        check.check_run = CheckRun(
            name=_text(node, "name"),
            status=_text(node, "status"),
            conclusion=_text(node, "conclusion"),
            creator=_text(node, "checkSuite", "creator", "login"),
            workflow_name=_text(node, "checkSuite", "workflowRun", "workflow", "name"),
        )
    elif typename == "StatusContext":
        check.status_context = StatusContext(
            context=_text(node, "context"),
            state=_text(node, "state"),
            creator=_text(node, "creator", "login"),
        )
    return check


def parse_issue(node: Mapping[str, Any]) -> IssueData:
    """Build an IssueData from a GraphQL issue node."""
    node = dict(node)
    return IssueData(
        number=_int(node, "number"),
        title=_text(node, "title"),
        body=_text(node, "body"),
        state=_text(node, "state"),
        author=_text(node, "author", "login"),
        updated_at=_time(node.get("updatedAt")),
        url=_text(node, "url"),
        repository=_repository(node.get("repository")),
        assignees=[Assignee(login=_text(n, "login")) for n in _nodes(node, "assignees", "nodes")],
        comments=[_comment(n) for n in _nodes(node, "comments", "nodes")],
        comments_total_count=_int(node, "comments", "totalCount"),
        reactions_total_count=_int(node, "reactions", "totalCount"),
        labels=[Label(color=_text(n, "color"), name=_text(n, "name")) for n in _nodes(node, "labels", "nodes")],
    )


def parse_pull_request(node: Mapping[str, Any]) -> PullRequestData:
    """Build a PullRequestData from a GraphQL pull request node."""
    node = dict(node)
    commits = _nodes(node, "commits", "nodes")
    commit_checks = None
    if commits:
        contexts = _nodes(commits[0], "commit", "statusCheckRollup", "contexts", "nodes")
        commit_checks = [_status_check(n) for n in contexts]
    return PullRequestData(
        number=_int(node, "number"),
        title=_text(node, "title"),
        body=_text(node, "body"),
        author=_text(node, "author", "login"),
        updated_at=_time(node.get("updatedAt")),
        url=_text(node, "url"),
        state=_text(node, "state"),
        mergeable=_text(node, "mergeable"),
        review_decision=_text(node, "reviewDecision"),
        additions=_int(node, "additions"),
        deletions=_int(node, "deletions"),
        head_ref_name=_text(node, "headRefName"),
        base_ref_name=_text(node, "baseRefName"),
        head_repository_name=_text(node, "headRepository", "name"),
        repository=_repository(node.get("repository")),
        assignees=[Assignee(login=_text(n, "login")) for n in _nodes(node, "assignees", "nodes")],
        comments=[_comment(n) for n in _nodes(node, "comments", "nodes")],
        comments_total_count=_int(node, "comments", "totalCount"),
        latest_reviews=[
            Review(
                author=_text(n, "author", "login"),
                body=_text(n, "body"),
                state=_text(n, "state"),
                updated_at=_time(n.get("updatedAt")),
            )
            for n in _nodes(node, "latestReviews", "nodes")
        ],
        is_draft=_bool(node, "isDraft"),
        commit_checks=commit_checks,
    )


def _search_variables(query: str, limit: int, page_info: Optional[PageInfo]) -> dict:
    return {
        "query": query,
        "limit": limit,
        "endCursor": page_info.end_cursor if page_info is not None else None,
    }


def fetch_issues(
    query: str,
    limit: int,
    page_info: Optional[PageInfo] = None,
    client: Optional[_Client] = None,
) -> IssuesResponse:
    """Search issues matching ``query``, skipping archived repositories."""
    client = client or GhGraphQLClient()
    variables = _search_variables(make_issues_query(query), limit, page_info)
    log.debug("Fetching issues query=%s limit=%s endCursor=%s", query, limit, variables["endCursor"])
    result = client.query(_ISSUES_QUERY, variables)
    search = _get(result, "search") or {}
    log.debug("Successfully fetched issues query=%s count=%s", query, search.get("issueCount"))

    issues = [parse_issue(n) for n in _nodes(search, "nodes")]
    return IssuesResponse(
        issues=[issue for issue in issues if not issue.repository.is_archived],
        total_count=_int(search, "issueCount"),
        page_info=_page_info(search.get("pageInfo")),
    )


def fetch_pull_requests(
    query: str,
    limit: int,
    page_info: Optional[PageInfo] = None,
    client: Optional[_Client] = None,
) -> PullRequestsResponse:
    """Search pull requests matching ``query``, skipping archived repositories."""
    client = client or GhGraphQLClient()
    variables = _search_variables(make_pull_requests_query(query), limit, page_info)
    log.debug("Fetching PRs query=%s limit=%s endCursor=%s", query, limit, variables["endCursor"])
    result = client.query(_PULL_REQUESTS_QUERY, variables)
    search = _get(result, "search") or {}
    log.debug("Successfully fetched PRs query=%s count=%s", query, search.get("issueCount"))

    prs = [parse_pull_request(n) for n in _nodes(search, "nodes")]
    return PullRequestsResponse(
        prs=[pr for pr in prs if not pr.repository.is_archived],
        total_count=_int(search, "issueCount"),
        page_info=_page_info(search.get("pageInfo")),
    )


def current_login_name(client: Optional[_Client] = None) -> str:
    """Login of the authenticated user."""
    client = client or GhGraphQLClient()
    result = client.query(_VIEWER_QUERY, None)
    return _text(result, "viewer", "login")