import json
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from ghdash.data import (
    GhGraphQLClient,
    PageInfo,
    current_login_name,
    fetch_issues,
    fetch_pull_requests,
    is_conclusion_a_failure,
    is_status_waiting,
    make_issues_query,
    make_pull_requests_query,
    parse_issue,
    parse_pull_request,
)


class FakeClient:
    def __init__(self, data):
        self.data = data
        self.calls = []

    def query(self, query, variables=None):
        self.calls.append((query, variables))
        return self.data


def issue_node(number, archived=False):
    return {
        "number": number,
        "title": f"issue {number}",
        "body": "body text",
        "state": "OPEN",
        "author": {"login": "alice"},
        "updatedAt": "2023-01-02T03:04:05Z",
        "url": f"https://example.com/issues/{number}",
        "repository": {"name": "repo", "nameWithOwner": "owner/repo", "isArchived": archived},
        "assignees": {"nodes": [{"login": "bob"}]},
        "comments": {"nodes": [{"author": {"login": "carol"}, "body": "hi", "updatedAt": None}], "totalCount": 7},
        "reactions": {"totalCount": 2},
        "labels": {"nodes": [{"color": "ff0000", "name": "bug"}]},
    }


@pytest.mark.parametrize("status", ["PENDING", "QUEUED", "IN_PROGRESS", "WAITING"])
def test_waiting_statuses(status):
    assert is_status_waiting(status) is True


@pytest.mark.parametrize("status", ["COMPLETED", "SUCCESS", ""])
def test_non_waiting_statuses(status):
    assert is_status_waiting(status) is False


@pytest.mark.parametrize("conclusion", ["FAILURE", "TIMED_OUT", "STARTUP_FAILURE"])
def test_failure_conclusions(conclusion):
    assert is_conclusion_a_failure(conclusion) is True


def test_success_is_not_failure():
    assert is_conclusion_a_failure("SUCCESS") is False


def test_search_query_wrapping():
    assert make_issues_query("author:@me") == "is:issue author:@me sort:updated"
    assert make_pull_requests_query("author:@me") == "is:pr author:@me sort:updated"


def test_parse_issue_fields():
    issue = parse_issue(issue_node(12))
    assert issue.number == 12
    assert issue.author == "alice"
    assert issue.repo_name_with_owner == "owner/repo"
    assert issue.updated_at == datetime(2023, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert [a.login for a in issue.assignees] == ["bob"]
    assert issue.comments[0].author == "carol"
    assert issue.comments_total_count == 7
    assert issue.reactions_total_count == 2
    assert issue.labels[0].name == "bug"


def test_parse_issue_tolerates_nulls():
    issue = parse_issue({"number": 3, "author": None, "repository": None})
    assert issue.author == ""
    assert issue.repository.name_with_owner == ""
    assert issue.comments == []


def test_parse_pull_request_checks():
    node = {
        "number": 5,
        "state": "OPEN",
        "headRepository": {"name": "repo"},
        "repository": {"nameWithOwner": "owner/repo"},
        "commits": {
            "nodes": [
                {
                    "commit": {
                        "statusCheckRollup": {
                            "contexts": {
                                "nodes": [
                                    {
                                        "__typename": "CheckRun",
                                        "name": "build",
                                        "status": "COMPLETED",
                                        "conclusion": "SUCCESS",
                                        "checkSuite": {
                                            "creator": {"login": "ci-bot"},
                                            "workflowRun": {"workflow": {"name": "CI"}},
                                        },
                                    },
                                    {
                                        "__typename": "StatusContext",
                                        "context": "lint",
                                        "state": "PENDING",
                                        "creator": {"login": "linter"},
                                    },
                                ]
                            }
                        }
                    }
                }
            ]
        },
        "latestReviews": {"nodes": [{"author": {"login": "dave"}, "state": "APPROVED"}]},
    }
    pr = parse_pull_request(node)
    assert pr.head_repository_name == "repo"
    assert pr.latest_reviews[0].state == "APPROVED"
    run, status = pr.commit_checks
    assert run.check_run.workflow_name == "CI"
    assert run.check_run.creator == "ci-bot"
    assert status.status_context.context == "lint"
    assert status.status_context.state == "PENDING"


def test_parse_pull_request_without_commits():
    pr = parse_pull_request({"number": 1, "commits": {"nodes": []}})
    assert pr.commit_checks is None


def test_fetch_issues_filters_archived_and_passes_variables():
    client = FakeClient(
        {
            "search": {
                "nodes": [issue_node(1), issue_node(2, archived=True)],
                "issueCount": 2,
                "pageInfo": {"hasNextPage": True, "startCursor": "a", "endCursor": "b"},
            }
        }
    )
    response = fetch_issues("author:@me", 5, None, client)
    query, variables = client.calls[0]
    assert "SearchIssues" in query
    assert variables == {"query": "is:issue author:@me sort:updated", "limit": 5, "endCursor": None}
    assert [i.number for i in response.issues] == [1]
    assert response.total_count == 2
    assert response.page_info == PageInfo(has_next_page=True, start_cursor="a", end_cursor="b")


def test_fetch_pull_requests_uses_end_cursor():
    client = FakeClient({"search": {"nodes": [], "issueCount": 0, "pageInfo": {}}})
    response = fetch_pull_requests("is:open", 3, PageInfo(end_cursor="cursor"), client)
    query, variables = client.calls[0]
    assert "SearchPullRequests" in query
    assert variables["endCursor"] == "cursor"
    assert variables["query"] == "is:pr is:open sort:updated"
    assert response.prs == []


def test_current_login_name():
    client = FakeClient({"viewer": {"login": "alice"}})
    assert current_login_name(client) == "alice"
    assert "UserCurrent" in client.calls[0][0]


def test_gh_client_runs_gh_api():
    calls = []

    def runner(args, **kwargs):
        calls.append((args, kwargs))
        return SimpleNamespace(returncode=0, stdout=json.dumps({"data": {"viewer": {"login": "x"}}}), stderr="")

    client = GhGraphQLClient(runner=runner)
    assert client.query("query { viewer { login } }", {"a": 1}) == {"viewer": {"login": "x"}}
    args, kwargs = calls[0]
    assert args == ["gh", "api", "graphql", "--input", "-"]
    assert json.loads(kwargs["input"]) == {"query": "query { viewer { login } }", "variables": {"a": 1}}


def test_gh_client_raises_on_failure():
    def runner(args, **kwargs):
        return SimpleNamespace(returncode=1, stdout="", stderr="not logged in")

    with pytest.raises(RuntimeError, match="not logged in"):
        GhGraphQLClient(runner=runner).query("query {}")


def test_gh_client_raises_on_graphql_errors():
    def runner(args, **kwargs):
        return SimpleNamespace(returncode=0, stdout=json.dumps({"errors": [{"message": "bad field"}]}), stderr="")

    with pytest.raises(RuntimeError, match="bad field"):
        GhGraphQLClient(runner=runner).query("query {}")