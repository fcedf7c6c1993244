"""Mock GitHub API response fixtures.

These fixtures represent realistic GitHub REST API responses for testing
schema parsing and sync logic. Structure matches the GitHub REST API v3.

See: https://docs.github.com/en/rest
"""

from typing import Any

from tests.conftest import JAN_10_ISO, JAN_12_ISO, JAN_15_ISO, JAN_16_ISO, JAN_20_ISO

# -----------------------------------------------------------------------------
# User Responses
# -----------------------------------------------------------------------------
GITHUB_AUTHENTICATED_USER_RESPONSE = {
    "login": "octocat",
    "id": 1001,
    "name": "The Octocat",
    "avatar_url": "https://avatars.githubusercontent.com/u/1001",
    "html_url": "https://github.com/octocat",
    "type": "User",
}

GITHUB_MEMBER_RESPONSE = {
    "login": "hubot",
    "id": 2002,
    "avatar_url": "https://avatars.githubusercontent.com/u/2002",
    "html_url": "https://github.com/hubot",
    "type": "User",
}

# -----------------------------------------------------------------------------
# Organization Response
# -----------------------------------------------------------------------------
GITHUB_ORG_RESPONSE = {
    "login": "acme",
    "id": 501,
    "url": "https://api.github.com/orgs/acme",
    "description": None,
}

# -----------------------------------------------------------------------------
# Rate Limit Response
# -----------------------------------------------------------------------------
GITHUB_RATE_LIMIT_RESPONSE = {
    "resources": {"core": {"limit": 5000, "remaining": 4990, "reset": 1705334400, "used": 10}},
    "rate": {"limit": 5000, "remaining": 4990, "reset": 1705334400, "used": 10},
}


# -----------------------------------------------------------------------------
# Payload Builders
# -----------------------------------------------------------------------------
def repo_payload(
    repo_id: int,
    full_name: str,
    *,
    fork: bool = False,
    parent: str | None = None,
    **overrides: Any,
) -> dict[str, Any]:
    """Repository object as returned by /user/repos or /repos/{owner}/{repo}."""
    payload: dict[str, Any] = {
        "id": repo_id,
        "name": full_name.split("/", 1)[1],
        "full_name": full_name,
        "private": False,
        "html_url": f"https://github.com/{full_name}",
        "description": f"{full_name} repository",
        "language": "Python",
        "forks_count": 2,
        "stargazers_count": 10,
        "open_issues_count": 1,
        "fork": fork,
    }
    if parent is not None:
        payload["parent"] = {"id": repo_id + 100_000, "full_name": parent}
    payload.update(overrides)
    return payload


def commit_payload(sha: str, *, date: str = JAN_15_ISO, login: str | None = "octocat") -> dict[str, Any]:
    return {
        "sha": sha,
        "html_url": f"https://github.com/acme/widget/commit/{sha}",
        "commit": {
            "message": f"Commit {sha[:7]}",
            "author": {"name": "The Octocat", "email": "octocat@example.com", "date": date},
        },
        "author": {"login": login, "id": 1001} if login else None,
    }


def pull_payload(number: int, *, state: str = "open", merged: bool = False) -> dict[str, Any]:
    return {
        "number": number,
        "title": f"Pull request {number}",
        "state": state,
        "html_url": f"https://github.com/acme/widget/pull/{number}",
        "user": {"login": "octocat", "id": 1001},
        "created_at": JAN_10_ISO,
        "merged_at": JAN_12_ISO if merged else None,
    }


def issue_payload(number: int, *, pull_request: bool = False) -> dict[str, Any]:
    """Issue listing entry; ``pull_request`` marks entries that are pull requests."""
    payload: dict[str, Any] = {
        "number": number,
        "title": f"Issue {number}",
        "state": "open",
        "html_url": f"https://github.com/acme/widget/issues/{number}",
        "user": {"login": "hubot", "id": 2002},
        "created_at": JAN_16_ISO,
        "closed_at": None,
    }
    if pull_request:
        payload["pull_request"] = {"url": f"https://api.github.com/repos/acme/widget/pulls/{number}"}
    return payload


def release_payload(release_id: int, tag_name: str) -> dict[str, Any]:
    return {
        "id": release_id,
        "tag_name": tag_name,
        "name": tag_name,
        "body": None,
        "html_url": f"https://github.com/acme/widget/releases/tag/{tag_name}",
        "created_at": JAN_20_ISO,
        "published_at": JAN_20_ISO,
    }
