"""
gh — GitHub CLI wrappers and issue fetchers.
"""

import json
import shutil
import subprocess

from .errors import IntegrationError
from .issues import Author, Issue, parse_timestamp, split_full_name


INTEGRATION_ID = "github"

_ISSUE_FIELDS = "number,title,body,repository,author,updatedAt,url"


# ── Low-level gh CLI ─────────────────────────────────────────────────────

def installed():
    return shutil.which("gh") is not None


def gh(*args, json_output=False):
    cmd = ["gh"] + list(args)
    try:
        r = subprocess.run(cmd, capture_output=True, text=True)
    except FileNotFoundError:
        raise IntegrationError(INTEGRATION_ID, "the gh CLI is not installed") from None
    if r.returncode != 0:
        raise IntegrationError(INTEGRATION_ID, r.stderr.strip() or f"gh exited with {r.returncode}")
    if json_output:
        try:
            return json.loads(r.stdout or "null")
        except ValueError as exc:
            raise IntegrationError(INTEGRATION_ID, f"unexpected gh output: {exc}") from exc
    return r.stdout.strip()


# ── Auth ─────────────────────────────────────────────────────────────────

def auth_status(hostname="github.com"):
    """True when gh has a usable token for ``hostname``."""
    if not installed():
        return False
    r = subprocess.run(["gh", "auth", "status", "--hostname", hostname],
                       capture_output=True, text=True)
    return r.returncode == 0


def auth_login(hostname="github.com"):
    """Interactive browser login; inherits the terminal."""
    if not installed():
        raise IntegrationError(INTEGRATION_ID, "the gh CLI is not installed")
    r = subprocess.run(["gh", "auth", "login", "--web", "--hostname", hostname])
    return r.returncode == 0


# ── Issue queries ────────────────────────────────────────────────────────

def search_my_issues(limit=50):
    """Open issues assigned to the authenticated user, newest first."""
    data = gh(
        "search", "issues",
        "--assignee", "@me",
        "--state", "open",
        "--sort", "updated",
        "--limit", str(limit),
        "--json", _ISSUE_FIELDS,
        json_output=True,
    )
    return [issue_from_json(i) for i in data or []]


def fetch_issue_detail(repo, number):
    """Fetch a single issue by ``owner/repo`` and number."""
    data = gh(
        "issue", "view", str(number), "--repo", repo,
        "--json", "number,title,body,author,updatedAt,url",
        json_output=True,
    )
    data["repository"] = {"nameWithOwner": repo}
    return issue_from_json(data)


def issue_from_json(data):
    repo = data.get("repository") or {}
    full_name = repo.get("nameWithOwner") or repo.get("name", "")
    author = data.get("author") or {}
    login = author.get("login", "")
    return Issue(
        id=data["number"],
        title=data.get("title", ""),
        body=data.get("body") or "",
        repository=split_full_name(full_name),
        author=Author(login, f"https://github.com/{login}.png" if login else None),
        updated_date=parse_timestamp(data.get("updatedAt")),
        url=data.get("url"),
        integration_id=INTEGRATION_ID,
    )
