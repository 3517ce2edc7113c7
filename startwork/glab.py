"""
glab — GitLab CLI wrappers and issue fetchers.
"""

import json
import shutil
import subprocess

from .errors import IntegrationError
from .issues import Author, Issue, parse_timestamp, split_full_name


INTEGRATION_ID = "gitlab"


def installed():
    return shutil.which("glab") is not None


def glab(*args, json_output=False):
    cmd = ["glab"] + list(args)
    try:
        r = subprocess.run(cmd, capture_output=True, text=True)
    except FileNotFoundError:
        raise IntegrationError(INTEGRATION_ID, "the glab CLI is not installed") from None
    if r.returncode != 0:
        raise IntegrationError(INTEGRATION_ID, r.stderr.strip() or f"glab exited with {r.returncode}")
    if json_output:
        try:
            return json.loads(r.stdout or "null")
        except ValueError as exc:
            raise IntegrationError(INTEGRATION_ID, f"unexpected glab output: {exc}") from exc
    return r.stdout.strip()


def auth_status():
    if not installed():
        return False
    r = subprocess.run(["glab", "auth", "status"], capture_output=True, text=True)
    return r.returncode == 0


def auth_login():
    if not installed():
        raise IntegrationError(INTEGRATION_ID, "the glab CLI is not installed")
    r = subprocess.run(["glab", "auth", "login"])
    return r.returncode == 0


def search_my_issues(limit=50):
    data = glab(
        "api",
        f"issues?scope=assigned_to_me&state=opened&order_by=updated_at&per_page={limit}",
        json_output=True,
    )
    return [issue_from_json(i) for i in data or []]


def issue_from_json(data):
    # references.full looks like "group/sub/project#12"
    full_ref = (data.get("references") or {}).get("full", "")
    full_name = full_ref.rsplit("#", 1)[0]
    author = data.get("author") or {}
    return Issue(
        id=data["iid"],
        title=data.get("title", ""),
        body=data.get("description") or "",
        repository=split_full_name(full_name),
        author=Author(author.get("username", ""), author.get("avatar_url")),
        updated_date=parse_timestamp(data.get("updated_at")),
        url=data.get("web_url"),
        integration_id=INTEGRATION_ID,
    )
