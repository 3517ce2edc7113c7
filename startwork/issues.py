"""
issues — Issue references fetched from a tracker, and the work item wrapper.
"""

import datetime


class Repository:
    __slots__ = ("owner", "repo")

    def __init__(self, owner, repo):
        self.owner = owner
        self.repo = repo

    def __repr__(self):
        return f"Repository({self.owner!r}, {self.repo!r})"

    def __eq__(self, other):
        return isinstance(other, Repository) and (self.owner, self.repo) == (other.owner, other.repo)

    def __hash__(self):
        return hash((self.owner, self.repo))


class Author:
    __slots__ = ("name", "avatar_url")

    def __init__(self, name, avatar_url=None):
        self.name = name
        self.avatar_url = avatar_url

    def __repr__(self):
        return f"Author({self.name!r})"


class Issue:
    """Read-only issue reference. ``id`` is the tracker's short number as a string."""

    __slots__ = ("id", "title", "body", "repository", "author", "updated_date", "url", "integration_id")

    def __init__(self, id, title, repository=None, author=None, updated_date=None,
                 body=None, url=None, integration_id=None):
        self.id = str(id)
        self.title = title
        self.body = body
        self.repository = repository
        self.author = author or Author("")
        self.updated_date = updated_date
        self.url = url
        self.integration_id = integration_id

    def __setattr__(self, name, value):
        if hasattr(self, name):
            raise AttributeError(f"Issue is read-only: cannot set {name!r}")
        object.__setattr__(self, name, value)

    def __repr__(self):
        return f"Issue({self.ref()!r}, {self.title!r})"

    def __eq__(self, other):
        return isinstance(other, Issue) and (self.integration_id, self.ref()) == (other.integration_id, other.ref())

    def __hash__(self):
        return hash((self.integration_id, self.ref()))

    def ref(self):
        owner = self.repository.owner if self.repository else ""
        repo = self.repository.repo if self.repository else ""
        return f"{owner}/{repo}#{self.id}"


class WorkItem:
    """What the pick step chooses: one issue to start work on."""

    __slots__ = ("issue",)

    def __init__(self, issue):
        self.issue = issue

    def __repr__(self):
        return f"WorkItem({self.issue!r})"

    def __eq__(self, other):
        return isinstance(other, WorkItem) and self.issue == other.issue

    def __hash__(self):
        return hash(self.issue)


# ── Parsing ──────────────────────────────────────────────────────────────

def parse_timestamp(value):
    """ISO-8601 (with 'Z' or an offset) → aware datetime, or None."""
    if not value:
        return None
    if isinstance(value, datetime.datetime):
        return value
    try:
        return datetime.datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def split_full_name(full_name):
    """'owner/group/repo' → Repository('owner/group', 'repo')."""
    owner, _, repo = (full_name or "").rpartition("/")
    return Repository(owner, repo)
