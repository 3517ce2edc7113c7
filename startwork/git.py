"""
git — Repository discovery and branch commands.
"""

import asyncio
import logging
import os
import subprocess

from .errors import GitError


log = logging.getLogger(__name__)


class Repository:
    __slots__ = ("path", "name")

    def __init__(self, path):
        self.path = path
        self.name = os.path.basename(path.rstrip(os.sep)) or path

    def __repr__(self):
        return f"Repository({self.path!r})"

    def __eq__(self, other):
        return isinstance(other, Repository) and self.path == other.path

    def __hash__(self):
        return hash(self.path)


def git(*args, cwd=None):
    try:
        r = subprocess.run(["git"] + list(args), capture_output=True, text=True, cwd=cwd)
    except FileNotFoundError:
        raise GitError(args, "git is not installed") from None
    if r.returncode != 0:
        raise GitError(args, r.stderr.strip())
    return r.stdout.strip()


class GitService:
    def __init__(self, paths):
        self.paths = list(paths)
        self.repositories = []
        self._discovery = None

    @property
    def is_discovering_repositories(self):
        """The running discovery task, or None once it has finished."""
        if self._discovery is not None and not self._discovery.done():
            return self._discovery
        return None

    def start_discovery(self):
        # a task left over from a closed event loop ends up cancelled
        if self._discovery is None or self._discovery.cancelled():
            self._discovery = asyncio.ensure_future(self._discover())
        return self._discovery

    async def _discover(self):
        found = []
        for path in self.paths:
            try:
                top = await asyncio.to_thread(git, "rev-parse", "--show-toplevel", cwd=path)
            except (GitError, OSError) as exc:
                log.debug("no repository at %s: %s", path, exc)
                continue
            repo = Repository(top)
            if repo not in found:
                found.append(repo)
        self.repositories = found
        log.info("discovered %d repositories", len(found))
        return found

    # ── Branches ─────────────────────────────────────────────────────────

    async def current_branch(self, repo):
        return await asyncio.to_thread(git, "rev-parse", "--abbrev-ref", "HEAD", cwd=repo.path)

    async def branches(self, repo):
        out = await asyncio.to_thread(git, "branch", "--format=%(refname:short)", cwd=repo.path)
        return [b for b in out.splitlines() if b]

    def validate_branch_name(self, name):
        """(ok, message) using git's own ref-name rules."""
        if not name:
            return False, "Branch name is required."
        try:
            git("check-ref-format", "--branch", name)
        except GitError:
            return False, f"'{name}' is not a valid branch name."
        return True, None

    async def create_branch(self, repo, name, reference, switch=True):
        if switch:
            args = ("switch", "-c", name, reference)
        else:
            args = ("branch", name, reference)
        await asyncio.to_thread(git, *args, cwd=repo.path)
        log.info("created branch %s from %s in %s", name, reference, repo.path)
