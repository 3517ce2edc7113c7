"""
integrations — Issue-tracker integrations and their registry.

Each integration wraps a tracker CLI (gh, glab). Blocking CLI calls run in a
worker thread so the wizard's event loop stays responsive.
"""

import asyncio
import logging

from . import gh, glab
from .errors import UnknownIntegrationError


log = logging.getLogger(__name__)

GITHUB = gh.INTEGRATION_ID
GITLAB = glab.INTEGRATION_ID


class Integration:
    """Connection state for one tracker, cached after the first probe."""

    id = None
    name = None

    def __init__(self):
        self._connected = None

    def __repr__(self):
        return f"{type(self).__name__}(connected={self._connected!r})"

    @property
    def maybe_connected(self):
        """Last known state, or None when never probed."""
        return self._connected

    async def is_connected(self):
        self._connected = bool(await asyncio.to_thread(self._auth_status))
        return self._connected

    async def connect(self, source):
        log.info("connecting %s (source=%s)", self.id, source)
        ok = await asyncio.to_thread(self._auth_login)
        if not ok:
            self._connected = False
            return False
        return await self.is_connected()

    async def get_my_issues(self):
        return await asyncio.to_thread(self._search_my_issues)

    def _auth_status(self):
        raise NotImplementedError

    def _auth_login(self):
        raise NotImplementedError

    def _search_my_issues(self):
        raise NotImplementedError


class GitHubIntegration(Integration):
    id = GITHUB
    name = "GitHub"

    def _auth_status(self):
        return gh.auth_status()

    def _auth_login(self):
        return gh.auth_login()

    def _search_my_issues(self):
        return gh.search_my_issues()


class GitLabIntegration(Integration):
    id = GITLAB
    name = "GitLab"

    def _auth_status(self):
        return glab.auth_status()

    def _auth_login(self):
        return glab.auth_login()

    def _search_my_issues(self):
        return glab.search_my_issues()


KNOWN_INTEGRATIONS = {
    GITHUB: GitHubIntegration,
    GITLAB: GitLabIntegration,
}


def integration_name(integration_id):
    cls = KNOWN_INTEGRATIONS.get(integration_id)
    return cls.name if cls else integration_id


# ═════════════════════════════════════════════════════════════════════════════
# REGISTRY
# ═════════════════════════════════════════════════════════════════════════════

class IntegrationRegistry:
    def __init__(self, factories=None):
        self._factories = dict(factories or KNOWN_INTEGRATIONS)
        self._instances = {}

    def ids(self):
        return list(self._factories)

    def get(self, integration_id):
        if integration_id not in self._instances:
            try:
                factory = self._factories[integration_id]
            except KeyError:
                raise UnknownIntegrationError(integration_id) from None
            self._instances[integration_id] = factory()
        return self._instances[integration_id]

    async def connect_cloud_integrations(self, integration_ids, source):
        """Connect every listed integration that isn't connected yet.

        Returns True when at least one of them is connected afterwards.
        """
        any_connected = False
        for integration_id in integration_ids:
            try:
                integration = self.get(integration_id)
                connected = integration.maybe_connected
                if connected is None:
                    connected = await integration.is_connected()
                if not connected:
                    connected = await integration.connect(source)
            except Exception as exc:
                log.warning("connect %s failed: %s", integration_id, exc)
                connected = False
            any_connected = any_connected or connected
        return any_connected

    async def get_my_issues(self, integration_ids):
        """Issues assigned to the user across connected integrations.

        Failures of one tracker don't hide the others; returns None only
        when every queried tracker failed.
        """
        integrations = []
        for integration_id in integration_ids:
            integration = self.get(integration_id)
            connected = integration.maybe_connected
            if connected is None:
                try:
                    connected = await integration.is_connected()
                except Exception as exc:
                    log.warning("probe %s failed: %s", integration_id, exc)
                    connected = False
            if connected:
                integrations.append(integration)
        if not integrations:
            return []

        results = await asyncio.gather(
            *(i.get_my_issues() for i in integrations), return_exceptions=True,
        )
        issues = []
        failures = 0
        for integration, result in zip(integrations, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                log.warning("fetching issues from %s failed: %s", integration.id, result)
                failures += 1
                continue
            issues.extend(result)
        if failures == len(integrations):
            return None
        issues.sort(key=_updated_key, reverse=True)
        return issues


def _updated_key(issue):
    return issue.updated_date.timestamp() if issue.updated_date else 0.0
