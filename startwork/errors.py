"""
errors — Exception types for the Start Work CLI.
"""


class StartWorkError(Exception):
    """Base class for expected, reportable failures."""


class IntegrationError(StartWorkError):
    """A tracker CLI call or login failed."""

    def __init__(self, integration_id, message):
        super().__init__(f"{integration_id}: {message}")
        self.integration_id = integration_id
        self.message = message


class UnknownIntegrationError(StartWorkError, KeyError):
    def __init__(self, integration_id):
        super().__init__(integration_id)
        self.integration_id = integration_id

    def __str__(self):
        return f"Unknown integration: {self.integration_id!r}"


class GitError(StartWorkError):
    """A git command exited non-zero."""

    def __init__(self, args, stderr):
        super().__init__(f"git {' '.join(args)}: {stderr}")
        self.command = ["git", *args]
        self.stderr = stderr
