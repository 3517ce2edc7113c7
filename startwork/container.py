"""
container — Wires the services one CLI run shares.
"""

from . import config as _config
from .access import AccessChecker
from .git import GitService
from .integrations import IntegrationRegistry
from .provider import StartWorkProvider
from .telemetry import Telemetry


class Container:
    def __init__(self, settings=None, *, integrations=None, git=None, access=None, telemetry=None):
        self.config = {**_config.CONFIG, **(settings or {})}
        self.integrations = integrations or IntegrationRegistry()
        self.git = git or GitService(self.config["workspace_paths"] or [_config.WORKSPACE])
        self.access = access or AccessChecker(self.config["disabled_features"])
        self.telemetry = telemetry or Telemetry(enabled=bool(self.config["telemetry"]))
        self.start_work = StartWorkProvider(self.integrations, self.config["supported_integrations"])
