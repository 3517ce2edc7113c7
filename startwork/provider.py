"""
provider — Which start-work integrations are connected.
"""

import asyncio
import logging


log = logging.getLogger(__name__)


class StartWorkProvider:
    def __init__(self, integrations, supported):
        self.integrations = integrations
        self.supported = list(supported)

    async def get_connected_integrations(self):
        """Map of integration id → connected, probing each one concurrently.

        A probe that fails is reported as not connected; it never blocks the
        others from being reported.
        """
        connected = {}

        async def _probe(integration_id):
            integration = self.integrations.get(integration_id)
            if integration.maybe_connected is not None:
                return integration.maybe_connected
            return await integration.is_connected()

        results = await asyncio.gather(
            *(_probe(i) for i in self.supported), return_exceptions=True,
        )
        for integration_id, result in zip(self.supported, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                log.warning("could not probe %s: %s", integration_id, result)
                connected[integration_id] = False
            else:
                connected[integration_id] = bool(result)
        return connected
