"""
telemetry — Fire-and-forget usage events.

Events go to the structlog logger ``startwork.telemetry`` and to any
subscribers. Nothing here can change a flow's control path.
"""

import itertools
import logging

import structlog


log = logging.getLogger(__name__)
events = structlog.get_logger("startwork.telemetry")


class ScopedCounter:
    def __init__(self):
        self._counter = itertools.count(1)

    def next(self):
        return next(self._counter)


def instance_counter():
    return ScopedCounter()


class Telemetry:
    def __init__(self, enabled=False):
        self.enabled = enabled
        self._subscribers = []

    def subscribe(self, callback):
        """Register ``callback(name, data)``; returns an unsubscribe function."""
        self._subscribers.append(callback)

        def _unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def send_event(self, name, data=None, source=None):
        if not self.enabled:
            return
        payload = {**(data or {}), **(source or {})}
        events.info(name, **payload)
        for callback in list(self._subscribers):
            try:
                callback(name, payload)
            except Exception:
                log.exception("telemetry subscriber failed for %s", name)
