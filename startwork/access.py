"""
access — Feature access checks and the step that enforces them.
"""

import shutil

from .steps import (
    QuickPickItem, StepResultBreak,
    can_pick_step_continue, create_confirm_step,
)


START_WORK = "startWork"

FEATURE_REQUIREMENTS = {
    START_WORK: ("git",),
}


class FeatureAccess:
    __slots__ = ("feature", "allowed", "missing", "disabled")

    def __init__(self, feature, allowed, missing=(), disabled=False):
        self.feature = feature
        self.allowed = allowed
        self.missing = list(missing)
        self.disabled = disabled

    def __repr__(self):
        return f"FeatureAccess({self.feature!r}, allowed={self.allowed})"


class AccessChecker:
    def __init__(self, disabled_features=(), which=shutil.which):
        self.disabled_features = set(disabled_features)
        self._which = which

    def check(self, feature):
        if feature in self.disabled_features:
            return FeatureAccess(feature, False, disabled=True)
        missing = [exe for exe in FEATURE_REQUIREMENTS.get(feature, ()) if self._which(exe) is None]
        return FeatureAccess(feature, not missing, missing)


def ensure_access_step(container, state, context, feature):
    """Return immediately when ``feature`` is usable; otherwise explain and
    let the user re-check until it is, or break out."""
    while True:
        access = container.access.check(feature)
        if access.allowed:
            return True

        if access.disabled:
            detail = f"{feature} is disabled in your configuration"
            confirmations = []
        else:
            detail = f"Install {', '.join(access.missing)} and make sure it is on your PATH"
            confirmations = [QuickPickItem("Check again", detail=detail, item=True, picked=True)]

        step = create_confirm_step(
            f"{context.title} • Missing Requirements",
            confirmations,
            placeholder=detail,
        )
        selection = yield step
        if not can_pick_step_continue(step, state, selection):
            return StepResultBreak
        # "Check again" consumed a step; don't count it as progress
        state.counter -= 1
