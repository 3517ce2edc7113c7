"""
steps — Step primitives for quick-pick wizards.

A flow yields Step objects (pick, confirm, input) and receives the user's
selection back. Selections are either a list of picked items, a string (input
steps), or one of the navigation sentinels BACK / QUIT from ``ui``.
"""

import enum

from .ui import BACK, QUIT


class _Break:
    __slots__ = ()

    def __repr__(self):
        return "StepResultBreak"

    def __bool__(self):
        return False


# Returned (never raised) by a step routine to abort or step back.
StepResultBreak = _Break()


# ═════════════════════════════════════════════════════════════════════════════
# STATE
# ═════════════════════════════════════════════════════════════════════════════

class StepState:
    """Per-invocation navigation state. Flows subclass it to add fields."""

    def __init__(self, counter=0, confirm=None, starting_step=0):
        self.counter = counter
        self.confirm = confirm
        self.starting_step = starting_step
        self.ended = False

    def __repr__(self):
        fields = ", ".join(f"{k}={v!r}" for k, v in vars(self).items())
        return f"{type(self).__name__}({fields})"


def end_steps(state):
    """Flag the flow as finished. The counter is left alone."""
    state.ended = True


def cancel_steps(state):
    """Abort the whole flow; the top-level routine reports a Break."""
    state.counter = -1
    state.ended = True


# ═════════════════════════════════════════════════════════════════════════════
# ITEMS
# ═════════════════════════════════════════════════════════════════════════════

class Directive(enum.Enum):
    BACK = "back"
    CANCEL = "cancel"
    NOOP = "noop"


class QuickInputButton:
    """A row button. In the terminal it is clicked as <key><row>, e.g. 's3'."""

    __slots__ = ("key", "tooltip")

    def __init__(self, key, tooltip):
        self.key = key
        self.tooltip = tooltip

    def __repr__(self):
        return f"QuickInputButton({self.key!r}, {self.tooltip!r})"


class QuickPickItem:
    __slots__ = ("label", "description", "detail", "item", "icon", "buttons", "picked")

    def __init__(self, label, description=None, detail=None, item=None,
                 icon=None, buttons=(), picked=False):
        self.label = label
        self.description = description
        self.detail = detail
        self.item = item
        self.icon = icon
        self.buttons = list(buttons)
        self.picked = picked

    def __repr__(self):
        return f"QuickPickItem({self.label!r})"


class DirectiveItem:
    __slots__ = ("directive", "label", "description", "detail", "picked")

    def __init__(self, directive, label=None, description=None, detail=None, picked=False):
        self.directive = directive
        self.label = label if label is not None else directive.value.title()
        self.description = description
        self.detail = detail
        self.picked = picked

    @property
    def selectable(self):
        return self.directive is not Directive.NOOP

    def __repr__(self):
        return f"DirectiveItem({self.directive.name})"


class Separator:
    __slots__ = ("label",)

    def __init__(self, label=""):
        self.label = label


def is_directive_item(obj):
    return isinstance(obj, DirectiveItem)


def is_selectable(obj):
    if isinstance(obj, Separator):
        return False
    if is_directive_item(obj):
        return obj.selectable
    return True


# ═════════════════════════════════════════════════════════════════════════════
# STEPS
# ═════════════════════════════════════════════════════════════════════════════

class PickStep:
    """Choose one of N items."""

    kind = "pick"

    def __init__(self, title, items, placeholder=None, *, match_on_description=False,
                 match_on_detail=False, ignore_focus_out=False, buttons=(),
                 on_did_click_item_button=None, on_did_activate=None):
        self.title = title
        self.items = list(items)
        self.placeholder = placeholder
        self.match_on_description = match_on_description
        self.match_on_detail = match_on_detail
        self.ignore_focus_out = ignore_focus_out
        self.buttons = list(buttons)
        self.on_did_click_item_button = on_did_click_item_button
        self.on_did_activate = on_did_activate
        self.frozen = False

    def __repr__(self):
        return f"{type(self).__name__}({self.title!r}, {len(self.items)} items)"


class ConfirmStep(PickStep):
    kind = "confirm"


class InputStep:
    """Free-text entry, optionally pre-filled and validated."""

    kind = "input"

    def __init__(self, title, prompt, value=None, placeholder=None, validate=None,
                 on_did_activate=None):
        self.title = title
        self.prompt = prompt
        self.value = value
        self.placeholder = placeholder
        self.validate = validate
        self.on_did_activate = on_did_activate
        self.frozen = False

    def __repr__(self):
        return f"InputStep({self.title!r})"


def create_pick_step(title, items, placeholder=None, **options):
    return PickStep(title, items, placeholder, **options)


def create_confirm_step(title, confirmations, cancel=None, placeholder=None, **options):
    """Confirmation list; a Cancel directive is always the last row."""
    items = list(confirmations)
    items.append(cancel if cancel is not None else DirectiveItem(Directive.CANCEL, "Cancel"))
    return ConfirmStep(title, items, placeholder, **options)


def create_input_step(title, prompt, value=None, placeholder=None, validate=None):
    return InputStep(title, prompt, value, placeholder, validate)


def freeze_step(step, handle):
    """Keep the host prompt on screen; returns the Disposable that un-freezes it."""
    step.frozen = True
    disposable = handle.suspend_dismissal()

    def _thaw():
        step.frozen = False

    disposable.on_dispose(_thaw)
    return disposable


# ═════════════════════════════════════════════════════════════════════════════
# CONTINUATION
# ═════════════════════════════════════════════════════════════════════════════

def can_step_continue(step, state, result):
    if result == BACK or result is None:
        state.counter -= 1
        return False
    if result == QUIT:
        cancel_steps(state)
        return False
    state.counter += 1
    return True


def can_pick_step_continue(step, state, selection):
    if isinstance(selection, list) and selection and is_directive_item(selection[0]):
        directive = selection[0].directive
        if directive is Directive.CANCEL:
            cancel_steps(state)
        elif directive is Directive.BACK:
            state.counter -= 1
        return False
    if isinstance(selection, list) and not selection:
        return False
    return can_step_continue(step, state, selection)


def can_input_step_continue(step, state, value):
    return can_step_continue(step, state, value)
