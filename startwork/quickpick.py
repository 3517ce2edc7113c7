"""
quickpick — Terminal host for quick-pick steps.

Renders Pick/Confirm/Input steps as numbered prompts and turns the user's
answer into a selection the engine understands:

  3        pick row 3
  s3       click button 's' on row 3
  text     filter rows by label (and description/detail when enabled)
  enter    pick the default row (``picked=True``)
  b / q    BACK / QUIT
"""

import re

from .steps import (
    InputStep, Separator,
    is_directive_item, is_selectable,
)
from .ui import (
    BOLD, CYAN, DIM, YELLOW, RED, RESET,
    BACK, QUIT,
    clear, banner, nav_hint, prompt,
)


_BUTTON_RE = re.compile(r"^([a-z])\s*(\d+)$", re.IGNORECASE)


class Disposable:
    """Callback holder; dispose() runs every registered callback once."""

    def __init__(self, callback=None):
        self._callbacks = [callback] if callback else []
        self.disposed = False

    def on_dispose(self, callback):
        self._callbacks.append(callback)

    def dispose(self):
        if self.disposed:
            return
        self.disposed = True
        for callback in reversed(self._callbacks):
            callback()


class PromptHandle:
    """What a step's ``on_did_activate`` hook receives: the live prompt."""

    def __init__(self, host, step):
        self._host = host
        self._placeholder = getattr(step, "placeholder", None)
        self.step = step
        self.ignore_focus_out = getattr(step, "ignore_focus_out", False)

    @property
    def placeholder(self):
        return self._placeholder

    @placeholder.setter
    def placeholder(self, value):
        self._placeholder = value
        if self._host.frozen:
            self._host.status(value)

    def suspend_dismissal(self):
        self._host.freeze_count += 1
        return Disposable(self._host.thaw)


class TerminalQuickPick:
    """Synchronous terminal host. ``show(step)`` returns the selection."""

    def __init__(self, input_fn=prompt, output=print):
        self._input = input_fn
        self._print = output
        self._activated = set()
        self.freeze_count = 0

    @property
    def frozen(self):
        return self.freeze_count > 0

    def thaw(self):
        self.freeze_count = max(0, self.freeze_count - 1)

    def status(self, text):
        if text:
            self._print(f"  {DIM}⏳ {text}{RESET}")

    # ── Entry point ──────────────────────────────────────────────────────

    def show(self, step):
        handle = PromptHandle(self, step)
        if step.on_did_activate is not None and id(step) not in self._activated:
            self._activated.add(id(step))
            step.on_did_activate(handle)

        if isinstance(step, InputStep):
            return self._show_input(step)
        return self._show_pick(step, handle)

    # ── Pick / confirm ───────────────────────────────────────────────────

    def _screen(self, title):
        if not self.frozen:
            clear()
            banner()
        self._print(f"  {BOLD}{title}{RESET}\n")

    def _show_pick(self, step, handle):
        rows = [i for i in step.items if is_selectable(i)]
        visible = rows
        while True:
            self._screen(step.title)
            if handle.placeholder:
                self._print(f"  {DIM}{handle.placeholder}{RESET}\n")
            self._render_items(step, visible)
            nav_hint(_button_hint(visible))

            raw = self._input("Choose")
            if raw in (BACK, QUIT):
                return raw

            if raw is None or raw == "":
                default = next((i for i in visible if getattr(i, "picked", False)), None)
                if default is None and len(visible) == 1:
                    default = visible[0]
                if default is not None:
                    return [default]
                continue

            clicked = _BUTTON_RE.match(raw)
            if clicked:
                result = self._click(step, handle, visible, clicked.group(1), int(clicked.group(2)))
                if result is not None:
                    return result
                continue

            if raw.isdigit():
                idx = int(raw) - 1
                if 0 <= idx < len(visible):
                    return [visible[idx]]
                self._print(f"    {DIM}Enter a number (1-{len(visible)}) or text to filter{RESET}")
                continue

            matches = filter_items(step, rows, raw)
            if len(matches) == 1:
                return matches
            if not matches:
                self._print(f"    {YELLOW}No matches for {raw!r}{RESET}")
                visible = rows
            else:
                visible = matches

    def _click(self, step, handle, visible, key, row):
        if not 0 < row <= len(visible):
            return None
        item = visible[row - 1]
        button = next((b for b in getattr(item, "buttons", ()) if b.key.lower() == key.lower()), None)
        if button is None or step.on_did_click_item_button is None:
            self._print(f"    {DIM}Row {row} has no '{key}' button{RESET}")
            return None
        if step.on_did_click_item_button(handle, button, item):
            return [item]
        return None

    def _render_items(self, step, visible):
        number = {id(i): n for n, i in enumerate(visible, 1)}
        for item in step.items:
            if isinstance(item, Separator):
                self._print(f"  {DIM}── {item.label} ──{RESET}" if item.label else "")
                continue
            if id(item) not in number:
                if is_directive_item(item) and not item.selectable:
                    self._print("")
                continue
            n = number[id(item)]
            marker = f"{CYAN}›{RESET}" if getattr(item, "picked", False) else " "
            desc = f"  {DIM}{item.description}{RESET}" if item.description else ""
            buttons = "".join(f"  {DIM}[{b.key}] {b.tooltip}{RESET}" for b in getattr(item, "buttons", ()))
            self._print(f"   {marker}{CYAN}{n:>2}{RESET}  {item.label}{desc}{buttons}")
            if item.detail:
                for line in str(item.detail).splitlines()[:6]:
                    self._print(f"        {DIM}{line}{RESET}")
        self._print("")

    # ── Input ────────────────────────────────────────────────────────────

    def _show_input(self, step):
        while True:
            self._screen(step.title)
            if step.placeholder:
                self._print(f"  {DIM}{step.placeholder}{RESET}\n")
            nav_hint()
            raw = self._input(step.prompt, default=step.value)
            if raw in (BACK, QUIT):
                return raw
            value = (raw or "").strip()
            if step.validate is not None:
                ok, message = step.validate(value)
                if not ok:
                    self._print(f"    {RED}{message}{RESET}")
                    step.value = value or step.value
                    continue
            return value


def filter_items(step, items, text):
    """Case-insensitive substring match on label, plus description/detail if enabled."""
    needle = text.lower()
    matches = []
    for item in items:
        fields = [item.label]
        if step.match_on_description:
            fields.append(item.description)
        if step.match_on_detail:
            fields.append(item.detail)
        if any(f and needle in str(f).lower() for f in fields):
            matches.append(item)
    return matches


def _button_hint(items):
    keys = {}
    for item in items:
        for b in getattr(item, "buttons", ()):
            keys.setdefault(b.key, b.tooltip)
    if not keys:
        return ""
    return f"{DIM}" + " · ".join(f"{k}N = {t}" for k, t in keys.items()) + f"{RESET}"
