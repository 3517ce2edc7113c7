"""
start_work — Pick an assigned issue and start a branch for it.

Flow per loop pass:

  connect an integration (only while none is connected)
  → ensure access → refresh my issues → pick an issue
  → confirm the action → hand off to `branch create`
"""

import logging
import webbrowser

from slugify import slugify

from .access import START_WORK, ensure_access_step
from .dates import from_now
from .engine import QuickCommand, get_steps
from .integrations import integration_name
from .issues import WorkItem
from .steps import (
    Directive, DirectiveItem, QuickInputButton, QuickPickItem, Separator, StepState,
    StepResultBreak,
    can_pick_step_continue, cancel_steps, create_pick_step, end_steps, freeze_step,
)
from .telemetry import instance_counter
from .ui import RED, RESET, truncate


log = logging.getLogger(__name__)

LABEL_WIDTH = 60

START_WORK_ACTION = "start"

StartWorkButton = QuickInputButton("s", "Start Work on this Item")
OpenOnRemoteButton = QuickInputButton("o", "Open in Browser")

_instances = instance_counter()


class StartWorkState(StepState):
    def __init__(self, item=None, action=None, **kwargs):
        super().__init__(**kwargs)
        self.item = item
        self.action = action


class FlowContext:
    __slots__ = ("result", "title", "telemetry_context", "connected_integrations")

    def __init__(self, title, connected_integrations, telemetry_context=None):
        self.result = []
        self.title = title
        self.telemetry_context = telemetry_context
        self.connected_integrations = connected_integrations

    def has_connected_integrations(self):
        return any(self.connected_integrations.values())


def assert_start_work_step_state(state):
    if state.item is not None:
        return
    raise AssertionError("Missing item")


class StartWorkCommand(QuickCommand):
    state_class = StartWorkState

    def __init__(self, container, args=None):
        super().__init__(container, "startWork", "startWork", "Start Work",
                         description="Start work on an issue")
        args = args or {}
        self.source = {"source": args.get("source") or "commandPalette"}
        self.picked_via = self.source["source"]
        self.telemetry_context = None

        if self.container.telemetry.enabled:
            self.telemetry_context = {"instance": _instances.next()}
            self.container.telemetry.send_event("startWork/open", self.telemetry_context, self.source)

        self.initial_state = {"counter": 0, **(args.get("state") or {})}

    @property
    def supported_integrations(self):
        return self.container.start_work.supported

    def _send(self, name, **data):
        if self.telemetry_context is None:
            return
        self.container.telemetry.send_event(name, {**self.telemetry_context, **data}, self.source)

    # ═════════════════════════════════════════════════════════════════════
    # STEPS
    # ═════════════════════════════════════════════════════════════════════

    def steps(self, state):
        discovering = self.container.git.is_discovering_repositories
        if discovering is not None:
            yield discovering

        context = FlowContext(
            self.title,
            (yield self.container.start_work.get_connected_integrations()),
            self.telemetry_context,
        )

        opened = False
        while self.can_steps_continue(state):
            context.title = self.title

            if not context.has_connected_integrations():
                self._send("startWork/steps/connect" if opened else "startWork/opened", connected=False)
                opened = True
                if self.container.config["cloud_integrations"]:
                    result = yield from self.confirm_cloud_integrations_connect_step(state, context)
                else:
                    result = yield from self.confirm_local_integration_connect_step(state, context)
                if result is StepResultBreak:
                    return result
                if not context.has_connected_integrations():
                    continue
            elif not opened:
                self._send("startWork/opened", connected=True)
                opened = True

            result = yield from ensure_access_step(self.container, state, context, START_WORK)
            if result is StepResultBreak:
                continue

            yield self.update_context_items(context)

            if state.counter < 1 or state.item is None:
                result = yield from self.pick_issue_step(state, context)
                if result is StepResultBreak:
                    state.item = None
                    continue
                state.item = result
                self._send("startWork/issue/chosen",
                           via="button" if state.action is not None else "pick")

            assert_start_work_step_state(state)

            if state.action is None:
                if self.confirm(state.confirm):
                    result = yield from self.confirm_step(state, context)
                    if result is StepResultBreak:
                        state.item = None
                        continue
                    state.action = result
                else:
                    state.action = START_WORK_ACTION

            if state.action == START_WORK_ACTION:
                self._send("startWork/issue/action", action=state.action)
                result = yield from get_steps(
                    self.container,
                    {
                        "command": "branch",
                        "state": {
                            "subcommand": "create",
                            "repo": None,
                            "name": self.suggest_branch_name(state.item),
                            "suggest_name_only": True,
                        },
                    },
                    self.picked_via,
                )
                if result is StepResultBreak:
                    cancel_steps(state)

            end_steps(state)

        return StepResultBreak if state.counter < 0 else None

    # ── Connect ──────────────────────────────────────────────────────────

    def confirm_local_integration_connect_step(self, state, context):
        confirmations = []
        for integration_id in self.supported_integrations:
            if context.connected_integrations.get(integration_id):
                continue
            name = integration_name(integration_id)
            confirmations.append(QuickPickItem(
                f"Connect to {name}...",
                detail=f"Will connect to {name} to provide access to your issues",
                item=integration_id,
            ))

        step = self.create_confirm_step(
            f"{self.title} • Connect an Integration",
            confirmations,
            DirectiveItem(Directive.CANCEL, "Cancel"),
            placeholder="Connect an integration to view their issues in Start Work",
            ignore_focus_out=False,
        )

        # The prompt must stay up while the connect round trip runs.
        freeze = None

        def on_did_activate(handle):
            nonlocal freeze
            freeze = lambda: freeze_step(step, handle)  # noqa: E731

        step.on_did_activate = on_did_activate

        selection = yield step
        if not can_pick_step_continue(step, state, selection):
            return StepResultBreak

        resume = freeze()
        try:
            connected = yield self.ensure_integration_connected(selection[0].item)
            if connected:
                yield from self.refresh_connected_integrations(context)
        finally:
            resume.dispose()
        return connected

    def refresh_connected_integrations(self, context):
        context.connected_integrations = yield self.container.start_work.get_connected_integrations()

    async def ensure_integration_connected(self, integration_id):
        try:
            integration = self.container.integrations.get(integration_id)
            connected = integration.maybe_connected
            if connected is None:
                connected = await integration.is_connected()
            if not connected:
                connected = await integration.connect("startWork")
        except Exception as exc:
            log.warning("could not connect %s: %s", integration_id, exc)
            print(f"  {RED}❌ Could not connect {integration_name(integration_id)}: {exc}{RESET}")
            connected = False
        return connected

    def confirm_cloud_integrations_connect_step(self, state, context):
        additional = "Additional " if context.has_connected_integrations() else ""
        step = self.create_confirm_step(
            f"{self.title} • Connect an {additional}Integration",
            [
                QuickPickItem(
                    f"Connect an {additional}Integration...",
                    detail=(
                        "Connect additional integrations to view their issues in Start Work"
                        if additional
                        else "Connect an integration to accelerate your work"
                    ),
                    item=True,
                    picked=True,
                ),
            ],
            DirectiveItem(Directive.CANCEL, "Cancel"),
            placeholder=(
                "Connect additional integrations to Start Work"
                if additional
                else "Connect an integration to get started with Start Work"
            ),
            ignore_focus_out=True,
        )

        freeze = None
        quickpick = None

        def on_did_activate(handle):
            nonlocal freeze, quickpick
            quickpick = handle
            freeze = lambda: freeze_step(step, handle)  # noqa: E731

        step.on_did_activate = on_did_activate

        selection = yield step
        if not can_pick_step_continue(step, state, selection):
            return StepResultBreak

        previous_placeholder = quickpick.placeholder
        resume = freeze()
        try:
            quickpick.ignore_focus_out = True
            quickpick.placeholder = "Connecting integrations..."
            connected = yield self.container.integrations.connect_cloud_integrations(
                self.supported_integrations, "startWork",
            )
            if connected:
                yield from self.refresh_connected_integrations(context)
        finally:
            quickpick.placeholder = previous_placeholder
            resume.dispose()
        return connected

    # ── Items ────────────────────────────────────────────────────────────

    async def update_context_items(self, context):
        try:
            issues = await self.container.integrations.get_my_issues(self.supported_integrations)
        except Exception as exc:
            log.warning("fetching issues failed: %s", exc)
            issues = None
        context.result = [WorkItem(i) for i in issues or []]

    def pick_issue_step(self, state, context):
        def build_issue_item(work_item):
            issue = work_item.issue
            return QuickPickItem(
                truncate(issue.title, LABEL_WIDTH),
                description=issue.ref(),
                detail=f"{from_now(issue.updated_date)} by @{issue.author.name}",
                item=work_item,
                icon=issue.author.avatar_url,
                buttons=[StartWorkButton, OpenOnRemoteButton],
            )

        if context.result:
            placeholder = "Choose an item to focus on"
            items = [build_issue_item(i) for i in context.result]
        else:
            placeholder = "No issues found. Start work anyway."
            items = [DirectiveItem(Directive.CANCEL, "Start Work")]

        def on_did_click_item_button(_quickpick, button, picked):
            if button is StartWorkButton:
                self.start_work(state, picked.item)
                return True
            if button is OpenOnRemoteButton:
                open_in_browser(picked.item.issue.url)
            return False

        step = create_pick_step(
            context.title,
            items,
            placeholder,
            match_on_description=True,
            match_on_detail=True,
            on_did_click_item_button=on_did_click_item_button,
        )

        selection = yield step
        if not can_pick_step_continue(step, state, selection):
            return StepResultBreak
        return selection[0].item

    def confirm_step(self, state, context):
        issue = state.item.issue
        confirmations = [
            Separator(from_now(issue.updated_date)),
            QuickPickItem(
                issue.title,
                description=issue.ref(),
                detail=issue.body or "",
                item=START_WORK_ACTION,
                icon=issue.author.avatar_url,
                buttons=[StartWorkButton],
            ),
            DirectiveItem(Directive.NOOP, ""),
            Separator("Actions"),
            QuickPickItem(
                "Start Work...",
                detail="Will start working on this issue",
                item=START_WORK_ACTION,
                picked=True,
            ),
        ]

        def on_did_click_item_button(_quickpick, button, picked):
            if button is StartWorkButton:
                if isinstance(picked, DirectiveItem):
                    return False
                self.start_work(state)
                return True
            return False

        step = self.create_confirm_step(
            f"Issue {issue.ref()}",
            confirmations,
            placeholder="Choose an action to perform",
            on_did_click_item_button=on_did_click_item_button,
        )

        selection = yield step
        if can_pick_step_continue(step, state, selection):
            return selection[0].item
        return StepResultBreak

    # ── Actions ──────────────────────────────────────────────────────────

    def start_work(self, state, item=None):
        state.action = START_WORK_ACTION
        if item is not None:
            state.item = item

    def suggest_branch_name(self, item):
        name = f"{item.issue.id}-{item.issue.title}"
        if self.container.config["slugify_branch_names"]:
            return slugify(name)
        return name


def open_in_browser(url):
    if url:
        webbrowser.open(url)
