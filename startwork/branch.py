"""
branch — `branch create` flow: repository → base → name → confirm → git.
"""

import logging

from .engine import QuickCommand
from .errors import GitError
from .steps import (
    QuickPickItem, StepResultBreak, StepState,
    can_input_step_continue, can_pick_step_continue,
    create_input_step, create_pick_step, end_steps,
)
from .ui import GREEN, RED, RESET


log = logging.getLogger(__name__)

SWITCH = "--switch"


class BranchCreateState(StepState):
    def __init__(self, subcommand="create", repo=None, reference=None, name=None,
                 suggest_name_only=False, flags=None, **kwargs):
        super().__init__(**kwargs)
        self.subcommand = subcommand
        self.repo = repo
        self.reference = reference
        self.name = name
        self.suggest_name_only = suggest_name_only
        self.flags = flags


class BranchCommand(QuickCommand):
    state_class = BranchCreateState

    def __init__(self, container, args=None):
        super().__init__(container, "branch", "branch", "Create Branch",
                         description="Create a new branch")
        args = args or {}
        self.initial_state = {"counter": 0, **(args.get("state") or {})}

    def steps(self, state):
        if state.subcommand != "create":
            raise ValueError(f"Unsupported branch subcommand: {state.subcommand!r}")

        git = self.container.git
        discovering = git.is_discovering_repositories
        if discovering is not None:
            yield discovering

        while self.can_steps_continue(state):
            if state.repo is None:
                repos = git.repositories
                if len(repos) == 1:
                    state.repo = repos[0]
                else:
                    result = yield from self.pick_repository_step(state, repos)
                    if result is StepResultBreak:
                        continue
                    state.repo = result

            if state.reference is None:
                if state.suggest_name_only:
                    state.reference = yield git.current_branch(state.repo)
                else:
                    result = yield from self.pick_reference_step(state)
                    if result is StepResultBreak:
                        state.repo = None
                        continue
                    state.reference = result

            result = yield from self.input_name_step(state)
            if result is StepResultBreak:
                if state.suggest_name_only:
                    break
                state.reference = None
                continue
            state.name = result

            if state.flags is None:
                if self.confirm(state.confirm):
                    result = yield from self.confirm_step(state)
                    if result is StepResultBreak:
                        continue
                    state.flags = result
                else:
                    state.flags = [SWITCH]

            try:
                yield git.create_branch(state.repo, state.name, state.reference, switch=SWITCH in state.flags)
            except GitError as exc:
                log.warning("branch create failed: %s", exc)
                print(f"  {RED}❌ {exc.stderr or exc}{RESET}")
            else:
                verb = "Switched to new" if SWITCH in state.flags else "Created"
                print(f"  {GREEN}✅ {verb} branch {state.name}{RESET}")

            end_steps(state)

        return StepResultBreak if state.counter < 0 else None

    # ── Steps ────────────────────────────────────────────────────────────

    def pick_repository_step(self, state, repos):
        if not repos:
            step = self.create_confirm_step(
                f"{self.title} • No Repositories Found",
                [],
                placeholder="Open a terminal inside a git repository and try again",
            )
        else:
            step = create_pick_step(
                f"{self.title} • Choose a Repository",
                [QuickPickItem(r.name, description=r.path, item=r) for r in repos],
                "Choose a repository",
                match_on_description=True,
            )
        selection = yield step
        if not can_pick_step_continue(step, state, selection):
            return StepResultBreak
        return selection[0].item

    def pick_reference_step(self, state):
        branches = yield self.container.git.branches(state.repo)
        current = yield self.container.git.current_branch(state.repo)
        step = create_pick_step(
            f"{self.title} • Choose a Base Branch",
            [QuickPickItem(b, item=b, picked=b == current) for b in branches],
            "Choose a base to create the new branch from",
        )
        selection = yield step
        if not can_pick_step_continue(step, state, selection):
            return StepResultBreak
        return selection[0].item

    def input_name_step(self, state):
        placeholder = (
            f"Based on {state.reference}; edit the suggested name"
            if state.suggest_name_only
            else f"Based on {state.reference}"
        )
        step = create_input_step(
            f"{self.title} • {state.repo.name}",
            "Branch name",
            value=state.name,
            placeholder=placeholder,
            validate=self.container.git.validate_branch_name,
        )
        value = yield step
        if not can_input_step_continue(step, state, value):
            return StepResultBreak
        return value

    def confirm_step(self, state):
        step = self.create_confirm_step(
            f"Confirm {self.title} • {state.name}",
            [
                QuickPickItem(
                    "Create & Switch to Branch",
                    detail=f"Will create and switch to {state.name} from {state.reference}",
                    item=[SWITCH],
                    picked=True,
                ),
                QuickPickItem(
                    "Create Branch",
                    detail=f"Will create {state.name} from {state.reference}",
                    item=[],
                ),
            ],
            placeholder="Choose how to create the branch",
        )
        selection = yield step
        if can_pick_step_continue(step, state, selection):
            return selection[0].item
        return StepResultBreak
