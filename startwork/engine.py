"""
engine — Quick-command engine: drives step generators to completion.

A flow is a generator that yields either

  * a Step (pick / confirm / input): the host shows it and the user's
    selection is sent back in, or
  * an awaitable: the driver awaits it and sends the result back in (or
    throws the exception back in at the same ``yield``).

Sub-flows are delegated with ``yield from`` and every caller checks the
returned value against ``StepResultBreak`` right away.
"""

import inspect
import logging

from .steps import create_confirm_step


log = logging.getLogger(__name__)


async def run_steps(steps, host):
    """Drive ``steps`` against ``host`` until the generator returns.

    ``host.show(step)`` is synchronous: the terminal host blocks on
    ``input()`` and the event loop sits idle until the user answers. Work
    that must run in the background (repository discovery) is awaited by the
    flow before its first step, and every other awaitable runs between
    prompts.
    """
    send = None
    throw = None
    while True:
        try:
            if throw is not None:
                out = steps.throw(throw)
            else:
                out = steps.send(send)
        except StopIteration as stop:
            return stop.value
        send = throw = None

        if inspect.isawaitable(out):
            try:
                send = await out
            except Exception as exc:  # handed back to the routine that awaited it
                log.debug("awaited operation failed: %r", exc)
                throw = exc
        else:
            send = host.show(out)


# ═════════════════════════════════════════════════════════════════════════════
# QUICK COMMAND
# ═════════════════════════════════════════════════════════════════════════════

class QuickCommand:
    """A named multi-step flow. Subclasses implement ``steps(state)``."""

    state_class = None

    def __init__(self, container, key, label, title, description=None):
        self.container = container
        self.key = key
        self.label = label
        self.title = title
        self.description = description
        self.initial_state = None
        self.picked_via = None

    def __repr__(self):
        return f"{type(self).__name__}({self.key!r})"

    def create_state(self):
        return self.state_class(**(self.initial_state or {}))

    def can_steps_continue(self, state):
        return not state.ended and state.counter >= state.starting_step

    def confirm(self, override=None):
        if override is not None:
            return override
        return self.key not in self.container.config["skip_confirmations"]

    def create_confirm_step(self, title, confirmations, cancel=None, placeholder=None, **options):
        return create_confirm_step(title, confirmations, cancel, placeholder, **options)

    def steps(self, state):
        raise NotImplementedError

    async def run(self, host):
        state = self.create_state()
        log.debug("running %s with %r", self.key, state)
        return await run_steps(self.steps(state), host)


# ── Sub-flows ────────────────────────────────────────────────────────────

def _command_classes():
    from .branch import BranchCommand
    from .start_work import StartWorkCommand
    return {
        "branch": BranchCommand,
        "startWork": StartWorkCommand,
    }


def create_command(container, args):
    commands = _command_classes()
    try:
        cls = commands[args["command"]]
    except KeyError:
        raise ValueError(f"Unknown command: {args.get('command')!r}") from None
    return cls(container, args)


def get_steps(container, args, picked_via=None):
    """Run another command inline, pre-seeded with ``args['state']``."""
    command = create_command(container, args)
    command.picked_via = picked_via
    state = command.create_state()
    log.debug("handing off to %s via %s", command.key, picked_via)
    result = yield from command.steps(state)
    return result
