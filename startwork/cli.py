"""
cli — Argparse entry point and interactive main menu.
"""

import argparse
import asyncio
import re
import sys
import textwrap

from . import gh
from .container import Container
from .engine import create_command
from .errors import IntegrationError, StartWorkError
from .integrations import integration_name
from .issues import WorkItem
from .log import setup_logging
from .quickpick import TerminalQuickPick
from .ui import (
    BOLD, CYAN, DIM, GREEN, RED, RESET,
    QUIT, clear, banner, prompt,
)
from .views import view_integrations


_ISSUE_REF_RE = re.compile(r"^(?P<repo>[\w.-]+/[\w.-]+)#(?P<number>\d+)$")


# ═════════════════════════════════════════════════════════════════════════════
# COMMANDS
# ═════════════════════════════════════════════════════════════════════════════

async def start_work(container, source=None, issue_ref=None, confirm=None, host=None):
    """Run the Start Work wizard. Returns True unless the user backed out."""
    container.git.start_discovery()
    state = {}
    if confirm is not None:
        state["confirm"] = confirm
    if issue_ref:
        item = await asyncio.to_thread(_fetch_issue_ref, issue_ref)
        state.update(item=item, counter=1)

    command = create_command(container, {"command": "startWork", "source": source, "state": state})
    result = await command.run(host or TerminalQuickPick())
    return result is None


def _fetch_issue_ref(issue_ref):
    m = _ISSUE_REF_RE.match(issue_ref.strip())
    if not m:
        raise ValueError(f"Expected OWNER/REPO#NUMBER, got {issue_ref!r}")
    return WorkItem(gh.fetch_issue_detail(m.group("repo"), int(m.group("number"))))


async def connect_integration(container, integration_id):
    integration = container.integrations.get(integration_id)
    name = integration_name(integration_id)
    if await integration.is_connected():
        print(f"  {GREEN}✅ {name} is already connected{RESET}")
        return True
    print(f"  ⏳ Connecting to {name}...")
    connected = await integration.connect("cli")
    if connected:
        print(f"  {GREEN}✅ Connected to {name}{RESET}")
    else:
        print(f"  {RED}❌ Could not connect to {name}{RESET}")
    return connected


# ═════════════════════════════════════════════════════════════════════════════
# MAIN MENU
# ═════════════════════════════════════════════════════════════════════════════

def main_menu(container):
    """Top-level interactive menu loop."""
    while True:
        clear()
        banner()
        print(f"  {BOLD}What would you like to do?{RESET}\n")
        print(f"    {CYAN}1{RESET}  🚀 Start work on an issue")
        print(f"    {CYAN}2{RESET}  🔌 View integrations")
        print(f"    {CYAN}3{RESET}  🔑 Connect an integration")
        print(f"    {CYAN}q{RESET}  Quit")
        print()

        choice = prompt("Choose")
        if choice in (QUIT, None, "q"):
            print(f"\n  {DIM}Goodbye!{RESET}\n")
            return
        elif choice == "1":
            asyncio.run(start_work(container, source="menu"))
            prompt("Press enter to return to menu")
        elif choice == "2":
            asyncio.run(view_integrations(container))
        elif choice == "3":
            raw = prompt(f"Integration ({', '.join(container.integrations.ids())})")
            if raw in container.integrations.ids():
                try:
                    asyncio.run(connect_integration(container, raw))
                except IntegrationError as exc:
                    print(f"  {RED}❌ {exc}{RESET}")
                prompt("Press enter to return to menu")


# ═════════════════════════════════════════════════════════════════════════════
# MAIN
# ═════════════════════════════════════════════════════════════════════════════

def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="startwork",
        description="Pick an issue assigned to you and start a branch for it.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            Run without arguments for the interactive menu.

            Examples:
              startwork start
              startwork start --issue acme/app#42 --no-confirm
              startwork integrations
              startwork connect github
        """),
    )
    parser.add_argument("--log-level", help="debug, info, warning, error")
    sub = parser.add_subparsers(dest="command")

    p_start = sub.add_parser("start", help="Start work on an issue")
    p_start.add_argument("--source", default="cli")
    p_start.add_argument("--issue", metavar="OWNER/REPO#N", help="Skip the picker and use this issue")
    p_start.add_argument("--no-confirm", dest="confirm", action="store_false", default=None,
                         help="Skip confirmation steps")

    sub.add_parser("integrations", help="Show integration connection status")

    p_connect = sub.add_parser("connect", help="Connect an integration")
    p_connect.add_argument("integration")

    args = parser.parse_args(argv)
    setup_logging(args.log_level)
    container = Container()

    try:
        if args.command == "start":
            ok = asyncio.run(start_work(container, args.source, args.issue, args.confirm))
            return 0 if ok else 1
        elif args.command == "integrations":
            asyncio.run(view_integrations(container, interactive=False))
        elif args.command == "connect":
            ok = asyncio.run(connect_integration(container, args.integration))
            return 0 if ok else 1
        else:
            main_menu(container)
    except (StartWorkError, ValueError) as exc:
        print(f"{RED}❌ {exc}{RESET}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print(f"\n  {DIM}Cancelled.{RESET}\n")
        return 130
    return 0
