"""
ui — Terminal UI primitives for the Start Work CLI.

Colours, screen helpers, and line prompts shared by the quick-pick host.
"""

# ── Colour constants ─────────────────────────────────────────────────────

CYAN    = "\033[36m"
BOLD    = "\033[1m"
DIM     = "\033[2m"
GREEN   = "\033[32m"
YELLOW  = "\033[33m"
RED     = "\033[31m"
RESET   = "\033[0m"
CLEAR   = "\033[2J\033[H"

BACK = "__BACK__"
QUIT = "__QUIT__"


# ── Screen helpers ───────────────────────────────────────────────────────

def clear():
    print(CLEAR, end="")


def banner():
    print(f"""
{BOLD}{CYAN}  ┌──────────────────────────────────────────────┐
    │              🚀  Start Work CLI               │
    │        Pick an issue · create a branch        │
  └──────────────────────────────────────────────┘{RESET}
""")


def nav_hint(extra=""):
    parts = [f"{DIM}↩ enter = confirm", "b = back", f"q = quit{RESET}"]
    if extra:
        parts.insert(0, extra)
    print(f"  {' · '.join(parts)}\n")


def truncate(text, width):
    """Cut ``text`` to ``width`` characters, marking the cut with '...'."""
    return f"{text[:width]}..." if len(text) > width else text


# ── Input primitives ─────────────────────────────────────────────────────

def prompt(text, default=None):
    """Prompt for text input. Returns BACK on 'b', QUIT on 'q'."""
    suffix = f" {DIM}[{default}]{RESET}" if default else ""
    try:
        raw = input(f"  {CYAN}▸{RESET} {text}{suffix}: ").strip()
    except (EOFError, KeyboardInterrupt):
        return QUIT
    if raw.lower() == "q":
        return QUIT
    if raw.lower() == "b":
        return BACK
    return raw if raw else default
