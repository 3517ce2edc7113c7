"""
views — Read-only view screens (integration status).
"""

from .errors import IntegrationError
from .integrations import integration_name
from .ui import BOLD, DIM, GREEN, RED, RESET, clear, banner, prompt


async def integration_statuses(container):
    """[(id, name, connected, supported)] for every known integration."""
    supported = set(container.start_work.supported)
    rows = []
    for integration_id in container.integrations.ids():
        integration = container.integrations.get(integration_id)
        try:
            connected = await integration.is_connected()
        except IntegrationError:
            connected = False
        rows.append((integration_id, integration_name(integration_id), connected,
                     integration_id in supported))
    return rows


async def view_integrations(container, interactive=True):
    if interactive:
        clear()
        banner()
    print(f"  {BOLD}🔌 Integrations{RESET}\n")
    for integration_id, name, connected, supported in await integration_statuses(container):
        state = f"{GREEN}● connected{RESET}" if connected else f"{RED}● not connected{RESET}"
        note = "" if supported else f"  {DIM}(not enabled for Start Work){RESET}"
        print(f"    {BOLD}{name:10s}{RESET} {state}  {DIM}{integration_id}{RESET}{note}")
    print()
    if interactive:
        prompt("Press enter to return")
