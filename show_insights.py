#!/usr/bin/env python3
"""
Print the insight groups of an app.

Usage:
    python show_insights.py <app-id>               # List groups and their insights
    python show_insights.py <app-id> <group-id>    # Show a single group
    python show_insights.py <app-id> --debug       # Verbose logging

Reads TELEMETRY_API_URL and TELEMETRY_API_TOKEN from the environment.
"""

import asyncio
import sys
from pathlib import Path
from uuid import UUID

# Add project to path
sys.path.insert(0, str(Path(__file__).parent))

from settings.logging import setup_logging
from telemetry_client.insights import InsightGroup
from viewer.container import Container


def print_group(group: InsightGroup, selected: bool) -> None:
    marker = "*" if selected else " "
    print(f"{marker} {group.title} ({group.id})")
    for insight in group.insights:
        print(f"    - {insight.title} [{insight.display_mode}]")


async def show(app_id: UUID, group_id: UUID | None) -> bool:
    async with Container() as container:
        service = container.insights
        result = await service.fetch_insight_groups(app_id)
        if not result.ok:
            print(f"\nCould not load insight groups: {result.error}\n")
            return False

        if group_id is not None:
            group = service.insight_group(group_id, app_id)
            if group is None:
                print(f"\nNo insight group {group_id} in app {app_id}\n")
                return False
            print_group(group, selected=True)
            return True

        groups = service.insight_groups(app_id) or []
        if not groups:
            print("\nNo insight groups.\n")
        for group in groups:
            print_group(group, selected=group.id == service.selected_group_id)
        return True


def main():
    args = sys.argv[1:]
    debug = "--debug" in args
    args = [a for a in args if a != "--debug"]

    setup_logging(level="DEBUG" if debug else "WARNING")

    try:
        ids = [UUID(a) for a in args]
    except ValueError:
        ids = []
    if len(ids) not in (1, 2):
        print(__doc__)
        sys.exit(1)

    ok = asyncio.run(show(ids[0], ids[1] if len(ids) == 2 else None))
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
