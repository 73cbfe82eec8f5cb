#!/usr/bin/env python3
"""Print the live device table of a Traccar-compatible server.

Polls devices and positions on the configured interval and redraws a plain
text table after every update. Optionally selects one device to show its
trail and resolved address.

Usage
-----
Set environment variables and run::

    export TRACCAR_BASE_URL="https://demo.traccar.org/api"
    export TRACCAR_EMAIL="you@example.com"
    export TRACCAR_PASSWORD="your-password"
    python scripts/watch_fleet.py

Options::

    --search TEXT       Only list devices whose name contains TEXT
    --select ID         Select device ID and show its address and trail
    --interval SECONDS  Poll interval (default: TRACCAR_POLL_INTERVAL or 30)
    --once              Poll once, print, and exit
    --verbose / -v      Enable debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from pyfleetview import FleetClient, FleetConfig, FleetError, FleetTracker
from pyfleetview.formatting import format_coordinates, format_datetime, format_time_ago
from pyfleetview.state.app_state import AppState
from pyfleetview.state.selection import compute_bounds


def _render(state: AppState, tracker: FleetTracker) -> str:
    out: list[str] = []
    out.append(f"── Devices ({len(state.filtered)}/{len(state.views)}) ── last refresh: {format_datetime(state.last_refresh)}")
    if state.error:
        out.append(f"  !! {state.error}")
    for view in state.filtered:
        marker = "*" if view.id == state.selected_id else " "
        out.append(
            f"{marker} {view.id:>6}  {view.name[:24]:<24}  {view.status.value:<7}  "
            f"{format_coordinates(view.latitude, view.longitude):<24}  {format_time_ago(view.last_update)}"
        )

    bounds = compute_bounds(state.filtered)
    if bounds is not None and state.selected is None:
        out.append(f"  bounds: {bounds[0]:.4f},{bounds[1]:.4f} → {bounds[2]:.4f},{bounds[3]:.4f}")

    selected = state.selected
    if selected is not None:
        out.append(f"── Selected: {selected.name} ({selected.status.value})")
        out.append(f"  coordinates : {format_coordinates(selected.latitude, selected.longitude)}")
        out.append(f"  address     : {selected.address or '…'}")
        out.append(f"  speed/course: {selected.speed:.1f} / {selected.course:.0f}")
        out.append(f"  last update : {format_datetime(selected.last_update)}")
        trail = tracker.get_trail(selected.id)
        out.append(f"  trail       : {len(trail)} point(s)")
    return "\n".join(out)


async def main() -> int:
    parser = argparse.ArgumentParser(description="Watch live device positions.")
    parser.add_argument("--search", default="", help="Only list devices whose name contains TEXT")
    parser.add_argument("--select", type=int, help="Select device ID and show its address and trail")
    parser.add_argument("--interval", type=float, help="Poll interval in seconds")
    parser.add_argument("--once", action="store_true", help="Poll once, print, and exit")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    overrides = {"poll_interval": args.interval} if args.interval else {}
    try:
        config = FleetConfig.from_env(**overrides)
        config.validate()
    except FleetError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    async with FleetClient(config) as client:
        if args.once:
            tracker = FleetTracker(client, poll_interval=config.poll_interval)
            tracker.set_search_term(args.search)
            await tracker.refresh()
            if args.select is not None:
                tracker.select(args.select)
                await tracker.resolve_selected_address()
            print(_render(tracker.state, tracker))
            await tracker.stop()
            return 1 if tracker.state.error else 0

        updates: asyncio.Queue[AppState] = asyncio.Queue()
        tracker = FleetTracker(client, poll_interval=config.poll_interval, on_update=updates.put_nowait)
        tracker.set_search_term(args.search)
        async with tracker:
            while True:
                state = await updates.get()
                if state.refreshing:
                    continue
                if args.select is not None and state.selected_id is None and state.views:
                    try:
                        tracker.select(args.select)
                    except KeyError:
                        print(f"Device {args.select} not found", file=sys.stderr)
                        args.select = None
                    continue
                print(_render(state, tracker), end="\n\n")


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        sys.exit(130)
