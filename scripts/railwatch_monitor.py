#!/usr/bin/env python3
"""Watch Railway deployments from the terminal.

Prints the status of every tracked service and keeps polling until
interrupted. The API token comes from the credential store or the
``RAILWAY_TOKEN`` environment variable; the project and services come from
the stored configuration or the command line.

Usage:
    python -m scripts.railwatch_monitor [--once] [--project ID --service ID ...]
"""

import argparse
import asyncio
import logging
import signal
from typing import List, Optional, Sequence

from railwatch.bootstrap import create_monitor
from railwatch.config import env_str
from railwatch.errors import StatusSourceError
from railwatch.formatting import status_line
from railwatch.logging_config import setup_logging
from railwatch.models import TrackedService, TransitionEvent
from railwatch.monitor import StatusMonitor
from railwatch.polling_engine_helpers import EngineObserver

logger = logging.getLogger(__name__)

TOKEN_ENV_VARIABLE = "RAILWAY_TOKEN"


class ConsoleObserver(EngineObserver):
    """Prints snapshots and transitions as they are published."""

    def on_snapshot(self, services: Sequence[TrackedService]) -> None:
        print_snapshot(services)

    def on_transition(self, event: TransitionEvent) -> None:
        duration = event.deployment_duration()
        suffix = f" in {duration}" if duration else ""
        print(f"{event.service_name}: {event.old_status.display_name} -> {event.new_status.display_name}{suffix}")

    def on_error(self, message: Optional[str]) -> None:
        if message:
            print(f"Error: {message}")


def print_snapshot(services: Sequence[TrackedService]) -> None:
    for service in services:
        print(status_line(service, elapsed=service.time_in_current_state()))


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Monitor Railway deployment status")
    parser.add_argument("--once", action="store_true", help="Refresh once, print the services and exit")
    parser.add_argument("--project", help="Railway project id to monitor (saved for later runs)")
    parser.add_argument("--project-name", help="Display name for the project")
    parser.add_argument("--environment", help="Environment id filter (resolved automatically when omitted)")
    parser.add_argument(
        "--service",
        action="append",
        default=[],
        dest="services",
        help="Service id to monitor; repeat for several services",
    )
    parser.add_argument("--log-file", action="store_true", help="Also write logs/railwatch.log")
    args = parser.parse_args(argv)
    if args.services and not args.project:
        parser.error("--service requires --project")
    if args.project and not args.services:
        parser.error("--project requires at least one --service")
    return args


async def resolve_token(monitor: StatusMonitor) -> Optional[str]:
    stored = await monitor.credentials.get()
    if stored:
        return stored
    return env_str(TOKEN_ENV_VARIABLE)


async def _wait_for_shutdown() -> None:
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, stop_event.set)
        except (NotImplementedError, RuntimeError):  # Not supported on this platform  # policy_guard: allow-silent-handler
            logger.debug("Signal handler for %s unavailable", signum)
    await stop_event.wait()


async def run(args: argparse.Namespace) -> int:
    monitor = create_monitor()
    if not args.once:
        monitor.subscribe(ConsoleObserver())
    try:
        await monitor.load()
        if args.project:
            token = await resolve_token(monitor)
            if not token:
                logger.error("No API token: set %s or store one first", TOKEN_ENV_VARIABLE)
                return 2
            await monitor.configure(
                token,
                args.project,
                args.project_name,
                args.environment,
                args.services,
            )
        elif not monitor.is_configured:
            token = env_str(TOKEN_ENV_VARIABLE)
            if not token or not monitor.config.is_configured:
                logger.error("Nothing to monitor: pass --project and --service")
                return 2
            await monitor.configure(
                token,
                monitor.config.project_id or "",
                monitor.config.project_name,
                monitor.config.environment_id,
                monitor.config.service_ids,
                monitor.config.service_names,
            )
        else:
            await monitor.refresh()
            if not args.once:
                monitor.start()

        if args.once:
            await monitor.stop()
            print_snapshot(monitor.services)
            if monitor.last_error:
                print(f"Error: {monitor.last_error}")
            return 1 if monitor.last_error else 0

        await _wait_for_shutdown()
        return 0
    except StatusSourceError as exc:
        logger.error("Railway API error: %s", exc)
        return 1
    finally:
        await monitor.close()


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging("railwatch" if args.log_file else None, user_friendly=True)
    return asyncio.run(run(args))


if __name__ == "__main__":
    raise SystemExit(main())
