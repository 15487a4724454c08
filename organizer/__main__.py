"""Entry point: python -m organizer remind [--once]

- "remind":        Run the periodic incomplete-task reminder until interrupted
- "remind --once": Send a single reminder pass and exit
"""

import asyncio
import logging
import signal
import sys

from organizer.config import get_settings


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
    )


async def _remind(once: bool) -> int:
    from organizer.orchestrator import create_app_components

    settings = get_settings()
    app = create_app_components(settings)
    await app.load()
    scheduler = app.create_scheduler(reload=True)

    if once:
        await scheduler.run_once()
        return 0

    if not settings.reminders.enabled:
        logging.getLogger(__name__).warning("Reminders are disabled in settings.")
        return 0

    shutdown_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, shutdown_event.set)
        except NotImplementedError:
            pass  # Windows: fall back to KeyboardInterrupt

    await scheduler.start(shutdown_event)
    return 0


def main() -> None:
    args = sys.argv[1:]
    cmd = args[0] if args else "remind"

    if cmd != "remind":
        print(f"Unknown command: {cmd}")
        print("Usage: python -m organizer remind [--once]")
        sys.exit(1)

    _setup_logging(get_settings().app.log_level)

    try:
        sys.exit(asyncio.run(_remind(once="--once" in args[1:])))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
