from __future__ import annotations

import argparse
import curses
import logging
import sys
from pathlib import Path
from typing import Any

from pewcraft_client.api.client import HttpSessionClient, RemoteSessionError
from pewcraft_client.api.models import GameDefinition
from pewcraft_client.catalog import CatalogLoadError, load_catalog_file, validate_catalog
from pewcraft_client.config import ClientSettings, load_dotenv_for_client, settings_from_env
from pewcraft_client.core.context import RootContext
from pewcraft_client.core.machine import start
from pewcraft_client.game_loop import Workflow, run_session
from pewcraft_client.tui.input import CursesEventSource
from pewcraft_client.tui.render import CursesPresenter

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Set up and join a pewcraft game from the terminal.")
    parser.add_argument("--url", type=str, help="Backend URL (overrides PEWCRAFT_API_URL).")
    parser.add_argument("--catalog", type=Path, help="Load the game catalog from a JSON file instead of the backend.")
    parser.add_argument(
        "--join",
        dest="offer_join",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Start on the create/join menu (default from PEWCRAFT_OFFER_JOIN).",
    )
    return parser


def _run(stdscr: Any, workflow: Workflow, catalog: GameDefinition, settings: ClientSettings) -> int:
    # Raw mode hands Ctrl-C and Ctrl-Q to get_wch instead of the tty driver, so they map to Exit.
    curses.raw()
    try:
        curses.curs_set(0)
    except curses.error:
        logger.debug("Terminal cannot hide the cursor")

    source = CursesEventSource(stdscr, poll_interval_ms=settings.poll_interval_ms)
    presenter = CursesPresenter(stdscr, catalog)
    return run_session(workflow, source, presenter)


def main(argv: list[str] | None = None) -> int:
    load_dotenv_for_client()
    args = build_parser().parse_args(argv)

    try:
        settings = settings_from_env()
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(
        filename=settings.log_file,
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    client = HttpSessionClient.from_url(args.url or settings.api_url, timeout=settings.http_timeout)
    try:
        try:
            catalog = load_catalog_file(args.catalog) if args.catalog else validate_catalog(client.load_catalog())
        except (CatalogLoadError, RemoteSessionError) as e:
            logger.error("Cannot load the game catalog: %s", e)
            print(f"Cannot load the game catalog: {e}", file=sys.stderr)
            return 1

        root = RootContext(catalog=catalog, client=client, team_size=settings.team_size)
        offer_join = settings.offer_join if args.offer_join is None else args.offer_join
        workflow = Workflow(start(root, offer_join=offer_join))

        try:
            curses.wrapper(_run, workflow, catalog, settings)
        except KeyboardInterrupt:
            logger.info("Session interrupted")
            return 130
        except Exception:
            # curses.wrapper has restored the terminal at this point.
            logger.exception("Fatal error in the session loop")
            print(f"Fatal error, details in {settings.log_file}", file=sys.stderr)
            return 1
    finally:
        client.close()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
