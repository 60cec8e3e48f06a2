"""
Command line entry point for CFP to Trello.
Imports a Conference-Hall export into Trello deliberation boards, or publishes
the deliberation back to Conference-Hall.
"""

import argparse
import logging
import sys
import threading
from pathlib import Path
from typing import Optional

from .auth import TrelloAuthorizer
from .cfp_loader import load_event
from .conference_hall import ConferenceHallClient
from .config import AppConfig, load_config
from .dashboard import create_app, run_dashboard
from .errors import CFPTrelloError
from .geo import GeoLocator
from .importer import ImportOrchestrator
from .progress import ProgressLog
from .publisher import Publication, publish
from .trello_client import TrelloClient

logger = logging.getLogger(__name__)


LOG_FILE_NAME = "cfp-to-trello.log"

# Chatty in debug mode, and they log request bodies holding OAuth tokens
QUIET_LOGGERS = ("urllib3", "requests_oauthlib", "oauthlib", "werkzeug")


def setup_logging(log_dir: str, debug: bool = False) -> Path:
    """Log everything to a file in log_dir and progress messages to the console.

    Calling it again replaces the handlers it installed. Returns the log file path.
    """
    log_file = Path(log_dir) / LOG_FILE_NAME
    log_file.parent.mkdir(parents=True, exist_ok=True)
    level = logging.DEBUG if debug else logging.INFO

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
    ))
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s" if debug else "%(message)s"))

    root_logger = logging.getLogger()
    for handler in [h for h in root_logger.handlers if getattr(h, "_cfp_to_trello", False)]:
        root_logger.removeHandler(handler)
        handler.close()
    for handler in (file_handler, console_handler):
        handler._cfp_to_trello = True
        handler.setLevel(level)
        root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return log_file


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cfp-to-trello",
        description="Import a Conference-Hall CFP into Trello deliberation boards.",
    )
    parser.add_argument("action", choices=["import", "accept", "reject"],
                        help="import the CFP in Trello, or accept/reject the deliberated talks")
    parser.add_argument("--org", help="Trello organization name (default: TRELLO_ORGANIZATION)")
    parser.add_argument("--json", dest="json_path", help="path to the CFP export (default: CFP_EXPORT_PATH)")
    parser.add_argument("--event-id", help="Conference-Hall event ID (default: CFP_EVENT_ID)")
    parser.add_argument("--dry-run", action="store_true",
                        help="don't publish proposals, only log the requests")
    parser.add_argument("--dashboard", action="store_true",
                        help="serve import progress on DASHBOARD_HOST:DASHBOARD_PORT")
    return parser


def apply_arguments(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """Command line arguments take precedence over the environment."""
    if args.org:
        config.importer.organization = args.org
    if args.json_path:
        config.conference_hall.export_path = args.json_path
    if args.event_id:
        config.conference_hall.event_id = args.event_id
    if args.dry_run:
        config.conference_hall.dry_run = True
    return config


def run_import(config: AppConfig, with_dashboard: bool = False) -> int:
    """Load the CFP export and build the deliberation boards."""
    locate = GeoLocator(config.geo)
    event = load_event(config.conference_hall.export_path, locate, config.conference_hall.timezone)

    progress = ProgressLog()
    orchestrator = ImportOrchestrator(
        authorizer=TrelloAuthorizer(config.trello),
        client_factory=lambda credentials: TrelloClient(config.trello, credentials),
        progress=progress,
        cfp_url=config.conference_hall.base_url,
        event_id=config.conference_hall.event_id,
        board_name_prefix=config.importer.board_name_prefix,
        visibility=config.importer.visibility,
        formats=config.importer.formats,
    )

    if with_dashboard:
        app = create_app(progress, orchestrator.created_boards)
        dashboard_thread = threading.Thread(
            target=run_dashboard,
            args=(app, config.dashboard_host, config.dashboard_port),
            daemon=True,
        )
        dashboard_thread.start()

    result = orchestrator.run(config.importer.organization, event)
    for board in result.boards:
        logger.info(f"  {board.name}: {board.url}")
    return 0


def run_publish(config: AppConfig, publication: Publication) -> int:
    """Accept or reject on Conference-Hall the talks deliberated in Trello."""
    credentials = TrelloAuthorizer(config.trello).authorize()
    trello_client = TrelloClient(config.trello, credentials)
    cfp_client = ConferenceHallClient(config.conference_hall)

    published = publish(
        config.importer.organization,
        cfp_client,
        trello_client,
        publication,
        config.importer.board_name_prefix,
    )
    logger.info(f"{len(published)} talks {publication.value}ed")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    # Load configuration
    config = apply_arguments(load_config(), args)

    # Setup logging
    setup_logging(config.log_dir, config.debug_mode)

    # Validate configuration
    errors = config.validate_import() if args.action == "import" else config.validate_publish()
    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        return 1

    try:
        if args.action == "import":
            return run_import(config, args.dashboard)
        return run_publish(config, Publication(args.action))
    except CFPTrelloError as e:
        logger.error(f"{args.action.capitalize()} failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 1


if __name__ == "__main__":
    sys.exit(main())
