import argparse
import logging
import os
import sys
from collections.abc import Mapping
from pathlib import Path

from flood_alert.adapters.sqlite.migrator import SQLiteMigrator
from flood_alert.adapters.sqlite_db import SQLiteSubscriberRepo, SQLiteTideRepo
from flood_alert.adapters.station_time import StationTimeAdapter
from flood_alert.app_shell.config import (
    build_alert_config,
    build_email_sender,
    build_tide_client,
    resolve_db_path,
    validate_ops_rules,
)
from flood_alert.components.notify import NotifyInput, run_notification_cycle
from flood_alert.components.tides import RefreshInput, run_refresh
from flood_alert.core.ports.db import StoreError
from flood_alert.rules.loader import load_rules
from flood_alert.rules.models import Rules

logger = logging.getLogger("cli")

RULES_PATH = "rules.yaml"


def get_rules(environ: Mapping[str, str]) -> Rules:
    rules_path = Path(environ.get("FLOOD_ALERT_RULES", RULES_PATH))
    if not rules_path.exists():
        logger.error("Rules file %s not found.", rules_path)
        sys.exit(1)
    return load_rules(rules_path)


def migrate(rules: Rules, environ: Mapping[str, str]) -> str:
    """Apply pending migrations; returns the database path."""
    db_path = resolve_db_path(rules, environ)
    SQLiteMigrator(db_path).run_migrations()
    return db_path


def handle_migrate(rules: Rules, environ: Mapping[str, str]) -> int:
    db_path = migrate(rules, environ)
    logger.info("Database ready at %s", db_path)
    return 0


def handle_sync(rules: Rules, environ: Mapping[str, str]) -> int:
    db_path = migrate(rules, environ)
    time = StationTimeAdapter()
    client = build_tide_client(rules)

    try:
        result = run_refresh(
            RefreshInput(window_start=time.now_local().date(), station_id=rules.tides.station_id),
            client=client,
            repo=SQLiteTideRepo(db_path),
        )
    finally:
        client.close()

    if not result.success:
        for error in result.errors:
            logger.error("Sync failed [%s]: %s", error.code, error.message)
        return 1
    return 0


def handle_notify(rules: Rules, environ: Mapping[str, str]) -> int:
    validate_ops_rules(rules, environ)
    config = build_alert_config(rules, environ)
    db_path = migrate(rules, environ)
    time = StationTimeAdapter()
    subscribers = SQLiteSubscriberRepo(db_path)

    try:
        report = run_notification_cycle(
            NotifyInput(now_local=time.now_local()),
            recipients=subscribers,
            tides=SQLiteTideRepo(db_path),
            email_sender=build_email_sender(rules, environ, config),
            config=config,
        )
    except StoreError as e:
        logger.error("Notification cycle aborted: %s", e)
        return 1

    if not report.success:
        logger.error(
            "%d of %d notifications failed: %s",
            report.failed_count,
            report.failed_count + report.sent_count,
            ", ".join(report.failed_recipients),
        )
        return 1
    return 0


def handle_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("flood_alert.api.main:app", host=args.host, port=args.port)
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Bike Path Flood Alert CLI")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("migrate", help="Apply database migrations")
    subparsers.add_parser("sync", help="Refresh the tide prediction archive")
    subparsers.add_parser("notify", help="Email flood alerts to active subscribers")

    serve_parser = subparsers.add_parser("serve", help="Run the web server")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=3000)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        sys.exit(handle_serve(args))

    environ = os.environ
    rules = get_rules(environ)

    try:
        if args.command == "migrate":
            code = handle_migrate(rules, environ)
        elif args.command == "sync":
            code = handle_sync(rules, environ)
        else:
            code = handle_notify(rules, environ)
    except (RuntimeError, ValueError) as e:
        logger.error("%s failed: %s", args.command, e)
        code = 1

    sys.exit(code)


if __name__ == "__main__":
    main()
