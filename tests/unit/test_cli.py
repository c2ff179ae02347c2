"""
CLI job tests: migrate, sync and notify exit codes.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from flood_alert.adapters.dev_email import DevEmailAdapter
from flood_alert.adapters.sqlite_db import SQLiteSubscriberRepo, SQLiteTideRepo
from flood_alert.adapters.station_time import StationTimeAdapter
from flood_alert.app_shell import cli
from flood_alert.components.tides import (
    TidePrediction,
    TideType,
    UpstreamFetchError,
    UpstreamPrediction,
    window_bounds,
)
from flood_alert.rules.loader import load_rules
from flood_alert.rules.models import Rules


class FakeTideClient:
    def __init__(self, predictions=None, fail: bool = False) -> None:
        self.predictions = predictions or []
        self.fail = fail
        self.closed = False

    def fetch_predictions(self, station_id, begin_date, end_date):
        if self.fail:
            raise UpstreamFetchError(station_id, "HTTP 503")
        return self.predictions

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def rules(rules_path: Path) -> Rules:
    return load_rules(rules_path)


@pytest.fixture
def environ(tmp_path: Path) -> dict[str, str]:
    return {"FLOOD_ALERT_DATA_DIR": str(tmp_path / "data"), "UNSUBSCRIBE_SECRET": "cli-secret"}


def db_file(environ: dict[str, str]) -> str:
    return str(Path(environ["FLOOD_ALERT_DATA_DIR"]) / "flood_alert.db")


def tomorrow_morning() -> datetime:
    today = StationTimeAdapter().now_local().date()
    return datetime.combine(today + timedelta(days=1), datetime.min.time()) + timedelta(hours=6)


def test_migrate_creates_database(rules, environ):
    assert cli.handle_migrate(rules, environ) == 0

    conn = sqlite3.connect(db_file(environ))
    names = {r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    conn.close()
    assert {"users", "tides", "_migrations"} <= names


def test_sync_success(rules, environ, monkeypatch):
    client = FakeTideClient([UpstreamPrediction(tomorrow_morning(), 7.0, TideType.HIGH)])
    monkeypatch.setattr(cli, "build_tide_client", lambda rules: client)

    assert cli.handle_sync(rules, environ) == 0
    assert client.closed

    today = StationTimeAdapter().now_local().date()
    rows = SQLiteTideRepo(db_file(environ)).list_between(*window_bounds(today, 30))
    assert [r.height_ft for r in rows] == [7.0]


def test_sync_failure_exits_nonzero(rules, environ, monkeypatch):
    monkeypatch.setattr(cli, "build_tide_client", lambda rules: FakeTideClient(fail=True))

    assert cli.handle_sync(rules, environ) == 1


def seed(environ: dict[str, str], emails: list[str]) -> None:
    db_path = db_file(environ)
    subscribers = SQLiteSubscriberRepo(db_path)
    for email in emails:
        pending = subscribers.upsert_pending_signup(email)
        subscribers.verify(pending.verification_token)
    start = tomorrow_morning().replace(hour=0)
    SQLiteTideRepo(db_path).replace_window(
        start,
        start + timedelta(hours=23),
        [TidePrediction(tomorrow_morning(), 7.0, TideType.HIGH)],
    )


def test_notify_sends_to_active_subscribers(rules, environ, monkeypatch):
    sender = DevEmailAdapter()
    monkeypatch.setattr(cli, "build_email_sender", lambda rules, environ, config: sender)
    cli.handle_migrate(rules, environ)
    seed(environ, ["a@example.com", "b@example.com"])

    assert cli.handle_notify(rules, environ) == 0
    assert sorted(e.recipient for e in sender.sent_emails) == ["a@example.com", "b@example.com"]


def test_notify_partial_failure_exits_nonzero(rules, environ, monkeypatch):
    sender = DevEmailAdapter(failing_recipients={"a@example.com"})
    monkeypatch.setattr(cli, "build_email_sender", lambda rules, environ, config: sender)
    cli.handle_migrate(rules, environ)
    seed(environ, ["a@example.com", "b@example.com"])

    assert cli.handle_notify(rules, environ) == 1
    assert [e.recipient for e in sender.sent_emails] == ["b@example.com"]


def test_notify_requires_secret(rules, environ):
    del environ["UNSUBSCRIBE_SECRET"]

    with pytest.raises(SystemExit):
        cli.handle_notify(rules, environ)


def test_main_migrate(rules_path, environ, monkeypatch):
    monkeypatch.setenv("FLOOD_ALERT_RULES", str(rules_path))
    monkeypatch.setenv("FLOOD_ALERT_DATA_DIR", environ["FLOOD_ALERT_DATA_DIR"])

    with pytest.raises(SystemExit) as exc:
        cli.main(["migrate"])

    assert exc.value.code == 0
    assert Path(db_file(environ)).is_file()


def test_main_missing_rules(tmp_path, monkeypatch):
    monkeypatch.setenv("FLOOD_ALERT_RULES", str(tmp_path / "missing.yaml"))

    with pytest.raises(SystemExit) as exc:
        cli.main(["migrate"])

    assert exc.value.code == 1
