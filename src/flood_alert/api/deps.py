import os
from functools import lru_cache
from pathlib import Path

from fastapi import Depends

from flood_alert.adapters.sqlite_db import SQLiteSubscriberRepo, SQLiteTideRepo
from flood_alert.adapters.station_time import StationTimeAdapter
from flood_alert.app_shell.config import (
    build_alert_config,
    build_email_sender,
    build_mailing_list,
    resolve_db_path,
)
from flood_alert.core.config import AlertConfig
from flood_alert.core.ports.email import EmailPort, MailingListPort
from flood_alert.core.ports.time import TimePort
from flood_alert.rules.loader import load_rules
from flood_alert.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.rules_path = Path(
            os.environ.get("FLOOD_ALERT_RULES", str(self.base_dir / "rules.yaml"))
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules / Config ---
@lru_cache
def get_rules() -> Rules:
    return load_rules(get_settings().rules_path)


@lru_cache
def get_db_path() -> str:
    return resolve_db_path(get_rules(), os.environ)


@lru_cache
def get_alert_config() -> AlertConfig:
    return build_alert_config(get_rules(), os.environ)


# --- Repos ---
def get_subscriber_repo(db_path: str = Depends(get_db_path)) -> SQLiteSubscriberRepo:
    return SQLiteSubscriberRepo(db_path)


def get_tide_repo(db_path: str = Depends(get_db_path)) -> SQLiteTideRepo:
    return SQLiteTideRepo(db_path)


# --- Adapters ---
@lru_cache
def get_email_sender() -> EmailPort:
    return build_email_sender(get_rules(), os.environ, get_alert_config())


@lru_cache
def get_mailing_list() -> MailingListPort | None:
    return build_mailing_list(get_rules(), os.environ)


def get_time() -> TimePort:
    return StationTimeAdapter()
