from datetime import UTC, datetime

import pytest
from fastapi.testclient import TestClient

from flood_alert.adapters.dev_email import DevMailingList
from flood_alert.adapters.station_time import FrozenTimeAdapter
from flood_alert.api.deps import (
    get_alert_config,
    get_email_sender,
    get_mailing_list,
    get_subscriber_repo,
    get_tide_repo,
    get_time,
)
from flood_alert.api.main import app

# 2024-10-01 08:00 in the station's zone (PDT)
FROZEN_UTC = datetime(2024, 10, 1, 15, 0, tzinfo=UTC)


@pytest.fixture
def mailing_list() -> DevMailingList:
    return DevMailingList()


@pytest.fixture
def client(subscriber_repo, tide_repo, email_sender, alert_config, mailing_list):
    app.dependency_overrides[get_subscriber_repo] = lambda: subscriber_repo
    app.dependency_overrides[get_tide_repo] = lambda: tide_repo
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    app.dependency_overrides[get_mailing_list] = lambda: mailing_list
    app.dependency_overrides[get_alert_config] = lambda: alert_config
    app.dependency_overrides[get_time] = lambda: FrozenTimeAdapter(FROZEN_UTC)
    yield TestClient(app)
    app.dependency_overrides.clear()
