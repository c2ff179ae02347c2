"""
Public home page.

Lists upcoming flood tides and the signup form.
"""

from __future__ import annotations

import html
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from flood_alert.adapters.sqlite_db import SQLiteTideRepo
from flood_alert.api.deps import get_alert_config, get_tide_repo, get_time
from flood_alert.api.pages import message_page, render_page
from flood_alert.components.tides import FLOOD_THRESHOLD_FT, FORECAST_DAYS, query_flood_events
from flood_alert.core.config import AlertConfig
from flood_alert.core.ports.db import StoreError
from flood_alert.core.ports.time import TimePort

logger = logging.getLogger(__name__)

router = APIRouter()

SIGNUP_SCRIPT = """
<script>
document.getElementById("signup").addEventListener("submit", async (ev) => {
  ev.preventDefault();
  const email = ev.target.email.value;
  const res = await fetch("/signup", {
    method: "POST",
    headers: {"Content-Type": "application/json"},
    body: JSON.stringify({email}),
  });
  const data = await res.json();
  document.getElementById("signup-result").textContent = data.message || data.detail;
});
</script>
"""


@router.get("/", response_class=HTMLResponse)
def home(
    repo: SQLiteTideRepo = Depends(get_tide_repo),
    time: TimePort = Depends(get_time),
    config: AlertConfig = Depends(get_alert_config),
) -> HTMLResponse:
    """Render upcoming flood events (threshold and window included)."""
    try:
        events = query_flood_events(time.now_local(), repo=repo)
    except StoreError as e:
        logger.error("Home page could not read tide archive: %s", e)
        return message_page("Something went wrong", "Internal server error", 500)

    if events:
        rows = "".join(
            f"<tr><td>{html.escape(e.display_time)}</td>"
            f"<td>{html.escape(e.display_height)} ft</td></tr>"
            for e in events
        )
        listing = f"<table><tr><th>When</th><th>Height</th></tr>{rows}</table>"
    else:
        listing = "<p>No flood tides forecast.</p>"

    body = (
        f"<h1>{html.escape(config.site_name)}</h1>"
        f"<p>High tides at or above {FLOOD_THRESHOLD_FT} ft can flood the bike path. "
        f"Forecast for the next {FORECAST_DAYS} days:</p>"
        f"{listing}"
        "<h2>Get an email before it floods</h2>"
        '<form id="signup"><input type="email" name="email" required />'
        '<button type="submit">Sign up</button></form>'
        '<p id="signup-result"></p>'
        f"{SIGNUP_SCRIPT}"
    )
    return HTMLResponse(render_page(config.site_name, body))
