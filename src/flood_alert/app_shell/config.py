import logging
import sys
from collections.abc import Mapping
from pathlib import Path

from flood_alert.adapters.dev_email import DevEmailAdapter
from flood_alert.adapters.mailgun_email import MailgunEmailAdapter, MailgunMailingList
from flood_alert.adapters.noaa_tides import NoaaTideClient
from flood_alert.core.config import AlertConfig
from flood_alert.core.ports.email import EmailAddress, EmailPort, MailingListPort
from flood_alert.rules.models import Rules

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = "./data"


def validate_ops_rules(rules: Rules, environ: Mapping[str, str]) -> None:
    """
    Validate operational requirements before startup.

    Exits the process when required environment variables are missing.
    """
    ops = rules.ops

    missing = [name for name in ops.required_env if not environ.get(name)]

    if rules.email.provider == "mailgun":
        missing += [
            name for name in ("MAILGUN_API_KEY", "MAILGUN_DOMAIN")
            if not environ.get(name) and name not in missing
        ]

    if missing:
        logger.critical("Missing required environment variables: %s", ", ".join(missing))
        sys.exit(1)

    logger.info("Configuration validated.")


def resolve_db_path(rules: Rules, environ: Mapping[str, str]) -> str:
    """Database file inside FLOOD_ALERT_DATA_DIR (created when required)."""
    data_dir = Path(environ.get("FLOOD_ALERT_DATA_DIR", DEFAULT_DATA_DIR))
    if rules.ops.data_dir_required:
        data_dir.mkdir(parents=True, exist_ok=True)
    return str(data_dir / rules.ops.db_filename)


def build_alert_config(rules: Rules, environ: Mapping[str, str]) -> AlertConfig:
    """
    Build the immutable AlertConfig from rules and environment.

    Raises:
        ValueError: If UNSUBSCRIBE_SECRET is missing or empty
    """
    secret = environ.get("UNSUBSCRIBE_SECRET", "")
    if not secret:
        raise ValueError("UNSUBSCRIBE_SECRET must be set")

    return AlertConfig(
        unsubscribe_secret=secret,
        base_url=environ.get("BASE_URL") or rules.site.base_url,
        site_name=rules.site.name,
        sender=EmailAddress(rules.email.sender.email, rules.email.sender.name),
        verify_path=rules.site.verify_path,
        unsubscribe_path=rules.site.unsubscribe_path,
    )


# --- Adapter factories (shared by API deps and CLI) ---


def build_email_sender(rules: Rules, environ: Mapping[str, str], config: AlertConfig) -> EmailPort:
    """Mailgun when configured as provider, otherwise the logging dev adapter."""
    if rules.email.provider == "mailgun":
        return MailgunEmailAdapter(
            environ["MAILGUN_API_KEY"],
            environ["MAILGUN_DOMAIN"],
            config.sender,
            timeout=rules.email.http_timeout_seconds,
        )
    logger.warning("Email provider is 'dev'; messages are logged, not sent")
    return DevEmailAdapter()


def build_mailing_list(rules: Rules, environ: Mapping[str, str]) -> MailingListPort | None:
    """Mailgun list projection, only when MAILING_LIST_ID is set."""
    list_id = environ.get("MAILING_LIST_ID")
    if rules.email.provider != "mailgun" or not list_id:
        return None
    return MailgunMailingList(
        environ["MAILGUN_API_KEY"],
        environ["MAILGUN_DOMAIN"],
        list_id,
        timeout=rules.email.http_timeout_seconds,
    )


def build_tide_client(rules: Rules) -> NoaaTideClient:
    return NoaaTideClient(timeout=rules.tides.http_timeout_seconds)
