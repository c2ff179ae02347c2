"""
Rules loading and shell configuration tests.
"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from flood_alert.adapters.dev_email import DevEmailAdapter
from flood_alert.adapters.mailgun_email import MailgunEmailAdapter, MailgunMailingList
from flood_alert.app_shell.config import (
    build_alert_config,
    build_email_sender,
    build_mailing_list,
    resolve_db_path,
    validate_ops_rules,
)
from flood_alert.rules.loader import load_rules
from flood_alert.rules.models import Rules


@pytest.fixture
def rules(rules_path: Path) -> Rules:
    return load_rules(rules_path)


@pytest.fixture
def mailgun_rules(rules: Rules) -> Rules:
    email = rules.email.model_copy(update={"provider": "mailgun"})
    return rules.model_copy(update={"email": email})


class TestLoader:
    def test_project_rules_load(self, rules: Rules) -> None:
        assert rules.tides.station_id == "9414819"
        assert rules.email.provider == "dev"
        assert rules.site.unsubscribe_path == "/unsubscribe"
        assert "UNSUBSCRIBE_SECRET" in rules.ops.required_env

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_rules(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("project: [unclosed\n")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_rules(path)

    def test_unknown_provider_rejected(self, tmp_path: Path, rules_path: Path) -> None:
        data = yaml.safe_load(rules_path.read_text())
        data["email"]["provider"] = "carrier-pigeon"
        path = tmp_path / "rules.yaml"
        path.write_text(yaml.safe_dump(data))

        with pytest.raises(ValueError, match="Rules validation failed"):
            load_rules(path)


class TestValidateOpsRules:
    def test_passes_with_required_env(self, rules: Rules) -> None:
        validate_ops_rules(rules, {"UNSUBSCRIBE_SECRET": "s"})

    def test_missing_env_exits(self, rules: Rules) -> None:
        with pytest.raises(SystemExit) as exc:
            validate_ops_rules(rules, {})
        assert exc.value.code == 1

    def test_mailgun_needs_credentials(self, mailgun_rules: Rules) -> None:
        with pytest.raises(SystemExit):
            validate_ops_rules(mailgun_rules, {"UNSUBSCRIBE_SECRET": "s"})


class TestBuildConfig:
    def test_env_overrides_base_url(self, rules: Rules) -> None:
        config = build_alert_config(
            rules, {"UNSUBSCRIBE_SECRET": "s", "BASE_URL": "https://alerts.example.com"}
        )
        assert config.base_url == "https://alerts.example.com"
        assert config.unsubscribe_secret == "s"
        assert config.sender.email == "no-reply@localhost"

    def test_defaults_from_rules(self, rules: Rules) -> None:
        config = build_alert_config(rules, {"UNSUBSCRIBE_SECRET": "s"})
        assert config.base_url == rules.site.base_url
        assert config.site_name == rules.site.name

    def test_secret_required(self, rules: Rules) -> None:
        with pytest.raises(ValueError):
            build_alert_config(rules, {"UNSUBSCRIBE_SECRET": ""})

    def test_secret_not_in_repr(self, rules: Rules) -> None:
        config = build_alert_config(rules, {"UNSUBSCRIBE_SECRET": "hunter2"})
        assert "hunter2" not in repr(config)


class TestFactories:
    def test_db_path_in_data_dir(self, rules: Rules, tmp_path: Path) -> None:
        data_dir = tmp_path / "data"
        path = resolve_db_path(rules, {"FLOOD_ALERT_DATA_DIR": str(data_dir)})
        assert path == str(data_dir / "flood_alert.db")
        assert data_dir.is_dir()

    def test_dev_provider(self, rules: Rules) -> None:
        config = build_alert_config(rules, {"UNSUBSCRIBE_SECRET": "s"})
        assert isinstance(build_email_sender(rules, {}, config), DevEmailAdapter)
        assert build_mailing_list(rules, {"MAILING_LIST_ID": "alerts"}) is None

    def test_mailgun_provider(self, mailgun_rules: Rules) -> None:
        env = {"UNSUBSCRIBE_SECRET": "s", "MAILGUN_API_KEY": "k", "MAILGUN_DOMAIN": "mg.example.com"}
        config = build_alert_config(mailgun_rules, env)

        assert isinstance(build_email_sender(mailgun_rules, env, config), MailgunEmailAdapter)
        assert build_mailing_list(mailgun_rules, env) is None

        mailing_list = build_mailing_list(mailgun_rules, {**env, "MAILING_LIST_ID": "alerts"})
        assert isinstance(mailing_list, MailgunMailingList)
        assert mailing_list.list_address == "alerts@mg.example.com"
