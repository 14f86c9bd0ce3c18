"""Tests for the eventhub_geodr command-line entry point."""

import logging
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from core.errors.exceptions import AuthError, ConflictError
from eventhub_geodr import __main__ as cli
from eventhub_geodr.naming import ResourceNames


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    monkeypatch.setenv("AZURE_SUBSCRIPTION_ID", "sub-123")
    for name in ("GEODR_CONFIG_FILE", "GEODR_SYNC_STRATEGY", "GEODR_PRIMARY_LOCATION", "LOG_TO_STDOUT", "JSON_LOGS"):
        monkeypatch.delenv(name, raising=False)
    with patch.object(cli, "load_dotenv"), patch.object(cli, "setup_logging") as mock_setup:
        yield mock_setup


def _async_cm(instance):
    instance.__aenter__ = AsyncMock(return_value=instance)
    instance.__aexit__ = AsyncMock(return_value=False)
    return instance


@pytest.fixture
def provider():
    provider = _async_cm(MagicMock())
    provider.get_diagnostics.return_value = {"auth_mode": "default"}
    with patch.object(cli, "AzureCredentialProvider", return_value=provider):
        yield provider


@pytest.fixture
def management_client():
    client = _async_cm(MagicMock())
    with patch.object(cli, "GeoDrManagementClient", return_value=client) as mock_cls:
        yield mock_cls


@pytest.fixture
def sample_cls():
    with patch.object(cli, "GeoDrSample") as mock_cls:
        mock_cls.return_value.run = AsyncMock(
            return_value=SimpleNamespace(
                names=ResourceNames("rg", "nsa", "nsb", "geodr", "eh"),
                resource_group_id="/subscriptions/sub-123/resourceGroups/rg",
            )
        )
        yield mock_cls


class TestParseArgs:

    def test_defaults(self):
        args = cli.parse_args([])
        assert args.config is None
        assert args.primary_location is None
        assert args.sync_strategy is None
        assert args.sync_wait is None
        assert args.log_level == "INFO"
        assert args.json_logs is None
        assert args.log_to_stdout is False

    def test_all_flags(self):
        args = cli.parse_args(
            [
                "--config", "geodr.yaml",
                "--primary-location", "westus2",
                "--secondary-location", "eastus2",
                "--sync-strategy", "sleep",
                "--sync-wait", "90",
                "--log-level", "DEBUG",
                "--log-dir", "/tmp/logs",
                "--json-logs",
                "--log-to-stdout",
            ]
        )
        assert str(args.config) == "geodr.yaml"
        assert args.primary_location == "westus2"
        assert args.secondary_location == "eastus2"
        assert args.sync_strategy == "sleep"
        assert args.sync_wait == 90.0
        assert args.log_level == "DEBUG"
        assert args.log_dir == "/tmp/logs"
        assert args.json_logs is True
        assert args.log_to_stdout is True

    def test_rejects_unknown_strategy(self):
        with pytest.raises(SystemExit):
            cli.parse_args(["--sync-strategy", "spin"])


class TestMain:

    def test_success(self, provider, management_client, sample_cls, isolated_environment):
        assert cli.main([]) == 0

        sample_cls.return_value.run.assert_awaited_once()
        management_client.assert_called_once_with(provider.get_credential.return_value, "sub-123")
        config = sample_cls.call_args.args[1]
        assert config.subscription_id == "sub-123"
        assert isolated_environment.call_args.kwargs["run_id"].startswith("r-")

    def test_cli_overrides_reach_config(self, provider, management_client, sample_cls):
        cli.main(["--primary-location", "westus2", "--sync-strategy", "sleep", "--sync-wait", "5"])

        config = sample_cls.call_args.args[1]
        assert config.primary_location == "westus2"
        assert config.sync.strategy == "sleep"
        assert config.sync.wait_seconds == 5.0

    def test_failure_is_logged_and_exit_code_is_zero(self, provider, management_client, sample_cls, caplog):
        sample_cls.return_value.run.side_effect = ConflictError("Failover already in progress")

        with caplog.at_level(logging.ERROR, logger="eventhub_geodr.__main__"):
            assert cli.main([]) == 0

        record = next(r for r in caplog.records if r.getMessage() == "Sample failed")
        assert record.error_type == "ConflictError"
        provider.__aexit__.assert_awaited_once()
        management_client.return_value.__aexit__.assert_awaited_once()

    def test_auth_failure_is_logged(self, provider, management_client, sample_cls, caplog):
        provider.get_credential.side_effect = AuthError("No valid Azure credential configuration found")

        with caplog.at_level(logging.ERROR, logger="eventhub_geodr.__main__"):
            assert cli.main([]) == 0

        assert "Sample failed" in caplog.messages
        sample_cls.assert_not_called()

    def test_invalid_config_is_logged(self, provider, sample_cls, monkeypatch, caplog):
        monkeypatch.delenv("AZURE_SUBSCRIPTION_ID")

        with caplog.at_level(logging.ERROR, logger="eventhub_geodr.__main__"):
            assert cli.main([]) == 0

        assert any(m.startswith("Invalid configuration") for m in caplog.messages)
        sample_cls.assert_not_called()

    @pytest.mark.parametrize(
        "body",
        [
            "geodr:\n  sync: [oops\n",
            "geodr:\n  sync: poll\n",
            "geodr:\n  name_prefixes: eh\n",
        ],
    )
    def test_malformed_config_file_is_logged(self, provider, sample_cls, tmp_path, caplog, body):
        path = tmp_path / "geodr.yaml"
        path.write_text(body)

        with caplog.at_level(logging.ERROR, logger="eventhub_geodr.__main__"):
            assert cli.main(["--config", str(path)]) == 0

        assert any(m.startswith("Invalid configuration") for m in caplog.messages)
        sample_cls.assert_not_called()

    def test_unreadable_config_file_is_logged(self, provider, sample_cls, tmp_path, caplog):
        with caplog.at_level(logging.ERROR, logger="eventhub_geodr.__main__"):
            assert cli.main(["--config", str(tmp_path)]) == 0

        assert any(m.startswith("Cannot read configuration") for m in caplog.messages)
        sample_cls.assert_not_called()

    def test_same_regions_rejected(self, provider, sample_cls, caplog):
        with caplog.at_level(logging.ERROR, logger="eventhub_geodr.__main__"):
            assert cli.main(["--secondary-location", "southcentralus"]) == 0
        sample_cls.assert_not_called()

    def test_keyboard_interrupt(self, provider, management_client, sample_cls):
        sample_cls.return_value.run.side_effect = KeyboardInterrupt
        assert cli.main([]) == 0

    @pytest.mark.parametrize(
        "env,flag,expected_json,expected_stdout",
        [
            ({}, [], True, False),
            ({"JSON_LOGS": "false"}, [], False, False),
            ({"JSON_LOGS": "false"}, ["--json-logs"], True, False),
            ({}, ["--no-json-logs"], False, False),
            ({"LOG_TO_STDOUT": "1"}, [], True, True),
        ],
    )
    def test_logging_options(
        self, provider, management_client, sample_cls, isolated_environment, monkeypatch,
        env, flag, expected_json, expected_stdout,
    ):
        for key, value in env.items():
            monkeypatch.setenv(key, value)

        cli.main(flag)

        kwargs = isolated_environment.call_args.kwargs
        assert kwargs["json_format"] is expected_json
        assert kwargs["log_to_stdout"] is expected_stdout
