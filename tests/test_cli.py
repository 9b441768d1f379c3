"""Tests for the command line interface."""

from datetime import datetime, timezone
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from deployvelocity.cli.main import cli, schedule_status
from deployvelocity.config import ConfigError, DatabaseSettings
from deployvelocity.scheduler import SchedulerError, SchedulerManager, SchedulerStats
from deployvelocity.scraper import FetchError, FetchResponse

from tests.helpers import FakeFetcher, make_settings, page


@pytest.fixture
def cli_runner():
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_settings(tmp_path):
    return make_settings(
        database=DatabaseSettings(url=f"sqlite:///{tmp_path / 'data' / 'versions.db'}")
    )


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def patched_runtime(db_settings, fetcher):
    """Route the CLI to a temporary database and an in-memory fetcher."""
    with patch(
        "deployvelocity.cli.main.get_settings", return_value=db_settings
    ), patch("deployvelocity.cli.main.HttpFetcher", return_value=fetcher), patch(
        "deployvelocity.cli.main.setup_logging"
    ):
        yield


class OneShotScheduler(SchedulerManager):
    """Runs the job once on start, then stops the watch loop."""

    async def setup(self):
        await self.job()
        raise SchedulerError("stopped after one run")


def invoke(runner, config_file, *args):
    return runner.invoke(cli, ["-c", str(config_file), *args])


@pytest.mark.integration
@pytest.mark.usefixtures("patched_runtime")
class TestRunCommand:
    """Test the run command end to end."""

    def test_run_records_versions(self, cli_runner, config_file, fetcher):
        result = invoke(cli_runner, config_file, "run")

        assert result.exit_code == 0, result.output
        assert "update found for a.example.com" in result.output
        assert "update found for b.example.com" in result.output
        assert result.output.rstrip().endswith("Update Complete")
        assert fetcher.calls == ["https://a.example.com/", "https://b.example.com/app"]

    def test_failed_fetch_prints_status_block(self, cli_runner, config_file, fetcher):
        fetcher.responses["https://a.example.com/"] = FetchError("refused")

        result = invoke(cli_runner, config_file, "run")

        assert result.exit_code == 0
        assert "host request status a.example.com" in result.output
        assert "msg: refused, status code: 0" in result.output
        assert "host request status b.example.com" not in result.output

    def test_verbose_prints_every_host(self, cli_runner, config_file):
        result = invoke(cli_runner, config_file, "-v", "run")

        assert result.exit_code == 0
        assert "host request status a.example.com" in result.output
        assert "host request status b.example.com" in result.output
        assert "version hash:" in result.output

    def test_single_url(self, cli_runner, config_file, fetcher):
        result = invoke(cli_runner, config_file, "run", "-u", "https://solo.example.com/")

        assert result.exit_code == 0
        assert fetcher.calls == ["https://solo.example.com/"]

    def test_single_malformed_url_is_fatal(self, cli_runner, config_file, fetcher):
        result = invoke(cli_runner, config_file, "run", "-u", "solo.example.com")

        assert result.exit_code == 1
        assert "Configuration error" in result.output
        assert fetcher.calls == []

    def test_missing_config_is_fatal(self, cli_runner, tmp_path):
        result = invoke(cli_runner, tmp_path / "absent.yaml", "run")

        assert result.exit_code == 1
        assert "Configuration error" in result.output

    def test_debug_run_skips_store(self, cli_runner, config_file):
        result = invoke(cli_runner, config_file, "-d", "run")

        assert result.exit_code == 0
        assert "skipping store update in debug mode" in result.output
        assert "update found" not in result.output

        shown = invoke(cli_runner, config_file, "show", "a.example.com")
        assert shown.exit_code == 1

    def test_show_and_history(self, cli_runner, config_file, fetcher):
        url = "https://a.example.com/"
        fetcher.responses[url] = FetchResponse(200, page(("/v1.js",)).encode())
        invoke(cli_runner, config_file, "run")
        fetcher.responses[url] = FetchResponse(200, page(("/v2.js",)).encode())
        second = invoke(cli_runner, config_file, "run")

        assert "update count:  2" in second.output

        shown = invoke(cli_runner, config_file, "show", "a.example.com")
        assert shown.exit_code == 0
        assert "Latest Version: a.example.com" in shown.output
        assert "https://a.example.com/" in shown.output

        history = invoke(cli_runner, config_file, "history", "a.example.com")
        assert history.exit_code == 0
        assert "Version History: a.example.com" in history.output

    def test_show_unknown_host(self, cli_runner, config_file):
        result = invoke(cli_runner, config_file, "show", "nobody.example.com")

        assert result.exit_code == 1
        assert "No record for host" in result.output

    def test_watch_prints_schedule_after_each_run(self, cli_runner, config_file):
        with patch("deployvelocity.cli.main.SchedulerManager", OneShotScheduler):
            result = invoke(cli_runner, config_file, "watch", "--interval", "60")

        assert "update found for a.example.com" in result.output
        assert "next run at not scheduled (previous runs: 0, failed: 0)" in result.output
        assert "stopped after one run" in result.output
        assert result.exit_code == 1


class TestScheduleStatus:
    """Test the status line printed after scheduled runs."""

    def test_includes_next_run_and_counts(self):
        stats = SchedulerStats(
            interval_seconds=60,
            runs_executed=3,
            runs_failed=1,
            next_run_at=datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc),
        )

        assert schedule_status(stats) == (
            "next run at 2024-05-01 12:30:00 (previous runs: 3, failed: 1)"
        )


class TestConfigCommands:
    """Test configuration helper commands."""

    def test_init_writes_example(self, cli_runner, tmp_path):
        path = tmp_path / "config" / "config.yaml"

        result = invoke(cli_runner, path, "init")

        assert result.exit_code == 0
        assert path.exists()

    def test_init_refuses_to_overwrite(self, cli_runner, config_file):
        result = invoke(cli_runner, config_file, "init")

        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_validate_valid_config(self, cli_runner, config_file):
        result = invoke(cli_runner, config_file, "validate")

        assert result.exit_code == 0
        assert "Configuration is valid" in result.output

    def test_validate_reports_issues(self, cli_runner, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("urls:\n  - nope\n", encoding="utf-8")

        result = invoke(cli_runner, path, "validate")

        assert result.exit_code == 1
        assert "URL 0:" in result.output

    def test_settings_error_is_fatal(self, cli_runner, config_file):
        with patch(
            "deployvelocity.cli.main.get_settings",
            side_effect=ConfigError("bad env"),
        ):
            result = invoke(cli_runner, config_file, "run")

        assert result.exit_code == 1
        assert "bad env" in result.output
