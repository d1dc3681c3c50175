"""Tests for the rssdd command group."""

from __future__ import annotations

import importlib
import json

import pytest
import toml
from click.testing import CliRunner

from rssdd.cli.main import cli
from rssdd.feed.history import DownloadHistory
from rssdd.feed.parser import FeedItem
from rssdd.utils.exceptions import StorageError

# rssdd.cli re-exports the `main` function, shadowing the submodule attribute.
main_module = importlib.import_module("rssdd.cli.main")

pytestmark = [pytest.mark.cli]


@pytest.fixture
def cli_runner():
    """Create Click CLI runner for testing."""
    return CliRunner()


@pytest.fixture
def isolated_home(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    default_path = home / ".config" / "rssdd" / "rssdd.toml"
    monkeypatch.setattr(main_module, "DEFAULT_CONFIG_PATH", default_path)
    return home


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "rssdd-test.toml"
    data = {
        "feeds": [{"url": "https://example.com/rss", "match": ["Show"]}],
        "storage": {"data_dir": str(tmp_path / "data")},
    }
    path.write_text(toml.dumps(data), encoding="utf-8")
    return path


class TestConfigCommands:
    def test_show_toml(self, cli_runner, config_file):
        result = cli_runner.invoke(cli, ["-c", str(config_file), "config", "show"])
        assert result.exit_code == 0, result.output
        assert toml.loads(result.output)["feeds"][0]["url"] == "https://example.com/rss"

    def test_show_json(self, cli_runner, config_file):
        result = cli_runner.invoke(
            cli, ["-c", str(config_file), "config", "show", "--format", "json"]
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["feeds"][0]["match"] == ["Show"]

    def test_show_missing_config(self, cli_runner, tmp_path):
        result = cli_runner.invoke(cli, ["-c", str(tmp_path / "nope.toml"), "config", "show"])
        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_init_writes_file(self, cli_runner, tmp_path):
        target = tmp_path / "new" / "rssdd.toml"
        result = cli_runner.invoke(cli, ["config", "init", str(target)])
        assert result.exit_code == 0, result.output
        assert "Created default configuration" in result.output
        assert "feeds" in toml.loads(target.read_text(encoding="utf-8"))

    def test_init_existing_file(self, cli_runner, config_file):
        before = config_file.read_text(encoding="utf-8")
        result = cli_runner.invoke(cli, ["config", "init", str(config_file)])
        assert result.exit_code == 0
        assert "already exists" in result.output
        assert config_file.read_text(encoding="utf-8") == before

    def test_init_default_location(self, cli_runner, isolated_home):
        result = cli_runner.invoke(cli, ["config", "init"])
        assert result.exit_code == 0, result.output
        assert (isolated_home / ".config" / "rssdd" / "rssdd.toml").exists()


class TestHistoryCommand:
    def test_empty_history(self, cli_runner, config_file):
        result = cli_runner.invoke(cli, ["-c", str(config_file), "history"])
        assert result.exit_code == 0, result.output
        assert "No downloads recorded" in result.output

    def test_lists_downloads(self, cli_runner, config_file, tmp_path):
        with DownloadHistory(tmp_path / "data" / "downloads.db") as store:
            store.add(FeedItem(title="Show S01E01", link="https://example.com/1"))
            store.add(FeedItem(title="Show S01E02", link="https://example.com/2"))

        result = cli_runner.invoke(cli, ["-c", str(config_file), "history", "-n", "1"])
        assert result.exit_code == 0, result.output
        assert "Show S01E02" in result.output
        assert "Show S01E01" not in result.output


class TestRunCommand:
    def test_run_uses_config(self, cli_runner, config_file, monkeypatch):
        seen = []

        async def fake_run_watcher(config):
            seen.append(config)

        monkeypatch.setattr(main_module, "_run_watcher", fake_run_watcher)
        result = cli_runner.invoke(cli, ["-c", str(config_file), "run"])
        assert result.exit_code == 0, result.output
        assert seen[0].feeds[0].url == "https://example.com/rss"

    def test_run_creates_default_config(self, cli_runner, isolated_home, monkeypatch):
        async def fake_run_watcher(config):
            return None

        monkeypatch.setattr(main_module, "_run_watcher", fake_run_watcher)
        result = cli_runner.invoke(cli, ["run"])
        assert result.exit_code == 0, result.output
        assert "Created default configuration" in result.output
        assert (isolated_home / ".config" / "rssdd" / "rssdd.toml").exists()

    def test_run_storage_error(self, cli_runner, config_file, monkeypatch):
        async def fake_run_watcher(config):
            msg = "database locked"
            raise StorageError(msg)

        monkeypatch.setattr(main_module, "_run_watcher", fake_run_watcher)
        result = cli_runner.invoke(cli, ["-c", str(config_file), "run"])
        assert result.exit_code == 1
        assert "database locked" in result.output

    def test_run_interrupted(self, cli_runner, config_file, monkeypatch):
        async def fake_run_watcher(config):
            raise KeyboardInterrupt

        monkeypatch.setattr(main_module, "_run_watcher", fake_run_watcher)
        result = cli_runner.invoke(cli, ["-c", str(config_file), "run"])
        assert result.exit_code == 0, result.output
        assert "Stopped" in result.output

    def test_verbose_sets_debug(self, cli_runner, config_file, monkeypatch):
        seen = []

        async def fake_run_watcher(config):
            seen.append(config.observability.log_level.value)

        monkeypatch.setattr(main_module, "_run_watcher", fake_run_watcher)
        result = cli_runner.invoke(cli, ["-c", str(config_file), "-v", "run"])
        assert result.exit_code == 0, result.output
        assert seen == ["DEBUG"]
