"""Integration tests for the themesync command line.

Runs the Typer app through CliRunner with the theme CLI and git replaced
by in-memory fakes.
"""

import json
from pathlib import Path
from unittest.mock import Mock, patch

import pytest
from typer.testing import CliRunner
from watchdog.events import DirModifiedEvent, FileModifiedEvent

from themesync import __version__
from themesync.app import app, register_commands
from themesync.cmds.dev import ThemeChangeHandler
from themesync.models import ThemeRecord

register_commands()

runner = CliRunner()


@pytest.fixture
def project(tmp_path, monkeypatch):
    """Run every command from a project directory with credentials."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("SHOPIFY_PASSWORD", raising=False)
    monkeypatch.delenv("SHOPIFY_STORE", raising=False)
    monkeypatch.delenv("THEMESYNC_OUTPUT_FORMAT", raising=False)
    (tmp_path / ".env").write_text("SHOPIFY_PASSWORD=shppa_secret\nSHOPIFY_STORE=example.myshopify.com\n")
    return tmp_path


@pytest.fixture
def service(service_factory, live_theme):
    return service_factory(themes=[live_theme, ThemeRecord(id="2", name="feature-x-dev")])


@pytest.fixture
def fake_cli(service):
    """Patch the theme client and branch lookup used by the commands."""
    branch = {"name": "feature-y"}
    factory = Mock(return_value=service)
    with patch("themesync.cmds.dev.ThemeKitClient", factory), \
            patch("themesync.cmds.themes.ThemeKitClient", factory), \
            patch("themesync.cmds.dev.current_branch", lambda: branch["name"]), \
            patch("themesync.cmds.themes.current_branch", lambda: branch["name"]):
        yield branch


class TestGlobalOptions:
    """Test cases for global options."""

    def test_version(self):
        """Test --version prints the version."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"themesync {__version__}" in result.output

    def test_invalid_settings_file(self, project):
        """Test an invalid settings file exits with status 1."""
        (project / "themesync.toml").write_text("debounce_window = -1\n")

        result = runner.invoke(app, ["themes", "list"])

        assert result.exit_code == 1
        assert "Configuration error" in result.output


class TestStartCommand:
    """Test cases for 'themesync start'."""

    def test_start_creates_theme(self, project, fake_cli, service):
        """Test a branch without a theme gets one created."""
        result = runner.invoke(app, ["start"])

        assert result.exit_code == 0, result.output
        assert service.names() == ["list_themes", "get_theme", "create_theme", "deploy"]
        assert (project / "src" / "shopify").is_dir()

    def test_start_fetches_theme(self, project, fake_cli, service):
        """Test a branch with a theme gets it fetched."""
        fake_cli["name"] = "feature-x"

        result = runner.invoke(app, ["start"])

        assert result.exit_code == 0, result.output
        assert service.calls[1][:2] == ("get_theme", "2")

    def test_start_on_main_fails(self, project, fake_cli, service):
        """Test main is refused without calling the store."""
        fake_cli["name"] = "main"

        result = runner.invoke(app, ["start"])

        assert result.exit_code == 1
        assert "master|main" in result.output
        assert service.calls == []

    def test_start_dry_run(self, project, fake_cli, service):
        """Test --dry-run only prints the decision."""
        result = runner.invoke(app, ["--dry-run", "start"])

        assert result.exit_code == 0, result.output
        assert "DRY RUN" in result.output
        assert "feature-y" in result.output
        assert service.names() == ["list_themes"]

    def test_start_custom_dist(self, project, fake_cli, service):
        """Test --dist changes the distribution directory."""
        result = runner.invoke(app, ["--dist", "theme", "start"])

        assert result.exit_code == 0, result.output
        assert service.calls[1][2].as_posix() == "theme"

    def test_start_with_unusable_dist(self, project, fake_cli, service):
        """Test a distribution path that is a file fails with status 1."""
        fake_cli["name"] = "feature-x"
        (project / "theme").write_text("x")

        result = runner.invoke(app, ["--dist", "theme", "start"])

        assert result.exit_code == 1
        assert "Workspace error" in result.output
        assert service.names() == ["list_themes"]

    def test_start_without_credentials(self, project, fake_cli, service):
        """Test a missing credential fails startup."""
        (project / ".env").write_text("SHOPIFY_STORE=example.myshopify.com\n")

        result = runner.invoke(app, ["start"])

        assert result.exit_code == 1
        assert "SHOPIFY_PASSWORD" in result.output


class TestWatchCommand:
    """Test cases for 'themesync watch'."""

    @patch("themesync.cmds.dev.Observer")
    def test_watch_schedules_observer(self, mock_observer_cls, project, fake_cli, service):
        """Test watch syncs, then watches the distribution directory."""
        observer = mock_observer_cls.return_value
        observer.is_alive.return_value = False

        result = runner.invoke(app, ["watch"])

        assert result.exit_code == 0, result.output
        handler, path = observer.schedule.call_args[0]
        assert isinstance(handler, ThemeChangeHandler)
        assert path == "src/shopify"
        assert observer.schedule.call_args[1] == {"recursive": True}
        observer.start.assert_called_once()
        observer.stop.assert_called_once()
        observer.join.assert_called_once()

    @patch("themesync.cmds.dev.Observer")
    def test_watch_not_started_when_blocked(self, mock_observer_cls, project, fake_cli):
        """Test no watcher starts when startup is rejected."""
        fake_cli["name"] = "master"

        result = runner.invoke(app, ["watch"])

        assert result.exit_code == 1
        mock_observer_cls.return_value.start.assert_not_called()

    def test_change_handler_forwards_files(self):
        """Test file events reach the plugin and directory events do not."""
        plugin = Mock()
        handler = ThemeChangeHandler(plugin)

        handler.on_modified(FileModifiedEvent("src/shopify/index.liquid"))
        handler.on_modified(DirModifiedEvent("src/shopify"))

        plugin.handle_hot_update.assert_called_once_with("src/shopify/index.liquid")


class TestDeployCommand:
    """Test cases for 'themesync deploy'."""

    def test_deploy_single_file(self, project, fake_cli, service):
        """Test a file inside the distribution directory is deployed."""
        result = runner.invoke(app, ["deploy", "src/shopify/sections/header.liquid"])

        assert result.exit_code == 0, result.output
        assert service.calls == [("deploy", Path("src/shopify"), "sections/header.liquid")]

    def test_deploy_outside_dist(self, project, fake_cli, service):
        """Test a file outside the distribution directory is refused."""
        result = runner.invoke(app, ["deploy", "other/page.liquid"])

        assert result.exit_code == 1
        assert service.calls == []

    def test_deploy_failure(self, project, fake_cli, service):
        """Test a failing deploy exits with status 1."""
        service.fail_on.add("deploy")

        result = runner.invoke(app, ["deploy", "src/shopify/index.liquid"])

        assert result.exit_code == 1
        assert "Theme CLI error" in result.output


class TestThemesCommands:
    """Test cases for the 'themesync themes' group."""

    def test_list_json(self, project, fake_cli):
        """Test themes are listed as JSON."""
        result = runner.invoke(app, ["-o", "json", "themes", "list"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == [
            {"id": "1", "name": "Production", "live": True},
            {"id": "2", "name": "feature-x-dev", "live": False},
        ]

    def test_list_table(self, project, fake_cli):
        """Test themes are listed as a table."""
        result = runner.invoke(app, ["-o", "table", "themes", "list"])

        assert result.exit_code == 0, result.output
        assert "Production" in result.output
        assert "feature-x-dev" in result.output

    def test_list_failure(self, project, fake_cli, service):
        """Test a listing failure exits with status 1."""
        service.fail_on.add("list_themes")

        result = runner.invoke(app, ["themes", "list"])

        assert result.exit_code == 1
        assert "Theme CLI error" in result.output

    def test_current(self, project, fake_cli):
        """Test the live theme is shown."""
        result = runner.invoke(app, ["-o", "table", "themes", "current"])

        assert result.exit_code == 0, result.output
        assert "Live theme: Production (1)" in result.output

    def test_current_without_live_theme(self, project, fake_cli, service):
        """Test a listing without a live theme exits with status 1."""
        service.themes = [ThemeRecord(id="2", name="Draft")]

        result = runner.invoke(app, ["themes", "current"])

        assert result.exit_code == 1
        assert "No live theme" in result.output

    def test_branch_json(self, project, fake_cli):
        """Test the branch report as JSON."""
        fake_cli["name"] = "feature-x"

        result = runner.invoke(app, ["-o", "json", "themes", "branch"])

        assert result.exit_code == 0, result.output
        report = json.loads(result.stdout)
        assert report["branch"] == "feature-x"
        assert report["action"] == "fetching"
        assert report["matching_themes"] == [{"id": "2", "name": "feature-x-dev", "live": False}]

    def test_branch_protected_skips_listing(self, project, fake_cli, service):
        """Test a protected branch is reported without listing themes."""
        fake_cli["name"] = "master"

        result = runner.invoke(app, ["-o", "json", "themes", "branch"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["action"] == "blocked"
        assert service.calls == []
