"""Unit tests for plugin.py module.

Tests the host hook surface: startup reconciliation, the HTTPS toggle and
hot update handling.
"""

import pytest

from themesync.config import Settings
from themesync.exceptions import ConfigError, PolicyBlock, RemoteQueryError, WorkspaceError
from themesync.models import SyncAction, ThemeRecord
from themesync.plugin import ThemeSyncPlugin
from themesync.reconcile import ReconcileState


@pytest.fixture
def project(tmp_path, monkeypatch):
    """A project directory with an environment file."""
    monkeypatch.delenv("SHOPIFY_PASSWORD", raising=False)
    monkeypatch.delenv("SHOPIFY_STORE", raising=False)
    (tmp_path / ".env").write_text("SHOPIFY_PASSWORD=shppa_secret\nSHOPIFY_STORE=example.myshopify.com\n")
    return tmp_path


@pytest.fixture
def settings(project):
    return Settings(
        env_file=project / ".env",
        dist_dir=project / "src" / "shopify",
        build_dir=project / ".build",
    )


def make_plugin(settings, service, console, branch="feature-y", **kwargs):
    return ThemeSyncPlugin(
        settings=settings,
        service=service,
        branch_resolver=lambda: branch,
        console=console,
        **kwargs,
    )


class TestThemeSyncPlugin:
    """Test cases for ThemeSyncPlugin."""

    def test_construction_prints_banner_and_loads_env(self, settings, fake_service, console):
        """Test the banner is printed and the environment file loaded."""
        plugin = make_plugin(settings, fake_service, console)

        assert plugin.name == "themesync"
        assert plugin.env["SHOPIFY_STORE"] == "example.myshopify.com"
        assert "_" * 33 in console.file.getvalue()
        assert plugin.ready is False

    def test_banner_can_be_disabled(self, settings, fake_service, console):
        """Test show_banner=False prints nothing at construction."""
        make_plugin(settings, fake_service, console, show_banner=False)

        assert console.file.getvalue() == ""

    def test_build_start_creates_theme(self, settings, fake_service, console):
        """Test a branch without a theme gets one created and the plugin becomes ready."""
        plugin = make_plugin(settings, fake_service, console)

        decision = plugin.build_start()

        assert decision.state is ReconcileState.CREATING
        assert fake_service.names() == ["list_themes", "get_theme", "create_theme", "deploy"]
        assert plugin.ready is True
        assert plugin.session.outcome.action is SyncAction.CREATED
        assert plugin.session.credentials.store == "example.myshopify.com"

    def test_build_start_fetches_theme(self, settings, service_factory, console, live_theme):
        """Test a branch with a theme gets it fetched."""
        service = service_factory(themes=[live_theme, ThemeRecord(id="2", name="feature-x-dev")])
        plugin = make_plugin(settings, service, console, branch="feature-x")

        plugin.build_start()

        assert service.calls[1][:2] == ("get_theme", "2")
        assert plugin.session.outcome.theme_id == "2"

    def test_build_start_rejects_protected_branch(self, settings, fake_service, console):
        """Test startup is rejected on master and the error is printed."""
        plugin = make_plugin(settings, fake_service, console, branch="master")

        with pytest.raises(PolicyBlock):
            plugin.build_start()

        assert fake_service.calls == []
        assert plugin.ready is False
        assert "Cannot build on git branch (master|main)" in console.file.getvalue()

    def test_build_start_reports_remote_failure(self, settings, service_factory, console):
        """Test a failing theme CLI is printed and re-raised."""
        plugin = make_plugin(settings, service_factory(fail_on={"list_themes"}), console)

        with pytest.raises(RemoteQueryError):
            plugin.build_start()

        assert "list_themes failed" in console.file.getvalue()

    def test_build_start_reports_filesystem_failure(self, settings, service_factory, console, live_theme):
        """Test an unusable distribution directory is printed and rejects startup."""
        service = service_factory(themes=[live_theme, ThemeRecord(id="2", name="feature-x-dev")])
        settings.dist_dir.parent.mkdir(parents=True)
        settings.dist_dir.write_text("x")
        plugin = make_plugin(settings, service, console, branch="feature-x")

        with pytest.raises(WorkspaceError):
            plugin.build_start()

        assert "Workspace error" in console.file.getvalue()
        assert plugin.ready is False
        assert plugin.session.outcome.action is SyncAction.BLOCKED

    def test_build_start_missing_credentials(self, settings, fake_service, console):
        """Test missing credentials reject startup with ConfigError."""
        settings.env_file.write_text("SHOPIFY_STORE=example.myshopify.com\n")
        plugin = make_plugin(settings, fake_service, console)

        with pytest.raises(ConfigError):
            plugin.build_start()

        assert "SHOPIFY_PASSWORD" in console.file.getvalue()

    def test_build_start_dry_run(self, settings, fake_service, console):
        """Test a dry run decides without syncing and does not become ready."""
        plugin = make_plugin(settings, fake_service, console)

        decision = plugin.build_start(dry_run=True)

        assert decision.state is ReconcileState.CREATING
        assert fake_service.names() == ["list_themes"]
        assert plugin.ready is False

    def test_config_turns_https_on(self, settings, fake_service, console):
        """Test HTTPS is enabled when the server config has it off."""
        plugin = make_plugin(settings, fake_service, console)
        user_config = {"server": {"https": False, "port": 3000}}

        plugin.config(user_config)

        assert user_config["server"] == {"https": True, "port": 3000}
        assert "Https wasnt turned on" in console.file.getvalue()

    def test_config_leaves_https_alone(self, settings, fake_service, console):
        """Test an already-enabled HTTPS config is untouched."""
        plugin = make_plugin(settings, fake_service, console, show_banner=False)
        user_config = {"server": {"https": {"cert": "dev.pem"}}}

        plugin.config(user_config)

        assert user_config["server"]["https"] == {"cert": "dev.pem"}
        assert console.file.getvalue() == ""

    def test_config_without_server_section(self, settings, fake_service, console):
        """Test a config without a server section gets one."""
        plugin = make_plugin(settings, fake_service, console)
        user_config = {}

        plugin.config(user_config)

        assert user_config == {"server": {"https": True}}

    def test_hot_update_ignored_until_ready(self, settings, fake_service, console):
        """Test file changes before startup completes are ignored."""
        plugin = make_plugin(settings, fake_service, console)

        assert plugin.handle_hot_update(settings.dist_dir / "index.liquid") is False
        assert fake_service.calls == []

    def test_hot_update_deploys_after_ready(self, settings, fake_service, console):
        """Test file changes deploy once ready, and the ready notice is printed once."""
        plugin = make_plugin(settings, fake_service, console)
        plugin.build_start()
        fake_service.calls.clear()

        assert plugin.handle_hot_update(settings.dist_dir / "sections" / "header.liquid") is True
        plugin.handle_hot_update(settings.dist_dir / "assets" / "app.css")

        assert fake_service.calls == [("deploy", settings.dist_dir, "sections/header.liquid")]
        assert console.file.getvalue().count("Ready to start developing") == 1
