"""Shared fixtures for themesync tests."""

from io import StringIO
from pathlib import Path

import pytest
from rich.console import Console

from themesync.exceptions import RemoteQueryError
from themesync.models import Credentials, SyncSession, ThemeRecord


class FakeThemeService:
    """In-memory RemoteThemeService that records every call."""

    def __init__(self, themes=None, fail_on=()):
        self.themes = list(themes or [])
        self.fail_on = set(fail_on)
        self.calls = []
        self.build_dir_existed = None

    def _record(self, name, *args):
        self.calls.append((name, *args))
        if name in self.fail_on:
            raise RemoteQueryError(f"{name} failed", command=["theme", name], returncode=1)

    def names(self):
        return [call[0] for call in self.calls]

    def list_themes(self, credentials):
        self._record("list_themes")
        return list(self.themes)

    def get_theme(self, credentials, theme_id, dest_dir, ignored_files=(), allow_live=False):
        self._record("get_theme", theme_id, Path(dest_dir), tuple(ignored_files), allow_live)

    def create_theme(self, credentials, name, dest_dir):
        self.build_dir_existed = Path(dest_dir).is_dir()
        self._record("create_theme", name, Path(dest_dir))

    def deploy(self, dest_dir, file=None):
        self._record("deploy", Path(dest_dir), file)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def console():
    """Console writing to a buffer, without colours."""
    return Console(file=StringIO(), width=200, color_system=None)


@pytest.fixture
def credentials():
    return Credentials(password="shppa_secret", store="example.myshopify.com")


@pytest.fixture
def session(tmp_path, credentials):
    return SyncSession(
        dist_dir=tmp_path / "src" / "shopify",
        build_dir=tmp_path / ".build",
        credentials=credentials,
    )


@pytest.fixture
def live_theme():
    return ThemeRecord(id="1", name="Production", live=True)


@pytest.fixture
def fake_service(live_theme):
    return FakeThemeService(themes=[live_theme])


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def service_factory():
    """Build a FakeThemeService with custom themes or failures."""
    return FakeThemeService
