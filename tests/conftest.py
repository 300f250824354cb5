"""Shared pytest configuration and fake browser sessions."""

import asyncio
import sys
from pathlib import Path

import pytest
from selenium.common.exceptions import TimeoutException, WebDriverException

PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from pwa_assets import browser  # noqa: E402


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    config.addinivalue_line(
        "markers", "browser: mark test as requiring a local Chrome installation"
    )


def pytest_addoption(parser):
    parser.addoption(
        "--run-browser",
        action="store_true",
        default=False,
        help="Run tests that launch a real headless Chrome",
    )


def pytest_collection_modifyitems(config, items):
    if config.getoption("--run-browser"):
        return

    skip_browser = pytest.mark.skip(reason="Need --run-browser option to run")
    for item in items:
        if "browser" in item.keywords:
            item.add_marker(skip_browser)


# =============================================================================
# Fake sessions
# =============================================================================

class FakePage:
    def __init__(self, session):
        self.session = session
        self.url = None

    async def set_user_agent(self, user_agent):
        self.session.calls.append(("set_user_agent", user_agent))

    async def goto(self, address):
        await asyncio.sleep(0)
        self.url = address
        self.session.calls.append(("goto", address))
        if address in self.session.browser.broken_urls:
            raise WebDriverException("net::ERR_NAME_NOT_RESOLVED")

    async def set_content(self, html):
        await asyncio.sleep(0)
        self.session.calls.append(("set_content", html))

    async def wait_for_selector(self, selector, timeout):
        self.session.calls.append(("wait_for_selector", selector, timeout))
        if self.url in self.session.browser.missing_tables:
            raise TimeoutException()

    async def table_rows(self, selector):
        return self.session.browser.tables.get(self.url, [])

    async def screenshot(self, path=None, **kwargs):
        await asyncio.sleep(0)
        self.session.calls.append(("screenshot", path, kwargs))
        if path is not None and Path(path).stem in self.session.browser.failing_names:
            raise WebDriverException("tab crashed")
        if path is not None:
            Path(path).write_bytes(b"\x89PNG fake")
        return b"\x89PNG fake"


class FakeSession:
    def __init__(self, fake_browser, config):
        self.browser = fake_browser
        self.config = config
        self.calls = []
        self.released = False

    async def new_page(self):
        return FakePage(self)

    async def release(self):
        if self.released:
            return
        self.released = True
        self.browser.live -= 1
        self.browser.events.append(("release", self))


class FakeBrowser:
    """Stands in for ``browser.acquire_session`` and records what happened."""

    def __init__(self):
        self.sessions = []
        self.events = []
        self.tables = {}
        self.missing_tables = set()
        self.broken_urls = set()
        self.failing_names = set()
        self.acquire_error = None
        self.live = 0
        self.max_live = 0

    async def acquire(self, config, executor=None):
        await asyncio.sleep(0)
        if self.acquire_error is not None:
            raise self.acquire_error
        session = FakeSession(self, config)
        self.sessions.append(session)
        self.events.append(("acquire", session))
        self.live += 1
        self.max_live = max(self.max_live, self.live)
        return session


@pytest.fixture
def fake_browser(monkeypatch) -> FakeBrowser:
    fake = FakeBrowser()
    monkeypatch.setattr(browser, "acquire_session", fake.acquire)
    return fake
