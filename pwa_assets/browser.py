"""
Headless Chrome sessions driven through selenium.

A session is either owned by selenium (chromedriver starts and stops the
browser) or attached to a Chrome process launched here with a remote
debugging port. Callers only ever see ``RenderingSession``; which variant they
got is decided in ``acquire_session`` from the configured Chrome binary.

Selenium is blocking, so every call is dispatched to an executor and many
sessions can make progress under one event loop.
"""
import abc
import asyncio
import base64
import functools
import shutil
import socket
import subprocess
import tempfile
import threading
import time
import urllib.request
from contextlib import asynccontextmanager
from dataclasses import dataclass
from io import BytesIO
from typing import List, Optional

from PIL import Image
from selenium import webdriver
from selenium.common.exceptions import WebDriverException
from selenium.webdriver.common.by import By
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait

from . import constants
from .errors import AcquireTimeout, AssetGeneratorError
from .log import get_logger
from .models import Dimension

logger = get_logger("browser")

_CONTENT_READY_JS = (
    "return document.readyState === 'complete' && "
    "Array.from(document.images).every(function (img) { return img.complete; });"
)
_TABLE_ROWS_JS = (
    "return Array.from(document.querySelectorAll(arguments[0])).map(function (tr) {"
    "  return Array.from(tr.querySelectorAll('td')).map(function (td) {"
    "    return td.innerText;"
    "  });"
    "});"
)
_WRITE_DOCUMENT_JS = "document.open(); document.write(arguments[0]); document.close();"
_TRANSPARENT = {"color": {"r": 0, "g": 0, "b": 0, "a": 0}}


@dataclass(frozen=True)
class SessionConfig:
    viewport: Optional[Dimension] = None
    timeout: float = constants.BROWSER_SHELL_TIMEOUT
    no_sandbox: bool = False
    chrome_path: Optional[str] = constants.CHROME_PATH


def chrome_arguments(config: SessionConfig) -> List[str]:
    args = ["--headless=new", "--hide-scrollbars", "--disable-gpu", "--mute-audio"]
    if config.viewport is not None:
        args.append(f"--window-size={config.viewport.width},{config.viewport.height}")
    if config.no_sandbox:
        args += ["--no-sandbox", "--disable-dev-shm-usage"]
    return args


def encode_image(png: bytes, image_type: str, quality: Optional[int] = None) -> bytes:
    """Re-encode a PNG capture into the requested format."""
    if image_type == "png":
        return png
    with Image.open(BytesIO(png)) as im:
        im = im.convert("RGBA")
        kwargs = {}
        if quality is not None:
            kwargs["quality"] = quality
        if image_type == "jpeg":
            # JPEG has no alpha; flatten onto white
            flat = Image.new("RGBA", im.size, (255, 255, 255, 255))
            im = Image.alpha_composite(flat, im).convert("RGB")
            kwargs["optimize"] = True
            fmt = "JPEG"
        elif image_type == "webp":
            fmt = "WEBP"
        else:
            raise ValueError(f"Unsupported image type: {image_type}")
        out = BytesIO()
        im.save(out, format=fmt, **kwargs)
        return out.getvalue()


class Page:
    """One browser tab of a session."""

    def __init__(self, session: "RenderingSession", handle: str):
        self._session = session
        self._handle = handle

    @property
    def _driver(self):
        return self._session.driver

    def _activate(self):
        if self._driver.current_window_handle != self._handle:
            self._driver.switch_to.window(self._handle)

    def _set_user_agent(self, user_agent: str):
        self._activate()
        self._driver.execute_cdp_cmd(
            "Network.setUserAgentOverride", {"userAgent": user_agent}
        )

    def _goto(self, address: str):
        self._activate()
        self._driver.get(address)

    def _set_content(self, html: str):
        self._activate()
        self._driver.get("about:blank")
        self._driver.execute_script(_WRITE_DOCUMENT_JS, html)
        WebDriverWait(self._driver, constants.PAGE_LOAD_TIMEOUT).until(
            lambda d: d.execute_script(_CONTENT_READY_JS)
        )

    def _wait_for_selector(self, selector: str, timeout: float):
        self._activate()
        WebDriverWait(self._driver, timeout).until(
            EC.presence_of_element_located((By.CSS_SELECTOR, selector))
        )

    def _table_rows(self, selector: str) -> List[List[str]]:
        self._activate()
        return self._driver.execute_script(_TABLE_ROWS_JS, selector) or []

    def _screenshot(self, path, omit_background, image_type, quality):
        self._activate()
        driver = self._driver
        if omit_background:
            driver.execute_cdp_cmd("Emulation.setDefaultBackgroundColorOverride", _TRANSPARENT)
        try:
            result = driver.execute_cdp_cmd(
                "Page.captureScreenshot", {"format": "png", "fromSurface": True}
            )
        finally:
            if omit_background:
                driver.execute_cdp_cmd("Emulation.setDefaultBackgroundColorOverride", {})
        data = encode_image(base64.b64decode(result["data"]), image_type, quality)
        if path:
            with open(path, "wb") as f:
                f.write(data)
        return data

    async def set_user_agent(self, user_agent: str) -> None:
        await self._session.run(self._set_user_agent, user_agent)

    async def goto(self, address: str) -> None:
        await self._session.run(self._goto, address)

    async def set_content(self, html: str) -> None:
        await self._session.run(self._set_content, html)

    async def wait_for_selector(self, selector: str, timeout: float) -> None:
        await self._session.run(self._wait_for_selector, selector, timeout)

    async def table_rows(self, selector: str) -> List[List[str]]:
        return await self._session.run(self._table_rows, selector)

    async def screenshot(self, path=None, omit_background=False, type="png", quality=None) -> bytes:
        return await self._session.run(
            self._screenshot, path, omit_background, type, quality
        )


class RenderingSession(abc.ABC):
    """A live browser bound to a viewport. Release exactly once, via ``release``."""

    def __init__(self, driver, config: SessionConfig, executor=None):
        self.driver = driver
        self.config = config
        self._executor = executor
        self._pages = 0
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    async def run(self, fn, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, functools.partial(fn, *args))

    def _new_page(self) -> str:
        if self._pages:
            self.driver.switch_to.new_window("tab")
        self._pages += 1
        viewport = self.config.viewport
        if viewport is not None:
            self.driver.execute_cdp_cmd(
                "Emulation.setDeviceMetricsOverride",
                {
                    "width": viewport.width,
                    "height": viewport.height,
                    "deviceScaleFactor": 1,
                    "mobile": False,
                },
            )
        return self.driver.current_window_handle

    async def new_page(self) -> Page:
        handle = await self.run(self._new_page)
        return Page(self, handle)

    @abc.abstractmethod
    def close(self) -> None:
        """Shut the browser down. Blocking; runs on the executor."""

    async def release(self) -> None:
        if self._released:
            return
        self._released = True
        await self.run(self.close)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.release()


class OwnedSession(RenderingSession):
    """Browser process started and owned by chromedriver."""

    @classmethod
    def launch(cls, config: SessionConfig, executor=None) -> "OwnedSession":
        options = webdriver.ChromeOptions()
        for arg in chrome_arguments(config):
            options.add_argument(arg)
        driver = webdriver.Chrome(options=options)
        driver.set_page_load_timeout(constants.PAGE_LOAD_TIMEOUT)
        return cls(driver, config, executor)

    def close(self) -> None:
        try:
            self.driver.quit()
        except WebDriverException as e:
            logger.warning("Failed to quit browser cleanly: %s", e)


class AttachedSession(RenderingSession):
    """Driver attached to a Chrome process launched outside chromedriver."""

    def __init__(self, driver, config, executor=None, process=None, profile_dir=None):
        super().__init__(driver, config, executor)
        self.process = process
        self.profile_dir = profile_dir

    @classmethod
    def launch(cls, config: SessionConfig, executor=None) -> "AttachedSession":
        port = _free_port()
        profile_dir = tempfile.mkdtemp(prefix="pwa-assets-chrome-")
        cmd = [
            config.chrome_path,
            f"--remote-debugging-port={port}",
            f"--user-data-dir={profile_dir}",
            "--no-first-run",
            "--no-default-browser-check",
            *chrome_arguments(config),
            "about:blank",
        ]
        process = subprocess.Popen(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
        try:
            _wait_for_devtools(process, port, config.timeout)
            options = webdriver.ChromeOptions()
            options.debugger_address = f"127.0.0.1:{port}"
            driver = webdriver.Chrome(options=options)
        except BaseException:
            _terminate(process)
            shutil.rmtree(profile_dir, ignore_errors=True)
            raise
        driver.set_page_load_timeout(constants.PAGE_LOAD_TIMEOUT)
        return cls(driver, config, executor, process=process, profile_dir=profile_dir)

    def close(self) -> None:
        try:
            # only ends the chromedriver session; the browser stays up
            self.driver.quit()
        except WebDriverException as e:
            logger.warning("Failed to disconnect from browser cleanly: %s", e)
        finally:
            _terminate(self.process)
            shutil.rmtree(self.profile_dir, ignore_errors=True)


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


def _wait_for_devtools(process, port: int, timeout: float) -> None:
    deadline = time.monotonic() + timeout
    url = f"http://127.0.0.1:{port}/json/version"
    while True:
        if process.poll() is not None:
            raise AssetGeneratorError(f"Chrome exited with code {process.returncode} during startup")
        try:
            with urllib.request.urlopen(url, timeout=1) as r:
                if r.status == 200:
                    return
        except OSError:
            pass
        if time.monotonic() >= deadline:
            raise AcquireTimeout(timeout)
        time.sleep(0.1)


def _terminate(process) -> None:
    if process is None or process.poll() is not None:
        return
    process.terminate()
    try:
        process.wait(timeout=constants.CHROME_TEARDOWN_TIMEOUT)
    except subprocess.TimeoutExpired:
        process.kill()
        process.wait()


def launch_session(config: SessionConfig, executor=None) -> RenderingSession:
    if config.chrome_path:
        return AttachedSession.launch(config, executor)
    return OwnedSession.launch(config, executor)


def _close_late(session: RenderingSession) -> None:
    # the session came up after its caller gave up waiting
    session._released = True
    threading.Thread(target=session.close, name="pwa-assets-close-late").start()


class _Launch:
    """Launches a session on a worker thread and closes it if nobody waits for it."""

    def __init__(self):
        self._lock = threading.Lock()
        self._abandoned = False
        self._session = None

    def __call__(self, config: SessionConfig, executor=None) -> RenderingSession:
        session = launch_session(config, executor)
        with self._lock:
            if not self._abandoned:
                self._session = session
                return session
        _close_late(session)
        return session

    def abandon(self) -> None:
        with self._lock:
            self._abandoned = True
            session, self._session = self._session, None
        # launched, but the result never reached the caller
        if session is not None:
            _close_late(session)


async def acquire_session(config: SessionConfig, executor=None) -> RenderingSession:
    loop = asyncio.get_running_loop()
    launch = _Launch()
    future = loop.run_in_executor(executor, launch, config, executor)
    try:
        return await asyncio.wait_for(asyncio.shield(future), config.timeout)
    except asyncio.TimeoutError:
        launch.abandon()
        raise AcquireTimeout(config.timeout) from None
    except WebDriverException as e:
        raise AssetGeneratorError(f"Could not start browser: {e.msg or e}") from e


@asynccontextmanager
async def rendering_session(config: SessionConfig, executor=None):
    """Acquire a session and release it on every exit path."""
    session = await acquire_session(config, executor)
    try:
        yield session
    finally:
        await session.release()
