import asyncio
import threading
import time
from pathlib import Path

import pytest

from pwa_assets import browser, constants, puppets
from pwa_assets.errors import AcquireTimeout, CaptureFailed, DirectoryCreateFailed
from pwa_assets.models import ImageSpec, Options, SavedImage

MARKUP = "<html><body><h1>Logo</h1></body></html>"

MANIFEST = [
    ImageSpec("apple-splash-750-1334", 750, 1334, 2, "portrait"),
    ImageSpec("apple-icon-180", 180, 180),
    ImageSpec("manifest-icon-192", 192, 192),
]


def test_can_navigate_to(tmp_path):
    assert puppets.can_navigate_to("https://example.com")
    assert puppets.can_navigate_to("https://example.com/index.html?x=1")
    assert not puppets.can_navigate_to("https://example.com/logo.png")
    assert puppets.can_navigate_to(str(tmp_path / "logo.html"))
    assert not puppets.can_navigate_to(str(tmp_path / "logo.svg"))
    assert not puppets.can_navigate_to(MARKUP)


def test_screenshot_options():
    assert puppets.screenshot_options(Options(type="png", quality=50)) == {
        "omit_background": False, "type": "png",
    }
    assert puppets.screenshot_options(Options(type="jpeg", quality=50, opaque=False)) == {
        "omit_background": True, "type": "jpeg", "quality": 50,
    }


def test_save_images_preserves_manifest_order(fake_browser, tmp_path):
    saved = asyncio.run(puppets.save_images(MANIFEST, MARKUP, str(tmp_path), Options()))

    assert [s.name for s in saved] == [i.name for i in MANIFEST]
    assert saved[0] == SavedImage(
        name="apple-splash-750-1334", width=750, height=1334, scale_factor=2,
        orientation="portrait", path=str(tmp_path / "apple-splash-750-1334.png"),
    )
    for image in saved:
        assert Path(image.path).exists()
    assert all(s.released for s in fake_browser.sessions)


def test_each_image_gets_its_own_sized_session(fake_browser, tmp_path):
    asyncio.run(puppets.save_images(MANIFEST, MARKUP, str(tmp_path), Options(no_sandbox=True)))

    viewports = sorted(
        (s.config.viewport.width, s.config.viewport.height) for s in fake_browser.sessions
    )
    assert viewports == [(180, 180), (192, 192), (750, 1334)]
    assert all(s.config.no_sandbox for s in fake_browser.sessions)


def test_markup_is_injected_not_navigated(fake_browser, tmp_path):
    asyncio.run(puppets.save_images(MANIFEST[:1], MARKUP, str(tmp_path), Options()))
    calls = fake_browser.sessions[0].calls
    assert ("set_content", MARKUP) in calls
    assert not any(call[0] == "goto" for call in calls)


def test_urls_are_navigated(fake_browser, tmp_path):
    asyncio.run(puppets.save_images(MANIFEST[:1], "https://example.com", str(tmp_path), Options()))
    calls = fake_browser.sessions[0].calls
    assert ("goto", "https://example.com") in calls
    assert not any(call[0] == "set_content" for call in calls)


def test_image_urls_are_wrapped_in_shell_page(fake_browser, tmp_path):
    source = "https://example.com/logo.png"
    asyncio.run(puppets.save_images(MANIFEST[:1], source, str(tmp_path), Options(background="#123456")))
    (html,) = [call[1] for call in fake_browser.sessions[0].calls if call[0] == "set_content"]
    assert source in html
    assert "#123456" in html


def test_lossy_types_carry_quality(fake_browser, tmp_path):
    options = Options(type="webp", quality=42, opaque=False)
    saved = asyncio.run(puppets.save_images(MANIFEST[1:2], MARKUP, str(tmp_path), options))
    assert saved[0].path.endswith("apple-icon-180.webp")
    (shot,) = [call for call in fake_browser.sessions[0].calls if call[0] == "screenshot"]
    assert shot[2] == {"omit_background": True, "type": "webp", "quality": 42}


def test_captures_start_concurrently(fake_browser, tmp_path):
    asyncio.run(puppets.save_images(MANIFEST, MARKUP, str(tmp_path), Options()))
    assert fake_browser.max_live == len(MANIFEST)


def test_max_sessions_bounds_live_browsers(fake_browser, tmp_path):
    saved = asyncio.run(
        puppets.save_images(MANIFEST, MARKUP, str(tmp_path), Options(), max_sessions=1)
    )
    assert fake_browser.max_live == 1
    assert [s.name for s in saved] == [i.name for i in MANIFEST]


def test_first_failure_aborts_batch(fake_browser, tmp_path):
    fake_browser.failing_names = {"apple-icon-180"}

    with pytest.raises(CaptureFailed) as excinfo:
        asyncio.run(puppets.save_images(MANIFEST, MARKUP, str(tmp_path), Options()))

    assert excinfo.value.name == "apple-icon-180"
    # the third capture was already running; its browser is still released
    assert len(fake_browser.sessions) == 3
    assert all(s.released for s in fake_browser.sessions)


def test_failure_reported_in_manifest_order(fake_browser, tmp_path):
    fake_browser.failing_names = {"apple-icon-180", "manifest-icon-192"}
    with pytest.raises(CaptureFailed) as excinfo:
        asyncio.run(puppets.save_images(MANIFEST, MARKUP, str(tmp_path), Options()))
    assert excinfo.value.name == "apple-icon-180"


def test_empty_manifest(fake_browser, tmp_path):
    assert asyncio.run(puppets.save_images([], MARKUP, str(tmp_path), Options())) == []
    assert fake_browser.sessions == []


def test_generate_images_creates_output_dir(fake_browser, tmp_path):
    output = tmp_path / "nested" / "assets"
    options = Options(scrape=False, splash_only=True, portrait_only=True)

    saved = asyncio.run(puppets.generate_images(MARKUP, str(output), options))

    assert output.is_dir()
    assert saved
    assert all(s.orientation == "portrait" for s in saved)
    assert len(fake_browser.sessions) == len(saved)


def test_generate_images_fails_before_capture_when_dir_cannot_be_made(fake_browser, tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")

    with pytest.raises(DirectoryCreateFailed):
        asyncio.run(
            puppets.generate_images(MARKUP, str(blocker / "assets"), Options(scrape=False))
        )
    assert fake_browser.sessions == []


def test_missing_html_file_source(fake_browser, tmp_path):
    with pytest.raises(FileNotFoundError):
        asyncio.run(
            puppets.save_images(MANIFEST, str(tmp_path / "missing.html"), str(tmp_path), Options())
        )
    assert fake_browser.sessions == []


def test_acquire_timeout_aborts_batch(fake_browser, tmp_path):
    fake_browser.acquire_error = AcquireTimeout(1)
    saved = None

    with pytest.raises(CaptureFailed) as excinfo:
        saved = asyncio.run(puppets.save_images(MANIFEST, MARKUP, str(tmp_path), Options()))

    assert saved is None
    assert excinfo.value.name == MANIFEST[0].name
    assert isinstance(excinfo.value.__cause__, AcquireTimeout)
    assert fake_browser.sessions == []
    assert not list(tmp_path.iterdir())


def test_acquire_timeout_does_not_stall_event_loop(monkeypatch, tmp_path):
    closed = threading.Event()

    class SlowSession:
        def close(self):
            closed.set()

    def slow_launch(config, executor=None):
        time.sleep(1.0)
        return SlowSession()

    monkeypatch.setattr(browser, "launch_session", slow_launch)
    monkeypatch.setattr(constants, "BROWSER_SHELL_TIMEOUT", 0.05)

    async def capture_with_heartbeat():
        gaps = []
        done = asyncio.Event()

        async def heartbeat():
            last = time.monotonic()
            while not done.is_set():
                await asyncio.sleep(0.01)
                now = time.monotonic()
                gaps.append(now - last)
                last = now

        beat = asyncio.ensure_future(heartbeat())
        started = time.monotonic()
        try:
            await puppets.save_images(
                [ImageSpec("apple-icon-1", 1, 1)], MARKUP, str(tmp_path), Options(log=False)
            )
        except CaptureFailed as e:
            failed = e
        finally:
            done.set()
            await beat
        return failed, time.monotonic() - started, max(gaps)

    failed, elapsed, longest_gap = asyncio.run(capture_with_heartbeat())

    assert failed.name == "apple-icon-1"
    assert elapsed < 0.5
    assert longest_gap < 0.5
    # the browser that came up late is still shut down
    assert closed.wait(5)
