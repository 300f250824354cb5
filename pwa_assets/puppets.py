"""
Render every image of a run in its own headless browser and save it.

All captures are started at once and collected in manifest order: the first
failure in that order aborts the run, and captures already in flight are
allowed to finish and release their browsers before the error propagates.
``max_sessions`` bounds how many browsers are alive at the same time; left
unset, every image gets its own browser immediately.
"""
import asyncio
import os
from concurrent.futures import ThreadPoolExecutor
from contextlib import nullcontext
from typing import List, Optional

from . import browser, constants, files, urls
from .errors import CaptureFailed, DirectoryCreateFailed
from .images import build_manifest
from .log import get_logger
from .metadata import get_splash_screen_meta_data
from .models import Dimension, ImageSpec, Options, SavedImage


def can_navigate_to(source: str) -> bool:
    return (urls.is_url(source) and not files.is_image_file(source)) or files.is_html_file(source)


def screenshot_options(options: Options) -> dict:
    kwargs = {"omit_background": not options.opaque, "type": options.type}
    if options.type != "png":
        kwargs["quality"] = options.quality
    return kwargs


async def _save_image(
    image: ImageSpec,
    address: Optional[str],
    shell_html: Optional[str],
    output: str,
    options: Options,
    executor,
    semaphore,
) -> SavedImage:
    logger = get_logger("save_image", options)
    config = browser.SessionConfig(
        viewport=Dimension(image.width, image.height),
        timeout=constants.BROWSER_SHELL_TIMEOUT,
        no_sandbox=options.no_sandbox,
    )
    path = files.get_image_save_path(image.name, output, options.type)

    async with semaphore or nullcontext():
        try:
            async with browser.rendering_session(config, executor) as session:
                page = await session.new_page()
                if address is not None:
                    await page.goto(address)
                else:
                    await page.set_content(shell_html)
                await page.screenshot(path=path, **screenshot_options(options))
        except Exception as e:
            logger.error("Capture of %s failed: %s", image.name, e)
            raise CaptureFailed(image.name) from e

    logger.success("Saved image %s", image.name)
    return SavedImage.from_spec(image, path)


async def save_images(
    images: List[ImageSpec],
    source: str,
    output: str,
    options: Options,
    max_sessions: Optional[int] = None,
) -> List[SavedImage]:
    logger = get_logger("save_images", options)
    logger.info("Initialising browser to take screenshots")

    address = shell_html = None
    if can_navigate_to(source):
        address = urls.get_address(source, options)
    else:
        shell_html = urls.get_shell_html(source, options)

    if not images:
        return []

    semaphore = asyncio.Semaphore(max_sessions) if max_sessions else None
    executor = ThreadPoolExecutor(
        max_workers=max_sessions or len(images), thread_name_prefix="pwa-assets"
    )
    try:
        tasks = [
            asyncio.ensure_future(
                _save_image(image, address, shell_html, output, options, executor, semaphore)
            )
            for image in images
        ]
        saved = []
        try:
            for task in tasks:
                saved.append(await task)
        except CaptureFailed:
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return saved
    finally:
        # late launches close themselves; do not block the loop on them
        executor.shutdown(wait=False)


def ensure_output_dir(output: str, options: Options) -> None:
    logger = get_logger("ensure_output_dir", options)
    if files.path_exists(output, files.WRITE_ACCESS):
        return
    if not os.path.exists(output):
        logger.warning("Looks like folder %s doesn't exist. Created one for you", output)
    try:
        files.make_dir(output)
    except OSError as e:
        raise DirectoryCreateFailed(output, str(e)) from e
    if not files.path_exists(output, files.WRITE_ACCESS):
        raise DirectoryCreateFailed(output, "folder is not writable")


async def generate_images(
    source: str,
    output: str,
    options: Options,
    max_sessions: Optional[int] = None,
) -> List[SavedImage]:
    specs = await get_splash_screen_meta_data(options)
    manifest = build_manifest(specs, options)
    ensure_output_dir(output, options)
    return await save_images(manifest, source, output, options, max_sessions)
