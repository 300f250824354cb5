"""
Launch screen metadata: device sizes and scale factors scraped from the Apple
Human Interface Guidelines, with the bundled dataset as a fallback whenever
scraping is skipped or fails.
"""
from typing import List

from selenium.common.exceptions import TimeoutException

from . import browser, constants
from .errors import EmptyScrapeResult, ScrapeTimeout
from .log import get_logger
from .models import DeviceLaunchSpec, DeviceScaleSpec, LaunchScreenSpec, Options
from .parsing import parse_dimension, parse_scale_factor


def _cell(cells, index) -> str:
    return cells[index].strip() if index < len(cells) else ""


def launch_spec_from_row(cells: List[str]) -> DeviceLaunchSpec:
    return DeviceLaunchSpec(
        device=_cell(cells, 0),
        portrait=parse_dimension(_cell(cells, 1)),
        landscape=parse_dimension(_cell(cells, 2)),
    )


def scale_spec_from_row(cells: List[str]) -> DeviceScaleSpec:
    return DeviceScaleSpec(
        device=_cell(cells, 0),
        scale_factor=parse_scale_factor(_cell(cells, 1)),
    )


async def _scrape_rows(session, url: str, options: Options) -> List[List[str]]:
    logger = get_logger("scrape_rows", options)
    page = await session.new_page()
    await page.set_user_agent(constants.EMULATED_USER_AGENT)
    logger.info("Navigating to Apple Human Interface Guidelines website - %s", url)
    await page.goto(url)

    logger.info("Waiting for the data table to be loaded")
    try:
        await page.wait_for_selector(
            constants.APPLE_HIG_TABLE_SELECTOR, constants.WAIT_FOR_SELECTOR_TIMEOUT
        )
    except TimeoutException:
        raise ScrapeTimeout(url, constants.WAIT_FOR_SELECTOR_TIMEOUT) from None

    rows = [
        cells
        for cells in await page.table_rows(constants.APPLE_HIG_SPLASH_SCR_SPECS_DATA_GRID_SELECTOR)
        if cells
    ]
    if not rows:
        raise EmptyScrapeResult(url)
    return rows


async def get_launch_screen_data(session, options: Options) -> List[DeviceLaunchSpec]:
    rows = await _scrape_rows(session, constants.APPLE_HIG_SPLASH_SCR_SPECS_URL, options)
    get_logger("get_launch_screen_data", options).info("Retrieved splash screen data")
    return [launch_spec_from_row(cells) for cells in rows]


async def get_scale_factor_data(session, options: Options) -> List[DeviceScaleSpec]:
    rows = await _scrape_rows(session, constants.APPLE_HIG_DEVICE_SCALE_FACTOR_SPECS_URL, options)
    get_logger("get_scale_factor_data", options).info("Retrieved scale factor data")
    return [scale_spec_from_row(cells) for cells in rows]


def unify_specs(
    launch_specs: List[DeviceLaunchSpec], scale_specs: List[DeviceScaleSpec]
) -> List[LaunchScreenSpec]:
    """Inner join on device name; devices without a scale factor are dropped."""
    scale_factors = {}
    for spec in scale_specs:
        scale_factors.setdefault(spec.device, spec.scale_factor)
    return [
        LaunchScreenSpec(
            device=spec.device,
            portrait=spec.portrait,
            landscape=spec.landscape,
            scale_factor=scale_factors[spec.device],
        )
        for spec in launch_specs
        if spec.device in scale_factors
    ]


async def get_splash_screen_meta_data(options: Options, executor=None) -> List[LaunchScreenSpec]:
    logger = get_logger("get_splash_screen_meta_data", options)

    if not options.scrape:
        logger.info("Skipped scraping - using static data")
        return list(constants.APPLE_HIG_SPLASH_SCREEN_FALLBACK_DATA)

    logger.info("Initialising browser to load latest splash screen metadata")
    config = browser.SessionConfig(
        timeout=constants.METADATA_SESSION_TIMEOUT, no_sandbox=options.no_sandbox
    )
    try:
        # one session per table; the second starts once the first is released
        async with browser.rendering_session(config, executor) as session:
            launch_specs = await get_launch_screen_data(session, options)
        async with browser.rendering_session(config, executor) as session:
            scale_specs = await get_scale_factor_data(session, options)
        unified = unify_specs(launch_specs, scale_specs)
        if not unified:
            raise EmptyScrapeResult(constants.APPLE_HIG_DEVICE_SCALE_FACTOR_SPECS_URL)
    except Exception as e:
        # scraping only enriches the bundled data; it never fails the run
        logger.warning(
            "Failed to fetch latest specs from Apple Human Interface guidelines"
            " (%s) - using static fallback data",
            e,
        )
        return list(constants.APPLE_HIG_SPLASH_SCREEN_FALLBACK_DATA)

    logger.success("Loaded metadata for iOS platform")
    return unified
