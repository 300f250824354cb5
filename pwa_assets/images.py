"""Work out which images a run has to produce."""
from typing import Iterable, List

from . import constants
from .models import LANDSCAPE, PORTRAIT, ImageSpec, LaunchScreenSpec, Options


def square_image(prefix: str, size: int) -> ImageSpec:
    return ImageSpec(name=f"{prefix}-{size}", width=size, height=size)


def splash_image(prefix: str, width: int, height: int, scale_factor: int, orientation: str) -> ImageSpec:
    return ImageSpec(
        name=f"{prefix}-{width}-{height}",
        width=width,
        height=height,
        scale_factor=scale_factor,
        orientation=orientation,
    )


def dedupe(images: Iterable[ImageSpec]) -> List[ImageSpec]:
    """Drop structurally equal repeats, keeping first occurrences in order."""
    return list(dict.fromkeys(images))


def get_icon_images(options: Options) -> List[ImageSpec]:
    icons = [square_image(constants.APPLE_ICON_FILENAME_PREFIX, size) for size in constants.APPLE_ICON_SIZES]
    icons += [square_image(constants.MANIFEST_ICON_FILENAME_PREFIX, size) for size in constants.MANIFEST_ICON_SIZES]
    if options.favicon:
        icons += [square_image(constants.FAVICON_FILENAME_PREFIX, size) for size in constants.FAVICON_SIZES]
    if options.mstile:
        icons += [square_image(constants.MSTILE_FILENAME_PREFIX, size) for size in constants.MSTILE_ICON_SIZES]
    return dedupe(icons)


def get_splash_screen_images(specs: Iterable[LaunchScreenSpec], options: Options) -> List[ImageSpec]:
    prefix = constants.APPLE_SPLASH_FILENAME_PREFIX
    if options.dark_mode:
        prefix += constants.APPLE_SPLASH_FILENAME_DARK_MODE_POSTFIX

    images = []
    for spec in specs:
        if not options.landscape_only:
            images.append(
                splash_image(prefix, spec.portrait.width, spec.portrait.height, spec.scale_factor, PORTRAIT)
            )
        if not options.portrait_only:
            images.append(
                splash_image(prefix, spec.landscape.width, spec.landscape.height, spec.scale_factor, LANDSCAPE)
            )
    return dedupe(images)


def build_manifest(specs: Iterable[LaunchScreenSpec], options: Options) -> List[ImageSpec]:
    images = []
    if not options.icon_only:
        images += get_splash_screen_images(specs, options)
    if not options.splash_only:
        images += get_icon_images(options)
    return dedupe(images)
