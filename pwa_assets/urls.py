"""Resolve a source into an address to navigate to, or markup to inject."""
import re
from pathlib import Path

from . import files
from .constants import SHELL_HTML_TEMPLATE
from .log import get_logger

_URL_RE = re.compile(r"^(https?|file)://[^\s]+$", re.IGNORECASE)


def is_url(source: str) -> bool:
    return bool(_URL_RE.match(source.strip()))


def _is_local_file(source: str) -> bool:
    try:
        return Path(source).is_file()
    except (OSError, ValueError):
        # raw markup can be too long or contain characters no path allows
        return False


def get_address(source: str, options=None) -> str:
    logger = get_logger("get_address", options)
    if is_url(source):
        return source.strip()
    if not _is_local_file(source):
        raise FileNotFoundError(f"Source file {source} does not exist")
    address = files.get_file_url(source)
    logger.info("Serving local file %s", address)
    return address


def get_shell_html(source: str, options) -> str:
    logger = get_logger("get_shell_html", options)
    if is_url(source):
        logger.info("Embedding image %s in a shell page", source)
        return _shell(source.strip(), options)
    if _is_local_file(source):
        if files.is_image_file(source):
            logger.info("Embedding local image %s in a shell page", source)
            return _shell(files.get_image_base64_url(source), options)
        logger.info("Injecting markup from %s", source)
        return files.read_file(source)
    logger.info("Injecting source as inline markup")
    return source


def _shell(image_url: str, options) -> str:
    return SHELL_HTML_TEMPLATE.format(
        background=options.background,
        padding=options.padding,
        url=image_url.replace('"', "%22"),
    )
