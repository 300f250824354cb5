"""Normalisation of user supplied flags into ``Options``."""
from .constants import IMAGE_TYPES
from .log import get_logger
from .models import Options

ONLY_FLAG_PAIRS = (
    ("icon_only", "splash_only"),
    ("portrait_only", "landscape_only"),
)


def normalize_only_flag_pairs(flag1: str, flag2: str, opts: dict, logger=None) -> dict:
    """Both flags of a pair set means "generate both": clear them."""
    if opts.get(flag1) and opts.get(flag2):
        if logger is not None:
            logger.warning(
                "Hmm, you want to _only_ generate both %s and %s set. "
                "Ignoring --x-only settings as this is default behavior",
                flag1.replace("_only", ""),
                flag2.replace("_only", ""),
            )
        return {flag1: False, flag2: False}
    return {}


def normalize_output(output) -> str:
    if not output:
        return "."
    return output


def get_default_options() -> dict:
    return {name: getattr(Options(), name) for name in Options.field_names()}


def normalize_options(**flags) -> Options:
    opts = get_default_options()
    opts.update({k: v for k, v in flags.items() if k in opts and v is not None})
    logger = get_logger("normalize_options", Options(log=opts["log"]))

    for flag1, flag2 in ONLY_FLAG_PAIRS:
        opts.update(normalize_only_flag_pairs(flag1, flag2, opts, logger))

    if opts["type"] == "jpg":
        opts["type"] = "jpeg"
    if opts["type"] not in IMAGE_TYPES:
        raise ValueError(f"Unsupported image type {opts['type']!r}, expected one of {', '.join(IMAGE_TYPES)}")
    if not 0 <= int(opts["quality"]) <= 100:
        raise ValueError(f"Image quality must be between 0 and 100, got {opts['quality']}")
    opts["quality"] = int(opts["quality"])
    return Options(**opts)
