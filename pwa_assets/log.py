"""Per-component loggers that honour ``Options.log``."""
import logging

ROOT_LOGGER_NAME = "pwa_assets"


class OptionsLoggerAdapter(logging.LoggerAdapter):
    """Drops everything below ERROR when logging is switched off for a run."""

    def __init__(self, logger, enabled=True):
        super().__init__(logger, {})
        self.enabled = enabled

    def isEnabledFor(self, level):
        if not self.enabled and level < logging.ERROR:
            return False
        return super().isEnabledFor(level)

    def success(self, msg, *args, **kwargs):
        self.info("✓ " + msg, *args, **kwargs)


def get_logger(name, options=None):
    enabled = True if options is None else options.log
    return OptionsLoggerAdapter(
        logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}"), enabled=enabled
    )
