"""Exceptions raised by the asset generator."""


class AssetGeneratorError(Exception):
    pass


class AcquireTimeout(AssetGeneratorError):
    def __init__(self, timeout: float):
        super().__init__(f"Browser was not ready within {timeout:g}s")
        self.timeout = timeout


class ScrapeTimeout(AssetGeneratorError):
    def __init__(self, url: str, timeout: float):
        super().__init__(
            f"Could not find the table on {url} within timeout {timeout:g}s"
        )
        self.url = url
        self.timeout = timeout


class EmptyScrapeResult(AssetGeneratorError):
    def __init__(self, url: str):
        super().__init__(f"Failed scraping the data on web page {url}")
        self.url = url


class CaptureFailed(AssetGeneratorError):
    def __init__(self, name: str):
        super().__init__(f"Failed to save image {name}")
        self.name = name


class DirectoryCreateFailed(AssetGeneratorError):
    def __init__(self, path: str, reason: str = ""):
        message = f"Could not create output folder {path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.path = path
