"""PWA icon and iOS launch screen generator."""
from .errors import (
    AcquireTimeout,
    AssetGeneratorError,
    CaptureFailed,
    DirectoryCreateFailed,
    EmptyScrapeResult,
    ScrapeTimeout,
)
from .flags import normalize_options
from .images import build_manifest, get_icon_images, get_splash_screen_images
from .metadata import get_splash_screen_meta_data
from .models import ImageSpec, LaunchScreenSpec, Options, SavedImage
from .puppets import generate_images, save_images

__version__ = "0.1.0"

__all__ = [
    "AcquireTimeout",
    "AssetGeneratorError",
    "CaptureFailed",
    "DirectoryCreateFailed",
    "EmptyScrapeResult",
    "ImageSpec",
    "LaunchScreenSpec",
    "Options",
    "SavedImage",
    "ScrapeTimeout",
    "build_manifest",
    "generate_images",
    "get_icon_images",
    "get_splash_screen_images",
    "get_splash_screen_meta_data",
    "normalize_options",
    "save_images",
]
