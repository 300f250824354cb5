"""Value types shared by the metadata, manifest and capture stages."""
from dataclasses import dataclass, fields
from typing import Optional

PORTRAIT = "portrait"
LANDSCAPE = "landscape"


@dataclass(frozen=True)
class Dimension:
    width: int
    height: int


# Parsed from text that held no usable numbers; not a real size.
UNKNOWN_DIMENSION = Dimension(1, 1)


@dataclass(frozen=True)
class DeviceLaunchSpec:
    device: str
    portrait: Dimension
    landscape: Dimension


@dataclass(frozen=True)
class DeviceScaleSpec:
    device: str
    scale_factor: int = 1


@dataclass(frozen=True)
class LaunchScreenSpec:
    """Launch screen sizes of one device joined with its scale factor."""
    device: str
    portrait: Dimension
    landscape: Dimension
    scale_factor: int


@dataclass(frozen=True)
class ImageSpec:
    name: str
    width: int
    height: int
    scale_factor: int = 1
    orientation: Optional[str] = None


@dataclass(frozen=True)
class SavedImage:
    name: str
    width: int
    height: int
    scale_factor: int
    orientation: Optional[str]
    path: str

    @classmethod
    def from_spec(cls, spec: ImageSpec, path: str) -> "SavedImage":
        return cls(
            name=spec.name,
            width=spec.width,
            height=spec.height,
            scale_factor=spec.scale_factor,
            orientation=spec.orientation,
            path=path,
        )


@dataclass(frozen=True)
class Options:
    """Configuration for one generator run.

    Conflicting flag pairs are resolved by ``flags.normalize_options`` before
    an instance reaches the pipeline.
    """
    background: str = "white"
    padding: str = "10%"
    scrape: bool = True
    icon_only: bool = False
    splash_only: bool = False
    portrait_only: bool = False
    landscape_only: bool = False
    type: str = "png"
    quality: int = 70
    opaque: bool = True
    favicon: bool = False
    mstile: bool = False
    dark_mode: bool = False
    log: bool = True
    no_sandbox: bool = False
    manifest: Optional[str] = None
    index: Optional[str] = None
    path_override: Optional[str] = None
    single_quotes: bool = False
    xhtml: bool = False

    @classmethod
    def field_names(cls):
        return [f.name for f in fields(cls)]
