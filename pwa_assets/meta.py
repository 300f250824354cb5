"""
HTML head tags and web app manifest entries for generated images, and helpers
that write them into an existing index page / manifest.json.
"""
import json
import re
from typing import Dict, List, Optional

from . import constants, files
from .models import LANDSCAPE, Options, SavedImage

# existing tags of these kinds are replaced when an index page is updated
_REPLACED_TAG_RE = re.compile(
    r"[ \t]*<(?:link[^>]*rel=[\"'](?:apple-touch-icon|apple-touch-startup-image|icon)[\"']"
    r"|meta[^>]*name=[\"'](?:apple-mobile-web-app-capable|msapplication-square\d+x\d+logo)[\"'])"
    r"[^>]*>[ \t]*\n?",
    re.IGNORECASE,
)
_HEAD_CLOSE_RE = re.compile(r"</head\s*>", re.IGNORECASE)


def _href(image: SavedImage, options: Options, reference_path: Optional[str]) -> str:
    if options.path_override is not None:
        prefix = options.path_override.rstrip("/")
        name = image.path.replace("\\", "/").rsplit("/", 1)[-1]
        return f"{prefix}/{name}" if prefix else name
    return files.get_relative_image_path(image.path, reference_path)


def _tag(name: str, attrs: Dict[str, str], options: Options) -> str:
    quote = "'" if options.single_quotes else '"'
    rendered = " ".join(f"{key}={quote}{value}{quote}" for key, value in attrs.items())
    close = " />" if options.xhtml else ">"
    return f"<{name} {rendered}{close}"


def _media_query(image: SavedImage, dark_mode: bool) -> str:
    # device-width/height are given in points of the portrait device
    width = image.width // image.scale_factor
    height = image.height // image.scale_factor
    if image.orientation == LANDSCAPE:
        width, height = height, width
    query = (
        f"screen and (device-width: {width}px) and (device-height: {height}px)"
        f" and (-webkit-device-pixel-ratio: {image.scale_factor})"
        f" and (orientation: {image.orientation})"
    )
    if dark_mode:
        query = f"(prefers-color-scheme: dark) and {query}"
    return query


def _by_prefix(images: List[SavedImage], prefix: str) -> List[SavedImage]:
    return [
        image for image in images
        if image.orientation is None and image.name.startswith(prefix + "-")
    ]


def generate_icons_content_for_manifest(images: List[SavedImage], options: Options,
                                        manifest_path: Optional[str] = None) -> List[dict]:
    return [
        {
            "src": _href(image, options, manifest_path),
            "sizes": f"{image.width}x{image.height}",
            "type": files.get_mime_type(image.path),
            "purpose": "any maskable",
        }
        for image in _by_prefix(images, constants.MANIFEST_ICON_FILENAME_PREFIX)
    ]


def generate_html_for_index_page(images: List[SavedImage], options: Options,
                                 index_path: Optional[str] = None) -> str:
    tags = []
    for image in _by_prefix(images, constants.FAVICON_FILENAME_PREFIX):
        tags.append(_tag("link", {
            "rel": "icon",
            "type": files.get_mime_type(image.path),
            "sizes": f"{image.width}x{image.height}",
            "href": _href(image, options, index_path),
        }, options))
    for image in _by_prefix(images, constants.APPLE_ICON_FILENAME_PREFIX):
        tags.append(_tag("link", {
            "rel": "apple-touch-icon",
            "sizes": f"{image.width}x{image.height}",
            "href": _href(image, options, index_path),
        }, options))
    for image in _by_prefix(images, constants.MSTILE_FILENAME_PREFIX):
        meta_name = constants.MSTILE_META_NAMES.get(image.width)
        if meta_name:
            tags.append(_tag("meta", {
                "name": meta_name,
                "content": _href(image, options, index_path),
            }, options))

    splash = [image for image in images if image.orientation is not None]
    if splash:
        tags.append(_tag("meta", {"name": "apple-mobile-web-app-capable", "content": "yes"}, options))
    for image in splash:
        tags.append(_tag("link", {
            "rel": "apple-touch-startup-image",
            "href": _href(image, options, index_path),
            "media": _media_query(image, options.dark_mode),
        }, options))
    return "\n".join(tags) + ("\n" if tags else "")


def add_meta_tags_to_index_page(html: str, index_path: str) -> str:
    """Insert ``html`` before ``</head>`` of the index page, replacing older tags."""
    page = files.read_file(index_path)
    match = _HEAD_CLOSE_RE.search(page)
    if not match:
        raise ValueError(f"No </head> tag found in {index_path}")
    head, tail = page[:match.start()], page[match.start():]
    head = _REPLACED_TAG_RE.sub("", head)
    if not head.endswith("\n"):
        head += "\n"
    updated = head + html + tail
    files.write_file(index_path, updated)
    return updated


def add_icons_to_manifest(icons: List[dict], manifest_path: str) -> dict:
    data = json.loads(files.read_file(manifest_path))
    generated = {icon["src"] for icon in icons}
    kept = [icon for icon in data.get("icons", []) if icon.get("src") not in generated]
    data["icons"] = kept + icons
    files.write_file(manifest_path, json.dumps(data, indent=2) + "\n")
    return data
