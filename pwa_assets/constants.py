"""
Fixed data the generator works from: icon size sets, filename prefixes,
reference pages for launch screen metadata and the static fallback dataset.

Environment overrides:
  PWA_ASSETS_CHROME_PATH   Chrome/Chromium binary to launch and attach to
                           instead of letting selenium start the browser.
"""
import os

from .models import Dimension, LaunchScreenSpec

APPLE_ICON_SIZES = [180, 167, 152, 120]
MANIFEST_ICON_SIZES = [192, 512]
FAVICON_SIZES = [196]
MSTILE_ICON_SIZES = [128, 270, 558]

APPLE_ICON_FILENAME_PREFIX = "apple-icon"
APPLE_SPLASH_FILENAME_PREFIX = "apple-splash"
APPLE_SPLASH_FILENAME_DARK_MODE_POSTFIX = "-dark"
MANIFEST_ICON_FILENAME_PREFIX = "manifest-icon"
FAVICON_FILENAME_PREFIX = "favicon"
MSTILE_FILENAME_PREFIX = "mstile-icon"

# msapplication meta name for each tile size
MSTILE_META_NAMES = {
    128: "msapplication-square70x70logo",
    270: "msapplication-square150x150logo",
    558: "msapplication-square310x310logo",
}

IMAGE_TYPES = ("png", "jpeg", "webp")
IMAGE_FILE_EXTENSIONS = {
    ".png", ".jpg", ".jpeg", ".webp", ".gif", ".svg", ".bmp", ".ico", ".tif", ".tiff",
}
HTML_FILE_EXTENSIONS = {".html", ".htm", ".xhtml"}

APPLE_HIG_SPLASH_SCR_SPECS_URL = (
    "https://developer.apple.com/design/human-interface-guidelines/layout"
)
APPLE_HIG_DEVICE_SCALE_FACTOR_SPECS_URL = (
    "https://developer.apple.com/design/human-interface-guidelines/images"
)
APPLE_HIG_SPLASH_SCR_SPECS_DATA_GRID_SELECTOR = "table tr:not(:first-child)"
APPLE_HIG_TABLE_SELECTOR = "table"

EMULATED_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)

# seconds
WAIT_FOR_SELECTOR_TIMEOUT = 1.0
METADATA_SESSION_TIMEOUT = 5.0
BROWSER_SHELL_TIMEOUT = 60.0
PAGE_LOAD_TIMEOUT = 60.0
CHROME_TEARDOWN_TIMEOUT = 5.0

CHROME_PATH = os.environ.get("PWA_ASSETS_CHROME_PATH") or None

SHELL_HTML_TEMPLATE = """<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8"/>
    <style>
      html, body {{ margin: 0; height: 100%; }}
      body {{
        background: {background};
        padding: {padding};
        box-sizing: border-box;
      }}
      .logo {{
        display: block;
        width: 100%;
        height: 100%;
        object-fit: contain;
      }}
    </style>
  </head>
  <body>
    <img class="logo" src="{url}" alt=""/>
  </body>
</html>
"""


def _spec(device, portrait, landscape, scale_factor):
    return LaunchScreenSpec(
        device=device,
        portrait=Dimension(*portrait),
        landscape=Dimension(*landscape),
        scale_factor=scale_factor,
    )


APPLE_HIG_SPLASH_SCREEN_FALLBACK_DATA = [
    _spec('12.9" iPad Pro', (2048, 2732), (2732, 2048), 2),
    _spec('11" iPad Pro', (1668, 2388), (2388, 1668), 2),
    _spec('10.5" iPad Pro', (1668, 2224), (2224, 1668), 2),
    _spec('10.9" iPad Air', (1640, 2360), (2360, 1640), 2),
    _spec('10.2" iPad', (1620, 2160), (2160, 1620), 2),
    _spec('9.7" iPad', (1536, 2048), (2048, 1536), 2),
    _spec('8.3" iPad mini', (1488, 2266), (2266, 1488), 2),
    _spec("iPhone 15 Pro Max", (1290, 2796), (2796, 1290), 3),
    _spec("iPhone 15 Pro", (1179, 2556), (2556, 1179), 3),
    _spec("iPhone 14 Plus", (1284, 2778), (2778, 1284), 3),
    _spec("iPhone 14", (1170, 2532), (2532, 1170), 3),
    _spec("iPhone 13 mini", (1125, 2436), (2436, 1125), 3),
    _spec("iPhone 11 Pro Max", (1242, 2688), (2688, 1242), 3),
    _spec("iPhone 11", (828, 1792), (1792, 828), 2),
    _spec("iPhone 8 Plus", (1242, 2208), (2208, 1242), 3),
    _spec("iPhone SE", (750, 1334), (1334, 750), 2),
    _spec("iPod touch", (640, 1136), (1136, 640), 2),
]
