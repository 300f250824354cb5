"""
Generate PWA icons and iOS launch screens from a URL, HTML file, image or
raw HTML markup.

Usage:
  pwa-assets https://example.com/logo.svg ./assets --background "#1a1a1a"
  pwa-assets ./logo.html ./assets --splash-only --portrait-only --type jpeg
  pwa-assets ./logo.png ./icons --icon-only --favicon --mstile \
      --index ./index.html --manifest ./manifest.json

Requires a Chrome/Chromium installation; selenium locates a matching
chromedriver. Set PWA_ASSETS_CHROME_PATH to launch a specific binary.
"""
import argparse
import asyncio
import json
import logging
import sys

from . import files, meta
from .errors import AssetGeneratorError
from .flags import normalize_options, normalize_output
from .log import ROOT_LOGGER_NAME
from .puppets import generate_images


def parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="pwa-assets",
        description="Generate PWA icons and iOS launch screen images",
    )
    p.add_argument("source", help="URL, HTML file, image file or HTML markup to render")
    p.add_argument("output", nargs="?", default=None, help="Output folder (default: current folder)")
    p.add_argument("-b", "--background", help="Page background CSS value for image sources (default: white)")
    p.add_argument("-p", "--padding", help="Padding around image sources, CSS value (default: 10%%)")
    p.add_argument("-s", "--scrape", action=argparse.BooleanOptionalAction, default=None,
                   help="Scrape Apple HIG for latest launch screen specs (default: on)")
    p.add_argument("-i", "--icon-only", action="store_true", default=None, help="Only generate icons")
    p.add_argument("--splash-only", action="store_true", default=None, help="Only generate launch screens")
    p.add_argument("--portrait-only", action="store_true", default=None, help="Only portrait launch screens")
    p.add_argument("--landscape-only", action="store_true", default=None, help="Only landscape launch screens")
    p.add_argument("-t", "--type", choices=["png", "jpeg", "jpg", "webp"], help="Image type (default: png)")
    p.add_argument("-q", "--quality", type=int, help="Quality 0-100 for jpeg and webp (default: 70)")
    p.add_argument("-o", "--opaque", action=argparse.BooleanOptionalAction, default=None,
                   help="Render an opaque background (default: on)")
    p.add_argument("-f", "--favicon", action="store_true", default=None, help="Also generate favicons")
    p.add_argument("--mstile", action="store_true", default=None, help="Also generate Windows tile icons")
    p.add_argument("-d", "--dark-mode", action="store_true", default=None, help="Name launch screens for dark mode")
    p.add_argument("-m", "--manifest", help="Web app manifest to add icon entries to")
    p.add_argument("-x", "--index", help="HTML page to add head tags to")
    p.add_argument("--path-override", help="Prefix for image paths written to HTML and manifest")
    p.add_argument("--single-quotes", action="store_true", default=None, help="Use single quotes in HTML")
    p.add_argument("--xhtml", action="store_true", default=None, help="Self-close HTML tags")
    p.add_argument("--no-sandbox", action="store_true", default=None, help="Run Chrome with --no-sandbox")
    p.add_argument("--max-sessions", type=int, default=None,
                   help="Upper bound on concurrently running browsers (default: one per image)")
    p.add_argument("-l", "--log", action=argparse.BooleanOptionalAction, default=None,
                   help="Print progress (default: on)")
    return p.parse_args(argv)


def run(args: argparse.Namespace) -> int:
    flags = vars(args).copy()
    source = flags.pop("source")
    output = normalize_output(flags.pop("output"))
    max_sessions = flags.pop("max_sessions")
    try:
        if max_sessions is not None and max_sessions < 1:
            raise ValueError("--max-sessions must be at least 1")
        options = normalize_options(**flags)
    except ValueError as e:
        print(f"Invalid options: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(level=logging.WARNING, format="%(message)s")
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(logging.INFO if options.log else logging.ERROR)

    try:
        saved = asyncio.run(generate_images(source, output, options, max_sessions))
    except (AssetGeneratorError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    html = meta.generate_html_for_index_page(saved, options, options.index)
    icons = meta.generate_icons_content_for_manifest(saved, options, options.manifest)

    try:
        if options.index and files.path_exists(options.index):
            meta.add_meta_tags_to_index_page(html, options.index)
            print(f"Updated {options.index}")
        else:
            print(html)
        if options.manifest and files.path_exists(options.manifest):
            meta.add_icons_to_manifest(icons, options.manifest)
            print(f"Updated {options.manifest}")
        elif icons:
            print(json.dumps(icons, indent=2))
    except (ValueError, OSError) as e:
        # JSONDecodeError is a ValueError
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Done. Generated {len(saved)} image(s) in {output}")
    return 0


def main(argv=None) -> None:
    sys.exit(run(parse_args(argv)))


if __name__ == "__main__":
    main()
