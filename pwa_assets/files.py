"""Path helpers for sources and generated images."""
import base64
import mimetypes
import os
from pathlib import Path
from urllib.parse import urlparse

from .constants import HTML_FILE_EXTENSIONS, IMAGE_FILE_EXTENSIONS

WRITE_ACCESS = os.W_OK
READ_ACCESS = os.R_OK


def _extension(source: str) -> str:
    # URLs carry query strings and fragments after the file name
    path = urlparse(source).path if "://" in source else source
    return Path(path).suffix.lower()


def is_image_file(source: str) -> bool:
    return _extension(source) in IMAGE_FILE_EXTENSIONS


def is_html_file(source: str) -> bool:
    return _extension(source) in HTML_FILE_EXTENSIONS


def path_exists(path, mode=READ_ACCESS) -> bool:
    return os.path.exists(path) and os.access(path, mode)


def make_dir(path) -> None:
    Path(path).mkdir(parents=True, exist_ok=True)


def get_image_save_path(name: str, output, image_type: str) -> str:
    return str(Path(output) / f"{name}.{image_type}")


def get_mime_type(path: str) -> str:
    mime, _ = mimetypes.guess_type(path)
    return mime or "application/octet-stream"


def get_image_base64_url(path) -> str:
    data = base64.b64encode(Path(path).read_bytes()).decode("ascii")
    return f"data:{get_mime_type(str(path))};base64,{data}"


def get_file_url(path) -> str:
    return Path(path).resolve().as_uri()


def get_relative_image_path(output_file_path, reference_file_path=None) -> str:
    """Path of an image as referenced from an HTML or manifest file."""
    if not reference_file_path:
        return Path(output_file_path).as_posix()
    reference_dir = Path(reference_file_path).resolve().parent
    return Path(
        os.path.relpath(Path(output_file_path).resolve(), reference_dir)
    ).as_posix()


def read_file(path) -> str:
    return Path(path).read_text(encoding="utf-8")


def write_file(path, content: str) -> None:
    Path(path).write_text(content, encoding="utf-8")
