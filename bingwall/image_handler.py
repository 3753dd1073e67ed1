"""
Image Handler

Utilities for downloading and storing the daily image.

Downloading images: fetch_bytes is the single HTTP capability bingwall uses, both for the
image-of-the-day metadata and for the image itself. Anything that takes a url and returns the
response body as bytes can stand in for it, which is how the tests avoid the network.

Storing images: ensure_today_image is the idempotency gate. If today's file is already in
the cache directory it is returned as is, otherwise the image is downloaded once and written
so that the final file name only ever holds a complete image.
"""

import io
from contextlib import suppress
from pathlib import Path
from typing import Callable

import requests
from PIL import Image, UnidentifiedImageError

from bingwall.cache import dated_image_path

Fetcher = Callable[[str], bytes]


class InvalidImageError(Exception):
    """
    Raised when a provided binary input is not an image. Wrapper around the PIL
    UnidentifiedImageError for better identification of errors during debugging
    and custom error messaging.
    """

    pass


class DownloadFailed(Exception):
    """
    Raised when a download is unsuccessful (transport error, bad status code, or a
    response that is not the expected image).
    """

    pass


class WriteFailed(Exception):
    """
    Raised when a downloaded image cannot be written to the cache directory.
    """

    pass


def validate_image(input) -> str:
    """
    Determine whether input is a valid image. PIL open method accepts a Path object, string, or file object (buffered stream).
    The PIL method reads the content header to determine file type but doesn't actually load the pixel data, so it
    is cheap enough to use as a validation method. Returns the image format, e.g. "JPEG".
    """

    try:
        with Image.open(input) as image:

            return image.format

    except UnidentifiedImageError:
        raise InvalidImageError(f"Input {str(input)} does not appear to be an image.")

    except FileNotFoundError:
        raise InvalidImageError(f"Input {str(input)} could not be found.")


def fetch_bytes(url: str) -> bytes:
    """
    GET url and return the raw response body. Redirects are followed by requests. No timeout
    is configured, so a hung server blocks until the transport gives up.

    Raise DownloadFailed for transport errors and unsuccessful status codes.
    """

    try:
        r = requests.get(url)

    except requests.exceptions.RequestException as error:
        raise DownloadFailed(f"Download error: could not reach {url}: {error}")

    # successful request but received a bad response from the server.
    try:
        r.raise_for_status()
    except requests.exceptions.HTTPError:
        raise DownloadFailed(
            f"Download error: something went wrong trying to access {url} (status code {r.status_code})"
        )

    return r.content


def save_image(content: bytes, file_path: Path) -> Path:
    """
    Write content to file_path. The bytes are written to a sibling ".part" file first and then
    renamed over file_path, so a failure part way through never leaves a truncated image under
    the final name, and an existing file at file_path is untouched unless the write completes.

    Raise WriteFailed on any filesystem error.
    """

    file_path = Path(file_path)
    partial_path = file_path.with_name(f"{file_path.name}.part")

    try:
        with partial_path.open("wb") as file:
            file.write(content)
        partial_path.replace(file_path)

    except OSError as error:
        with suppress(OSError):
            partial_path.unlink(missing_ok=True)
        raise WriteFailed(f"Could not write image to {file_path}: {error}")

    return file_path


def fetch_today_image(
    cache_dir: Path,
    date_key: str,
    remote_url: str,
    fetch: Fetcher = fetch_bytes,
    prefix: str = "bing_",
    suffix: str = ".jpg",
) -> tuple[Path, bool]:
    """
    Return the local path of the image for date_key together with whether it had to be
    downloaded. remote_url is only fetched if the image is not already in cache_dir, so at
    most one download happens per date_key no matter how many times this is called.

    Raise DownloadFailed if the image cannot be fetched or is not an image, and WriteFailed if
    it cannot be stored.
    """

    destination_path = dated_image_path(cache_dir, date_key, prefix=prefix, suffix=suffix)

    if destination_path.is_file():
        return destination_path, False

    # edge case where destination path is a folder
    if destination_path.exists():
        raise WriteFailed(f"Destination {destination_path} exists and is not a file.")

    content = fetch(remote_url)

    # successful request but did not get back image data as the response, e.g. an html error page
    try:
        validate_image(io.BytesIO(content))
    except InvalidImageError:
        raise DownloadFailed(
            f"Download error: the target resource at {remote_url} does not appear to be an image."
        )

    return save_image(content, destination_path), True


def ensure_today_image(
    cache_dir: Path,
    date_key: str,
    remote_url: str,
    fetch: Fetcher = fetch_bytes,
    prefix: str = "bing_",
    suffix: str = ".jpg",
) -> Path:
    """
    Return the local path of the image for date_key, downloading it from remote_url only if it
    is not already in cache_dir. See fetch_today_image.
    """

    path, _ = fetch_today_image(
        cache_dir, date_key, remote_url, fetch=fetch, prefix=prefix, suffix=suffix
    )
    return path
