"""
Bing Image of the Day - URL Builder

This module is a wrapper around the public unauthenticated Bing HPImageArchive endpoint, which
describes the featured homepage images as a JSON document:

    {"images": [{"urlbase": "/th?id=OHR.SomeImage_ZH-CN1234567890", ...}], ...}

Only the first image descriptor and its "urlbase" field are used. The full image url is built
by joining the host, the urlbase and a size/quality suffix such as "_UHD.jpg". Fetching the
image bytes themselves is left to the image handler.
"""

import json
from urllib.parse import urlencode

from bingwall.image_handler import DownloadFailed, Fetcher, fetch_bytes

BING_HOST = "https://www.bing.com"


class MetadataFetchFailed(Exception):
    """Raised when the image-of-the-day metadata cannot be retrieved or understood."""

    pass


class NoImageData(Exception):
    """Raised when the metadata document lists no images."""

    pass


def make_bing_url(path_components: list[str], query: str = "") -> str:
    return "".join(["/".join(path_components).removesuffix("/"), query])


def metadata_url(host: str = BING_HOST, market: str = "zh-CN") -> str:
    """
    Build the url for today's image metadata. idx=0 and n=1 ask for the single most recent
    image; uhd=1 makes the UHD renditions available.
    """

    query = "?" + urlencode(
        {"format": "js", "idx": 0, "n": 1, "mkt": market, "uhd": 1}
    )
    return make_bing_url(
        path_components=[host.removesuffix("/"), "HPImageArchive.aspx"], query=query
    )


def image_url(urlbase: str, host: str = BING_HOST, suffix: str = "_UHD.jpg") -> str:
    """
    Build the image url from a descriptor's urlbase. urlbase already starts with a slash,
    so it is appended to the host directly.
    """

    # should end up with something like "https://www.bing.com/th?id=OHR.SomeImage_ZH-CN1234567890_UHD.jpg"
    return f"{host.removesuffix('/')}{urlbase}{suffix}"


def parse_urlbase(document: bytes) -> str:
    """
    Pull the urlbase of the first image descriptor out of a metadata document. Raise NoImageData
    if there are no descriptors and MetadataFetchFailed if the document is not what we expect.
    """

    try:
        metadata = json.loads(document)
    except (json.JSONDecodeError, UnicodeDecodeError) as error:
        raise MetadataFetchFailed(f"Image metadata is not valid JSON: {error}")

    if not isinstance(metadata, dict):
        raise MetadataFetchFailed("Image metadata has an unexpected format.")

    images = metadata.get("images")
    if not images:
        raise NoImageData("Bing returned no image information for today.")

    try:
        urlbase = images[0]["urlbase"]
    except (KeyError, TypeError, IndexError):
        raise MetadataFetchFailed("Image metadata does not include a 'urlbase' for today's image.")

    if not isinstance(urlbase, str) or not urlbase:
        raise MetadataFetchFailed("Image metadata has an empty 'urlbase' for today's image.")

    return urlbase


def latest_image_url(
    fetch: Fetcher = fetch_bytes,
    host: str = BING_HOST,
    market: str = "zh-CN",
    suffix: str = "_UHD.jpg",
) -> str:
    """
    Ask Bing for today's image and return the url of its image file.
    """

    try:
        document = fetch(metadata_url(host=host, market=market))
    except DownloadFailed as error:
        raise MetadataFetchFailed(f"Could not retrieve image metadata: {error}")

    return image_url(parse_urlbase(document), host=host, suffix=suffix)
