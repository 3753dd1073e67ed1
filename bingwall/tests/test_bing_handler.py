"""
Tests for bing_handler.py

Validate the image-of-the-day urls and the handling of the metadata document. The fetch
function is passed in as a Mock, so no network access happens.
"""

import json
import unittest.mock

import pytest

# following entities are tested in this module:
from bingwall.bing_handler import metadata_url
from bingwall.bing_handler import image_url
from bingwall.bing_handler import parse_urlbase
from bingwall.bing_handler import latest_image_url
from bingwall.bing_handler import MetadataFetchFailed
from bingwall.bing_handler import NoImageData
from bingwall.image_handler import DownloadFailed

URLBASE = "/th?id=OHR.TestImage_ZH-CN1234567890"


def metadata(*urlbases) -> bytes:
    return json.dumps(
        {
            "images": [
                {"startdate": "20231027", "urlbase": urlbase, "copyright": "Test"}
                for urlbase in urlbases
            ],
            "tooltips": {},
        }
    ).encode("utf-8")


def test_metadata_url_default():

    assert metadata_url() == (
        "https://www.bing.com/HPImageArchive.aspx?format=js&idx=0&n=1&mkt=zh-CN&uhd=1"
    )


def test_metadata_url_market():

    assert "mkt=en-US" in metadata_url(market="en-US")


def test_metadata_url_host_trailing_slash():

    assert metadata_url(host="https://www.bing.com/") == metadata_url(host="https://www.bing.com")


@pytest.mark.parametrize(
    ["host", "suffix", "expected"],
    [
        (
            "https://www.bing.com",
            "_UHD.jpg",
            "https://www.bing.com/th?id=OHR.TestImage_ZH-CN1234567890_UHD.jpg",
        ),
        (
            "https://www.bing.com/",
            "_1920x1080.jpg",
            "https://www.bing.com/th?id=OHR.TestImage_ZH-CN1234567890_1920x1080.jpg",
        ),
    ],
)
def test_image_url(host, suffix, expected):

    assert image_url(URLBASE, host=host, suffix=suffix) == expected


def test_parse_urlbase_uses_first_descriptor():

    assert parse_urlbase(metadata(URLBASE, "/th?id=OHR.Yesterday")) == URLBASE


@pytest.mark.parametrize(
    "document",
    [b'{"images": []}', b'{"tooltips": {}}', b'{"images": null}'],
)
def test_parse_urlbase_no_images(document):

    with pytest.raises(NoImageData):
        parse_urlbase(document)


@pytest.mark.parametrize(
    "document",
    [
        b"<html>not json</html>",
        b"[]",
        b'{"images": [{"startdate": "20231027"}]}',
        b'{"images": [{"urlbase": ""}]}',
        b'{"images": ["not a descriptor"]}',
        b"\xff\xff\xff",
    ],
)
def test_parse_urlbase_malformed(document):

    with pytest.raises(MetadataFetchFailed):
        parse_urlbase(document)


def test_latest_image_url_success():

    fetch = unittest.mock.Mock(return_value=metadata(URLBASE))

    url = latest_image_url(fetch=fetch)

    assert url == "https://www.bing.com/th?id=OHR.TestImage_ZH-CN1234567890_UHD.jpg"
    fetch.assert_called_once_with(metadata_url())


def test_latest_image_url_fetch_failure():

    fetch = unittest.mock.Mock(side_effect=DownloadFailed("status code 503"))

    with pytest.raises(MetadataFetchFailed):
        latest_image_url(fetch=fetch)


def test_latest_image_url_empty_metadata():
    """
    Zero image descriptors fails with NoImageData after a single metadata request.
    """

    fetch = unittest.mock.Mock(return_value=metadata())

    with pytest.raises(NoImageData):
        latest_image_url(fetch=fetch)

    assert fetch.call_count == 1
