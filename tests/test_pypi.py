from datetime import datetime, timezone

import pytest
import responses

from cuppa.providers.pypi import (
    SOURCE_API,
    PyPIProvider,
    convert_latest,
    convert_releases,
    convert_urls,
)
from cuppa.results import NotFoundError, UnavailableError

WHEEL = {"upload_time": "2018-06-14T13:40:00", "url": "https://files.example.com/foo.whl"}
SDIST = {"upload_time": "2018-06-14T13:40:38", "url": "https://files.example.com/foo-2.0.tar.gz"}

DOCUMENT = {
    "info": {"version": "2.0"},
    "urls": [WHEEL, SDIST],
    "releases": {
        "1.0": [{"upload_time": "2017-01-01T00:00:00", "url": "https://files.example.com/foo-1.0.tar.gz"}],
        "2.0rc1": [SDIST],
        "2.0": [WHEEL, SDIST],
        "0.1": [],
    },
}


@pytest.mark.parametrize(
    ("query", "expected"),
    [
        ("https://files.pythonhosted.org/packages/ab/cd/requests-2.19.1.tar.gz", "requests"),
        ("https://pypi.python.org/packages/source/p/python-dateutil-2.8.0.tar.gz", "python-dateutil"),
    ],
)
def test_match(query, expected):
    assert PyPIProvider().match(query) == expected


def test_match_rejects_other_hosts():
    assert PyPIProvider().match("https://example.com/packages/a/requests-2.0.tar.gz") is None


def test_convert_urls_uses_last_file():
    result = convert_urls([WHEEL, SDIST], "foo", "2.0")
    assert result.location == SDIST["url"]
    assert result.published == datetime(2018, 6, 14, 13, 40, 38, tzinfo=timezone.utc)


def test_convert_urls_empty_is_none():
    assert convert_urls([], "foo", "2.0") is None


def test_convert_latest():
    result = convert_latest(DOCUMENT, "foo")
    assert result.name == "foo"
    assert str(result.version) == "2.0"
    assert result.location == SDIST["url"]


def test_convert_latest_without_files_raises():
    with pytest.raises(NotFoundError):
        convert_latest({"info": {"version": "2.0"}, "urls": []}, "foo")


def test_convert_releases_skips_prereleases_and_empty():
    results = convert_releases(DOCUMENT, "foo")
    assert sorted(str(result.version) for result in results) == ["1.0", "2.0"]
    assert results.last().location == SDIST["url"]


def test_provider_latest_and_releases():
    with responses.RequestsMock() as mock:
        mock.add(responses.GET, SOURCE_API.format("foo"), json=DOCUMENT)
        mock.add(responses.GET, SOURCE_API.format("foo"), json=DOCUMENT)
        provider = PyPIProvider()
        assert str(provider.latest("foo").version) == "2.0"
        assert len(provider.releases("foo")) == 2


def test_provider_releases_empty_raises_not_found():
    with responses.RequestsMock() as mock:
        mock.add(responses.GET, SOURCE_API.format("foo"), json={"releases": {}})
        with pytest.raises(NotFoundError):
            PyPIProvider().releases("foo")


@pytest.mark.parametrize(("status", "error"), [(404, NotFoundError), (502, UnavailableError)])
def test_provider_http_errors(status, error):
    with responses.RequestsMock() as mock:
        mock.add(responses.GET, SOURCE_API.format("foo"), status=status)
        with pytest.raises(error):
            PyPIProvider().latest("foo")