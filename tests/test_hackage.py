from datetime import datetime, timezone

import pytest
import requests
import responses

from cuppa.providers.hackage import (
    UPLOAD_TIME_API,
    VERSIONS_API,
    HackageProvider,
    HackageRelease,
    convert_releases,
)
from cuppa.results import NotFoundError


def test_convert_parses_unix_date_and_location():
    result = HackageRelease("text", "1.2.3.0", "Tue Jan 23 17:00:45 UTC 2018").convert()
    assert result.name == "text"
    assert str(result.version) == "1.2.3.0"
    assert result.location == "https://hackage.haskell.org/package/text-1.2.3.0/text-1.2.3.0.tar.gz"
    assert result.published == datetime(2018, 1, 23, 17, 0, 45, tzinfo=timezone.utc)


def test_convert_accepts_space_padded_day():
    result = HackageRelease("text", "1.0", "Tue Jan  2 17:00:45 UTC 2018").convert()
    assert result.published == datetime(2018, 1, 2, 17, 0, 45, tzinfo=timezone.utc)


def test_convert_with_unparsable_date_has_no_date():
    result = HackageRelease("text", "1.2.3.0", "yesterday").convert()
    assert result.published is None


def test_convert_releases_keeps_order():
    releases = [HackageRelease("text", "1.2"), HackageRelease("text", "1.1")]
    results = convert_releases(releases, "text")
    assert [str(r.version) for r in results] == ["1.2", "1.1"]
    assert results.query == "text"


def test_match():
    provider = HackageProvider()
    assert provider.match("https://hackage.haskell.org/package/text-1.2.3.0/text-1.2.3.0.tar.gz") == "text"
    assert provider.match("https://example.com/text-1.2.tar.gz") is None


def test_releases_and_latest():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, VERSIONS_API.format("text"), json={"normal-version": ["1.2.3.1", "1.2.3.0"]})
        rsps.add(responses.GET, UPLOAD_TIME_API.format("text", "1.2.3.1"), body="Wed Jan 24 10:00:00 UTC 2018")
        rsps.add(responses.GET, UPLOAD_TIME_API.format("text", "1.2.3.0"), body="Tue Jan 23 17:00:45 UTC 2018")
        provider = HackageProvider()
        results = provider.releases("text")
        assert [str(r.version) for r in results] == ["1.2.3.1", "1.2.3.0"]
        assert rsps.calls[0].request.headers["Accept"] == "application/json"
        assert str(provider.latest("text").version) == "1.2.3.1"


def test_failed_upload_time_skips_version():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, VERSIONS_API.format("text"), json={"normal-version": ["1.1", "1.0"]})
        rsps.add(responses.GET, UPLOAD_TIME_API.format("text", "1.1"), body=requests.ConnectionError("down"))
        rsps.add(responses.GET, UPLOAD_TIME_API.format("text", "1.0"), body="Tue Jan 23 17:00:45 UTC 2018")
        results = HackageProvider().releases("text")
    assert [str(r.version) for r in results] == ["1.0"]


def test_no_versions_is_not_found():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, VERSIONS_API.format("text"), json={"normal-version": []})
        with pytest.raises(NotFoundError):
            HackageProvider().releases("text")


def test_unknown_package_is_not_found():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, VERSIONS_API.format("nothing"), status=404)
        with pytest.raises(NotFoundError):
            HackageProvider().latest("nothing")