import bz2

import pytest
import responses

from cuppa.providers.kde import LISTING_URL, KdeProvider, parse_listing
from cuppa.results import NotFoundError

LISTING = (
    "/srv/archives/ftp/stable/other:\n"
    "drwxr-xr-x 2 ftp ftp 4096 2018-01-01 10:00 9.9.9\n"
    "\n"
    "/srv/archives/ftp/stable/plasma:\n"
    "drwxr-xr-x 2 ftp ftp 4096 2018-01-30 12:00 5.11.95\n"
    "drwxr-xr-x 2 ftp ftp 4096 2018-02-06 12:00 5.12.0\n"
    "-rw-r--r-- 1 ftp ftp 120 2018-02-06 12:00 README\n"
    "drwxr-xr-x 2 ftp ftp 4096 2018-02-07 12:00 5.13.0-beta\n"
    "\n"
    "/srv/archives/ftp/stable/frameworks:\n"
    "drwxr-xr-x 2 ftp ftp 4096 2018-02-01 12:00 5.43\n"
)

NAME = "stable/plasma/5.12.0/kwin-5.12.0.tar.xz"


def test_match_returns_path_below_root():
    provider = KdeProvider()
    assert provider.match("https://download.kde.org/" + NAME) == NAME


@pytest.mark.parametrize(
    "query",
    [
        "https://download.kde.org/stable/kwin-5.12.0.tar.xz",
        "https://download.kde.org/a/b/c/d/e/f/kwin-5.12.0.tar.xz",
        "https://example.com/stable/plasma/5.12.0/kwin-5.12.0.tar.xz",
    ],
)
def test_match_rejects_other_queries(query):
    assert KdeProvider().match(query) is None


def test_parse_listing_reads_only_the_named_directory():
    results = parse_listing(LISTING, NAME)
    assert results.query == "kwin"
    versions = sorted(str(result.version) for result in results)
    assert versions == ["5.11.95", "5.12.0"]
    assert all(result.name == "kwin" for result in results)


def test_parse_listing_latest_location():
    latest = parse_listing(LISTING, NAME).last()
    assert str(latest.version) == "5.12.0"
    assert latest.location == "https://download.kde.org/stable/plasma/5.12.0/kwin-5.12.0.tar.xz"


def test_parse_listing_five_piece_path_uses_grandparent_directory():
    name = "stable/plasma/5.12.0/src/kwin-5.12.0.tar.xz"
    results = parse_listing("/srv/archives/ftp/stable:\n" "d 2 f f 1 2018-01-01 10:00 5.12.0\n\n", name)
    assert len(results) == 1
    assert results.first().location.endswith("/stable/plasma/5.12.0/src/kwin-5.12.0.tar.xz")


def test_parse_listing_without_header_is_empty():
    assert parse_listing(LISTING, "stable/missing/1.0/thing-1.0.tar.xz").empty()


def test_parse_listing_ignores_unterminated_last_line():
    listing = "/srv/archives/ftp/stable/plasma:\nd 2 f f 1 2018-01-01 10:00 5.12.0"
    assert parse_listing(listing, NAME).empty()


def test_releases_downloads_listing():
    with responses.RequestsMock() as mock:
        mock.add(responses.GET, LISTING_URL, body=bz2.compress(LISTING.encode()), status=200)
        provider = KdeProvider()
        latest = provider.latest(NAME)
        assert str(latest.version) == "5.12.0"
        # The listing is kept and not fetched a second time.
        assert len(provider.releases(NAME)) == 2
        assert len(mock.calls) == 1


def test_latest_without_listing_raises_not_found():
    with responses.RequestsMock() as mock:
        mock.add(responses.GET, LISTING_URL, status=500)
        with pytest.raises(NotFoundError):
            KdeProvider().latest(NAME)