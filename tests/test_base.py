import pytest
import requests
import responses

from cuppa.providers.base import Provider, check_status, get_json
from cuppa.results import NotFoundError, Result, ResultSet, UnavailableError

URL = "https://api.example.com/thing"


class StaticProvider(Provider):
    name = "Static"

    def __init__(self, versions):
        self.versions = versions

    def match(self, query):
        return query or None

    def releases(self, name):
        results = ResultSet(name)
        for version in self.versions:
            results.add(Result.create(name, version, "", None))
        return results


def test_provider_is_abstract():
    with pytest.raises(TypeError):
        Provider()


def test_default_latest_is_newest_release():
    provider = StaticProvider(["1.0", "3.0", "2.0"])
    result = Provider.latest(provider, "x")
    assert str(result.version) == "3.0"


def test_default_latest_empty_raises():
    provider = StaticProvider([])
    with pytest.raises(NotFoundError):
        Provider.latest(provider, "x")


def test_get_json_success():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, URL, json={"a": [1, 2]}, status=200)
        assert get_json(URL) == {"a": [1, 2]}


def test_get_json_sends_headers():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, URL, json=[], status=200)
        data = get_json(URL, {"Accept": "application/json"})
        assert rsps.calls[0].request.headers["Accept"] == "application/json"
    assert data == []


def test_get_json_not_found():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, URL, status=404)
        with pytest.raises(NotFoundError):
            get_json(URL)


def test_get_json_server_error():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, URL, status=500)
        with pytest.raises(UnavailableError):
            get_json(URL)


def test_get_json_invalid_body():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, URL, body="not json", status=200)
        with pytest.raises(UnavailableError):
            get_json(URL)


def test_get_json_connection_error():
    with responses.RequestsMock():
        with pytest.raises(UnavailableError):
            get_json("https://unreachable.example.com/")


def test_check_status_codes():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, URL, status=404)
        response = requests.get(URL, timeout=5)
        with pytest.raises(NotFoundError):
            check_status(response)