"""Tests for RemoteCatalogFetcher against a mocked requests session."""
import json
from unittest.mock import MagicMock

import pytest
import requests

from catalog_fetcher import RemoteCatalogFetcher
from catalog_models import Catalog, CachedCatalog
from errors import MalformedCatalogError, MissingMetadataError, TransportError

from conftest import FakeClock, goes_payload

URL = "https://catalog.example.test/v1/config.json"


def _response(status=200, body=None, headers=None):
    response = MagicMock(status_code=status, headers=headers if headers is not None else {"ETag": '"abc"'})
    response.content = json.dumps(goes_payload() if body is None else body).encode("utf-8")
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} Server Error")
    else:
        response.raise_for_status = MagicMock()
    return response


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def fetcher(session):
    return RemoteCatalogFetcher(url=URL, timeout=5, session=session, clock=FakeClock(1234.9))


def test_fetch_success(fetcher, session):
    session.get.return_value = _response()

    cached = fetcher.fetch()

    assert cached.etag == '"abc"'
    assert cached.downloaded_at == 1234
    assert cached.catalog.satellites[0].name == "GOES-16"
    args, kwargs = session.get.call_args
    assert args == (URL,)
    assert kwargs["timeout"] == 5
    assert "If-None-Match" not in kwargs["headers"]


def test_missing_etag(fetcher, session):
    session.get.return_value = _response(headers={})
    with pytest.raises(MissingMetadataError):
        fetcher.fetch()


def test_malformed_body(fetcher, session):
    session.get.return_value = _response(body={"satellites": "nope"})
    with pytest.raises(MalformedCatalogError):
        fetcher.fetch()


def test_non_json_body(fetcher, session):
    response = _response()
    response.content = b"<html>maintenance</html>"
    session.get.return_value = response
    with pytest.raises(MalformedCatalogError):
        fetcher.fetch()


def test_http_error_status(fetcher, session):
    session.get.return_value = _response(status=503)
    with pytest.raises(TransportError):
        fetcher.fetch()


def test_connection_error(fetcher, session):
    session.get.side_effect = requests.ConnectionError("connection refused")
    with pytest.raises(TransportError):
        fetcher.fetch()
    assert session.get.call_count == 1


def test_not_modified_reuses_previous_catalog(fetcher, session):
    previous = CachedCatalog(Catalog.from_dict(goes_payload()), '"abc"', 100)
    session.get.return_value = _response(status=304, headers={})

    cached = fetcher.fetch(previous)

    assert cached.catalog is previous.catalog
    assert cached.etag == '"abc"'
    assert cached.downloaded_at == 1234
    assert session.get.call_args[1]["headers"]["If-None-Match"] == '"abc"'


def test_not_modified_without_previous_is_an_error(fetcher, session):
    response = _response(status=304, headers={})
    response.raise_for_status = MagicMock()
    session.get.return_value = response
    with pytest.raises(MissingMetadataError):
        fetcher.fetch()
