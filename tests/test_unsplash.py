"""Tests for the Unsplash client with a mocked requests session."""

from unittest.mock import MagicMock

import pytest
import requests

from errors import UpstreamError
from unsplash import UnsplashClient

RAW_PHOTO = {
    "id": "abc123",
    "urls": {"raw": "https://u.test/raw", "small": "https://u.test/small"},
    "alt_description": "orange cat",
    "description": "Sleepy",
    "user": {"name": "Jane Doe", "username": "janedoe", "bio": "ignored"},
    "likes": 42,
    "color": "#ffaa00",
}


def _response(status=200, payload=None):
    response = MagicMock()
    response.status_code = status
    response.ok = 200 <= status < 300
    response.text = "error body"
    response.json.return_value = payload
    return response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(session):
    return UnsplashClient(access_key="key", base_url="https://api.unsplash.test/", session=session)


def test_search_photos_normalizes_payload(client, session):
    session.get.return_value = _response(payload={"total": 133, "results": [RAW_PHOTO]})

    total, images = client.search_photos("cats")

    assert total == 133
    assert images[0].to_dict() == {
        "id": "abc123",
        "urls": {"raw": "https://u.test/raw", "small": "https://u.test/small"},
        "alt_description": "orange cat",
        "description": "Sleepy",
        "user": {"name": "Jane Doe", "username": "janedoe"},
        "likes": 42,
    }
    url = session.get.call_args.args[0]
    params = session.get.call_args.kwargs["params"]
    assert url == "https://api.unsplash.test/search/photos"
    assert params == {"query": "cats", "per_page": 20, "client_id": "key"}


def test_search_photos_keeps_upstream_order_and_caps_page(client, session):
    photos = [dict(RAW_PHOTO, id=f"p{i}") for i in range(25)]
    session.get.return_value = _response(payload={"total": 25, "results": photos})

    _, images = client.search_photos("cats")

    assert [img.id for img in images] == [f"p{i}" for i in range(20)]


def test_non_success_status_raises(client, session):
    session.get.return_value = _response(status=403)

    with pytest.raises(UpstreamError):
        client.search_photos("xyz123")


def test_transport_failure_raises(client, session):
    session.get.side_effect = requests.ConnectionError("unreachable")

    with pytest.raises(UpstreamError):
        client.search_photos("cats")


def test_malformed_payload_raises(client, session):
    session.get.return_value = _response(payload={"errors": ["nope"]})

    with pytest.raises(UpstreamError):
        client.search_photos("cats")
