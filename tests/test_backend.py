from unittest.mock import MagicMock

import pytest
import requests

from ngo_supply.api.backend import BackendClient
from ngo_supply.api.errors import BackendError


def response(status=200, body=None, headers=None):
    resp = MagicMock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.headers = headers or {}
    if isinstance(body, Exception):
        resp.json.side_effect = body
    else:
        resp.json.return_value = body
    return resp


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def client(session):
    return BackendClient("http://backend.test/api/", token="tok", timeout=3, session=session)


def test_create_supply_request(client, session):
    session.request.return_value = response(201, {"id": 31})

    assert client.create_supply_request({"ware_house_id": 7}) == {"id": 31}

    method, url = session.request.call_args[0]
    kwargs = session.request.call_args[1]
    assert (method, url) == ("POST", "http://backend.test/api/supply-requests")
    assert kwargs["json"] == {"ware_house_id": 7}
    assert kwargs["headers"]["Authorization"] == "Bearer tok"
    assert kwargs["timeout"] == 3


def test_no_token_no_auth_header(session):
    client = BackendClient("http://backend.test/api", token="", session=session)
    session.request.return_value = response(200, [])
    client.list("items")
    assert "Authorization" not in session.request.call_args[1]["headers"]


def test_empty_response(client, session):
    session.request.return_value = response(204, ValueError("no body"))
    assert client.delete("items", 3) == {"success": True}


def test_error_message_from_backend(client, session):
    session.request.return_value = response(422, {"message": "The items field is required."})
    with pytest.raises(BackendError) as exc:
        client.create("supply-requests", {})
    assert exc.value.message == "The items field is required."
    assert exc.value.status_code == 422


def test_error_without_body(client, session):
    session.request.return_value = response(500, ValueError("not json"))
    with pytest.raises(BackendError) as exc:
        client.get("supply-requests", 5)
    assert exc.value.message == "HTTP error! status: 500"


def test_reads_are_retried(client, session):
    session.request.side_effect = [
        requests.ConnectionError("reset"),
        response(200, {"data": [{"id": 1, "quantity": 4}]}),
    ]
    assert client.list_warehouse_items() == [{"id": 1, "quantity": 4}]
    assert session.request.call_count == 2


def test_reads_give_up(client, session):
    session.request.side_effect = requests.ConnectionError("down")
    with pytest.raises(BackendError):
        client.list_supply_requests()
    assert session.request.call_count == 3


def test_writes_are_not_retried(client, session):
    session.request.side_effect = requests.ConnectionError("down")
    with pytest.raises(BackendError):
        client.create_supply_request({"ware_house_id": 7})
    assert session.request.call_count == 1


def test_close_releases_session(client, session):
    client.close()
    session.close.assert_called_once_with()
