"""Shared fixtures: a mocked session standing in for the HTTP executor."""

import json
from unittest.mock import Mock

import pytest
import requests

from harvest_api_client import HarvestClient


def make_response(status_code=200, body=None):
    """Build a real ``requests.Response`` with the given status and body.

    ``body`` may be raw ``str``/``bytes`` or any JSON-serialisable object.
    """
    if body is None:
        content = b""
    elif isinstance(body, bytes):
        content = body
    elif isinstance(body, str):
        content = body.encode("utf-8")
    else:
        content = json.dumps(body).encode("utf-8")
    response = requests.Response()
    response.status_code = status_code
    response._content = content
    response._content_consumed = True
    response.encoding = "utf-8"
    response.headers["Content-Type"] = "application/json; charset=utf-8"
    return response


@pytest.fixture
def session():
    """A mocked ``requests.Session``; set ``send.return_value`` or ``side_effect``."""
    mock = Mock(spec=requests.Session)
    mock.send.return_value = make_response(200, {})
    return mock


@pytest.fixture
def client(session):
    return HarvestClient("123", "tok", session=session)


def sent_requests(session):
    """Return the prepared requests passed to ``session.send`` in order."""
    return [call.args[0] for call in session.send.call_args_list]
