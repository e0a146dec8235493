"""
Brief: Tests for daprlens.applications.cmdline command-line parsing.

Inputs:
  - None

Outputs:
  - None
"""

import pytest

from daprlens.applications.base import DaprApplication
from daprlens.applications.cmdline import get_app_id, get_http_port, to_application


@pytest.mark.parametrize(
    "cmd,expected",
    [
        ('daprd --app-id "orders" --dapr-http-port "3600"', "orders"),
        ("daprd --app-id orders --dapr-http-port 3600", "orders"),
        ("/usr/local/bin/daprd --app-id my_app-2 --log-level debug", "my_app-2"),
        ("daprd --app-id", None),
        ("daprd --dapr-http-port 3600", None),
    ],
)
def test_get_app_id(cmd, expected):
    assert get_app_id(cmd) == expected


def test_get_app_id_stops_at_first_disallowed_character():
    assert get_app_id("daprd --app-id orders.v2") == "orders"


def test_get_http_port_defaults_when_missing_or_non_numeric():
    assert get_http_port("daprd --app-id orders") == 3500
    assert get_http_port("daprd --dapr-http-port abc") == 3500
    assert get_http_port("daprd --app-id a", default=4000) == 4000


def test_get_http_port_reads_quoted_and_bare_values():
    assert get_http_port('daprd --dapr-http-port "3601"') == 3601
    assert get_http_port("daprd --dapr-http-port 3602") == 3602


def test_to_application_uses_cmdline_and_pid():
    app = to_application('daprd --app-id "orders" --dapr-http-port "3600"', 4242)
    assert app == DaprApplication(app_id="orders", http_port=3600, pid=4242)


def test_to_application_applies_default_port():
    assert to_application("daprd --app-id orders", 7).http_port == 3500
    assert to_application("daprd --app-id orders", 7, default_http_port=3999).http_port == 3999


@pytest.mark.parametrize("cmd", [None, "", "daprd --dapr-http-port 3600", "daprd"])
def test_to_application_without_app_id_returns_none(cmd):
    assert to_application(cmd, 1) is None


def test_to_dict_omits_missing_pid():
    assert DaprApplication("a", 1).to_dict() == {"app_id": "a", "http_port": 1}
    assert DaprApplication("a", 1, 9).to_dict() == {"app_id": "a", "http_port": 1, "pid": 9}
