import pytest
from werkzeug.test import EnvironBuilder
from werkzeug.wrappers import Request

from santa.net import normalize_ip, parse_forwarded, request_ip


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("203.0.113.7", "203.0.113.7"),
        ("203.0.113.7, 10.0.0.1", "203.0.113.7"),
        ('"203.0.113.7"', "203.0.113.7"),
        ("203.0.113.7:8080", "203.0.113.7"),
        ("[2001:db8::1]:443", "2001:db8::1"),
        ("2001:db8::1", "2001:db8::1"),
        ("", None),
        ("   ", None),
        (None, None),
        (", 10.0.0.1", None),
    ],
)
def test_normalize_ip(raw, expected):
    assert normalize_ip(raw) == expected


def test_parse_forwarded_uses_first_for():
    assert parse_forwarded('proto=https;For="[2001:db8::2]:80", for=198.51.100.3') == "2001:db8::2"
    assert parse_forwarded("proto=https") is None


def _request(headers=None, remote_addr="127.0.0.1"):
    env = EnvironBuilder(headers=headers or {}, environ_base={"REMOTE_ADDR": remote_addr}).get_environ()
    return Request(env)


def test_request_ip_header_priority():
    req = _request({"X-Real-IP": "10.0.0.2", "X-Forwarded-For": "10.0.0.1, 10.0.0.9"})
    assert request_ip(req) == "10.0.0.1"


def test_request_ip_falls_back_to_forwarded_then_remote_addr():
    assert request_ip(_request({"Forwarded": "for=192.0.2.60;proto=http"})) == "192.0.2.60"
    assert request_ip(_request()) == "127.0.0.1"
