import pytest
from starlette.requests import Request

from config import ApplicationConfig
from src.api.utils.request_meta import client_ip


def request_from(peer, forwarded=None):
    headers = [(b"x-forwarded-for", forwarded.encode())] if forwarded else []
    return Request({"type": "http", "headers": headers, "client": (peer, 51000)})


@pytest.fixture
def behind_proxies(monkeypatch):
    def configure(count):
        monkeypatch.setattr(ApplicationConfig, "TRUST_FORWARDED_FOR", True)
        monkeypatch.setattr(ApplicationConfig, "TRUSTED_PROXY_COUNT", count)

    return configure


def test_forwarded_header_ignored_unless_trusted(monkeypatch):
    monkeypatch.setattr(ApplicationConfig, "TRUST_FORWARDED_FOR", False)

    assert client_ip(request_from("192.0.2.10", "10.0.0.5")) == "192.0.2.10"


def test_client_written_hops_are_ignored(behind_proxies):
    behind_proxies(1)

    for spoofed in ("1.2.3.4", "1.2.3.5, 8.8.8.8"):
        request = request_from("172.16.0.1", f"{spoofed}, 10.0.0.5")
        assert client_ip(request) == "10.0.0.5"


def test_hop_is_counted_from_the_right(behind_proxies):
    behind_proxies(2)

    assert client_ip(request_from("172.16.0.2", "6.6.6.6, 10.0.0.5, 172.16.0.1")) == "10.0.0.5"


def test_short_or_invalid_chain_falls_back_to_peer(behind_proxies):
    behind_proxies(2)
    assert client_ip(request_from("172.16.0.1", "10.0.0.5")) == "172.16.0.1"

    behind_proxies(1)
    assert client_ip(request_from("172.16.0.1", "not-an-ip")) == "172.16.0.1"


def test_address_is_normalized(behind_proxies):
    behind_proxies(1)

    assert client_ip(request_from("172.16.0.1", "2001:DB8::0001")) == "2001:db8::1"
