"""
Brief: Tests for daprlens.applications.factory strategy selection.

Inputs:
  - None

Outputs:
  - None
"""

import pytest

from daprlens.applications.factory import create_application_provider, resolve_strategy
from daprlens.applications.mdns_provider import MdnsApplicationProvider
from daprlens.applications.process_provider import ProcessApplicationProvider
from daprlens.config.config_schema import DiscoveryConfig
from daprlens.mdns.transport import MulticastTransport


def test_resolve_strategy_uses_config_when_env_unset():
    assert resolve_strategy(DiscoveryConfig(strategy="mdns"), environ={}) == "mdns"
    assert resolve_strategy(DiscoveryConfig(), environ={}) == "process"


def test_resolve_strategy_env_wins():
    env = {"DAPRLENS_DISCOVERY": " MDNS "}
    assert resolve_strategy(DiscoveryConfig(strategy="process"), environ=env) == "mdns"


def test_resolve_strategy_rejects_unknown_env_value():
    with pytest.raises(ValueError):
        resolve_strategy(DiscoveryConfig(), environ={"DAPRLENS_DISCOVERY": "consul"})


def test_create_mdns_provider_from_config():
    """
    Brief: The mdns strategy wires config values into provider and transport.

    Inputs:
      - None

    Outputs:
      - None
    """
    config = DiscoveryConfig(
        strategy="mdns",
        mdns={
            "service_type": "_custom._tcp.local",
            "group": "239.1.2.3",
            "port": 5454,
            "include_additionals": False,
            "start_attempts": 4,
            "retry_backoff_ms": 5,
        },
    )
    provider = create_application_provider(config, environ={})
    try:
        assert isinstance(provider, MdnsApplicationProvider)
        assert provider.service_type == "_custom._tcp.local"
        assert provider.start_attempts == 4
        assert provider.retry_backoff_ms == 5

        client = provider._client_factory()
        transport = client._transport
        assert isinstance(transport, MulticastTransport)
        assert (transport.group, transport.port) == ("239.1.2.3", 5454)
        assert transport.include_additionals is False
        client.close()
    finally:
        provider.close()


def test_create_process_provider_by_default():
    provider = create_application_provider(
        DiscoveryConfig(process={"name": "mydaprd", "default_http_port": 4100}), environ={}
    )
    try:
        assert isinstance(provider, ProcessApplicationProvider)
        assert provider.process_name == "mydaprd"
        assert provider.default_http_port == 4100
    finally:
        provider.close()


def test_create_uses_defaults_without_config():
    provider = create_application_provider(environ={"DAPRLENS_DISCOVERY": "mdns"})
    try:
        assert isinstance(provider, MdnsApplicationProvider)
        assert provider.service_type == "_dapr._tcp.local"
    finally:
        provider.close()
