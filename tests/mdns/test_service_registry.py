"""
Brief: Tests for daprlens.mdns.registry.

Inputs:
  - None

Outputs:
  - None
"""

from daprlens.mdns.registry import ServiceRecord, ServiceRegistry


def test_service_record_resolution_depends_only_on_fqdn():
    assert not ServiceRecord(name="svcA").resolved
    assert ServiceRecord(name="svcA", fqdn="host.local").resolved
    assert ServiceRecord(name="svcA", port=1, address="10.0.0.1", text=["a=b"]).resolved is False


def test_insert_if_absent_keeps_first_record():
    registry = ServiceRegistry()
    first = ServiceRecord(name="svcA", fqdn="one.local", port=1)
    second = ServiceRecord(name="svcA", fqdn="two.local", port=2)

    assert registry.insert_if_absent(first) is True
    assert registry.insert_if_absent(second) is False
    assert registry.get("svcA") is first
    assert len(registry) == 1


def test_lookup_ignores_case_and_trailing_dot():
    registry = ServiceRegistry()
    registry.insert_if_absent(ServiceRecord(name="SvcA.local", fqdn="h"))
    assert "svca.local." in registry
    assert registry.get("SVCA.LOCAL") is not None
    assert registry.names() == ["SvcA.local"]


def test_remove_if_present_returns_last_known_record():
    registry = ServiceRegistry()
    record = ServiceRecord(name="svcA", fqdn="host.local")
    registry.insert_if_absent(record)

    assert registry.remove("svcA") is record
    assert registry.remove("svcA") is None
    assert "svcA" not in registry


def test_clear_and_iteration():
    registry = ServiceRegistry()
    for name in ("a", "b", "c"):
        registry.insert_if_absent(ServiceRecord(name=name, fqdn=f"{name}.local"))
    assert sorted(r.name for r in registry) == ["a", "b", "c"]
    registry.clear()
    assert len(registry) == 0
    assert 42 not in registry
