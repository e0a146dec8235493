"""
Brief: Tests for daprlens.mdns.records classification helpers.

Inputs:
  - None

Outputs:
  - None
"""

from dnslib import AAAA, CNAME, QTYPE, RR

from daprlens.mdns import records


def test_each_predicate_matches_only_its_type(dns):
    ptr = dns.ptr("svcA")
    srv = dns.srv("svcA", "host.local", 50001)
    txt = dns.txt("svcA", ["appId=x"])
    a = dns.a("host.local", "10.0.0.5")

    checks = [
        records.is_pointer_record,
        records.is_server_record,
        records.is_text_record,
        records.is_address_record,
    ]
    for index, rr in enumerate([ptr, srv, txt, a]):
        assert [check(rr) for check in checks] == [i == index for i in range(4)]


def test_unsupported_types_are_not_classified():
    aaaa = RR("host.local", QTYPE.AAAA, rdata=AAAA("2001:db8::1"), ttl=120)
    cname = RR("alias.local", QTYPE.CNAME, rdata=CNAME("host.local"), ttl=120)
    for rr in (aaaa, cname):
        assert not records.is_pointer_record(rr)
        assert not records.is_server_record(rr)
        assert not records.is_text_record(rr)
        assert not records.is_address_record(rr)


def test_mislabelled_record_is_filtered_not_raised():
    """
    Brief: A record tagged PTR whose payload is not a pointer does not match.

    Inputs:
      - None

    Outputs:
      - None: Asserts predicate returns False
    """
    bogus = RR("_dapr._tcp.local", QTYPE.PTR, rdata=None, ttl=120)
    assert records.is_pointer_record(bogus) is False


def test_payload_accessors(dns):
    assert records.pointer_target(dns.ptr("svcA._dapr._tcp.local")) == "svcA._dapr._tcp.local"
    srv = dns.srv("svcA", "host.local", 50001)
    assert records.server_target(srv) == "host.local"
    assert records.server_port(srv) == 50001
    assert records.text_entries(dns.txt("svcA", ["appId=myapp", "httpPort=3501"])) == [
        "appId=myapp",
        "httpPort=3501",
    ]
    assert records.address_literal(dns.a("host.local", "10.0.0.5")) == "10.0.0.5"
    assert records.record_owner(srv) == "svcA"


def test_text_entries_replace_invalid_utf8(dns):
    rr = dns.txt("svcA", [b"appId=\xff"])
    assert records.text_entries(rr) == ["appId=�"]


def test_normalize_name():
    assert records.normalize_name("SvcA._DAPR._tcp.local.") == "svca._dapr._tcp.local"
    assert records.normalize_name("host.local") == "host.local"
