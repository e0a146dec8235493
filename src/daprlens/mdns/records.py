"""Brief: Narrow generic DNS resource records to the four shapes DNS-SD uses.

Inputs:
  - dnslib.RR instances taken from a parsed mDNS response.

Outputs:
  - Boolean predicates and payload accessors. Nothing here raises on
    malformed records; a record that does not look like its type tag says is
    simply classified as not matching.
"""

from __future__ import annotations

from typing import List

from cachetools import LRUCache, cached
from dnslib import QTYPE, RR

_NORMALIZE_NAME_CACHE: LRUCache = LRUCache(maxsize=4096)


@cached(_NORMALIZE_NAME_CACHE)
def normalize_name(name: str) -> str:
    """Brief: Normalize a DNS owner name for comparison and dict keys.

    Inputs:
      - name: Domain name (may include trailing dot, any case).

    Outputs:
      - str: Lowercased name without trailing dot.

    Example:
      >>> normalize_name("svcA._Dapr._tcp.local.")
      'svca._dapr._tcp.local'
    """

    return str(name).rstrip(".").lower()


def record_owner(rr: RR) -> str:
    """Owner name of rr as text, without the trailing dot."""

    return str(rr.rname).rstrip(".")


def is_pointer_record(rr: RR) -> bool:
    return getattr(rr, "rtype", None) == QTYPE.PTR and hasattr(rr.rdata, "label")


def is_server_record(rr: RR) -> bool:
    return (
        getattr(rr, "rtype", None) == QTYPE.SRV
        and hasattr(rr.rdata, "target")
        and hasattr(rr.rdata, "port")
    )


def is_text_record(rr: RR) -> bool:
    return getattr(rr, "rtype", None) == QTYPE.TXT and isinstance(
        getattr(rr.rdata, "data", None), list
    )


def is_address_record(rr: RR) -> bool:
    return getattr(rr, "rtype", None) == QTYPE.A and rr.rdata is not None


def pointer_target(rr: RR) -> str:
    """Brief: Instance name a PTR record points at (no trailing dot)."""

    return str(rr.rdata.label).rstrip(".")


def server_target(rr: RR) -> str:
    return str(rr.rdata.target).rstrip(".")


def server_port(rr: RR) -> int:
    return int(rr.rdata.port)


def text_entries(rr: RR) -> List[str]:
    """Brief: Decode TXT character-strings into text.

    Inputs:
      - rr: TXT record; rdata.data holds a list of byte strings.

    Outputs:
      - list[str]: One entry per character-string, decoded as UTF-8 with
        undecodable bytes replaced.
    """

    out: List[str] = []
    for chunk in rr.rdata.data:
        if isinstance(chunk, bytes):
            out.append(chunk.decode("utf-8", errors="replace"))
        else:
            out.append(str(chunk))
    return out


def address_literal(rr: RR) -> str:
    return str(rr.rdata)
