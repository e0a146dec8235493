from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from .records import normalize_name


@dataclass
class ServiceRecord:
    """Brief: One DNS-SD service instance as correlated from a single packet.

    Inputs:
      - name: PTR target / instance name; the stable key.
      - fqdn: SRV target host; empty until resolved.
      - port: SRV port; 0 until resolved.
      - address: A record literal for fqdn; empty when absent.
      - text: Raw TXT entries (typically ``key=value``).

    Outputs:
      - ServiceRecord instance.

    Notes:
      - Only ``fqdn`` gates resolution. Empty address/text mean "absent".
    """

    name: str
    fqdn: str = ""
    port: int = 0
    address: str = ""
    text: List[str] = field(default_factory=list)

    @property
    def resolved(self) -> bool:
        return bool(self.fqdn)


class ServiceRegistry:
    """Brief: Last-known resolved ServiceRecord per instance name.

    Inputs:
      - None.

    Outputs:
      - ServiceRegistry instance. Keys compare case-insensitively and ignore a
        trailing dot. There is no expiry: entries leave only through remove()
        or clear().
    """

    def __init__(self) -> None:
        self._services: Dict[str, ServiceRecord] = {}

    def __len__(self) -> int:
        return len(self._services)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize_name(name) in self._services

    def __iter__(self) -> Iterator[ServiceRecord]:
        return iter(list(self._services.values()))

    def names(self) -> List[str]:
        return [s.name for s in self._services.values()]

    def get(self, name: str) -> Optional[ServiceRecord]:
        return self._services.get(normalize_name(name))

    def insert_if_absent(self, record: ServiceRecord) -> bool:
        """Brief: Store record unless its name is already registered.

        Inputs:
          - record: ServiceRecord to insert.

        Outputs:
          - bool: True when the record was inserted, False when an entry with
            the same name already existed (the existing entry is kept).
        """

        key = normalize_name(record.name)
        if key in self._services:
            return False
        self._services[key] = record
        return True

    def remove(self, name: str) -> Optional[ServiceRecord]:
        """Remove name if present and return its last-known record."""

        return self._services.pop(normalize_name(name), None)

    def clear(self) -> None:
        self._services.clear()
