"""Brief: Pydantic models describing the daprlens YAML configuration.

Inputs:
  - Mappings parsed from YAML (see config_parser.load_config).

Outputs:
  - AppConfig and its nested section models with normalized field types.
"""

from __future__ import annotations

import ipaddress
from typing import Optional

from pydantic import BaseModel, Field, validator

from ..applications.base import DAPR_PROCESS_NAME, DAPR_SERVICE_TYPE, DEFAULT_HTTP_PORT
from ..mdns.transport import MDNS_GROUP, MDNS_PORT

STRATEGIES = ("mdns", "process")

# RFC 1035 limits
_MAX_LABEL_BYTES = 63
_MAX_NAME_BYTES = 253


class MdnsDiscoveryConfig(BaseModel):
    """Brief: Typed configuration for mDNS-based discovery.

    Inputs:
      - service_type: DNS-SD service type to browse.
      - group: IPv4 multicast group.
      - port: UDP port of the multicast group.
      - bind_address: Local IPv4 address to bind and join on ("" for any).
      - include_additionals: Correlate additional-section records too.
      - start_attempts: Attempts for the initial query (>= 1).
      - retry_backoff_ms: Delay before the first retry; doubles afterwards.

    Outputs:
      - MdnsDiscoveryConfig instance.
    """

    service_type: str = Field(default=DAPR_SERVICE_TYPE)
    group: str = Field(default=MDNS_GROUP)
    port: int = Field(default=MDNS_PORT, ge=1, le=65535)
    bind_address: str = Field(default="")
    include_additionals: bool = True
    start_attempts: int = Field(default=1, ge=1)
    retry_backoff_ms: int = Field(default=250, ge=0)

    @validator("service_type", pre=True)
    def _normalize_service_type(cls, v):  # type: ignore[no-untyped-def]
        """Strip whitespace and the trailing dot; reject names DNS cannot carry."""

        s = str(v or "").strip().rstrip(".")
        if not s:
            raise ValueError("service_type must not be empty")
        labels = s.split(".")
        if any(not label for label in labels):
            raise ValueError(f"service_type {s!r} contains an empty label")
        if any(len(label.encode("utf-8")) > _MAX_LABEL_BYTES for label in labels):
            raise ValueError(
                f"service_type {s!r} has a label longer than {_MAX_LABEL_BYTES} bytes"
            )
        if len(s.encode("utf-8")) > _MAX_NAME_BYTES:
            raise ValueError(f"service_type {s!r} is longer than {_MAX_NAME_BYTES} bytes")
        return s

    @validator("group")
    def _check_group(cls, v):  # type: ignore[no-untyped-def]
        addr = ipaddress.IPv4Address(str(v))
        if not addr.is_multicast:
            raise ValueError(f"{v} is not an IPv4 multicast address")
        return str(addr)

    @validator("bind_address")
    def _check_bind_address(cls, v):  # type: ignore[no-untyped-def]
        s = str(v or "").strip()
        if s:
            ipaddress.IPv4Address(s)
        return s

    class Config:
        extra = "forbid"


class ProcessDiscoveryConfig(BaseModel):
    """Brief: Typed configuration for process-table discovery.

    Inputs:
      - name: Executable name of the Dapr sidecar.
      - interval_ms: Poll interval in milliseconds.
      - default_http_port: Port used when the command line omits it.

    Outputs:
      - ProcessDiscoveryConfig instance.
    """

    name: str = Field(default=DAPR_PROCESS_NAME, min_length=1)
    interval_ms: int = Field(default=2000, ge=100)
    default_http_port: int = Field(default=DEFAULT_HTTP_PORT, ge=0, le=65535)

    class Config:
        extra = "forbid"


class DiscoveryConfig(BaseModel):
    strategy: str = Field(default="process")
    mdns: MdnsDiscoveryConfig = Field(default_factory=MdnsDiscoveryConfig)
    process: ProcessDiscoveryConfig = Field(default_factory=ProcessDiscoveryConfig)

    @validator("strategy", pre=True)
    def _normalize_strategy(cls, v):  # type: ignore[no-untyped-def]
        s = str(v or "process").strip().lower()
        if s not in STRATEGIES:
            raise ValueError(f"strategy must be one of {', '.join(STRATEGIES)}; got {v!r}")
        return s

    class Config:
        extra = "forbid"


class LoggingConfig(BaseModel):
    level: str = Field(default="info")
    stderr: bool = True
    file: Optional[str] = None

    class Config:
        extra = "forbid"


class AppConfig(BaseModel):
    """Brief: Root configuration model.

    Inputs:
      - discovery: DiscoveryConfig section.
      - logging: LoggingConfig section.

    Outputs:
      - AppConfig instance.
    """

    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    class Config:
        extra = "forbid"
