"""Brief: Select and build the configured discovery strategy.

Inputs:
  - DiscoveryConfig and an optional environment mapping.

Outputs:
  - A DaprApplicationProvider (mDNS-backed or process-backed).
"""

from __future__ import annotations

import logging
import os
from typing import Callable, Mapping, Optional

from ..config.config_parser import ENV_STRATEGY
from ..config.config_schema import STRATEGIES, DiscoveryConfig
from ..mdns.client import MdnsClient
from ..mdns.transport import MulticastTransport
from .base import DaprApplicationProvider
from .mdns_provider import MdnsApplicationProvider
from .process_provider import ProcessApplicationProvider

logger = logging.getLogger(__name__)


def resolve_strategy(
    config: DiscoveryConfig, environ: Optional[Mapping[str, str]] = None
) -> str:
    """Brief: Return the strategy name, letting DAPRLENS_DISCOVERY win.

    Raises:
      - ValueError for an unknown strategy name.
    """

    env = os.environ if environ is None else environ
    strategy = str(env.get(ENV_STRATEGY, "") or "").strip().lower() or config.strategy
    if strategy not in STRATEGIES:
        raise ValueError(
            f"Unknown discovery strategy {strategy!r}; expected one of {', '.join(STRATEGIES)}"
        )
    return strategy


def _mdns_client_factory(config: DiscoveryConfig) -> Callable[[], MdnsClient]:
    mdns_cfg = config.mdns

    def create() -> MdnsClient:
        return MdnsClient(
            transport=MulticastTransport(
                group=mdns_cfg.group,
                port=mdns_cfg.port,
                bind_address=mdns_cfg.bind_address,
                include_additionals=mdns_cfg.include_additionals,
            )
        )

    return create


def create_application_provider(
    config: Optional[DiscoveryConfig] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> DaprApplicationProvider:
    """Brief: Build the provider for the configured discovery strategy.

    Inputs:
      - config: DiscoveryConfig (defaults apply when None).
      - environ: Optional environment mapping (defaults to os.environ).

    Outputs:
      - MdnsApplicationProvider or ProcessApplicationProvider.

    Example:
      >>> provider = create_application_provider(environ={"DAPRLENS_DISCOVERY": "mdns"})
      >>> type(provider).__name__
      'MdnsApplicationProvider'
    """

    config = config or DiscoveryConfig()
    strategy = resolve_strategy(config, environ)
    logger.info("Using %s discovery", strategy)

    if strategy == "mdns":
        return MdnsApplicationProvider(
            client_factory=_mdns_client_factory(config),
            service_type=config.mdns.service_type,
            start_attempts=config.mdns.start_attempts,
            retry_backoff_ms=config.mdns.retry_backoff_ms,
        )

    return ProcessApplicationProvider(
        process_name=config.process.name,
        interval_ms=config.process.interval_ms,
        default_http_port=config.process.default_http_port,
    )
