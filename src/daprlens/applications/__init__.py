"""Dapr application descriptors and the discovery strategies that produce them.

The strategy factory lives in ``daprlens.applications.factory``.
"""

from .base import (
    DAPR_PROCESS_NAME,
    DAPR_SERVICE_TYPE,
    DEFAULT_HTTP_PORT,
    DaprApplication,
    DaprApplicationProvider,
)
from .mdns_provider import MdnsApplicationProvider
from .process_provider import ProcessApplicationProvider

__all__ = [
    "DAPR_PROCESS_NAME",
    "DAPR_SERVICE_TYPE",
    "DEFAULT_HTTP_PORT",
    "DaprApplication",
    "DaprApplicationProvider",
    "MdnsApplicationProvider",
    "ProcessApplicationProvider",
]
