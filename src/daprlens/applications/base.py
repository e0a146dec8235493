"""Brief: Application descriptor and the provider capability shared by all
discovery strategies.

Inputs:
  - None.

Outputs:
  - DaprApplication, DaprApplicationProvider and discovery constants.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Callable, Dict, List, Optional, Protocol

from ..events import Subscription

DAPR_SERVICE_TYPE = "_dapr._tcp.local"
DAPR_PROCESS_NAME = "daprd"
DEFAULT_HTTP_PORT = 3500


@dataclass(frozen=True)
class DaprApplication:
    """Brief: One discovered Dapr application.

    Inputs:
      - app_id: Application identifier (never empty).
      - http_port: Dapr sidecar HTTP port.
      - pid: Process id of the sidecar when discovered from the process table.

    Outputs:
      - DaprApplication instance.
    """

    app_id: str
    http_port: int
    pid: Optional[int] = None

    def to_dict(self) -> Dict[str, object]:
        data = asdict(self)
        if self.pid is None:
            data.pop("pid")
        return data


class DaprApplicationProvider(Protocol):
    """Brief: Capability implemented by every discovery strategy.

    Notes:
      - on_did_change listeners receive None whenever the application list
        may have changed; they re-query get_applications().
    """

    def on_did_change(self, listener: Callable[[None], None]) -> Subscription: ...

    def get_applications(self, refresh: bool = False) -> List[DaprApplication]: ...

    def close(self) -> None: ...
