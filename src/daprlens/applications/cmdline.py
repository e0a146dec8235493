"""Brief: Extract Dapr application identity from a daprd command line.

Inputs:
  - Command-line strings such as
    ``daprd --app-id "orders" --dapr-http-port "3600"``.

Outputs:
  - Pure helper functions; no process access happens here.
"""

from __future__ import annotations

import re
from typing import Optional

from .base import DEFAULT_HTTP_PORT, DaprApplication

_APP_ID_RE = re.compile(r'--app-id "?(?P<app_id>[a-zA-Z0-9_-]+)"?')
_HTTP_PORT_RE = re.compile(r'--dapr-http-port "?(?P<port>\d+)"?')


def get_app_id(cmd: str) -> Optional[str]:
    """Brief: Return the value of ``--app-id`` or None when absent.

    Example:
      >>> get_app_id('daprd --app-id "orders"')
      'orders'
    """

    m = _APP_ID_RE.search(cmd)
    return m.group("app_id") if m else None


def get_http_port(cmd: str, default: int = DEFAULT_HTTP_PORT) -> int:
    """Brief: Return the value of ``--dapr-http-port`` or default when absent.

    Example:
      >>> get_http_port("daprd --app-id orders")
      3500
    """

    m = _HTTP_PORT_RE.search(cmd)
    return int(m.group("port")) if m else default


def to_application(
    cmd: Optional[str], pid: Optional[int], default_http_port: int = DEFAULT_HTTP_PORT
) -> Optional[DaprApplication]:
    """Brief: Build a DaprApplication from a command line.

    Inputs:
      - cmd: Full command line (may be None or empty).
      - pid: Process id recorded on the descriptor.
      - default_http_port: Port used when ``--dapr-http-port`` is missing.

    Outputs:
      - DaprApplication, or None when the command line has no app id.
    """

    if not cmd:
        return None
    app_id = get_app_id(cmd)
    if not app_id:
        return None
    return DaprApplication(
        app_id=app_id, http_port=get_http_port(cmd, default_http_port), pid=pid
    )
