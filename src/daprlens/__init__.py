"""daprlens: discover running Dapr applications via mDNS or the process table."""

__version__ = "0.1.0"
