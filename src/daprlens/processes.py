"""Brief: List local processes by executable name using psutil.

Inputs:
  - Executable name filter (e.g. ``daprd``).

Outputs:
  - ProcessInfo records carrying the pid and the joined command line.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

import psutil

logger = logging.getLogger(__name__)


class ProcessListError(Exception):
    """
    Brief: The process table could not be read.

    Inputs:
    - message: description

    Outputs:
    - Exception instance
    """

    pass


@dataclass(frozen=True)
class ProcessInfo:
    pid: int
    cmd: str


def _executable_matches(proc_name: Optional[str], wanted: str) -> bool:
    if not proc_name:
        return False
    base = os.path.basename(proc_name)
    stem, _ = os.path.splitext(base)
    return base == wanted or stem == wanted


class PsutilProcessLister:
    """Brief: ProcessLister backed by psutil.process_iter().

    Inputs:
      - process_iter: Optional replacement for psutil.process_iter (tests).

    Outputs:
      - PsutilProcessLister instance.
    """

    def __init__(self, process_iter: Optional[Callable[..., Iterable]] = None) -> None:
        self._process_iter = process_iter or psutil.process_iter

    def list_processes(self, name: str) -> List[ProcessInfo]:
        """Brief: Return every process whose executable is ``name``.

        Inputs:
          - name: Executable name without extension; ``daprd`` also matches
            ``daprd.exe``.

        Outputs:
          - list[ProcessInfo] in process-table order.

        Raises:
          - ProcessListError when the process table cannot be enumerated.
            Processes that exit or deny access mid-scan are skipped.
        """

        found: List[ProcessInfo] = []
        try:
            for proc in self._process_iter(["pid", "name", "cmdline"]):
                try:
                    info = proc.info
                    if not _executable_matches(info.get("name"), name):
                        continue
                    cmdline = info.get("cmdline") or []
                    found.append(ProcessInfo(pid=int(info["pid"]), cmd=" ".join(cmdline)))
                except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                    continue
        except (psutil.Error, OSError) as e:
            raise ProcessListError(f"listing processes named {name!r} failed: {e}") from e

        logger.debug("Found %d %s process(es)", len(found), name)
        return found
