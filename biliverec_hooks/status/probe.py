"""Recorder liveness probe based on the recorder's own status logs.

The recorder writes one JSON record per line into daily files named like
``bilirec20230215.txt``. The newest file's last record carries the
recorder's ``ProcessId``; the recorder is considered running when that
process still exists.
"""

import os
import re
import logging
from pathlib import Path
from typing import Iterable

from ..models.status import StatusReport

logger = logging.getLogger(__name__)

LOG_PREFIX = "bilirec"
LOG_SUFFIX = ".txt"
# Initial comparison value; file names embed a fixed-width date, so the
# greatest name is the newest file.
BASELINE_LOG_NAME = "bilirec19700101.txt"

PROCESS_ID_PATTERN = re.compile(r'^{.*"ProcessId":\s*(\d+),.*}$')
# Largest value os.kill accepts (pid_t is a signed 32-bit int).
MAX_PROCESS_ID = 2 ** 31 - 1


class StatusProbeError(Exception):
    """The probe could not produce a report."""


class LogFileNotFoundError(StatusProbeError):
    """No recorder log file matched the expected name pattern."""


class ProcessIdNotFoundError(StatusProbeError):
    """The last log line carries no process id."""


def find_latest_log(names: Iterable[str], prefix: str = LOG_PREFIX, suffix: str = LOG_SUFFIX) -> str:
    """Pick the newest recorder log name.

    Raises:
        LogFileNotFoundError: if no name has the prefix and suffix
    """
    latest = BASELINE_LOG_NAME
    found = False

    for name in names:
        if not name.startswith(prefix) or not name.endswith(suffix):
            continue
        if not found or name > latest:
            latest = name
            found = True

    if not found:
        raise LogFileNotFoundError(f"No log file matching {prefix}*{suffix}")
    return latest


def read_last_line(path: Path) -> str:
    """Return the last non-blank line of ``path`` without its line ending.

    Empty files give ``""``.
    """
    last_line = ""
    with open(path, 'r', encoding='utf-8', errors='replace') as f:
        for line in f:
            if line.strip():
                last_line = line.rstrip("\r\n")
    return last_line


def extract_process_id(line: str) -> int:
    """Extract ``ProcessId`` from a structured log record.

    Raises:
        ProcessIdNotFoundError: if the line is empty, not a matching record,
            or the id is out of the platform's pid range
    """
    match = PROCESS_ID_PATTERN.match(line)
    if match is None:
        raise ProcessIdNotFoundError(f"No ProcessId in last log line: {line[:200]!r}")

    pid = int(match.group(1))
    if pid > MAX_PROCESS_ID:
        raise ProcessIdNotFoundError(f"ProcessId {pid} is out of range")
    return pid


def is_process_alive(pid: int) -> bool:
    """Check whether ``pid`` exists and can be signalled.

    Raises:
        StatusProbeError: on lookup failures other than missing process or
            missing permission
    """
    if pid <= 0:
        # 0 and negatives address process groups, not a single process
        return False

    try:
        os.kill(pid, 0)
    except (ProcessLookupError, PermissionError):
        return False
    except (OSError, OverflowError) as e:
        raise StatusProbeError(f"Cannot check process {pid}: {e}") from e
    return True


class StatusProbe:
    """Builds a fresh StatusReport from the recorder log directory on each call."""

    def __init__(self, log_dir: str, prefix: str = LOG_PREFIX, suffix: str = LOG_SUFFIX):
        self.log_dir = Path(log_dir)
        self.prefix = prefix
        self.suffix = suffix

    def latest_log_path(self) -> Path:
        try:
            names = os.listdir(self.log_dir)
        except OSError as e:
            raise StatusProbeError(f"Cannot list log directory {self.log_dir}: {e}") from e

        return self.log_dir / find_latest_log(names, self.prefix, self.suffix)

    def probe(self) -> StatusReport:
        """Run discovery, tail read, pid extraction and liveness check.

        Raises:
            StatusProbeError: if any step cannot complete
        """
        log_path = self.latest_log_path()
        try:
            last_line = read_last_line(log_path)
        except OSError as e:
            raise StatusProbeError(f"Cannot read {log_path}: {e}") from e

        pid = extract_process_id(last_line)
        running = is_process_alive(pid)
        logger.debug(f"Recorder pid {pid} from {log_path.name}: running={running}")

        return StatusReport(running=running, last_log=last_line)
