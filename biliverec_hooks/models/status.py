"""Status probe data models."""

from dataclasses import dataclass
from typing import Dict, Any


@dataclass(frozen=True)
class StatusReport:
    """Snapshot of the recorder's liveness, built fresh on every probe."""
    running: bool
    last_log: str

    def to_dict(self) -> Dict[str, Any]:
        return {"running": self.running, "last_log": self.last_log}
