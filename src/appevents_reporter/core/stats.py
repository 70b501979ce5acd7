"""Dispatch statistics snapshot handed to network listeners."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict


@dataclass(frozen=True)
class DispatchStats:
    """State of the reporter after a dispatch step."""

    pending: int = 0  # Events submitted in the current call, not yet resolved
    successful: int = 0  # Resolved successfully in the current call
    failed: int = 0  # Resolved as failed in the current call
    cumulative_seen: int = 0  # Distinct event ids ever submitted plus buffered events
    cumulative_successful: int = 0  # Events accepted by the server for the process lifetime

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


NetworkListener = Callable[[DispatchStats], None]
