"""
Agent availability register.

Holds the single process-wide ``online``/``offline`` value the dashboard
toggles. The register is created once at startup, stored on ``app.state`` and
handed to the HTTP layer through dependency injection; it is never persisted,
so a restart brings the agent back ``offline``.
"""

from __future__ import annotations

import threading
from enum import Enum

from utils.ml_logging import get_logger

logger = get_logger("agent.status")


class AgentStatus(str, Enum):
    """Availability of the agent behind the dashboard."""

    ONLINE = "online"
    OFFLINE = "offline"


class InvalidStatusError(ValueError):
    """Raised when a candidate value is not a legal AgentStatus."""

    def __init__(self, candidate: object):
        self.candidate = candidate
        super().__init__(f"Invalid status: {candidate!r}")


class StatusRegister:
    """
    Thread-safe single-value store for the agent's availability.

    Reads and writes are serialized by a mutex so handlers running in the
    threadpool never observe a torn value. Concurrent writers resolve as last
    write wins.
    """

    def __init__(self, initial: AgentStatus = AgentStatus.OFFLINE):
        self._lock = threading.Lock()
        self._status = AgentStatus(initial)
        logger.debug("Status register initialized", extra={"agent_status": self._status.value})

    def get(self) -> AgentStatus:
        """Return the current status. Never fails, no side effects."""
        with self._lock:
            return self._status

    def set(self, candidate: object) -> AgentStatus:
        """
        Replace the stored status with ``candidate``.

        Only the exact strings ``"online"`` and ``"offline"`` (or the enum
        members themselves) are accepted; anything else raises
        InvalidStatusError and leaves the stored value untouched.

        Returns:
            The previous status.
        """
        if isinstance(candidate, AgentStatus):
            new_status = candidate
        elif isinstance(candidate, str) and candidate in AgentStatus._value2member_map_:
            new_status = AgentStatus(candidate)
        else:
            logger.error(f"Rejected invalid status: {candidate!r}")
            raise InvalidStatusError(candidate)

        with self._lock:
            previous = self._status
            self._status = new_status

        logger.keyinfo(
            f"Agent status changed from '{previous.value}' to '{new_status.value}'",
            extra={"agent_status_previous": previous.value, "agent_status": new_status.value},
        )
        return previous

    @property
    def is_online(self) -> bool:
        return self.get() is AgentStatus.ONLINE
