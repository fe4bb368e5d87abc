"""
Agent state shared by the HTTP layer.

Exports:
- AgentStatus: ``online`` / ``offline`` enumeration
- StatusRegister: mutex-guarded holder of the current AgentStatus
- InvalidStatusError: raised for values outside AgentStatus
"""

from src.agent.status import AgentStatus, InvalidStatusError, StatusRegister

__all__ = [
    "AgentStatus",
    "InvalidStatusError",
    "StatusRegister",
]
