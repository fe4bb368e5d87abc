from . import agent, calls, health, logs, relay, webrtc

__all__ = ["agent", "calls", "health", "logs", "relay", "webrtc"]
