"""
API Router
==========

Mounts every endpoint router at the paths the agent dashboard expects.
"""

from fastapi import APIRouter

from .endpoints import agent, calls, health, logs, relay, webrtc

api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(agent.router, prefix="/agent")
api_router.include_router(calls.router, prefix="/call")
api_router.include_router(webrtc.router, prefix="/webrtc")
api_router.include_router(logs.router, prefix="/api/logs")
api_router.include_router(relay.router)
