"""
Logging store: request logs and agent tickets.

Backed by a dedicated supabase project, separate from the call directory.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from supabase import Client
from utils.ml_logging import get_logger

from src.enums.monitoring import PeerService
from src.stores.client import _extract_host, trace_store
from src.stores.errors import ExternalStoreError

logger = get_logger("stores.log_store")

DEFAULT_AGENT_NAME = "System"
DEFAULT_AGENT_ID = "AGENT_001"


class RequestLogStore:
    peer_service = PeerService.LOG_STORE

    def __init__(self, client: Client, url: str | None = None):
        self.client = client
        self.server_address = _extract_host(url)

    @trace_store("insert", "request_logs")
    def save_request_log(
        self,
        phone: str,
        notes: str,
        category: str | None = None,
        agent_name: str | None = None,
    ) -> list[dict[str, Any]]:
        """Insert one request log and return the stored rows."""
        record = {
            "phone": phone,
            "category": category,
            "notes": notes,
            "agent_name": agent_name or DEFAULT_AGENT_NAME,
        }
        response = self.client.table("request_logs").insert([record]).execute()
        logger.info(f"Request log saved for {phone} [{category}]")
        return response.data or []

    @trace_store("insert", "tickets")
    def create_ticket(
        self,
        phone_number: str,
        request_details: str,
        agent_id: str | None = None,
    ) -> dict[str, Any]:
        """Insert a ``New`` ticket and return the stored row (with its id)."""
        record = {
            "phone_number": phone_number,
            "request_details": request_details,
            "agent_id": agent_id or DEFAULT_AGENT_ID,
            "status": "New",
            "created_at": datetime.now(UTC).isoformat(),
        }
        response = self.client.table("tickets").insert([record]).execute()
        rows = response.data or []
        if not rows:
            raise ExternalStoreError("Ticket insert returned no rows")
        logger.info(f"Ticket {rows[0].get('id')} created by {record['agent_id']}")
        return rows[0]
