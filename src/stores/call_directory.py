"""
Call directory store: subscriber lookup and address book.

Backed by the main supabase project:
- ``AllowedNumber(phone_number, user_id)`` maps caller numbers to users
- ``User(user_id, name, plan_status)`` carries the subscription plan
- ``Address(id, user_id, address_line)`` lists a user's service addresses
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from supabase import Client
from utils.ml_logging import get_logger

from src.enums.monitoring import PeerService
from src.stores.client import _extract_host, trace_store
from src.stores.errors import ExternalStoreError

logger = get_logger("stores.call_directory")

_NON_DIGITS = re.compile(r"[^0-9]")


def normalize_phone_number(phone_number: str) -> str:
    """Keep every digit (country code included), drop everything else."""
    return _NON_DIGITS.sub("", phone_number or "")


@dataclass(frozen=True)
class SubscriberProfile:
    """What the dashboard needs to know about a caller."""

    has_active_subscription: bool
    user_name: str
    subscription_status: str
    dashboard_link: str
    ticket: str

    @classmethod
    def inactive(cls, digits: str, name: str) -> SubscriberProfile:
        return cls(
            has_active_subscription=False,
            user_name=name,
            subscription_status="None",
            dashboard_link=f"/new-call/search?caller={digits}",
            ticket="New Call - Search Required",
        )

    @classmethod
    def active(cls, user_id: Any, name: str | None) -> SubscriberProfile:
        return cls(
            has_active_subscription=True,
            user_name=name or "Active Subscriber",
            subscription_status="Verified",
            dashboard_link=f"/user/dashboard/{user_id}",
            ticket="Active Plan Call",
        )


class CallDirectory:
    """Read-only view of the call directory supabase project."""

    peer_service = PeerService.CALL_DIRECTORY

    def __init__(self, client: Client, url: str | None = None):
        self.client = client
        self.server_address = _extract_host(url)

    @trace_store("select", "AllowedNumber")
    def find_user_id(self, digits: str) -> Any | None:
        response = (
            self.client.table("AllowedNumber")
            .select("user_id")
            .eq("phone_number", digits)
            .limit(1)
            .execute()
        )
        rows = response.data or []
        return rows[0].get("user_id") if rows else None

    @trace_store("select", "User")
    def find_user(self, user_id: Any) -> dict[str, Any] | None:
        response = (
            self.client.table("User")
            .select("plan_status, name")
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        rows = response.data or []
        return rows[0] if rows else None

    @trace_store("select", "Address")
    def list_addresses(self, user_id: str) -> list[dict[str, Any]]:
        response = (
            self.client.table("Address")
            .select("id, user_id, address_line")
            .eq("user_id", user_id)
            .execute()
        )
        addresses = response.data or []
        if not addresses:
            logger.warning(f"No addresses found for user {user_id}")
        return addresses

    def lookup_subscriber(self, phone_number: str) -> SubscriberProfile:
        """
        Resolve a caller's subscription status.

        Never raises: store failures degrade to an inactive profile so the
        call can still be routed.
        """
        digits = normalize_phone_number(phone_number)
        logger.info(f"Looking up subscriber for {phone_number}")

        try:
            user_id = self.find_user_id(digits)
            if user_id is None:
                logger.info("Caller not found in AllowedNumber; treating as unrecognized")
                return SubscriberProfile.inactive(digits, "Unrecognized Caller")

            user = self.find_user(user_id)
            if not user:
                logger.info(f"User {user_id} missing from User table")
                return SubscriberProfile.inactive(digits, "User Data Missing")

            # Non-string plan_status values (bool, int) are never active.
            plan_status = user.get("plan_status")
            if isinstance(plan_status, str) and plan_status.strip().lower() == "active":
                logger.info(f"User {user_id} has an active plan")
                return SubscriberProfile.active(user_id, user.get("name"))

            return SubscriberProfile.inactive(digits, user.get("name") or "Inactive Subscriber")
        except ExternalStoreError:
            return SubscriberProfile.inactive(digits, "DB Error")
        except Exception as exc:
            logger.error(f"Subscriber lookup failed: {exc}")
            return SubscriberProfile.inactive(digits, "System Error")
