"""
External store adapters (supabase).

Exports:
- CallDirectory / SubscriberProfile: caller lookup against the main project
- RequestLogStore: request logs and tickets in the logging project
- ExternalStoreError: failures surfaced to handlers
- create_store_client: client factory returning None when unconfigured
"""

from src.stores.call_directory import CallDirectory, SubscriberProfile, normalize_phone_number
from src.stores.client import create_store_client
from src.stores.errors import ExternalStoreError
from src.stores.log_store import RequestLogStore

__all__ = [
    "CallDirectory",
    "ExternalStoreError",
    "RequestLogStore",
    "SubscriberProfile",
    "create_store_client",
    "normalize_phone_number",
]
