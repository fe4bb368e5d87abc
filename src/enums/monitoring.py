from enum import Enum


# Span attribute keys for Azure App Insights OpenTelemetry logging
class SpanAttr(str, Enum):
    """
    Standardized span attribute keys for OpenTelemetry tracing.

    Attribute Categories:
    - Core: Basic correlation and identification
    - Application Map: Required for proper dependency visualization
    - Agent / Call: Agent availability and call routing
    - Relay: Real-time notification channel tracking
    """

    # Core
    OPERATION_NAME = "operation.name"
    SERVICE_NAME = "service.name"
    ERROR_TYPE = "error.type"
    ERROR_MESSAGE = "error.message"

    # Application Map - these create edges between nodes
    PEER_SERVICE = "peer.service"
    SERVER_ADDRESS = "server.address"
    DB_SYSTEM = "db.system"
    DB_OPERATION = "db.operation"
    DB_NAME = "db.name"
    DB_OPERATION_DURATION_MS = "db.operation.duration_ms"

    # Agent / Call
    AGENT_STATUS = "agent.status"
    AGENT_ID = "agent.id"
    CALL_SUBSCRIPTION_STATUS = "call.subscription_status"
    CALL_DELIVERED = "call.delivered"

    # Relay
    RELAY_CONNECTION_ID = "relay.connection.id"


class PeerService:
    """
    Standard peer.service values for Application Map dependency visualization.
    """

    CALL_DIRECTORY = "supabase.call-directory"
    LOG_STORE = "supabase.log-store"
    IDENTITY = "identity-platform"
