"""
Broker connection and data flow emoji definitions.

Usage:
    >>> from shared.reporter.emojis import NetworkEmoji
    >>> print(f"{NetworkEmoji.CONNECTED} Broker connected")
    🔗 Broker connected
"""

from shared.reporter.emojis.base_emojis import ComponentEmoji


class NetworkEmoji(ComponentEmoji):
    """Broker connection states and data flow."""

    # ============================================================
    # Connection States
    # ============================================================

    CONNECTED = "🔗"  # Connection established
    DISCONNECTED = "⚠️"  # Connection lost
    RECONNECTING = "🔄"  # Reconnection attempt
    CONNECTING = "⏳"  # Connection in progress
    TIMEOUT = "⏱️"  # Connection timeout

    # ============================================================
    # Data Flow
    # ============================================================

    SEND = "📤"  # Message published
    RECEIVE = "📥"  # Message received
    SUBSCRIPTION = "📬"  # Topic subscription
