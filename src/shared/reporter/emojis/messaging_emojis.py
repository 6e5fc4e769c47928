"""
Inbound device message emoji definitions.
"""

from shared.reporter.emojis.base_emojis import ComponentEmoji


class MessageEmoji(ComponentEmoji):
    """Inbound message kinds delivered to a device."""

    CONFIG = "📋"  # Configuration update
    COMMAND = "⚡"  # Command received
    OTHER = "✉️"  # Unclassified message
