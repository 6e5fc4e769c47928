"""
Error level emoji definitions.
"""

from shared.reporter.emojis.base_emojis import ComponentEmoji


class ErrorEmoji(ComponentEmoji):
    """Error severity levels."""

    CRITICAL = "🔴"  # Fatal, agent cannot proceed
    ERROR = "❌"  # Operation failed
    WARNING = "⚠️"  # Degraded but running
