"""
System-level operations and lifecycle emoji definitions.
"""

from shared.reporter.emojis.base_emojis import ComponentEmoji


class SystemEmoji(ComponentEmoji):
    """System-level operations and lifecycle events."""

    # ============================================================
    # Lifecycle Operations
    # ============================================================
    STARTUP = "🚀"  # Agent/component initialization
    SHUTDOWN = "🛑"  # Agent/component shutdown
    READY = "✅"  # Component initialized successfully

    # ============================================================
    # Configuration & Credentials
    # ============================================================
    CONFIG = "⚙️"  # Configuration operation
    KEY = "🔑"  # Private key / token operation
    REFRESH = "🔄"  # Token refresh
