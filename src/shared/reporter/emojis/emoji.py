"""
Main Emoji registry class with centralized access to all emoji categories.

Usage:
    >>> from shared.reporter.emojis import Emoji
    >>>
    >>> Emoji.SYSTEM.STARTUP        # "🚀"
    >>> Emoji.NETWORK.CONNECTED     # "🔗"
    >>> Emoji.ERROR.CRITICAL        # "🔴"
"""

from shared.reporter.emojis.errors_emojis import ErrorEmoji
from shared.reporter.emojis.messaging_emojis import MessageEmoji
from shared.reporter.emojis.network_emojis import NetworkEmoji
from shared.reporter.emojis.sensor_emojis import SensorEmoji
from shared.reporter.emojis.system_emojis import SystemEmoji


class Emoji:
    """
    Central emoji registry with semantic categories.

    Each category is a separate class defined in its own module; this
    class aggregates them for convenient access.

    Categories:
        SYSTEM: Lifecycle, configuration and credentials
        NETWORK: Broker connection and data flow
        MESSAGE: Inbound device messages
        SENSOR: Telemetry readings
        ERROR: Error levels and warnings
    """

    SYSTEM = SystemEmoji
    NETWORK = NetworkEmoji
    MESSAGE = MessageEmoji
    SENSOR = SensorEmoji
    ERROR = ErrorEmoji
