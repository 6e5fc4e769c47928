"""Emoji definitions for system reporting."""

from shared.reporter.emojis.emoji import Emoji
from shared.reporter.emojis.errors_emojis import ErrorEmoji
from shared.reporter.emojis.messaging_emojis import MessageEmoji
from shared.reporter.emojis.network_emojis import NetworkEmoji
from shared.reporter.emojis.sensor_emojis import SensorEmoji
from shared.reporter.emojis.system_emojis import SystemEmoji

__all__ = [
    "Emoji",
    "SystemEmoji",
    "NetworkEmoji",
    "MessageEmoji",
    "SensorEmoji",
    "ErrorEmoji",
]
