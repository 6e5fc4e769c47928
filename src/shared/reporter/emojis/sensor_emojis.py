"""
Sensor reading emoji definitions.
"""

from shared.reporter.emojis.base_emojis import ComponentEmoji


class SensorEmoji(ComponentEmoji):
    """Environmental sensor readings."""

    TEMPERATURE = "🌡️"
    HUMIDITY = "💧"
    WIND = "🌬️"
    RAIN = "🌧️"
    READING = "📡"  # Full telemetry record
