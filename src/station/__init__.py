"""
Station - Environmental Sensor Station Agent

Clean Architecture implementation of a device that publishes simulated
weather telemetry to an MQTT bridge authenticated with a device-signed JWT.
"""

from station.main import StationApp, main

__version__ = "0.1.0"
__all__ = ["StationApp", "main"]
