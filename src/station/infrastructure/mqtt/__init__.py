"""
MQTT transport infrastructure.
"""

from station.infrastructure.mqtt.session import MqttSession, SessionState

__all__ = ["MqttSession", "SessionState"]
