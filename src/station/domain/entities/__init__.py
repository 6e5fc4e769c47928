"""
Domain entities for the station.
"""
from station.domain.entities.inbound_message import InboundMessage
from station.domain.entities.telemetry_record import TelemetryRecord

__all__ = ["InboundMessage", "TelemetryRecord"]
