"""
Application use cases.
"""

from station.application.use_cases.authenticate_device import (
    AuthenticateDeviceUseCase,
)
from station.application.use_cases.generate_telemetry import GenerateTelemetryUseCase
from station.application.use_cases.handle_inbound_message import (
    ClassifiedMessage,
    HandleInboundMessageUseCase,
)
from station.application.use_cases.publish_telemetry import PublishTelemetryUseCase

__all__ = [
    "AuthenticateDeviceUseCase",
    "GenerateTelemetryUseCase",
    "HandleInboundMessageUseCase",
    "ClassifiedMessage",
    "PublishTelemetryUseCase",
]
