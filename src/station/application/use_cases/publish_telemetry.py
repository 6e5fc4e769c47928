"""
Use case for publishing one telemetry reading.
"""

from typing import Optional

from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji
from station.application.use_cases.generate_telemetry import GenerateTelemetryUseCase
from station.domain.entities import TelemetryRecord
from station.domain.value_objects import DeliveryGuarantee, DeviceTopics
from station.infrastructure.mqtt import MqttSession


class PublishTelemetryUseCase:
    """
    Use case for one publish cycle.

    Generates a reading and publishes it at-least-once to the telemetry
    topic. A cycle with no connected session is skipped.
    """

    def __init__(
        self,
        generator: GenerateTelemetryUseCase,
        topics: DeviceTopics,
        reporter: SystemReporter,
    ):
        """
        Initialize use case.

        Args:
            generator: Reading generator
            topics: Device topic names
            reporter: SystemReporter for logging
        """
        self.generator = generator
        self.topics = topics
        self.reporter = reporter

    def execute(self, session: Optional[MqttSession]) -> Optional[TelemetryRecord]:
        """
        Generate and publish one reading.

        Args:
            session: Current transport session (may be None or closed)

        Returns:
            Published record, or None if the cycle was skipped
        """
        if session is None or not session.is_connected:
            self.reporter.warning(
                f"{Emoji.ERROR.WARNING} Session not connected, "
                f"skipping telemetry publish",
                context="Telemetry",
                verbose_level=1,
            )
            return None

        record = self.generator.next_reading(self.topics.device_id)
        payload = record.to_payload()

        self.reporter.info(
            f"{Emoji.NETWORK.SEND} Publishing message: {payload}",
            context="Telemetry",
            verbose_level=1,
        )
        self.reporter.debug(
            f"{Emoji.SENSOR.TEMPERATURE} {record.temperature}C "
            f"{Emoji.SENSOR.HUMIDITY} {record.humidity}% "
            f"{Emoji.SENSOR.WIND} {record.wind_intensity}km/h @ {record.wind_direction} deg "
            f"{Emoji.SENSOR.RAIN} {record.rain_height}mm",
            context="Telemetry",
        )
        session.publish(self.topics.telemetry, payload, DeliveryGuarantee.AT_LEAST_ONCE)
        return record
