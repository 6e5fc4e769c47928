"""
DeviceTopics value object - MQTT topic names of one device.
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Tuple


class MessageKind(str, Enum):
    """Classification of a message delivered to the device."""

    CONFIG = "config"
    COMMAND = "command"
    OTHER = "other"

    @property
    def label(self) -> str:
        """Log label used when the message is received."""
        return {
            MessageKind.CONFIG: "Config message received",
            MessageKind.COMMAND: "Command message received",
            MessageKind.OTHER: "Message received",
        }[self]


@dataclass(frozen=True)
class DeviceTopics:
    """
    Topic names the bridge expects for a device.

    Attributes:
        device_id: Device identifier
        message_type: Telemetry topic suffix ("events" or "state")

    Examples:
        >>> topics = DeviceTopics("station")
        >>> topics.config
        '/devices/station/config'
        >>> topics.commands
        '/devices/station/commands/#'
        >>> topics.telemetry
        '/devices/station/events'
    """

    device_id: str
    message_type: str = "events"

    MESSAGE_TYPES: ClassVar[Tuple[str, ...]] = ("events", "state")

    def __post_init__(self):
        """Validate topic segments on creation."""
        if not self.device_id:
            raise ValueError("device_id cannot be empty")
        if any(ch in self.device_id for ch in "/#+"):
            raise ValueError(f"Invalid device_id for MQTT topics: {self.device_id!r}")
        if self.message_type not in self.MESSAGE_TYPES:
            raise ValueError(
                f"message_type must be one of {self.MESSAGE_TYPES}, "
                f"got {self.message_type!r}"
            )

    @property
    def base(self) -> str:
        """Common prefix of all device topics."""
        return f"/devices/{self.device_id}"

    @property
    def config(self) -> str:
        """Configuration updates topic."""
        return f"{self.base}/config"

    @property
    def commands_prefix(self) -> str:
        """Prefix shared by every command subfolder."""
        return f"{self.base}/commands"

    @property
    def commands(self) -> str:
        """Subscription filter covering all command subfolders."""
        return f"{self.commands_prefix}/#"

    @property
    def telemetry(self) -> str:
        """Topic telemetry records are published to."""
        return f"{self.base}/{self.message_type}"

    def classify(self, topic: str) -> MessageKind:
        """
        Classify an inbound topic.

        Args:
            topic: Topic the message arrived on

        Returns:
            CONFIG for the exact config topic, COMMAND for anything under
            the commands prefix, OTHER otherwise
        """
        if topic == self.config:
            return MessageKind.CONFIG
        if topic.startswith(self.commands_prefix):
            return MessageKind.COMMAND
        return MessageKind.OTHER
