"""
Use case for handling messages delivered to the device.
"""

from dataclasses import dataclass

from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji
from station.domain.entities import InboundMessage
from station.domain.value_objects import DeviceTopics, MessageKind

KIND_EMOJIS = {
    MessageKind.CONFIG: Emoji.MESSAGE.CONFIG,
    MessageKind.COMMAND: Emoji.MESSAGE.COMMAND,
    MessageKind.OTHER: Emoji.MESSAGE.OTHER,
}


@dataclass(frozen=True)
class ClassifiedMessage:
    """Inbound message with its classification and decoded text."""

    topic: str
    kind: MessageKind
    text: str

    def describe(self) -> str:
        """Log line for the message."""
        return f"{self.kind.label}: {self.text}"


class HandleInboundMessageUseCase:
    """
    Use case for classifying and logging inbound messages.

    Configuration updates arrive on the exact config topic, commands on
    any subfolder of the commands topic. Anything else is logged as a
    plain message.
    """

    def __init__(self, topics: DeviceTopics, reporter: SystemReporter):
        """
        Initialize use case.

        Args:
            topics: Device topic names
            reporter: SystemReporter for logging
        """
        self.topics = topics
        self.reporter = reporter

    def execute(self, message: InboundMessage) -> ClassifiedMessage:
        """
        Classify, decode and log a message.

        Args:
            message: Message as delivered by the transport

        Returns:
            ClassifiedMessage
        """
        classified = ClassifiedMessage(
            topic=message.topic,
            kind=self.topics.classify(message.topic),
            text=message.decode_text(),
        )

        self.reporter.info(
            f"{KIND_EMOJIS[classified.kind]} {classified.describe()}",
            context="Messages",
            verbose_level=1,
        )
        return classified
