"""
DeviceIdentity value object - registry coordinates of one device.
"""

import re
from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class DeviceIdentity:
    """
    Value object locating a device inside a cloud device registry.

    Every segment becomes part of MQTT topics or the client id, so MQTT
    wildcard and separator characters are rejected.

    Examples:
        DeviceIdentity("awesome-sylph-271611", "us-central1", "assignment1", "station")
    """

    project_id: str
    region: str
    registry_id: str
    device_id: str

    PATTERN: ClassVar[re.Pattern] = re.compile(r"^[A-Za-z0-9._~%+\-]+$")
    MAX_LENGTH: ClassVar[int] = 255

    def __post_init__(self):
        """Validate every segment on creation."""
        for field_name in ("project_id", "region", "registry_id", "device_id"):
            value = getattr(self, field_name)
            if not value:
                raise ValueError(f"{field_name} cannot be empty")
            if len(value) > self.MAX_LENGTH:
                raise ValueError(
                    f"{field_name} too long (max {self.MAX_LENGTH} characters)"
                )
            if not self.PATTERN.match(value):
                raise ValueError(
                    f"{field_name} contains characters not allowed in MQTT "
                    f"client ids or topics: {value!r}"
                )

    @property
    def client_id(self) -> str:
        """MQTT client id in the format required by the bridge."""
        return (
            f"projects/{self.project_id}/locations/{self.region}"
            f"/registries/{self.registry_id}/devices/{self.device_id}"
        )

    def __str__(self) -> str:
        return self.client_id
