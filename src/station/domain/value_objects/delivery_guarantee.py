"""
DeliveryGuarantee value object - MQTT quality of service levels in use.
"""

from enum import IntEnum


class DeliveryGuarantee(IntEnum):
    """Delivery guarantee, valued as the MQTT QoS level."""

    AT_MOST_ONCE = 0
    AT_LEAST_ONCE = 1

    @property
    def qos(self) -> int:
        """MQTT QoS level."""
        return int(self)
