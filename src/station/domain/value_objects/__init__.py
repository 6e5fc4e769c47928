"""
Domain value objects for the station.
"""
from station.domain.value_objects.connection_descriptor import (
    ConnectionDescriptor,
    TransportSecurity,
)
from station.domain.value_objects.delivery_guarantee import DeliveryGuarantee
from station.domain.value_objects.device_identity import DeviceIdentity
from station.domain.value_objects.device_topics import DeviceTopics, MessageKind

__all__ = [
    "ConnectionDescriptor",
    "TransportSecurity",
    "DeliveryGuarantee",
    "DeviceIdentity",
    "DeviceTopics",
    "MessageKind",
]
