"""
In-memory stand-in for the paho-mqtt client.

FakeBroker plays the bridge: it hands out FakeMqttClient instances through
``client_factory`` and records what they publish and subscribe. Callbacks
are invoked synchronously with the same signatures paho uses for callback
API version 2, carrying real paho ReasonCode and MQTTMessage objects.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import paho.mqtt.client as mqtt
from paho.mqtt.packettypes import PacketTypes
from paho.mqtt.reasoncodes import ReasonCode


@dataclass
class PublishResult:
    """Return value of publish (mirrors MQTTMessageInfo.rc / .mid)."""

    rc: int
    mid: int


@dataclass
class FakeBroker:
    """
    Scripted broker behaviour.

    Attributes:
        connack: CONNACK reason name ("Success", "Not authorized", ...)
        unreachable: Fire on_connect_fail instead of a CONNACK
        silent: Never answer the connection (timeout path)
        refused_topics: Topic filters answered with a failing SUBACK
        publish_rc: Return code handed back by publish
    """

    connack: str = "Success"
    unreachable: bool = False
    silent: bool = False
    refused_topics: Tuple[str, ...] = ()
    publish_rc: int = mqtt.MQTT_ERR_SUCCESS

    clients: List["FakeMqttClient"] = field(default_factory=list)
    published: List[Tuple[str, str, int]] = field(default_factory=list)
    subscriptions: List[Tuple[str, int]] = field(default_factory=list)

    def client_factory(self, **kwargs) -> "FakeMqttClient":
        client = FakeMqttClient(self, **kwargs)
        self.clients.append(client)
        return client

    @property
    def last_client(self) -> Optional["FakeMqttClient"]:
        return self.clients[-1] if self.clients else None

    def deliver(self, topic: str, payload: bytes, qos: int = 1) -> None:
        """Push a message to the connected client."""
        self.last_client.receive(topic, payload, qos)

    def drop(self) -> None:
        """Drop the connected client's link."""
        self.last_client.lose_connection()


class FakeMqttClient:
    """Subset of paho.mqtt.client.Client used by MqttSession."""

    def __init__(self, broker: FakeBroker, **kwargs):
        self.broker = broker
        self.init_kwargs = kwargs
        self.client_id = kwargs.get("client_id")

        self.username: Optional[str] = None
        self.password: Optional[str] = None
        self.tls_context = None
        self.host: Optional[str] = None
        self.port: Optional[int] = None
        self.keepalive: Optional[int] = None
        self.connected = False
        self.loop_running = False
        self.disconnect_calls = 0
        self._mid = 0

        self.on_connect = None
        self.on_connect_fail = None
        self.on_disconnect = None
        self.on_message = None
        self.on_subscribe = None
        self.on_publish = None

    def _next_mid(self) -> int:
        self._mid += 1
        return self._mid

    def username_pw_set(self, username, password=None):
        self.username = username
        self.password = password

    def tls_set_context(self, context=None):
        self.tls_context = context

    def connect_async(self, host, port=1883, keepalive=60, **kwargs):
        self.host = host
        self.port = port
        self.keepalive = keepalive

    def loop_start(self):
        self.loop_running = True
        if self.broker.silent:
            return mqtt.MQTT_ERR_SUCCESS

        if self.broker.unreachable:
            self.on_connect_fail(self, None)
            return mqtt.MQTT_ERR_SUCCESS

        reason = ReasonCode(PacketTypes.CONNACK, self.broker.connack)
        self.connected = not reason.is_failure
        self.on_connect(self, None, {}, reason, None)
        return mqtt.MQTT_ERR_SUCCESS

    def loop_stop(self):
        self.loop_running = False
        return mqtt.MQTT_ERR_SUCCESS

    def disconnect(self, reasoncode=None, properties=None):
        self.disconnect_calls += 1
        was_connected, self.connected = self.connected, False
        if was_connected:
            reason = ReasonCode(PacketTypes.DISCONNECT, "Normal disconnection")
            self.on_disconnect(self, None, {}, reason, None)
        return mqtt.MQTT_ERR_SUCCESS

    def subscribe(self, topic, qos=0):
        mid = self._next_mid()
        self.broker.subscriptions.append((topic, qos))

        if topic in self.broker.refused_topics:
            granted = ReasonCode(PacketTypes.SUBACK, "Unspecified error")
        else:
            granted = ReasonCode(PacketTypes.SUBACK, f"Granted QoS {qos}")
        self.on_subscribe(self, None, mid, [granted], None)
        return mqtt.MQTT_ERR_SUCCESS, mid

    def publish(self, topic, payload=None, qos=0, retain=False):
        mid = self._next_mid()
        rc = self.broker.publish_rc
        if rc == mqtt.MQTT_ERR_SUCCESS:
            self.broker.published.append((topic, payload, qos))
            if qos > 0:
                self.on_publish(
                    self, None, mid, ReasonCode(PacketTypes.PUBACK, "Success"), None
                )
        return PublishResult(rc=rc, mid=mid)

    def receive(self, topic: str, payload: bytes, qos: int) -> None:
        message = mqtt.MQTTMessage(mid=self._next_mid(), topic=topic.encode("utf-8"))
        message.payload = payload
        message.qos = qos
        self.on_message(self, None, message)

    def lose_connection(self) -> None:
        self.connected = False
        reason = ReasonCode(PacketTypes.DISCONNECT, "Unspecified error")
        self.on_disconnect(self, None, {}, reason, None)
