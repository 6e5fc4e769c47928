"""
MQTT transport session over paho-mqtt.

Owns one authenticated connection to the MQTT bridge. paho runs its
network loop on a background thread; every paho callback is handed to
the asyncio event loop with ``call_soon_threadsafe`` so session state and
application handlers are only touched from the event loop thread.
"""

import asyncio
import inspect
import ssl
from enum import Enum
from typing import Any, Callable, Dict, Optional, Set

import paho.mqtt.client as mqtt

from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji
from station.domain.entities import InboundMessage
from station.domain.exceptions import (
    ConnectError,
    PublishError,
    SessionClosedError,
    SubscribeError,
    TransportError,
)
from station.domain.value_objects import ConnectionDescriptor, DeliveryGuarantee

# SUBACK return code for a refused subscription
SUBACK_FAILURE = 0x80


class SessionState(str, Enum):
    """Transport session state."""

    CLOSED = "closed"
    CONNECTED = "connected"


class MqttSession:
    """
    One MQTT connection to the bridge.

    State machine: CLOSED -> connect() -> CONNECTED -> (link drop or
    close()) -> CLOSED. paho's built-in reconnect is disabled; the owner
    decides whether to open a new session.

    Events (assign callables or coroutine functions):
        on_connect(success: bool)
        on_close(reason: str)
        on_error(error: TransportError)
        on_message(message: InboundMessage)

    Attributes:
        descriptor: Connection parameters (host, client id, token, TLS)
        connect_timeout: Seconds to wait for CONNACK
    """

    def __init__(
        self,
        descriptor: ConnectionDescriptor,
        reporter: SystemReporter,
        connect_timeout: float = 30.0,
        client_factory: Optional[Callable[..., Any]] = None,
    ):
        """
        Initialize session (does not connect).

        Args:
            descriptor: Connection parameters
            reporter: SystemReporter for logging
            connect_timeout: Seconds to wait for CONNACK
            client_factory: paho Client class or compatible factory
        """
        self.descriptor = descriptor
        self.reporter = reporter
        self.connect_timeout = connect_timeout
        self._client_factory = client_factory or mqtt.Client

        self.on_connect: Optional[Callable[[bool], Any]] = None
        self.on_close: Optional[Callable[[str], Any]] = None
        self.on_error: Optional[Callable[[TransportError], Any]] = None
        self.on_message: Optional[Callable[[InboundMessage], Any]] = None

        self._state = SessionState.CLOSED
        self._client: Optional[Any] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._connack: Optional[asyncio.Future] = None
        self._closing = False
        self._teardown: Optional[asyncio.Task] = None
        self._pending_subscriptions: Dict[int, str] = {}
        self._handler_tasks: Set[asyncio.Task] = set()

    @property
    def state(self) -> SessionState:
        """Current session state."""
        return self._state

    @property
    def is_connected(self) -> bool:
        """Check if the session is CONNECTED."""
        return self._state is SessionState.CONNECTED

    # ================================================================
    # Public operations
    # ================================================================

    async def connect(self) -> "MqttSession":
        """
        Open the connection and wait for the broker's CONNACK.

        Returns:
            This session, CONNECTED

        Raises:
            ConnectError: If the broker refuses the connection, the socket
                cannot be opened, or no CONNACK arrives in time
        """
        if self._client is not None:
            raise ConnectError(
                self.descriptor.host,
                self.descriptor.port,
                "session already opened",
            )

        self._loop = asyncio.get_running_loop()
        self._connack = self._loop.create_future()
        self._closing = False

        self.reporter.info(
            f"{Emoji.NETWORK.CONNECTING} Connecting to "
            f"{self.descriptor.host}:{self.descriptor.port} "
            f"as {self.descriptor.client_id}",
            context="MqttSession",
            verbose_level=1,
        )

        try:
            self._client = self._build_client()
            self._client.connect_async(
                self.descriptor.host,
                self.descriptor.port,
                keepalive=self.descriptor.keepalive,
            )
            self._client.loop_start()
        except (OSError, ValueError) as e:
            await self._fail_connect(str(e))
            raise ConnectError(self.descriptor.host, self.descriptor.port, str(e)) from e

        try:
            success, reason = await asyncio.wait_for(
                self._connack, timeout=self.connect_timeout
            )
        except asyncio.TimeoutError as e:
            reason = f"no CONNACK within {self.connect_timeout}s"
            await self._fail_connect(reason)
            raise ConnectError(self.descriptor.host, self.descriptor.port, reason) from e
        except asyncio.CancelledError:
            await self._fail_connect("connect cancelled")
            raise

        if not success:
            await self._fail_connect(reason)
            raise ConnectError(self.descriptor.host, self.descriptor.port, reason)

        self.reporter.info(
            f"{Emoji.NETWORK.CONNECTED} Connected to {self.descriptor.host}",
            context="MqttSession",
            verbose_level=1,
        )
        self._emit("on_connect", True)
        return self

    def subscribe(self, topic: str, guarantee: DeliveryGuarantee) -> int:
        """
        Subscribe to a topic filter.

        Args:
            topic: Topic filter (wildcards allowed)
            guarantee: Requested delivery guarantee

        Returns:
            MQTT message id of the SUBSCRIBE packet

        Raises:
            SessionClosedError: If the session is not CONNECTED
        """
        self._require_connected("subscribe")

        rc, mid = self._client.subscribe(topic, qos=guarantee.qos)
        if rc != mqtt.MQTT_ERR_SUCCESS:
            self._emit("on_error", SubscribeError(topic, mqtt.error_string(rc)))
            return mid

        self._pending_subscriptions[mid] = topic
        self.reporter.info(
            f"{Emoji.NETWORK.SUBSCRIPTION} Subscribing to {topic} "
            f"(qos={guarantee.qos})",
            context="MqttSession",
            verbose_level=2,
        )
        return mid

    def publish(self, topic: str, payload: str, guarantee: DeliveryGuarantee) -> int:
        """
        Publish a payload.

        At-least-once retransmission is handled by paho until the broker
        acknowledges the message.

        Args:
            topic: Topic to publish to
            payload: Text payload
            guarantee: Delivery guarantee

        Returns:
            MQTT message id

        Raises:
            SessionClosedError: If the session is not CONNECTED
        """
        self._require_connected("publish")

        info = self._client.publish(topic, payload, qos=guarantee.qos)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            self._emit(
                "on_error",
                PublishError(topic, mqtt.error_string(info.rc), mid=info.mid),
            )
        return info.mid

    async def close(self) -> None:
        """
        Disconnect and stop the network loop.

        Safe to call on a session that is already closed.
        """
        client = self._client
        if client is None:
            if self._teardown is not None:
                await self._teardown
            return

        self._closing = True
        self._client = None
        client.disconnect()
        self._mark_closed("closed by client")
        await asyncio.to_thread(client.loop_stop)

    # ================================================================
    # Client construction
    # ================================================================

    def _build_client(self) -> Any:
        """Create and configure the paho client."""
        client = self._client_factory(
            callback_api_version=mqtt.CallbackAPIVersion.VERSION2,
            client_id=self.descriptor.client_id,
            protocol=mqtt.MQTTv311,
            reconnect_on_failure=False,
        )
        client.username_pw_set(
            username=self.descriptor.username,
            password=self.descriptor.password,
        )

        if self.descriptor.security.enabled:
            client.tls_set_context(self._tls_context())

        client.on_connect = self._on_paho_connect
        client.on_connect_fail = self._on_paho_connect_fail
        client.on_disconnect = self._on_paho_disconnect
        client.on_message = self._on_paho_message
        client.on_subscribe = self._on_paho_subscribe
        client.on_publish = self._on_paho_publish
        return client

    def _tls_context(self) -> ssl.SSLContext:
        """TLS 1.2+ context verifying the broker certificate."""
        context = ssl.create_default_context(cafile=self.descriptor.security.ca_certs)
        context.minimum_version = ssl.TLSVersion.TLSv1_2
        return context

    # ================================================================
    # paho callbacks (network thread)
    # ================================================================

    def _on_paho_connect(self, client, userdata, flags, reason_code, properties) -> None:
        if reason_code.is_failure:
            # Stop paho from retrying with the same credentials
            client.disconnect()
            self._call_in_loop(self._handle_connack, False, str(reason_code))
        else:
            self._call_in_loop(self._handle_connack, True, str(reason_code))

    def _on_paho_connect_fail(self, client, userdata) -> None:
        client.disconnect()
        self._call_in_loop(self._handle_connack, False, "connection failed")

    def _on_paho_disconnect(
        self, client, userdata, disconnect_flags, reason_code, properties
    ) -> None:
        self._call_in_loop(self._handle_disconnect, str(reason_code))

    def _on_paho_message(self, client, userdata, message) -> None:
        inbound = InboundMessage(
            topic=message.topic,
            payload=bytes(message.payload),
            qos=message.qos,
        )
        self._call_in_loop(self._handle_message, inbound)

    def _on_paho_subscribe(
        self, client, userdata, mid, reason_code_list, properties
    ) -> None:
        self._call_in_loop(self._handle_suback, mid, list(reason_code_list))

    def _on_paho_publish(self, client, userdata, mid, reason_code, properties) -> None:
        self._call_in_loop(self._handle_puback, mid)

    def _call_in_loop(self, callback: Callable, *args) -> None:
        """Schedule a callback on the event loop from the network thread."""
        try:
            self._loop.call_soon_threadsafe(callback, *args)
        except RuntimeError:
            self.reporter.debug(
                f"Event loop closed, dropped {callback.__name__}",
                context="MqttSession",
            )

    # ================================================================
    # Event loop handlers
    # ================================================================

    def _handle_connack(self, success: bool, reason: str) -> None:
        if self._connack is not None and not self._connack.done():
            if success:
                self._state = SessionState.CONNECTED
            self._connack.set_result((success, reason))

    def _handle_disconnect(self, reason: str) -> None:
        if self._connack is not None and not self._connack.done():
            self._connack.set_result((False, f"disconnected: {reason}"))
            return

        if self._state is SessionState.CONNECTED and not self._closing:
            self.reporter.warning(
                f"{Emoji.NETWORK.DISCONNECTED} Link to {self.descriptor.host} "
                f"dropped: {reason}",
                context="MqttSession",
                verbose_level=1,
            )
            client, self._client = self._client, None
            if client is not None:
                self._teardown = asyncio.ensure_future(self._stop_loop(client))
        self._mark_closed(reason)

    async def _stop_loop(self, client: Any) -> None:
        """Join the network thread of a client whose link dropped."""
        await asyncio.to_thread(client.loop_stop)

    def _handle_message(self, message: InboundMessage) -> None:
        if self._state is not SessionState.CONNECTED:
            self.reporter.debug(
                f"Dropped message on {message.topic}: session closed",
                context="MqttSession",
            )
            return
        self._emit("on_message", message)

    def _handle_suback(self, mid: int, reason_codes: list) -> None:
        topic = self._pending_subscriptions.pop(mid, "<unknown>")
        for code in reason_codes:
            value = getattr(code, "value", code)
            if value >= SUBACK_FAILURE:
                self._emit("on_error", SubscribeError(topic, str(code)))
                return

        self.reporter.debug(
            f"Subscribed to {topic} (granted={[str(c) for c in reason_codes]})",
            context="MqttSession",
        )

    def _handle_puback(self, mid: int) -> None:
        self.reporter.debug(f"Publish acknowledged (mid={mid})", context="MqttSession")

    def _mark_closed(self, reason: str) -> None:
        """Transition to CLOSED, firing on_close once per connection."""
        was_connected = self._state is SessionState.CONNECTED
        self._state = SessionState.CLOSED
        self._pending_subscriptions.clear()
        if was_connected:
            self._emit("on_close", reason)

    async def _fail_connect(self, reason: str) -> None:
        """Tear down a client that never reached CONNECTED."""
        self.reporter.error(
            f"{Emoji.ERROR.ERROR} Connection to {self.descriptor.host}:"
            f"{self.descriptor.port} failed: {reason}",
            context="MqttSession",
        )
        self._state = SessionState.CLOSED
        client, self._client = self._client, None
        if client is not None:
            self._closing = True
            client.disconnect()
            await asyncio.to_thread(client.loop_stop)
        self._emit("on_connect", False)

    def _require_connected(self, operation: str) -> None:
        if not self.is_connected or self._client is None:
            raise SessionClosedError(operation)

    # ================================================================
    # Event dispatch
    # ================================================================

    def _emit(self, event: str, *args) -> None:
        """Invoke an event handler; coroutine handlers run as tasks."""
        handler = getattr(self, event)
        if handler is None:
            return

        try:
            result = handler(*args)
        except Exception as e:
            self.reporter.error(
                f"{event} handler failed: {type(e).__name__}: {e}",
                context="MqttSession",
                exc_info=True,
            )
            return

        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._handler_tasks.add(task)
            task.add_done_callback(self._handler_done)

    def _handler_done(self, task: asyncio.Task) -> None:
        self._handler_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self.reporter.error(
                f"Event handler failed: {type(error).__name__}: {error}",
                context="MqttSession",
            )
