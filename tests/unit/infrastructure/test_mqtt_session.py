"""
Unit tests for MqttSession.

Runs the session against the in-memory FakeBroker, so no network is used.

Usage:
    pytest tests/unit/infrastructure/test_mqtt_session.py
"""

import base64
import ssl

import paho.mqtt.client as mqtt
import pytest

from shared.tests import ComponentTest
from station.domain.exceptions import (
    ConnectError,
    PublishError,
    SessionClosedError,
    SubscribeError,
)
from station.domain.value_objects import DeliveryGuarantee
from station.infrastructure.mqtt import MqttSession, SessionState
from tests.helpers.factories import CLIENT_ID, make_descriptor
from tests.helpers.fake_mqtt import FakeBroker
from tests.helpers.manual_sleep import settle


class TestMqttSession(ComponentTest):
    """Unit tests for MqttSession."""

    component_name = "station"
    test_category = "unit"

    def setup_test(self):
        self.broker = FakeBroker()
        self.events = []

    def _session(self, tls: bool = False, connect_timeout: float = 1.0) -> MqttSession:
        session = MqttSession(
            descriptor=make_descriptor(tls=tls),
            reporter=self.reporter,
            connect_timeout=connect_timeout,
            client_factory=self.broker.client_factory,
        )
        session.on_connect = lambda success: self.events.append(("connect", success))
        session.on_close = lambda reason: self.events.append(("close", reason))
        session.on_error = lambda error: self.events.append(("error", error))
        session.on_message = lambda message: self.events.append(("message", message))
        return session

    # ================================================================
    # Connect
    # ================================================================

    async def test_connect_success(self):
        """Test CONNACK success moves the session to CONNECTED."""
        self.reporter.info("Testing successful connect", context="Test")

        session = self._session()

        result = await session.connect()

        assert result is session
        assert session.state is SessionState.CONNECTED
        assert session.is_connected is True
        assert self.events == [("connect", True)]

        await session.close()

    async def test_connect_configures_client(self):
        """Test client id, credentials and endpoint handed to paho."""
        session = self._session()
        await session.connect()

        client = self.broker.last_client
        assert client.client_id == CLIENT_ID
        assert client.init_kwargs["callback_api_version"] is mqtt.CallbackAPIVersion.VERSION2
        assert client.init_kwargs["protocol"] == mqtt.MQTTv311
        assert client.username == "unused"
        assert client.password == session.descriptor.token.value
        assert (client.host, client.port, client.keepalive) == ("localhost", 1883, 60)
        assert client.tls_context is None

        await session.close()

    async def test_connect_with_tls(self):
        """Test TLS context requires TLS 1.2 or newer."""
        self.reporter.info("Testing TLS configuration", context="Test")

        session = self._session(tls=True)
        await session.connect()

        context = self.broker.last_client.tls_context
        assert isinstance(context, ssl.SSLContext)
        assert context.minimum_version == ssl.TLSVersion.TLSv1_2
        assert context.verify_mode == ssl.CERT_REQUIRED

        await session.close()

    async def test_connect_refused(self):
        """Test refused CONNACK raises and stays CLOSED."""
        self.reporter.info("Testing refused connect", context="Test")

        self.broker.connack = "Not authorized"
        session = self._session()

        with pytest.raises(ConnectError) as exc_info:
            await session.connect()

        assert "Not authorized" in str(exc_info.value)
        assert session.state is SessionState.CLOSED
        assert self.events == [("connect", False)]

        client = self.broker.last_client
        assert client.disconnect_calls >= 1
        assert client.loop_running is False

    async def test_connect_unreachable(self):
        """Test socket failure raises ConnectError."""
        self.broker.unreachable = True
        session = self._session()

        with pytest.raises(ConnectError):
            await session.connect()

        assert session.state is SessionState.CLOSED
        assert self.events == [("connect", False)]

    async def test_connect_timeout(self):
        """Test missing CONNACK is bounded by connect_timeout."""
        self.reporter.info("Testing connect timeout", context="Test")

        self.broker.silent = True
        session = self._session(connect_timeout=0.05)

        with pytest.raises(ConnectError, match="no CONNACK"):
            await session.connect()

        assert session.state is SessionState.CLOSED
        assert self.broker.last_client.loop_running is False

    async def test_connect_twice_rejected(self):
        """Test a session cannot be opened twice."""
        session = self._session()
        await session.connect()

        with pytest.raises(ConnectError, match="already opened"):
            await session.connect()

        await session.close()

    # ================================================================
    # Publish / subscribe
    # ================================================================

    async def test_publish_when_closed_raises(self):
        """Test publish before connect raises SessionClosedError."""
        session = self._session()

        with pytest.raises(SessionClosedError):
            session.publish("/devices/station/events", "{}", DeliveryGuarantee.AT_LEAST_ONCE)

    async def test_subscribe_when_closed_raises(self):
        """Test subscribe before connect raises SessionClosedError."""
        session = self._session()

        with pytest.raises(SessionClosedError):
            session.subscribe("/devices/station/config", DeliveryGuarantee.AT_LEAST_ONCE)

    async def test_publish(self):
        """Test publish hands topic, payload and QoS to the client."""
        self.reporter.info("Testing publish", context="Test")

        session = self._session()
        await session.connect()

        mid = session.publish(
            "/devices/station/events", '{"deviceId":"station"}', DeliveryGuarantee.AT_LEAST_ONCE
        )
        await settle()

        assert mid > 0
        assert self.broker.published == [
            ("/devices/station/events", '{"deviceId":"station"}', 1)
        ]
        assert not [e for e in self.events if e[0] == "error"]

        await session.close()

    async def test_publish_failure_reported_as_error(self):
        """Test a failing publish return code fires the error event."""
        session = self._session()
        await session.connect()
        self.broker.publish_rc = mqtt.MQTT_ERR_NO_CONN

        session.publish("/devices/station/events", "{}", DeliveryGuarantee.AT_LEAST_ONCE)

        errors = [e[1] for e in self.events if e[0] == "error"]
        assert len(errors) == 1
        assert isinstance(errors[0], PublishError)
        assert errors[0].topic == "/devices/station/events"

        await session.close()

    async def test_subscribe(self):
        """Test subscribe records topic filter and QoS."""
        session = self._session()
        await session.connect()

        session.subscribe("/devices/station/config", DeliveryGuarantee.AT_LEAST_ONCE)
        session.subscribe("/devices/station/commands/#", DeliveryGuarantee.AT_MOST_ONCE)
        await settle()

        assert self.broker.subscriptions == [
            ("/devices/station/config", 1),
            ("/devices/station/commands/#", 0),
        ]
        assert not [e for e in self.events if e[0] == "error"]

        await session.close()

    async def test_refused_subscription_reported_as_error(self):
        """Test SUBACK failure fires the error event with the topic."""
        self.reporter.info("Testing refused subscription", context="Test")

        self.broker.refused_topics = ("/devices/station/commands/#",)
        session = self._session()
        await session.connect()

        session.subscribe("/devices/station/commands/#", DeliveryGuarantee.AT_MOST_ONCE)
        await settle()

        errors = [e[1] for e in self.events if e[0] == "error"]
        assert len(errors) == 1
        assert isinstance(errors[0], SubscribeError)
        assert errors[0].topic == "/devices/station/commands/#"

        await session.close()

    # ================================================================
    # Inbound messages
    # ================================================================

    async def test_messages_delivered_in_order(self):
        """Test inbound messages reach the handler in arrival order."""
        self.reporter.info("Testing message ordering", context="Test")

        session = self._session()
        await session.connect()

        for index in range(3):
            self.broker.deliver(
                f"/devices/station/commands/{index}", base64.b64encode(f"cmd {index}".encode())
            )
        await settle()

        messages = [e[1] for e in self.events if e[0] == "message"]
        assert [m.topic for m in messages] == [
            "/devices/station/commands/0",
            "/devices/station/commands/1",
            "/devices/station/commands/2",
        ]
        assert messages[1].decode_text() == "cmd 1"
        assert messages[1].qos == 1

        await session.close()

    async def test_coroutine_handler(self):
        """Test async event handlers are run as tasks."""
        session = self._session()
        received = []

        async def on_message(message):
            received.append(message.topic)

        session.on_message = on_message
        await session.connect()

        self.broker.deliver("/devices/station/config", b"e30=")
        await settle()

        assert received == ["/devices/station/config"]

        await session.close()

    async def test_failing_handler_does_not_stop_dispatch(self):
        """Test a raising handler is logged and later messages still arrive."""
        session = self._session()
        received = []

        def on_message(message):
            received.append(message.topic)
            if len(received) == 1:
                raise RuntimeError("handler bug")

        session.on_message = on_message
        await session.connect()

        self.broker.deliver("/devices/station/config", b"first")
        self.broker.deliver("/devices/station/config", b"second")
        await settle()

        assert len(received) == 2
        assert session.is_connected

        await session.close()

    # ================================================================
    # Close
    # ================================================================

    async def test_link_drop_closes_session(self):
        """Test a dropped link moves to CLOSED, fires close and stops paho."""
        self.reporter.info("Testing link drop", context="Test")

        session = self._session()
        await session.connect()
        client = self.broker.last_client

        self.broker.drop()
        await settle()

        assert session.state is SessionState.CLOSED
        assert ("close", "Unspecified error") in self.events
        assert client.init_kwargs["reconnect_on_failure"] is False
        assert client.loop_running is False

        with pytest.raises(SessionClosedError):
            session.publish("/devices/station/events", "{}", DeliveryGuarantee.AT_LEAST_ONCE)

        await session.close()
        assert [e for e in self.events if e[0] == "close"] == [("close", "Unspecified error")]

    async def test_messages_after_drop_not_delivered(self):
        """Test late messages from a dropped client never reach the handler."""
        session = self._session()
        await session.connect()

        self.broker.drop()
        self.broker.deliver("/devices/station/config", b"bGF0ZQ==")
        await settle()

        assert [e for e in self.events if e[0] == "message"] == []

    async def test_close(self):
        """Test explicit close disconnects and fires close once."""
        session = self._session()
        await session.connect()
        client = self.broker.last_client

        await session.close()
        await session.close()
        await settle()

        assert session.state is SessionState.CLOSED
        assert client.loop_running is False
        assert [e for e in self.events if e[0] == "close"] == [("close", "closed by client")]

    async def test_close_before_connect_is_noop(self):
        """Test closing a never-opened session."""
        session = self._session()

        await session.close()

        assert session.state is SessionState.CLOSED
        assert self.events == []
