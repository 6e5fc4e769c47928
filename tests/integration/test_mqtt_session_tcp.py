"""
Integration tests for MqttSession with a real paho client.

The broker side is a bare TCP endpoint on 127.0.0.1 (tests/helpers/tcp_broker.py),
so paho's own socket handling, network thread and reconnect behaviour are
exercised for real.

Usage:
    pytest tests/integration/test_mqtt_session_tcp.py
"""

import asyncio
import threading
import uuid

import pytest

from shared.tests import ComponentTest
from station.domain.exceptions import ConnectError
from station.domain.value_objects import ConnectionDescriptor, TransportSecurity
from station.infrastructure.mqtt import MqttSession, SessionState
from tests.helpers.factories import make_token
from tests.helpers.tcp_broker import TcpBroker

# Longer than paho's minimum reconnect delay (1s)
RECONNECT_WINDOW = 1.5


class TestMqttSessionTcp(ComponentTest):
    """Integration tests for MqttSession over a real socket."""

    component_name = "station"
    test_category = "integration"

    def setup_test(self):
        self.events = []
        self.client_id = f"projects/p/locations/r/registries/g/devices/{uuid.uuid4().hex}"

    def _session(self, port: int) -> MqttSession:
        session = MqttSession(
            descriptor=ConnectionDescriptor(
                host="127.0.0.1",
                port=port,
                client_id=self.client_id,
                token=make_token(),
                security=TransportSecurity(enabled=False),
            ),
            reporter=self.reporter,
            connect_timeout=2.0,
        )
        session.on_connect = lambda success: self.events.append(("connect", success))
        session.on_close = lambda reason: self.events.append(("close", reason))
        return session

    def _network_thread_alive(self) -> bool:
        return any(
            thread.is_alive() and thread.name == f"paho-mqtt-client-{self.client_id}"
            for thread in threading.enumerate()
        )

    @staticmethod
    async def _wait_until(condition, timeout: float = 2.0) -> None:
        deadline = asyncio.get_running_loop().time() + timeout
        while not condition():
            if asyncio.get_running_loop().time() > deadline:
                raise AssertionError("condition not met in time")
            await asyncio.sleep(0.02)

    async def test_dropped_link_is_not_reopened(self):
        """Test a broker hang-up leaves one connection and no network thread."""
        self.reporter.info("Testing broker hang-up with real paho", context="Test")

        broker = TcpBroker(hold=0.2)
        port = await broker.start()
        session = self._session(port)

        try:
            await session.connect()
            await self._wait_until(lambda: session.state is SessionState.CLOSED)
            await asyncio.sleep(RECONNECT_WINDOW)

            assert broker.accepted == 1
            assert [e[0] for e in self.events] == ["connect", "close"]
            assert self._network_thread_alive() is False
        finally:
            await session.close()
            await broker.stop()

    async def test_close_reports_client_reason(self):
        """Test an explicit close reports its own reason, not paho's."""
        broker = TcpBroker()
        port = await broker.start()
        session = self._session(port)

        try:
            await session.connect()
            await session.close()
            await asyncio.sleep(0.1)

            assert self.events == [("connect", True), ("close", "closed by client")]
            assert self._network_thread_alive() is False
        finally:
            await broker.stop()

    async def test_refused_connection_is_not_retried(self):
        """Test a refused CONNACK is final for the session."""
        broker = TcpBroker(return_code=5)
        port = await broker.start()
        session = self._session(port)

        try:
            with pytest.raises(ConnectError):
                await session.connect()
            await asyncio.sleep(RECONNECT_WINDOW)

            assert broker.accepted == 1
            assert self.events == [("connect", False)]
            assert self._network_thread_alive() is False
        finally:
            await broker.stop()
