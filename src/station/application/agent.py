"""
Station agent.

Authenticates the device, keeps one MQTT session to the bridge, publishes
a telemetry reading every interval and logs the configuration updates and
commands it receives.
"""

import asyncio
from functools import partial
from typing import Any, Callable, Optional

from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji
from shared.resilience import Retry, RetryError
from station.application.use_cases import (
    AuthenticateDeviceUseCase,
    HandleInboundMessageUseCase,
    PublishTelemetryUseCase,
)
from station.domain.entities import InboundMessage
from station.domain.exceptions import ConnectError, CredentialError, TransportError
from station.domain.value_objects import (
    ConnectionDescriptor,
    DeliveryGuarantee,
    DeviceTopics,
)
from station.infrastructure.mqtt import MqttSession
from station.infrastructure.scheduling import PeriodicTask

SessionFactory = Callable[[ConnectionDescriptor], MqttSession]


class StationAgent:
    """
    Agent loop of one station.

    Holds at most one live session. Reconnection after a failed or
    dropped link happens only when a Retry policy is given; token refresh
    only when a refresh margin is given.

    Attributes:
        topics: Device topic names
        ticker: Telemetry publish cadence
    """

    def __init__(
        self,
        authenticator: AuthenticateDeviceUseCase,
        session_factory: SessionFactory,
        topics: DeviceTopics,
        publisher: PublishTelemetryUseCase,
        message_handler: HandleInboundMessageUseCase,
        reporter: SystemReporter,
        publish_interval: float = 5.0,
        retry: Optional[Retry] = None,
        token_refresh_margin: Optional[int] = None,
        sleep: Callable[[float], Any] = asyncio.sleep,
    ):
        """
        Initialize agent (does not connect).

        Args:
            authenticator: Builds a descriptor with a fresh token
            session_factory: Creates a transport session for a descriptor
            topics: Device topic names
            publisher: Publish cycle use case
            message_handler: Inbound message use case
            reporter: SystemReporter for logging
            publish_interval: Seconds between telemetry publishes
            retry: Reconnect policy (no reconnection if None)
            token_refresh_margin: Seconds before token expiry to reconnect
                with a new token (no refresh if None)
            sleep: Sleep coroutine (injectable for tests)
        """
        self.authenticator = authenticator
        self.session_factory = session_factory
        self.topics = topics
        self.publisher = publisher
        self.message_handler = message_handler
        self.reporter = reporter
        self.retry = retry
        self.token_refresh_margin = token_refresh_margin
        self._sleep = sleep

        self.ticker = PeriodicTask(
            interval=publish_interval,
            callback=self._publish_cycle,
            reporter=reporter,
            name="telemetry",
            sleep=sleep,
        )

        self._session: Optional[MqttSession] = None
        self._reconnect_task: Optional[asyncio.Task] = None
        self._refresh_task: Optional[asyncio.Task] = None
        self._stopping = False

    @property
    def session(self) -> Optional[MqttSession]:
        """Current transport session, if any."""
        return self._session

    @property
    def is_connected(self) -> bool:
        """Check if the current session is CONNECTED."""
        return self._session is not None and self._session.is_connected

    # ================================================================
    # Lifecycle
    # ================================================================

    async def start(self) -> bool:
        """
        Connect, subscribe and start publishing.

        Returns:
            True if a session was established, False otherwise

        Raises:
            CredentialError: If the private key cannot be read or the
                token cannot be signed
        """
        self._stopping = False
        self.reporter.info(
            f"{Emoji.SYSTEM.STARTUP} STATION --- ACTIVATED",
            context="Station",
            verbose_level=0,
        )

        session = await self._establish_session()
        if session is None:
            return False
        if self._stopping:
            await session.close()
            return False

        self._activate(session)
        return True

    async def stop(self) -> None:
        """Stop publishing, cancel pending recovery and close the session."""
        self._stopping = True

        await self.ticker.stop()
        for task in (self._reconnect_task, self._refresh_task):
            await self._cancel(task)
        self._reconnect_task = None
        self._refresh_task = None

        if self._session is not None:
            await self._session.close()

        self.reporter.info(
            f"{Emoji.SYSTEM.SHUTDOWN} Station stopped "
            f"({self.ticker.invocations} publish cycles)",
            context="Station",
            verbose_level=1,
        )

    # ================================================================
    # Session management
    # ================================================================

    async def _connect_once(self) -> MqttSession:
        """Mint a fresh token and open one session."""
        descriptor = self.authenticator.execute()
        session = self.session_factory(descriptor)
        self._bind(session)
        await session.connect()
        return session

    async def _establish_session(self) -> Optional[MqttSession]:
        """Connect once, or under the retry policy when one is set."""
        try:
            if self.retry is None:
                return await self._connect_once()
            return await self.retry.execute_async(self._connect_once)
        except ConnectError as e:
            self.reporter.error(
                f"{Emoji.ERROR.ERROR} {e}",
                context="Station",
            )
        except RetryError as e:
            self.reporter.error(
                f"{Emoji.ERROR.ERROR} Giving up after {e.attempts} attempts: "
                f"{e.last_exception}",
                context="Station",
            )
        return None

    def _bind(self, session: MqttSession) -> None:
        session.on_connect = self._on_connect
        session.on_close = partial(self._on_close, session)
        session.on_error = self._on_error
        session.on_message = self._on_message

    def _activate(self, session: MqttSession) -> None:
        """Make a connected session current and start using it."""
        self._session = session

        session.subscribe(self.topics.config, DeliveryGuarantee.AT_LEAST_ONCE)
        session.subscribe(self.topics.commands, DeliveryGuarantee.AT_MOST_ONCE)

        self.ticker.start()
        if self.token_refresh_margin is not None:
            self._schedule_refresh(session)

    def _schedule_reconnect(self) -> None:
        if self._reconnect_task is not None and not self._reconnect_task.done():
            return
        self._reconnect_task = asyncio.create_task(self._reconnect())

    async def _reconnect(self) -> None:
        self.reporter.info(
            f"{Emoji.NETWORK.RECONNECTING} Reconnecting with a fresh token",
            context="Station",
            verbose_level=1,
        )

        try:
            session = await self._establish_session()
        except CredentialError as e:
            self.reporter.critical(
                f"{Emoji.ERROR.CRITICAL} Cannot mint token: {e}",
                context="Station",
            )
            return

        if session is None:
            return
        if self._stopping:
            await session.close()
            return
        self._activate(session)

    def _schedule_refresh(self, session: MqttSession) -> None:
        token = session.descriptor.token
        delay = max(0.0, token.seconds_until_expiry() - self.token_refresh_margin)

        self.reporter.debug(
            f"{Emoji.SYSTEM.KEY} Token refresh in {delay:.0f}s",
            context="Station",
        )
        self._refresh_task = asyncio.create_task(self._refresh_after(delay))

    async def _refresh_after(self, delay: float) -> None:
        await self._sleep(delay)
        if self._stopping:
            return

        self.reporter.info(
            f"{Emoji.SYSTEM.REFRESH} Token expires soon, reconnecting with a new token",
            context="Station",
            verbose_level=1,
        )

        # Detach first so the close below does not trigger a reconnect
        old, self._session = self._session, None
        if old is not None:
            await old.close()

        try:
            session = await self._establish_session()
        except CredentialError as e:
            self.reporter.critical(
                f"{Emoji.ERROR.CRITICAL} Cannot mint token: {e}",
                context="Station",
            )
            return

        if session is None:
            return
        if self._stopping:
            await session.close()
            return
        self._activate(session)

    @staticmethod
    async def _cancel(task: Optional[asyncio.Task]) -> None:
        if task is None or task.done():
            return
        if task is asyncio.current_task():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    # ================================================================
    # Session events
    # ================================================================

    def _on_connect(self, success: bool) -> None:
        self.reporter.info(
            f"{Emoji.NETWORK.CONNECTED} connect",
            context="Station",
            verbose_level=1,
        )
        if not success:
            self.reporter.warning(
                f"{Emoji.ERROR.WARNING} Client not connected...",
                context="Station",
                verbose_level=0,
            )

    def _on_close(self, session: MqttSession, reason: str) -> None:
        self.reporter.info(
            f"{Emoji.NETWORK.DISCONNECTED} close ({reason})",
            context="Station",
            verbose_level=1,
        )

        if session is not self._session or self._stopping:
            return

        if self._refresh_task is not None and not self._refresh_task.done():
            self._refresh_task.cancel()
        if self.retry is not None:
            self._schedule_reconnect()

    def _on_error(self, error: TransportError) -> None:
        self.reporter.error(
            f"{Emoji.ERROR.ERROR} error {error}",
            context="Station",
        )

    def _on_message(self, message: InboundMessage) -> None:
        self.message_handler.execute(message)

    def _publish_cycle(self) -> None:
        self.publisher.execute(self._session)
