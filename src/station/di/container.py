"""
Dependency Injection container for the station.

Manages lifecycle and dependencies of all application components.
"""

from typing import Optional

from shared.reporter import SystemReporter
from shared.resilience import Retry, RetryConfig
from station.application.agent import StationAgent
from station.application.use_cases import (
    AuthenticateDeviceUseCase,
    GenerateTelemetryUseCase,
    HandleInboundMessageUseCase,
    PublishTelemetryUseCase,
)
from station.config.settings import Settings
from station.domain.exceptions import ConnectError
from station.domain.value_objects import (
    ConnectionDescriptor,
    DeviceIdentity,
    DeviceTopics,
    TransportSecurity,
)
from station.infrastructure.auth import JWTSigner
from station.infrastructure.mqtt import MqttSession
from station.infrastructure.shutdown import ShutdownManager


class Container:
    """
    Dependency Injection container.

    Creates and manages all application dependencies.
    Implements singleton pattern for shared resources; transport
    sessions are created fresh for every connection attempt.
    """

    def __init__(self, settings: Settings, reporter: SystemReporter):
        """
        Initialize container with settings.

        Args:
            settings: Application settings
            reporter: SystemReporter shared by all components
        """
        self.settings = settings
        self.reporter = reporter

        self._identity: Optional[DeviceIdentity] = None
        self._topics: Optional[DeviceTopics] = None
        self._jwt_signer: Optional[JWTSigner] = None
        self._generator: Optional[GenerateTelemetryUseCase] = None
        self._shutdown_manager: Optional[ShutdownManager] = None
        self._agent: Optional[StationAgent] = None

    @property
    def identity(self) -> DeviceIdentity:
        """
        Get DeviceIdentity from configured registry coordinates.

        Returns:
            DeviceIdentity instance
        """
        if self._identity is None:
            self._identity = DeviceIdentity(
                project_id=self.settings.project_id,
                region=self.settings.cloud_region,
                registry_id=self.settings.registry_id,
                device_id=self.settings.device_id,
            )
        return self._identity

    @property
    def topics(self) -> DeviceTopics:
        """
        Get DeviceTopics for the configured device.

        Returns:
            DeviceTopics instance
        """
        if self._topics is None:
            self._topics = DeviceTopics(
                device_id=self.settings.device_id,
                message_type=self.settings.message_type,
            )
        return self._topics

    @property
    def jwt_signer(self) -> JWTSigner:
        """
        Get JWTSigner singleton.

        Returns:
            JWTSigner instance
        """
        if self._jwt_signer is None:
            self._jwt_signer = JWTSigner(
                private_key_file=self.settings.private_key_file,
                algorithm=self.settings.algorithm,
            )
        return self._jwt_signer

    @property
    def generator(self) -> GenerateTelemetryUseCase:
        """
        Get GenerateTelemetryUseCase singleton.

        Returns:
            Use case instance
        """
        if self._generator is None:
            self._generator = GenerateTelemetryUseCase()
        return self._generator

    @property
    def shutdown_manager(self) -> ShutdownManager:
        """
        Get ShutdownManager singleton.

        Returns:
            ShutdownManager instance
        """
        if self._shutdown_manager is None:
            self._shutdown_manager = ShutdownManager(
                shutdown_timeout=self.settings.shutdown_timeout,
                reporter=self.reporter,
            )
        return self._shutdown_manager

    @property
    def agent(self) -> StationAgent:
        """
        Get StationAgent singleton.

        Returns:
            StationAgent instance
        """
        if self._agent is None:
            self._agent = StationAgent(
                authenticator=self.get_authenticate_use_case(),
                session_factory=self.create_session,
                topics=self.topics,
                publisher=self.get_publish_use_case(),
                message_handler=self.get_message_handler(),
                reporter=self.reporter,
                publish_interval=self.settings.publish_interval,
                retry=self.get_reconnect_retry(),
                token_refresh_margin=(
                    self.settings.token_refresh_margin
                    if self.settings.token_refresh_enabled
                    else None
                ),
            )
        return self._agent

    def get_authenticate_use_case(self) -> AuthenticateDeviceUseCase:
        """
        Get AuthenticateDeviceUseCase.

        Returns:
            Use case instance
        """
        return AuthenticateDeviceUseCase(
            signer=self.jwt_signer,
            identity=self.identity,
            host=self.settings.mqtt_bridge_hostname,
            port=self.settings.mqtt_bridge_port,
            security=TransportSecurity(
                enabled=self.settings.use_tls,
                ca_certs=self.settings.ca_certs,
            ),
            keepalive=self.settings.keepalive,
            token_lifetime_seconds=self.settings.token_lifetime_seconds,
        )

    def get_publish_use_case(self) -> PublishTelemetryUseCase:
        """
        Get PublishTelemetryUseCase.

        Returns:
            Use case instance
        """
        return PublishTelemetryUseCase(
            generator=self.generator,
            topics=self.topics,
            reporter=self.reporter,
        )

    def get_message_handler(self) -> HandleInboundMessageUseCase:
        """
        Get HandleInboundMessageUseCase.

        Returns:
            Use case instance
        """
        return HandleInboundMessageUseCase(topics=self.topics, reporter=self.reporter)

    def get_reconnect_retry(self) -> Optional[Retry]:
        """
        Get reconnect policy.

        Returns:
            Retry on ConnectError if reconnect enabled, None otherwise
        """
        if not self.settings.reconnect_enabled:
            return None

        return Retry(
            RetryConfig(
                max_attempts=self.settings.reconnect_max_attempts,
                initial_delay=self.settings.reconnect_initial_delay,
                max_delay=self.settings.reconnect_max_delay,
                retry_on=(ConnectError,),
            )
        )

    def create_session(self, descriptor: ConnectionDescriptor) -> MqttSession:
        """
        Create a transport session for one connection attempt.

        Args:
            descriptor: Connection parameters with a fresh token

        Returns:
            New MqttSession (not connected)
        """
        return MqttSession(
            descriptor=descriptor,
            reporter=self.reporter,
            connect_timeout=self.settings.connect_timeout,
        )
