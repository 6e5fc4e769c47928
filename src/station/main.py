"""
Station - Environmental Sensor Station Agent

Orchestrates Clean Architecture components to publish simulated weather
readings to the MQTT bridge and log the messages the device receives.
"""

import asyncio
import os
import sys
from typing import Optional

from shared.reporter import SystemReporter
from shared.reporter.emojis import Emoji
from station.config.settings import Settings, get_settings
from station.di import Container
from station.domain.exceptions import CredentialError


class StationApp:
    """
    Station application orchestrator.

    Thin coordination layer that initializes and connects
    all Clean Architecture components.

    Responsibilities:
        - Initialize DI container
        - Install signal handlers
        - Run the agent until shutdown
        - Stop the agent within the shutdown timeout
    """

    def __init__(self, settings: Settings, container: Optional[Container] = None):
        """
        Initialize Station application.

        Args:
            settings: Application settings
            container: Optional prebuilt container (tests)
        """
        self.settings = settings

        # Initialize reporter FIRST
        self.reporter = self._create_reporter()

        self.container = container or Container(settings, reporter=self.reporter)

        self.reporter.info(
            f"{Emoji.SYSTEM.CONFIG} Station initialized "
            f"(device={settings.device_id}, env={settings.ENV})",
            context="Station",
            verbose_level=1,
        )

    def _create_reporter(self) -> SystemReporter:
        """
        Create SystemReporter instance.

        Returns:
            Configured SystemReporter
        """
        log_dir = None

        if self.settings.log_file:
            log_dir = os.path.dirname(self.settings.log_file)
            if not log_dir:
                log_dir = "logs"

        return SystemReporter(
            name="station",
            log_dir=log_dir,
            level="debug" if self.settings.DEBUG else self.settings.log_level,
            verbose=self.settings.verbose,
        )

    async def serve(self) -> int:
        """
        Run the agent with proper signal handling.

        Stopping the agent is registered as a shutdown callback, so a
        signal and a failed start go through the same sequence.

        Returns:
            Process exit code (0 after a clean shutdown, 1 if the agent
            could not connect)

        Raises:
            CredentialError: If the device key cannot be used
        """
        shutdown_manager = self.container.shutdown_manager
        agent = self.container.agent

        shutdown_manager.register_shutdown_callback(self._stop_agent)
        shutdown_manager.setup_signal_handlers()

        try:
            if not await agent.start():
                if shutdown_manager.is_shutting_down():
                    return 0
                self.reporter.error(
                    f"{Emoji.ERROR.CRITICAL} Station could not connect to "
                    f"{self.settings.mqtt_bridge_hostname}",
                    context="Station",
                )
                return 1

            self.reporter.info(
                f"{Emoji.SYSTEM.READY} Publishing every "
                f"{self.settings.publish_interval}s",
                context="Station",
                verbose_level=1,
            )

            await shutdown_manager.wait_for_shutdown()
            return 0
        finally:
            # No-op when a signal already started the sequence
            await shutdown_manager.initiate_shutdown("station exiting")
            await shutdown_manager.wait_for_shutdown()
            shutdown_manager.mark_shutdown_complete()
            shutdown_manager.restore_signal_handlers()

    async def _stop_agent(self) -> None:
        """Stop the agent, bounded by the shutdown timeout."""
        try:
            await asyncio.wait_for(
                self.container.agent.stop(),
                timeout=self.settings.shutdown_timeout,
            )
        except asyncio.TimeoutError:
            self.reporter.warning(
                f"{Emoji.NETWORK.TIMEOUT} Agent did not stop within "
                f"{self.settings.shutdown_timeout}s",
                context="Station",
                verbose_level=0,
            )

    def start(self) -> int:
        """
        Start the station.

        Blocks until shutdown.

        Returns:
            Process exit code
        """
        return asyncio.run(self.serve())


def main():
    """
    Main entry point for the station agent.

    Loads configuration and runs the agent.
    """
    config = get_settings()
    app = StationApp(config)

    try:
        exit_code = app.start()
    except CredentialError as e:
        app.reporter.critical(
            f"{Emoji.ERROR.CRITICAL} {e}",
            context="Station",
        )
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nStation stopped by user")
        sys.exit(0)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
