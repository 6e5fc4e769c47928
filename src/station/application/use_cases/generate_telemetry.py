"""
Use case for generating synthetic sensor readings.
"""

import random
import time
from typing import Callable, Optional

from station.domain.entities import TelemetryRecord
from station.domain.entities.telemetry_record import (
    HUMIDITY_RANGE,
    RAIN_HEIGHT_RANGE,
    TEMPERATURE_RANGE,
    WIND_DIRECTION_RANGE,
    WIND_INTENSITY_RANGE,
)


class GenerateTelemetryUseCase:
    """
    Use case for producing one simulated station reading per call.

    Each field is drawn independently and uniformly from its half-open
    range. Timestamps never go backwards for one generator, even if the
    wall clock does.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize use case.

        Args:
            rng: Random source (new unseeded Random if None)
            clock: Current Unix time provider
        """
        self.rng = rng or random.Random()
        self.clock = clock
        self._last_timestamp = 0

    def next_reading(self, device_id: str) -> TelemetryRecord:
        """
        Generate the next reading.

        Args:
            device_id: Device the reading is attributed to

        Returns:
            New TelemetryRecord
        """
        timestamp = max(int(self.clock()), self._last_timestamp)
        self._last_timestamp = timestamp

        return TelemetryRecord(
            device_id=device_id,
            temperature=self.rng.randrange(*TEMPERATURE_RANGE),
            humidity=self.rng.randrange(*HUMIDITY_RANGE),
            wind_direction=self.rng.randrange(*WIND_DIRECTION_RANGE),
            wind_intensity=self.rng.randrange(*WIND_INTENSITY_RANGE),
            rain_height=self.rng.randrange(*RAIN_HEIGHT_RANGE),
            timestamp=timestamp,
        )
