"""
TelemetryRecord entity - one synthetic reading of the station sensors.
"""

from pydantic import BaseModel, ConfigDict, Field

# Half-open [low, high) ranges of every reading
TEMPERATURE_RANGE = (-50, 50)
HUMIDITY_RANGE = (0, 100)
WIND_DIRECTION_RANGE = (0, 360)
WIND_INTENSITY_RANGE = (0, 100)
RAIN_HEIGHT_RANGE = (0, 50)


class TelemetryRecord(BaseModel):
    """
    Telemetry reading published to the events topic.

    Serialized with the station wire names: ``deviceId`` and ``date``
    (integer Unix seconds) alongside the snake_case reading fields.

    Attributes:
        device_id: Device that produced the reading
        temperature: Degrees Celsius
        humidity: Relative humidity (%)
        wind_direction: Degrees from north
        wind_intensity: Wind speed (km/h)
        rain_height: Rain height (mm)
        timestamp: Reading time (Unix seconds)
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    device_id: str = Field(..., min_length=1, alias="deviceId")
    temperature: int = Field(..., ge=TEMPERATURE_RANGE[0], lt=TEMPERATURE_RANGE[1])
    humidity: int = Field(..., ge=HUMIDITY_RANGE[0], lt=HUMIDITY_RANGE[1])
    wind_direction: int = Field(
        ..., ge=WIND_DIRECTION_RANGE[0], lt=WIND_DIRECTION_RANGE[1]
    )
    wind_intensity: int = Field(
        ..., ge=WIND_INTENSITY_RANGE[0], lt=WIND_INTENSITY_RANGE[1]
    )
    rain_height: int = Field(..., ge=RAIN_HEIGHT_RANGE[0], lt=RAIN_HEIGHT_RANGE[1])
    timestamp: int = Field(..., ge=0, alias="date")

    def to_payload(self) -> str:
        """Compact JSON payload in wire field names."""
        return self.model_dump_json(by_alias=True)
