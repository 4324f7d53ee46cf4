from datetime import datetime
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

MAX_CONDITION_CODE = 0xFFFF
# Largest magnitude a little-endian 32-bit float block can carry.
FLOAT32_MAX = 3.4028234663852886e38


def quantity_field(description: str):
    return Field(0.0, ge=-FLOAT32_MAX, le=FLOAT32_MAX, description=description)


class Forecast(BaseModel):
    """Point-in-time reading, used for current conditions and hourly entries."""

    model_config = ConfigDict(frozen=True)

    timestamp: int = Field(0, ge=0, description="Seconds since epoch")
    temperature: float = quantity_field("Temperature in Celsius")
    humidity: float = quantity_field("Relative humidity percentage")
    condition_code: int = Field(
        0, ge=0, le=MAX_CONDITION_CODE, description="Provider weather condition id"
    )


class DailyForecast(BaseModel):
    """One forecast day."""

    model_config = ConfigDict(frozen=True)

    timestamp: int = Field(0, ge=0, description="Seconds since epoch")
    temperature: float = quantity_field("Mean day temperature in Celsius")
    temp_min: float = quantity_field("Minimum temperature in Celsius")
    temp_max: float = quantity_field("Maximum temperature in Celsius")
    humidity: float = quantity_field("Relative humidity percentage")
    condition_code: int = Field(
        0, ge=0, le=MAX_CONDITION_CODE, description="Provider weather condition id"
    )


class WeatherSnapshot(BaseModel):
    """
    The cached weather state served to watch clients.

    Instances are immutable; an update builds a new snapshot and the store
    swaps it in, so holders of an older snapshot keep a consistent view.
    """

    model_config = ConfigDict(frozen=True)

    current: Forecast = Field(default_factory=Forecast)
    hourly: Tuple[Forecast, ...] = Field(default_factory=tuple)
    daily: Tuple[DailyForecast, ...] = Field(default_factory=tuple)
    refreshed_at: Optional[datetime] = Field(
        None, description="When the last successful refresh was committed"
    )

    @classmethod
    def empty(cls) -> "WeatherSnapshot":
        return cls()

    def with_current(self, current: Forecast, refreshed_at: datetime) -> "WeatherSnapshot":
        return self.model_copy(update={"current": current, "refreshed_at": refreshed_at})

    def with_full(
        self,
        current: Forecast,
        hourly: Tuple[Forecast, ...],
        daily: Tuple[DailyForecast, ...],
        refreshed_at: datetime,
    ) -> "WeatherSnapshot":
        return self.model_copy(
            update={
                "current": current,
                "hourly": tuple(hourly),
                "daily": tuple(daily),
                "refreshed_at": refreshed_at,
            }
        )
