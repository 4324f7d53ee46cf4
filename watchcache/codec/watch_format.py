"""
Binary payload served to the watch.

Layout, little-endian, no headers or counts:

    current   temperature f32, humidity f32, condition u16          10 bytes
    hourly    up to 4 upcoming entries, same layout as current     10 bytes each
    daily     temperature f32, humidity f32, temp_min f32,
              temp_max f32, condition u16                           18 bytes each

Timestamps are never sent. The device recovers the number of hourly and
daily blocks from the payload length alone, which is why the hourly section
is capped at MAX_HOURLY_BLOCKS.
"""

import struct
from itertools import islice
from typing import Iterable, Iterator, Tuple

from watchcache.models.weather import DailyForecast, Forecast, WeatherSnapshot

_POINT = struct.Struct("<ffH")
_DAILY = struct.Struct("<ffffH")

CURRENT_BLOCK_SIZE = _POINT.size
HOURLY_BLOCK_SIZE = _POINT.size
DAILY_BLOCK_SIZE = _DAILY.size
MAX_HOURLY_BLOCKS = 4


def upcoming_hours(hourly: Iterable[Forecast], now: int) -> Iterator[Forecast]:
    """The first MAX_HOURLY_BLOCKS entries stamped at or after now."""
    return islice((hour for hour in hourly if hour.timestamp >= now), MAX_HOURLY_BLOCKS)


def pack_point(forecast: Forecast) -> bytes:
    return _POINT.pack(forecast.temperature, forecast.humidity, forecast.condition_code)


def pack_daily(forecast: DailyForecast) -> bytes:
    return _DAILY.pack(
        forecast.temperature,
        forecast.humidity,
        forecast.temp_min,
        forecast.temp_max,
        forecast.condition_code,
    )


def encode(snapshot: WeatherSnapshot, now: int) -> bytes:
    """
    Serialize a snapshot for the watch.

    Args:
        snapshot: Snapshot read from the store
        now: Current time in seconds since epoch; hourly entries before it
            are skipped

    Returns:
        The payload bytes
    """
    blocks = [pack_point(snapshot.current)]
    blocks.extend(pack_point(hour) for hour in upcoming_hours(snapshot.hourly, now))
    blocks.extend(pack_daily(day) for day in snapshot.daily)
    return b"".join(blocks)


def block_counts(length: int) -> Tuple[int, int]:
    """
    Split a payload length into (hourly, daily) block counts.

    The split is unique because 10 * h leaves a different remainder modulo
    18 for every h in 0..4.

    Raises:
        ValueError: if no valid layout has this length
    """
    remaining = length - CURRENT_BLOCK_SIZE
    if remaining < 0:
        raise ValueError(f"payload of {length} bytes is shorter than the current block")

    for hourly in range(MAX_HOURLY_BLOCKS + 1):
        rest = remaining - hourly * HOURLY_BLOCK_SIZE
        if rest >= 0 and rest % DAILY_BLOCK_SIZE == 0:
            return hourly, rest // DAILY_BLOCK_SIZE

    raise ValueError(f"payload of {length} bytes does not match the watch layout")
