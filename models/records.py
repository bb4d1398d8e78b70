"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping


class Channel(str, Enum):
    """Measurement kinds recorded per device. Values double as JSON keys."""

    temperature = "temperature"
    peak_velocity_x = "peakVelocityX"
    rms_velocity_x = "rmsVelocityX"
    peak_acceleration_x = "peakAccelerationX"
    rms_acceleration_x = "rmsAccelerationX"
    peak_velocity_y = "peakVelocityY"
    rms_velocity_y = "rmsVelocityY"
    peak_acceleration_y = "peakAccelerationY"
    rms_acceleration_y = "rmsAccelerationY"


CHANNEL_FILES: Mapping[Channel, str] = MappingProxyType(
    {
        Channel.temperature: "temperature.csv",
        Channel.peak_velocity_x: "peak_velocity_x.csv",
        Channel.rms_velocity_x: "rms_velocity_x.csv",
        Channel.peak_acceleration_x: "peak_acceleration_x.csv",
        Channel.rms_acceleration_x: "rms_acceleration_x.csv",
        Channel.peak_velocity_y: "peak_velocity_y.csv",
        Channel.rms_velocity_y: "rms_velocity_y.csv",
        Channel.peak_acceleration_y: "peak_acceleration_y.csv",
        Channel.rms_acceleration_y: "rms_acceleration_y.csv",
    }
)

FILE_CHANNELS: Mapping[str, Channel] = MappingProxyType(
    {file_name: channel for channel, file_name in CHANNEL_FILES.items()}
)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


def to_epoch_ms(moment: datetime) -> int:
    """Convert a datetime to integer milliseconds since the Unix epoch.

    Naive datetimes are taken to be UTC. Sub-millisecond precision is floored.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (moment - _EPOCH) // _ONE_MS


def from_epoch_ms(timestamp: int) -> datetime:
    return _EPOCH + timedelta(milliseconds=timestamp)


# Range of epoch milliseconds that from_epoch_ms can represent.
MIN_EPOCH_MS = to_epoch_ms(datetime.min.replace(tzinfo=timezone.utc))
MAX_EPOCH_MS = to_epoch_ms(datetime.max.replace(tzinfo=timezone.utc))


@dataclass(frozen=True, slots=True)
class SparseSample:
    """A device's concrete readings at one instant, as ingested.

    Channels without a reading at this timestamp are simply absent from
    ``readings``.
    """

    timestamp: int
    readings: Mapping[Channel, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "readings", MappingProxyType(dict(self.readings)))

    @property
    def time(self) -> datetime:
        return from_epoch_ms(self.timestamp)

    def get(self, channel: Channel) -> float | None:
        return self.readings.get(channel)


@dataclass(frozen=True, slots=True)
class DenseSample:
    """A synthesized reading with a value for every channel."""

    timestamp: int
    values: Mapping[Channel, float]

    def __post_init__(self) -> None:
        missing = [channel.value for channel in Channel if channel not in self.values]
        if missing:
            raise ValueError(f"Dense sample is missing channels: {', '.join(missing)}")
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    @property
    def time(self) -> datetime:
        return from_epoch_ms(self.timestamp)

    def __getitem__(self, channel: Channel) -> float:
        return self.values[channel]

    def as_dict(self) -> Dict[str, float]:
        """Channel values keyed by their JSON names, in channel order."""
        return {channel.value: self.values[channel] for channel in Channel}
