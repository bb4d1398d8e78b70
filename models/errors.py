"""Error taxonomy for ingestion and per-query failures."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from models.records import Channel


class HardwareDataError(Exception):
    """Base class for every error raised by the sample store and its queries."""


class IngestionFailure(HardwareDataError):
    """Raised when the sample tree cannot be loaded. No partial store survives it."""

    def __init__(
        self, reason: str, path: Optional[Path] = None, row_number: Optional[int] = None
    ) -> None:
        self.reason = reason
        self.path = path
        self.row_number = row_number
        location = ""
        if path is not None:
            location = f" in {str(path)!r}"
            if row_number is not None:
                location += f" at row {row_number}"
        super().__init__(f"{reason}{location}")


class QueryError(HardwareDataError):
    """A single query was rejected. Recoverable; nothing is retried."""

    def __init__(self, device_id: str, message: str) -> None:
        self.device_id = device_id
        super().__init__(message)


class UnknownDevice(QueryError):
    def __init__(self, device_id: str) -> None:
        super().__init__(device_id, f"No hardware data for device {device_id!r}.")


class InsufficientDensity(QueryError):
    """The query time falls outside the window where interpolation is trusted."""

    def __init__(
        self,
        device_id: str,
        at: int,
        lower: Optional[int] = None,
        upper: Optional[int] = None,
    ) -> None:
        self.at = at
        self.lower = lower
        self.upper = upper
        if lower is None or upper is None:
            message = (
                f"Device {device_id!r} has too few samples to interpolate at {at}."
            )
        else:
            message = (
                f"No interpolable samples for device {device_id!r} at {at}; "
                f"queries must fall within [{lower}, {upper}]."
            )
        super().__init__(device_id, message)


class ChannelUnavailable(QueryError):
    def __init__(self, device_id: str, channel: Channel) -> None:
        self.channel = channel
        super().__init__(
            device_id,
            f"Device {device_id!r} has no readings for channel {channel.value!r}.",
        )
