"""Reconstruct a dense multi-channel sample at an arbitrary instant."""

from __future__ import annotations

import logging
import math
from bisect import bisect_left
from datetime import datetime
from functools import lru_cache
from typing import Dict, Optional, Sequence, Tuple

from models.errors import ChannelUnavailable, InsufficientDensity, UnknownDevice
from models.records import Channel, DenseSample, SparseSample, to_epoch_ms
from storage.sample_store import SampleStore, build_default_store

logger = logging.getLogger(__name__)


def average_interval(timestamps: Sequence[int]) -> int:
    """Sum of consecutive gaps divided by the number of samples, in whole ms.

    This is deliberately not the mean gap: dividing by the sample count rather
    than the gap count widens the density margin slightly.
    """
    if not timestamps:
        return 0
    return (timestamps[-1] - timestamps[0]) // len(timestamps)


def ease(left: float, right: float, position: float) -> float:
    """Blend two values with a raised-cosine curve; ``position`` is clamped to [0, 1]."""
    position = min(max(position, 0.0), 1.0)
    weight = 0.5 * (1.0 - math.cos(math.pi * position))
    return left * (1.0 - weight) + right * weight


class InterpolationEngine:
    """Answers point-in-time queries against an immutable :class:`SampleStore`."""

    def __init__(self, store: SampleStore) -> None:
        self.store = store

    def interpolate(self, device_id: str, at: int | datetime) -> DenseSample:
        at_ms = to_epoch_ms(at) if isinstance(at, datetime) else int(at)

        if not self.store.has_device(device_id):
            logger.info("Rejected query for unknown device", extra={"device_id": device_id})
            raise UnknownDevice(device_id)

        samples = self.store.samples(device_id)
        if len(samples) < 2:
            logger.info(
                "Rejected query: not enough samples",
                extra={"device_id": device_id, "sample_count": len(samples), "query_ms": at_ms},
            )
            raise InsufficientDensity(device_id, at_ms)

        timestamps = [sample.timestamp for sample in samples]
        margin = average_interval(timestamps)
        lower = timestamps[0] + margin
        upper = timestamps[-1] - margin
        if not lower <= at_ms <= upper:
            logger.info(
                "Rejected query outside density bound",
                extra={"device_id": device_id, "query_ms": at_ms},
            )
            raise InsufficientDensity(device_id, at_ms, lower, upper)

        anchor = bisect_left(timestamps, at_ms)
        values: Dict[Channel, float] = {}
        for channel in Channel:
            left = _scan_left(samples, anchor, at_ms, channel)
            right = _scan_right(samples, anchor, channel)
            if left is None and right is None:
                logger.info(
                    "Rejected query: channel has no readings",
                    extra={"device_id": device_id, "channel": channel.value},
                )
                raise ChannelUnavailable(device_id, channel)
            # A missing side holds the nearest reading from the other one.
            left = left or right
            right = right or left
            values[channel] = _blend(at_ms, left, right)

        return DenseSample(timestamp=at_ms, values=values)


def _scan_left(
    samples: Sequence[SparseSample], anchor: int, at_ms: int, channel: Channel
) -> Optional[Tuple[int, float]]:
    # The anchor only counts as a left neighbour when it sits exactly on the query.
    start = anchor if anchor < len(samples) and samples[anchor].timestamp == at_ms else anchor - 1
    for index in range(start, -1, -1):
        value = samples[index].get(channel)
        if value is not None:
            return samples[index].timestamp, value
    return None


def _scan_right(
    samples: Sequence[SparseSample], anchor: int, channel: Channel
) -> Optional[Tuple[int, float]]:
    for index in range(anchor, len(samples)):
        value = samples[index].get(channel)
        if value is not None:
            return samples[index].timestamp, value
    return None


def _blend(at_ms: int, left: Tuple[int, float], right: Tuple[int, float]) -> float:
    left_time, left_value = left
    right_time, right_value = right
    if left_time == right_time:
        return left_value
    position = (at_ms - left_time) / (right_time - left_time)
    return ease(left_value, right_value, position)


@lru_cache
def build_default_engine() -> InterpolationEngine:
    """Factory that wires the engine to the default sample store."""
    return InterpolationEngine(build_default_store())
