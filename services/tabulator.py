"""Evenly spaced tabulation of interpolated samples over a time range."""

from __future__ import annotations

import logging
import math
from datetime import datetime
from functools import lru_cache
from typing import Dict, List, Optional

from models.records import DenseSample, from_epoch_ms, to_epoch_ms
from services.interpolator import InterpolationEngine, build_default_engine
from settings import get_settings

logger = logging.getLogger(__name__)


def format_label(timestamp: int) -> str:
    """Render epoch milliseconds (UTC) as e.g. ``"March 14, 2022  3:09:26.5PM"``.

    Day and 12-hour clock are space padded to two characters. The millisecond
    fraction drops trailing zeros and disappears entirely when zero.
    """
    moment = from_epoch_ms(timestamp)
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    fraction = f"{moment.microsecond // 1000:03d}".rstrip("0")
    seconds = f"{moment.second:02d}" + (f".{fraction}" if fraction else "")
    return (
        f"{moment:%B} {moment.day:>2}, {moment.year} "
        f"{hour:>2}:{moment.minute:02d}:{seconds}{meridiem}"
    )


def query_points(start_ms: int, end_ms: int, count: int) -> List[int]:
    """Return up to ``count`` evenly spaced instants in ``[start_ms, end_ms)``.

    Points are floored to whole milliseconds, so a range shorter than
    ``count`` milliseconds repeats instants (``query_points(0, 2, 5)`` is
    ``[0, 0, 0, 1, 1]``). Repeats share a label and the tabulation keeps
    the last of them.
    """
    if count < 1:
        raise ValueError("count must be at least 1.")
    if start_ms > end_ms:
        raise ValueError("Range start must not be after its end.")

    step = (end_ms - start_ms) / count
    points: List[int] = []
    for index in range(count):
        point = start_ms + math.floor(index * step)
        if point >= end_ms:
            break
        points.append(point)
    return points


class RangeTabulator:
    """Drives repeated interpolation across a half-open time range."""

    def __init__(self, engine: InterpolationEngine, max_count: Optional[int] = None) -> None:
        self.engine = engine
        self.max_count = max_count

    def tabulate(
        self,
        device_id: str,
        start: int | datetime,
        end: int | datetime,
        count: int,
    ) -> Dict[str, DenseSample]:
        """Interpolate ``count`` points across ``[start, end)`` keyed by label.

        The first failing interpolation propagates unchanged and no partial
        result is returned. Instants that render to the same label keep the
        later sample.
        """
        if self.max_count is not None and count > self.max_count:
            raise ValueError(f"count must not exceed {self.max_count}.")

        start_ms = to_epoch_ms(start) if isinstance(start, datetime) else int(start)
        end_ms = to_epoch_ms(end) if isinstance(end, datetime) else int(end)

        tabulated: Dict[str, DenseSample] = {}
        for point in query_points(start_ms, end_ms, count):
            sample = self.engine.interpolate(device_id, point)
            tabulated[format_label(point)] = sample

        logger.debug(
            "Tabulated hardware samples",
            extra={"device_id": device_id, "point_count": len(tabulated)},
        )
        return tabulated


@lru_cache
def build_default_tabulator() -> RangeTabulator:
    """Factory that wires the tabulator with the default engine and limits."""
    settings = get_settings()
    return RangeTabulator(build_default_engine(), max_count=settings.max_tabulation_count)
