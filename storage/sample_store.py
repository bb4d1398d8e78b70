"""In-memory store of sparse per-device samples loaded from channel CSV files."""

from __future__ import annotations

import csv
import logging
import math
import re
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Tuple

from models.errors import IngestionFailure, UnknownDevice
from models.records import FILE_CHANNELS, MAX_EPOCH_MS, MIN_EPOCH_MS, Channel, SparseSample
from settings import get_settings

logger = logging.getLogger(__name__)

_TIMESTAMP_PATTERN = re.compile(r"[+-]?[0-9]+")


class SampleStore:
    """Read-only mapping of device id to its samples, ordered by timestamp.

    Instances are only built by :func:`populate` and never change afterwards,
    so any number of readers may share one without locking.
    """

    def __init__(self, devices: Mapping[str, Tuple[SparseSample, ...]]) -> None:
        frozen: Dict[str, Tuple[SparseSample, ...]] = {}
        for device_id, samples in devices.items():
            if not samples:
                continue
            frozen[device_id] = tuple(sorted(samples, key=lambda sample: sample.timestamp))
        self._devices: Mapping[str, Tuple[SparseSample, ...]] = MappingProxyType(frozen)

    def has_device(self, device_id: str) -> bool:
        return device_id in self._devices

    def device_ids(self) -> Tuple[str, ...]:
        return tuple(sorted(self._devices))

    def samples(self, device_id: str) -> Tuple[SparseSample, ...]:
        try:
            return self._devices[device_id]
        except KeyError as exc:
            raise UnknownDevice(device_id) from exc

    def device_sample_count(self, device_id: str) -> int:
        return len(self.samples(device_id))

    def sample_count(self) -> int:
        return sum(len(samples) for samples in self._devices.values())


def populate(root: Path | str) -> SampleStore:
    """Walk ``root`` and build a store from every channel file found.

    Each file belongs to the device named by its parent directory and to the
    channel its base name maps to. Any unreadable file, unknown file name or
    malformed row raises :class:`IngestionFailure`; nothing is returned in
    that case. Rows for the same device and timestamp from different files
    merge into one sample, and a repeated (device, timestamp, channel) keeps
    the last value read.
    """
    root_path = Path(root)
    if not root_path.is_dir():
        logger.error(
            "Sample root is not a directory",
            extra={"path": str(root_path)},
        )
        raise IngestionFailure("sample root is not a directory", path=root_path)

    logger.info("Populating hardware samples", extra={"path": str(root_path)})
    readings: Dict[str, Dict[int, Dict[Channel, float]]] = {}

    try:
        for path in _iter_sample_files(root_path):
            channel = FILE_CHANNELS.get(path.name)
            if channel is None:
                raise IngestionFailure("hardware schema does not support file", path=path)

            device_readings = readings.setdefault(path.parent.name, {})
            for timestamp, value in _read_channel_file(path):
                device_readings.setdefault(timestamp, {})[channel] = value
    except IngestionFailure as exc:
        logger.error(
            "Unable to populate hardware samples",
            extra={
                "path": str(exc.path) if exc.path else None,
                "row_number": exc.row_number,
                "reason": exc.reason,
            },
        )
        raise

    store = SampleStore(
        {
            device_id: tuple(
                SparseSample(timestamp=timestamp, readings=channels)
                for timestamp, channels in device_readings.items()
            )
            for device_id, device_readings in readings.items()
        }
    )
    logger.info(
        "Hardware samples populated",
        extra={
            "device_count": len(store.device_ids()),
            "sample_count": store.sample_count(),
        },
    )
    return store


def _iter_sample_files(root: Path) -> Iterator[Path]:
    try:
        paths = sorted(root.rglob("*"))
    except OSError as exc:
        raise IngestionFailure(f"unable to walk sample tree: {exc}", path=root) from exc
    for path in paths:
        if path.is_file():
            yield path


def _read_channel_file(path: Path) -> Iterator[Tuple[int, float]]:
    try:
        with path.open("r", encoding="utf-8", newline="") as handle:
            reader = csv.reader(handle)
            for row_number, row in enumerate(reader, start=1):
                if not row:
                    continue
                if len(row) != 2:
                    raise IngestionFailure(
                        f"expected 2 fields, found {len(row)}",
                        path=path,
                        row_number=row_number,
                    )
                yield (
                    _parse_timestamp(row[0], path, row_number),
                    _parse_value(row[1], path, row_number),
                )
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise IngestionFailure(f"unable to read hardware data file: {exc}", path=path) from exc


def _parse_timestamp(raw: str, path: Path, row_number: int) -> int:
    candidate = raw.strip()
    if not _TIMESTAMP_PATTERN.fullmatch(candidate):
        raise IngestionFailure(
            f"cannot convert timestamp {raw!r}", path=path, row_number=row_number
        )
    timestamp = int(candidate)
    if not MIN_EPOCH_MS <= timestamp <= MAX_EPOCH_MS:
        raise IngestionFailure(
            f"timestamp {raw!r} is out of range", path=path, row_number=row_number
        )
    return timestamp


def _parse_value(raw: str, path: Path, row_number: int) -> float:
    candidate = raw.strip()
    try:
        # float() accepts digit-group underscores; CSV values never carry them.
        if "_" in candidate:
            raise ValueError(candidate)
        value = float(candidate)
    except ValueError as exc:
        raise IngestionFailure(
            f"cannot convert value {raw!r}", path=path, row_number=row_number
        ) from exc
    if not math.isfinite(value):
        raise IngestionFailure(
            f"value {raw!r} is not a finite number", path=path, row_number=row_number
        )
    return value


@lru_cache
def build_default_store(root_path: Optional[str] = None) -> SampleStore:
    settings = get_settings()
    root = settings.samples_root_path if root_path is None else root_path
    return populate(Path(root))
