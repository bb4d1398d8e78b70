from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable, Iterator, Tuple

import pytest

from models.records import CHANNEL_FILES, Channel
from services.interpolator import build_default_engine
from services.tabulator import build_default_tabulator
from settings import get_settings
from storage.sample_store import build_default_store

Rows = Iterable[Tuple[object, object]]
WriteChannel = Callable[[str, str, Rows], Path]

FAN1_TIMESTAMPS = (0, 1000, 2000, 3000, 4000)


def fan1_value(channel: Channel, timestamp: int) -> float:
    """Deterministic reading: channel ordinal in the tens, time step in the units."""
    ordinal = list(Channel).index(channel) + 1
    return ordinal * 10.0 + timestamp / 1000


@pytest.fixture()
def sample_root(tmp_path: Path) -> Path:
    root = tmp_path / "samples"
    root.mkdir()
    return root


@pytest.fixture()
def write_channel(sample_root: Path) -> WriteChannel:
    def write(device_id: str, file_name: str, rows: Rows) -> Path:
        device_dir = sample_root / device_id
        device_dir.mkdir(parents=True, exist_ok=True)
        path = device_dir / file_name
        path.write_text("".join(f"{timestamp},{value}\n" for timestamp, value in rows))
        return path

    return write


@pytest.fixture()
def fan1_root(sample_root: Path, write_channel: WriteChannel) -> Path:
    """Device ``fan1`` with every channel sampled at 0, 1000, ..., 4000 ms."""
    for channel, file_name in CHANNEL_FILES.items():
        write_channel(
            "fan1",
            file_name,
            [(timestamp, fan1_value(channel, timestamp)) for timestamp in FAN1_TIMESTAMPS],
        )
    return sample_root


def _clear_caches() -> None:
    for cache in (build_default_tabulator, build_default_engine, build_default_store, get_settings):
        cache.cache_clear()


@pytest.fixture()
def clean_caches() -> Iterator[None]:
    _clear_caches()
    yield
    _clear_caches()
