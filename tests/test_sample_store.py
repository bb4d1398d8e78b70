from __future__ import annotations

from pathlib import Path

import pytest

from models.errors import IngestionFailure, UnknownDevice
from models.records import MAX_EPOCH_MS, MIN_EPOCH_MS, Channel
from storage.sample_store import SampleStore, populate


def test_rows_from_different_channel_files_merge_into_one_sample(
    sample_root: Path, write_channel
) -> None:
    write_channel("fan1", "temperature.csv", [(1000, 21.5)])
    write_channel("fan1", "rms_velocity_y.csv", [(1000, 0.25), (2000, 0.5)])

    store = populate(sample_root)

    samples = store.samples("fan1")
    assert [sample.timestamp for sample in samples] == [1000, 2000]
    merged = samples[0]
    assert merged.readings == {Channel.temperature: 21.5, Channel.rms_velocity_y: 0.25}
    assert samples[1].get(Channel.temperature) is None
    assert store.sample_count() == 2


def test_samples_are_sorted_regardless_of_row_order(sample_root: Path, write_channel) -> None:
    write_channel("fan1", "temperature.csv", [(3000, 3.0), (1000, 1.0), (2000, 2.0)])

    store = populate(sample_root)

    assert [sample.timestamp for sample in store.samples("fan1")] == [1000, 2000, 3000]


def test_duplicate_rows_keep_last_value(sample_root: Path, write_channel) -> None:
    write_channel("fan1", "temperature.csv", [(1000, 1.0), (1000, 9.0)])

    store = populate(sample_root)

    assert store.samples("fan1")[0].get(Channel.temperature) == 9.0
    assert store.device_sample_count("fan1") == 1


def test_blank_lines_and_padding_are_tolerated(sample_root: Path) -> None:
    device_dir = sample_root / "pump"
    device_dir.mkdir()
    (device_dir / "peak_velocity_x.csv").write_text(" 1000 , 4.5\n\n2000,-1e-3\n")

    store = populate(sample_root)

    values = [sample.get(Channel.peak_velocity_x) for sample in store.samples("pump")]
    assert values == [4.5, -0.001]


def test_store_queries(sample_root: Path, write_channel) -> None:
    write_channel("fan1", "temperature.csv", [(0, 1.0), (1000, 2.0)])
    write_channel("fan2", "temperature.csv", [(0, 1.0)])
    write_channel("idle", "temperature.csv", [])

    store = populate(sample_root)

    assert store.has_device("fan1")
    assert store.has_device("fan2")
    assert not store.has_device("idle")
    assert not store.has_device("missing")
    assert store.device_ids() == ("fan1", "fan2")
    assert store.sample_count() == 3
    with pytest.raises(UnknownDevice):
        store.samples("missing")


def test_invalid_timestamp_fails_whole_ingestion(sample_root: Path, write_channel) -> None:
    write_channel("fan1", "temperature.csv", [(1000, 1.0)])
    bad = write_channel("fan2", "temperature.csv", [("12.5", 1.0)])

    with pytest.raises(IngestionFailure) as excinfo:
        populate(sample_root)

    assert excinfo.value.path == bad
    assert excinfo.value.row_number == 1
    assert "timestamp" in excinfo.value.reason


@pytest.mark.parametrize("raw_value", ["abc", "nan", "inf", "", "1_000"])
def test_invalid_value_fails_ingestion(sample_root: Path, write_channel, raw_value: str) -> None:
    write_channel("fan1", "temperature.csv", [(1000, 1.0), (2000, raw_value)])

    with pytest.raises(IngestionFailure) as excinfo:
        populate(sample_root)

    assert excinfo.value.row_number == 2


def test_unknown_channel_file_fails_ingestion(sample_root: Path, write_channel) -> None:
    write_channel("fan1", "humidity.csv", [(1000, 1.0)])

    with pytest.raises(IngestionFailure, match="does not support file"):
        populate(sample_root)


def test_wrong_field_count_fails_ingestion(sample_root: Path) -> None:
    device_dir = sample_root / "fan1"
    device_dir.mkdir()
    (device_dir / "temperature.csv").write_text("1000,1.0,extra\n")

    with pytest.raises(IngestionFailure, match="expected 2 fields"):
        populate(sample_root)


def test_missing_root_fails_ingestion(tmp_path: Path) -> None:
    with pytest.raises(IngestionFailure, match="not a directory"):
        populate(tmp_path / "absent")


def test_store_ignores_empty_device_entries() -> None:
    store = SampleStore({"ghost": ()})

    assert not store.has_device("ghost")
    assert store.sample_count() == 0


def _write_rows(path: Path, rows) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("".join(f"{timestamp},{value}\n" for timestamp, value in rows))


def _snapshot(store: SampleStore, device_id: str) -> list:
    return [(sample.timestamp, dict(sample.readings)) for sample in store.samples(device_id)]


def test_merge_does_not_depend_on_file_order(tmp_path: Path) -> None:
    temperature_rows = [(2000, 2.0), (1000, 1.0), (3000, 3.0)]
    velocity_rows = [(1000, 0.5), (3000, 0.75), (1000, 0.5)]

    # Both files belong to "fan1"; the outer directories only change walk order.
    first = tmp_path / "first"
    _write_rows(first / "a" / "fan1" / "temperature.csv", temperature_rows)
    _write_rows(first / "b" / "fan1" / "rms_velocity_y.csv", velocity_rows)
    second = tmp_path / "second"
    _write_rows(second / "a" / "fan1" / "rms_velocity_y.csv", list(reversed(velocity_rows)))
    _write_rows(second / "b" / "fan1" / "temperature.csv", temperature_rows)

    first_store = populate(first)
    second_store = populate(second)

    assert _snapshot(first_store, "fan1") == _snapshot(second_store, "fan1")
    assert _snapshot(first_store, "fan1") == [
        (1000, {Channel.temperature: 1.0, Channel.rms_velocity_y: 0.5}),
        (2000, {Channel.temperature: 2.0}),
        (3000, {Channel.temperature: 3.0, Channel.rms_velocity_y: 0.75}),
    ]


def test_timestamps_at_representable_bounds_are_accepted(
    sample_root: Path, write_channel
) -> None:
    write_channel("edge", "temperature.csv", [(MIN_EPOCH_MS, 1.0), (MAX_EPOCH_MS, 2.0)])

    samples = populate(sample_root).samples("edge")

    assert samples[0].time.year == 1
    assert samples[-1].time.year == 9999


@pytest.mark.parametrize("timestamp", [MAX_EPOCH_MS + 1, MIN_EPOCH_MS - 1, 10**15])
def test_unrepresentable_timestamp_fails_ingestion(
    sample_root: Path, write_channel, timestamp: int
) -> None:
    write_channel("big", "temperature.csv", [(0, 1.0), (timestamp, 2.0)])

    with pytest.raises(IngestionFailure, match="out of range") as excinfo:
        populate(sample_root)

    assert excinfo.value.row_number == 2
