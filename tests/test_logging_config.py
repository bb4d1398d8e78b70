from __future__ import annotations

import logging

from logging_config import ContextualFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="storage.sample_store",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Hardware samples populated",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_appends_known_context() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")

    message = formatter.format(_record(device_count=2, sample_count=10, unrelated="x"))

    assert message == "Hardware samples populated | device_count=2 sample_count=10"


def test_formatter_skips_empty_context() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")

    assert formatter.format(_record(path=None)) == "Hardware samples populated"
