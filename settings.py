from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


_SAMPLES_PATH_ENV = "HARDWARE_SAMPLES_PATH"
_MAX_COUNT_ENV = "TABULATION_MAX_COUNT"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    samples_root_path: str
    max_tabulation_count: int
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        samples_root_path=_read_str_env(_SAMPLES_PATH_ENV, "./api/hardware/samples"),
        max_tabulation_count=_read_positive_int(_MAX_COUNT_ENV, 1000),
        log_level=_read_log_level("INFO"),
    )
