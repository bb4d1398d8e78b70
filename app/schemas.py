"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from models.records import DenseSample


class TabulationRequest(BaseModel):
    """Body of a tabulated hardware query."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1, description="Device identifier.")
    from_: datetime = Field(..., alias="from", description="Inclusive range start.")
    to: datetime = Field(..., description="Exclusive range end.")
    count: int = Field(..., ge=1, description="Number of evenly spaced points.")

    @field_validator("from_", "to")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Naive instants are UTC, matching to_epoch_ms.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _check_range(self) -> "TabulationRequest":
        if self.from_ > self.to:
            raise ValueError("'from' must not be after 'to'.")
        return self


class HardwareSample(BaseModel):
    """A dense interpolated sample; every channel is present."""

    model_config = ConfigDict(populate_by_name=True)

    temperature: float
    peak_velocity_x: float = Field(..., alias="peakVelocityX")
    rms_velocity_x: float = Field(..., alias="rmsVelocityX")
    peak_acceleration_x: float = Field(..., alias="peakAccelerationX")
    rms_acceleration_x: float = Field(..., alias="rmsAccelerationX")
    peak_velocity_y: float = Field(..., alias="peakVelocityY")
    rms_velocity_y: float = Field(..., alias="rmsVelocityY")
    peak_acceleration_y: float = Field(..., alias="peakAccelerationY")
    rms_acceleration_y: float = Field(..., alias="rmsAccelerationY")

    @classmethod
    def from_dense(cls, sample: DenseSample) -> "HardwareSample":
        return cls.model_validate(sample.as_dict())


class DeviceSummary(BaseModel):
    """Diagnostic view of one device's ingested samples."""

    id: str
    sample_count: int = Field(..., ge=1)
    first: datetime
    last: datetime


class DeviceList(BaseModel):
    devices: List[DeviceSummary] = Field(default_factory=list)


class HealthStatus(BaseModel):
    status: str = "ok"
    device_count: int = Field(..., ge=0)
    sample_count: int = Field(..., ge=0)


class ErrorResponse(BaseModel):
    """Body returned for rejected queries."""

    detail: str
    error: Optional[str] = Field(default=None, description="Error kind, e.g. UnknownDevice.")
