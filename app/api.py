"""HTTP route definitions for the service."""

from __future__ import annotations

import logging
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse

from app.schemas import (
    DeviceList,
    DeviceSummary,
    ErrorResponse,
    HardwareSample,
    HealthStatus,
    TabulationRequest,
)
from models.errors import ChannelUnavailable, InsufficientDensity, QueryError, UnknownDevice
from services.tabulator import RangeTabulator, build_default_tabulator
from storage.sample_store import SampleStore

logger = logging.getLogger(__name__)

router = APIRouter()

_UNPROCESSABLE = 422

_ERROR_STATUS: Dict[type[QueryError], int] = {
    UnknownDevice: status.HTTP_404_NOT_FOUND,
    InsufficientDensity: _UNPROCESSABLE,
    ChannelUnavailable: _UNPROCESSABLE,
}

_REJECTED = {
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    _UNPROCESSABLE: {"model": ErrorResponse},
}


def get_tabulator() -> RangeTabulator:
    return build_default_tabulator()


def get_store(tabulator: RangeTabulator = Depends(get_tabulator)) -> SampleStore:
    return tabulator.engine.store


async def query_error_handler(_request: Request, exc: QueryError) -> JSONResponse:
    """Translate a rejected query into a typed JSON error response."""
    status_code = _ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    logger.warning(
        "Rejected hardware query",
        extra={"device_id": exc.device_id, "error": type(exc).__name__, "reason": str(exc)},
    )
    payload = ErrorResponse(detail=str(exc), error=type(exc).__name__)
    return JSONResponse(status_code=status_code, content=payload.model_dump())


def _summarize(store: SampleStore, device_id: str) -> DeviceSummary:
    samples = store.samples(device_id)
    return DeviceSummary(
        id=device_id,
        sample_count=len(samples),
        first=samples[0].time,
        last=samples[-1].time,
    )


@router.post(
    "/api/tabulated_hardware",
    response_model=Dict[str, HardwareSample],
    responses=_REJECTED,
    summary="Interpolate evenly spaced samples for a device over a time range.",
)
def tabulated_hardware(
    query: TabulationRequest,
    tabulator: RangeTabulator = Depends(get_tabulator),
) -> Dict[str, HardwareSample]:
    try:
        tabulated = tabulator.tabulate(query.id, query.from_, query.to, query.count)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return {label: HardwareSample.from_dense(sample) for label, sample in tabulated.items()}


@router.get(
    "/api/devices",
    response_model=DeviceList,
    summary="List ingested devices with their sample counts.",
)
def list_devices(store: SampleStore = Depends(get_store)) -> DeviceList:
    return DeviceList(devices=[_summarize(store, device_id) for device_id in store.device_ids()])


@router.get(
    "/api/devices/{device_id}",
    response_model=DeviceSummary,
    responses=_REJECTED,
    summary="Fetch the sample summary for one device.",
)
def get_device(device_id: str, store: SampleStore = Depends(get_store)) -> DeviceSummary:
    if not store.has_device(device_id):
        raise UnknownDevice(device_id)
    return _summarize(store, device_id)


@router.get(
    "/health",
    response_model=HealthStatus,
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
def healthcheck(store: SampleStore = Depends(get_store)) -> HealthStatus:
    return HealthStatus(
        device_count=len(store.device_ids()),
        sample_count=store.sample_count(),
    )


@router.get(
    "/",
    summary="Root endpoint.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "Welcome! POST /api/tabulated_hardware to query samples."}
