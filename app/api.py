"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.schemas import (
    HistoryResponse,
    MonitorStatusResponse,
    ReadingResponse,
    StatisticsResponse,
    TransitionResponse,
)
from services.monitor import MonitorController, build_default_monitor

router = APIRouter()


def get_monitor() -> MonitorController:
    return build_default_monitor()


@router.post(
    "/monitor/start",
    response_model=TransitionResponse,
    summary="Start sampling; repeated calls leave the monitor running.",
)
async def start_monitoring(
    monitor: MonitorController = Depends(get_monitor),
) -> TransitionResponse:
    return TransitionResponse.from_outcome(monitor.start())


@router.post(
    "/monitor/stop",
    response_model=TransitionResponse,
    summary="Stop sampling; buffered history is retained.",
)
async def stop_monitoring(
    monitor: MonitorController = Depends(get_monitor),
) -> TransitionResponse:
    return TransitionResponse.from_outcome(monitor.stop())


@router.post(
    "/monitor/reset",
    response_model=MonitorStatusResponse,
    summary="Clear buffered history and tick counters.",
)
async def reset_monitoring(
    monitor: MonitorController = Depends(get_monitor),
) -> MonitorStatusResponse:
    monitor.reset()
    return MonitorStatusResponse.from_status(monitor.status())


@router.get(
    "/monitor/status",
    response_model=MonitorStatusResponse,
    summary="Current state and counters of the monitor.",
)
async def get_status(
    monitor: MonitorController = Depends(get_monitor),
) -> MonitorStatusResponse:
    return MonitorStatusResponse.from_status(monitor.status())


@router.get(
    "/monitor/statistics",
    response_model=StatisticsResponse,
    summary="Summary statistics over the buffered readings.",
)
async def get_statistics(
    monitor: MonitorController = Depends(get_monitor),
) -> StatisticsResponse:
    return StatisticsResponse.from_statistics(monitor.get_statistics())


@router.get(
    "/monitor/history",
    response_model=HistoryResponse,
    summary="Most recent readings, oldest first.",
)
async def get_history(
    limit: Optional[int] = Query(None, ge=0, description="Maximum number of readings to return."),
    monitor: MonitorController = Depends(get_monitor),
) -> HistoryResponse:
    try:
        readings = monitor.get_history(limit)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return HistoryResponse(
        count=len(readings),
        readings=[ReadingResponse.from_reading(reading) for reading in readings],
    )


@router.get(
    "/monitor/latest",
    response_model=ReadingResponse,
    summary="Most recent reading.",
)
async def get_latest(
    monitor: MonitorController = Depends(get_monitor),
) -> ReadingResponse:
    reading = monitor.latest()
    if reading is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No readings recorded yet.",
        )
    return ReadingResponse.from_reading(reading)


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
