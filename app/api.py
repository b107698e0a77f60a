"""HTTP route definitions for the service."""

from __future__ import annotations

from dataclasses import asdict
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import PlainTextResponse

from app.schemas import (
    HistoryEntryModel,
    MonitorStatus,
    ReportList,
    RobotCheckResult,
    RobotHistory,
)
from services.monitor import MonitorService

router = APIRouter()


def get_monitor(request: Request) -> MonitorService:
    monitor = getattr(request.app.state, "monitor", None)
    if monitor is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Monitor is not initialized.",
        )
    return monitor


@router.get(
    "/monitor/status",
    response_model=MonitorStatus,
    summary="Report whether the monitor is running and which reports it has emitted.",
)
async def monitor_status(monitor: MonitorService = Depends(get_monitor)) -> MonitorStatus:
    return MonitorStatus(**monitor.status())


@router.post(
    "/monitor/start",
    response_model=MonitorStatus,
    summary="Purge old reports and start background monitoring.",
)
def start_monitor(monitor: MonitorService = Depends(get_monitor)) -> MonitorStatus:
    monitor.start()
    return MonitorStatus(**monitor.status())


@router.post(
    "/monitor/stop",
    response_model=MonitorStatus,
    summary="Stop background monitoring after the current tick.",
)
def stop_monitor(monitor: MonitorService = Depends(get_monitor)) -> MonitorStatus:
    monitor.stop()
    return MonitorStatus(**monitor.status())


@router.post(
    "/monitor/check",
    response_model=List[RobotCheckResult],
    summary="Evaluate every robot immediately.",
)
def check_now(monitor: MonitorService = Depends(get_monitor)) -> List[RobotCheckResult]:
    return [RobotCheckResult(**asdict(result)) for result in monitor.check_all_robots()]


@router.get(
    "/reports",
    response_model=ReportList,
    summary="List report files currently on disk.",
)
def list_reports(monitor: MonitorService = Depends(get_monitor)) -> ReportList:
    return ReportList(reports=monitor.store.list_reports())


@router.get(
    "/reports/{filename}",
    response_class=PlainTextResponse,
    summary="Fetch the text of a single report.",
)
def get_report(filename: str, monitor: MonitorService = Depends(get_monitor)) -> PlainTextResponse:
    try:
        content = monitor.store.read_report(filename)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc.args[0]) if exc.args else "Report not found.",
        ) from exc
    return PlainTextResponse(content)


@router.get(
    "/robots/{robot_id}/history",
    response_model=RobotHistory,
    summary="Recent readings kept for trend detection.",
)
def robot_history(robot_id: str, monitor: MonitorService = Depends(get_monitor)) -> RobotHistory:
    parts = {
        part_id: [HistoryEntryModel(**asdict(entry)) for entry in entries]
        for part_id, entries in monitor.history.snapshot(robot_id).items()
    }
    return RobotHistory(robot_id=robot_id, parts=parts)


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
    return {"status": "ok", "detail": "See /monitor/status for monitor state."}
