"""Liveness and readiness probes."""

from typing import Literal

from fastapi import APIRouter, Depends, Request, Response, status
from pydantic import BaseModel
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from quizhub.core.errors import get_request_id
from quizhub.core.logging import get_logger
from quizhub.db.session import get_db

logger = get_logger(__name__)

router = APIRouter(tags=["Health"])

# Tables the service cannot run without; missing ones mean migrations were not applied
REQUIRED_TABLES = ("users", "categories", "questions", "exams", "exam_questions", "rating_marks", "activities")

ProbeStatus = Literal["ok", "down"]


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"


class ProbeResult(BaseModel):
    status: ProbeStatus
    message: str | None = None


class ReadinessResponse(BaseModel):
    status: ProbeStatus
    checks: dict[str, ProbeResult]
    request_id: str


def _probe_database(db: Session) -> ProbeResult:
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("Database probe failed", extra={"error": str(e)})
        return ProbeResult(status="down", message=str(e))
    return ProbeResult(status="ok")


def _probe_schema(db: Session) -> ProbeResult:
    try:
        present = set(inspect(db.get_bind()).get_table_names())
    except SQLAlchemyError as e:
        return ProbeResult(status="down", message=str(e))
    missing = [table for table in REQUIRED_TABLES if table not in present]
    if missing:
        logger.warning("Schema probe failed", extra={"missing_tables": missing})
        return ProbeResult(status="down", message=f"Missing tables: {', '.join(missing)}")
    return ProbeResult(status="ok")


@router.get("/health", response_model=HealthResponse, summary="Liveness probe")
async def health_check() -> HealthResponse:
    return HealthResponse()


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    description="Checks database connectivity and that the schema has been migrated. Responds 503 when either is down.",
)
async def readiness_check(request: Request, response: Response, db: Session = Depends(get_db)) -> ReadinessResponse:
    checks = {"db": _probe_database(db)}
    if checks["db"].status == "ok":
        checks["schema"] = _probe_schema(db)

    overall: ProbeStatus = "ok" if all(check.status == "ok" for check in checks.values()) else "down"
    if overall == "down":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ReadinessResponse(status=overall, checks=checks, request_id=get_request_id(request))
