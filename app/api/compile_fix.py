"""
POST /api/compile-fix
=====================
Runs one build → diagnose → repair session against a generated project
directory and returns the SessionReport.

GET /api/status lists the directories with a session in progress.
"""
import os
import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, field_validator

from app.core import config
from app.models.session_report import SessionReport
from app.services.repair_session import (
    SessionBusyError,
    active_sessions,
    run_repair_session,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Compile Fix"])

# Hard ceiling for a single build (seconds)
_MAX_BUILD_TIMEOUT = 1800


class CompileFixRequest(BaseModel):
    target_dir: str = config.TARGET_DIR
    max_retries: Optional[int] = None
    build_command: Optional[str] = None
    timeout_seconds: Optional[int] = None
    write_report: bool = False

    @field_validator("max_retries")
    @classmethod
    def validate_max_retries(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValueError("max_retries must be at least 1")
        return v

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and not 1 <= v <= _MAX_BUILD_TIMEOUT:
            raise ValueError(f"timeout_seconds must be between 1 and {_MAX_BUILD_TIMEOUT}")
        return v


class StatusResponse(BaseModel):
    running: List[str]


@router.post("/compile-fix", response_model=SessionReport)
async def compile_fix(request: CompileFixRequest) -> SessionReport:
    if not os.path.isdir(request.target_dir):
        raise HTTPException(status_code=400, detail=f"Target directory not found: {request.target_dir}")

    logger.info("compile-fix requested for %s", request.target_dir)
    try:
        return await run_repair_session(
            target_dir=request.target_dir,
            max_retries=request.max_retries or config.FIX_MAX_RETRIES,
            build_command=request.build_command or config.BUILD_COMMAND,
            timeout_seconds=request.timeout_seconds or config.BUILD_TIMEOUT,
            report_path=config.REPORT_PATH if request.write_report else None,
        )
    except SessionBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/status", response_model=StatusResponse)
async def get_status() -> StatusResponse:
    return StatusResponse(running=sorted(active_sessions))
