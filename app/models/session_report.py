"""
Session Report Model
====================
The structured result of one repair session. This is the only externally
observable output of the ConvergenceController.

Fields:
    success         — True if the final build passed
    fixed_files     — RepairRecords in the order they were applied
    attempts        — number of completed build invocations
    errors          — diagnostics still reported when the session stopped
                      (None on success)
    unfixed         — diagnostics whose repair produced no change or failed,
                      latest attempt per diagnostic identity
    stop_reason     — success / no_diagnostics / stalled / budget_exhausted
"""
from typing import List, Optional
from pydantic import BaseModel

from .diagnostic import Diagnostic
from .repair_record import RepairRecord


class UnfixedDiagnostic(BaseModel):
    diagnostic: Diagnostic
    reason: str
    detail: str = ""


class SessionReport(BaseModel):
    success: bool
    fixed_files: List[RepairRecord] = []
    attempts: int = 0
    errors: Optional[List[Diagnostic]] = None
    unfixed: List[UnfixedDiagnostic] = []
    stop_reason: str = ""
