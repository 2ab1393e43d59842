"""
Build Outcome
=============
Result of one build invocation. Consumed by the ConvergenceController to
derive the next diagnostic set, then dropped.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class BuildOutcome:
    """
    Fields
    ------
    success : bool
        True when the build process exited with code 0.
    output : str
        Combined stdout + stderr.
    exit_code : int
        Process exit code; -1 when the process never completed.
    duration_seconds : float
        Wall clock duration.
    timed_out : bool
        True when the process was killed after the timeout.
    error : str | None
        Infrastructure failure (spawn error, timeout), never a build error.
    """
    success: bool = False
    output: str = ""
    exit_code: int = -1
    duration_seconds: float = 0.0
    timed_out: bool = False
    error: Optional[str] = None
