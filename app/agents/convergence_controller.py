"""
Convergence Controller
======================
Drives the Build → Diagnose → Repair loop for one generated project.

State machine:
    Building   → build passes                      → Done(success)
    Diagnosing → build fails, no diagnostics       → Done(failure)
               → same diagnostics as last round    → Stalled
               → otherwise                         → Repairing
    Repairing  → every diagnostic, discovery order → Building
    After each failed round, attempts == max_retries → BudgetExhausted

Guarantees:
    - attempts counts completed build invocations
    - repairs run strictly in order; each reads the file's current on-disk
      content, so several diagnostics in one file compose
    - run() never raises for collaborator failures; every stop produces a
      well-formed SessionReport
    - all mutable session data lives in one SessionState created per run()
"""
import asyncio
import inspect
import logging
import os
from collections import Counter
from typing import Awaitable, Callable, List, Optional, Union

from app.agents.repair_applier import RepairApplier
from app.agents.repair_selector import RepairStrategySelector
from app.core import config
from app.core.constants import (
    STOP_BUDGET_EXHAUSTED,
    STOP_NO_DIAGNOSTICS,
    STOP_STALLED,
    STOP_SUCCESS,
)
from app.core.errors import RepairApplyError
from app.executor.build_runner import run_build
from app.models.build_outcome import BuildOutcome
from app.models.diagnostic import Diagnostic
from app.models.session_report import SessionReport
from app.parser.diagnostic_parser import parse_diagnostics
from app.state.session_state import SessionState
from app.utils.unfixed_reasons import APPLY_FAILED, OUT_OF_SCOPE, READ_FAILED

logger = logging.getLogger(__name__)

BuildCallable = Callable[[], Union[BuildOutcome, Awaitable[BuildOutcome]]]


def diagnostics_same(current: List[Diagnostic], previous: Optional[List[Diagnostic]]) -> bool:
    """
    True when both lists hold the same multiset of (file, line, message).

    Order does not matter; column and rule id are ignored.
    """
    if previous is None or len(current) != len(previous):
        return False
    return Counter(d.identity for d in current) == Counter(d.identity for d in previous)


class ConvergenceController:
    """
    Parameters
    ----------
    target_dir : str
        Build root; diagnostic file paths are resolved against it.
    selector : RepairStrategySelector
        Produces candidate content per diagnostic.
    applier : RepairApplier or None
        Writes repairs (auto-created if not provided).
    build : callable or None
        Zero-argument build collaborator returning a BuildOutcome (sync or
        async). Defaults to run_build(target_dir, build_command, timeout)
        in a worker thread, so the event loop keeps serving requests.
    max_retries : int
        Maximum number of build invocations.
    """

    def __init__(
        self,
        target_dir: str,
        selector: RepairStrategySelector,
        applier: Optional[RepairApplier] = None,
        build: Optional[BuildCallable] = None,
        max_retries: int = config.FIX_MAX_RETRIES,
        build_command: str = config.BUILD_COMMAND,
        timeout_seconds: int = config.BUILD_TIMEOUT,
    ) -> None:
        self.target_dir = os.path.abspath(target_dir)
        self.selector = selector
        self.applier = applier or RepairApplier()
        self.max_retries = max(1, max_retries)
        self._build = build or (
            lambda: asyncio.to_thread(run_build, self.target_dir, build_command, timeout_seconds)
        )

    # -------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------
    async def run(self) -> SessionReport:
        """Run build/repair rounds until success, stall, or budget exhaustion."""
        state = SessionState()
        logger.info("Starting repair session for %s (max %d builds)", self.target_dir, self.max_retries)

        while state.attempts < self.max_retries:
            # --- Building ---
            outcome = await self._run_build()
            state.attempts += 1
            logger.info("Build %d/%d finished (exit=%d)", state.attempts, self.max_retries, outcome.exit_code)

            if outcome.success:
                logger.info("Build passed after %d attempt(s)", state.attempts)
                return self._report(state, True, STOP_SUCCESS, None)

            # --- Diagnosing ---
            diagnostics = parse_diagnostics(outcome.output)
            if not diagnostics:
                logger.warning("Build failed but no diagnostics could be parsed")
                return self._report(state, False, STOP_NO_DIAGNOSTICS, state.previous_diagnostics or [])

            if diagnostics_same(diagnostics, state.previous_diagnostics):
                logger.warning("Diagnostics unchanged since last round, stopping")
                return self._report(state, False, STOP_STALLED, diagnostics)

            state.previous_diagnostics = list(diagnostics)

            # --- Repairing ---
            logger.info("Found %d diagnostic(s), repairing", len(diagnostics))
            for diagnostic in diagnostics:
                await self._repair_one(state, diagnostic)

        logger.warning("Retry budget of %d build(s) exhausted", self.max_retries)
        return self._report(state, False, STOP_BUDGET_EXHAUSTED, state.previous_diagnostics or [])

    # -------------------------------------------------------------------
    # Internal Helpers
    # -------------------------------------------------------------------
    async def _run_build(self) -> BuildOutcome:
        try:
            result = self._build()
            if inspect.isawaitable(result):
                result = await result
            return result
        except Exception as e:
            # the build collaborator is external code; a crash counts as a failed build
            logger.error("Build collaborator raised: %s", e, exc_info=True)
            return BuildOutcome(success=False, exit_code=-1, error=str(e))

    def _resolve(self, file_path: str) -> Optional[str]:
        """Absolute path for a diagnostic file, or None if it escapes the build root."""
        try:
            abs_path = os.path.normpath(os.path.join(self.target_dir, file_path))
            if os.path.commonpath([abs_path, self.target_dir]) != self.target_dir:
                return None
        except ValueError as e:
            logger.warning("Cannot resolve %r: %s", file_path, e)
            return None
        return abs_path

    async def _repair_one(self, state: SessionState, diagnostic: Diagnostic) -> None:
        logger.info("Repairing %s - %s", diagnostic.location, diagnostic.message)

        abs_path = self._resolve(diagnostic.file)
        if abs_path is None:
            logger.error("Refusing to touch %s: outside %s", diagnostic.file, self.target_dir)
            state.record_unfixed(diagnostic, OUT_OF_SCOPE)
            return

        try:
            with open(abs_path, "r", encoding="utf-8", newline="") as f:
                original = f.read()
        except (OSError, ValueError) as e:
            # ValueError: undecodable bytes or a NUL in the path
            logger.error("Cannot read %r: %s", abs_path, e)
            state.record_unfixed(diagnostic, READ_FAILED, str(e))
            return

        outcome = await self.selector.select_and_repair(diagnostic, original)
        if not outcome.changed:
            logger.info("Could not repair %s (%s)", diagnostic.location, outcome.reason)
            state.record_unfixed(diagnostic, outcome.reason, outcome.detail)
            return

        try:
            record = self.applier.apply(
                abs_path,
                outcome.content,
                original,
                message=diagnostic.message,
                display_path=diagnostic.file,
                strategy=outcome.strategy,
                rule=outcome.rule.value if outcome.rule else None,
            )
        except RepairApplyError as e:
            state.record_unfixed(diagnostic, APPLY_FAILED, str(e))
            return

        if record is not None:
            state.record_fixed(record, diagnostic)

    def _report(
        self,
        state: SessionState,
        success: bool,
        stop_reason: str,
        errors: Optional[List[Diagnostic]],
    ) -> SessionReport:
        return SessionReport(
            success=success,
            fixed_files=list(state.fixed_files),
            attempts=state.attempts,
            errors=None if success else list(errors or []),
            unfixed=state.unfixed_list(),
            stop_reason=stop_reason,
        )
