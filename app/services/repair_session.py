"""
Repair Session
==============
Wires the LLM client, selector, applier and controller together for one
target directory, runs the session and optionally writes the report.

Sessions on the same directory must not overlap (backups and overwrites
are not namespaced per session); ``active_sessions`` tracks the running ones.
"""
import logging
import os
from typing import Optional, Set

from app.agents.convergence_controller import ConvergenceController
from app.agents.repair_selector import RepairStrategySelector
from app.core import config
from app.llm.client import LLMClient
from app.models.session_report import SessionReport
from app.services.report_writer import ReportWriter

logger = logging.getLogger(__name__)

active_sessions: Set[str] = set()


class SessionBusyError(RuntimeError):
    """A repair session is already running on this directory."""


async def run_repair_session(
    target_dir: str,
    max_retries: int = config.FIX_MAX_RETRIES,
    build_command: str = config.BUILD_COMMAND,
    timeout_seconds: int = config.BUILD_TIMEOUT,
    report_path: Optional[str] = None,
    client: Optional[LLMClient] = None,
) -> SessionReport:
    key = os.path.abspath(target_dir)
    if key in active_sessions:
        raise SessionBusyError(f"A repair session is already running on {key}")

    active_sessions.add(key)
    owns_client = client is None
    client = client or LLMClient()
    try:
        controller = ConvergenceController(
            target_dir=key,
            selector=RepairStrategySelector(client=client),
            max_retries=max_retries,
            build_command=build_command,
            timeout_seconds=timeout_seconds,
        )
        report = await controller.run()
        logger.info(
            "Session finished | success=%s | attempts=%d | fixed=%d | stop=%s",
            report.success, report.attempts, len(report.fixed_files), report.stop_reason,
        )
        if report_path:
            ReportWriter.write_report(report, report_path)
        return report
    finally:
        active_sessions.discard(key)
        if owns_client:
            await client.close()
