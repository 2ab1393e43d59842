"""
Build Runner
============
Runs the generated project's build command and returns a BuildOutcome.

BOUNDARY RULES:
    - Runner ONLY observes execution.
    - Runner NEVER parses diagnostics — that is the parser's job.
    - Runner NEVER modifies files.

Timeout:
    The command runs in its own process group. On timeout the whole group
    is killed and the outcome carries no build output, so the controller
    stops through its zero-diagnostics path.

Spawn failures:
    An OSError while starting the process is retried BUILD_SPAWN_RETRIES
    times before a failed outcome is returned.
"""
import os
import signal
import subprocess
import time
import logging

from app.core.config import BUILD_COMMAND, BUILD_TIMEOUT, BUILD_SPAWN_RETRIES
from app.models.build_outcome import BuildOutcome

logger = logging.getLogger(__name__)


def _kill_process_tree(proc: subprocess.Popen) -> None:
    try:
        if os.name == "posix":
            os.killpg(proc.pid, signal.SIGKILL)
        else:
            proc.kill()
    except (ProcessLookupError, PermissionError):
        proc.kill()


def run_build(
    target_dir: str,
    command: str = BUILD_COMMAND,
    timeout_seconds: int = BUILD_TIMEOUT,
    spawn_retries: int = BUILD_SPAWN_RETRIES,
) -> BuildOutcome:
    """
    Execute ``command`` in ``target_dir`` and capture stdout + stderr.

    Parameters
    ----------
    target_dir : str
        Root of the generated project (build working directory).
    command : str
        Shell command, e.g. ``npm run build``.
    timeout_seconds : int
        Max seconds before the process group is killed.
    spawn_retries : int
        Extra attempts when the process cannot be started.

    Returns
    -------
    BuildOutcome
        Always returned — never raises.
    """
    start = time.monotonic()
    last_error = ""

    for attempt in range(1, spawn_retries + 2):
        logger.info("Running build | cmd=%s | cwd=%s | timeout=%ds", command, target_dir, timeout_seconds)
        try:
            proc = subprocess.Popen(
                command,
                shell=True,
                cwd=target_dir,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                start_new_session=(os.name == "posix"),
            )
        except OSError as e:
            last_error = f"Failed to start build: {e}"
            logger.warning("Build spawn attempt %d failed: %s", attempt, e)
            continue

        try:
            stdout, stderr = proc.communicate(timeout=timeout_seconds)
        except subprocess.TimeoutExpired:
            _kill_process_tree(proc)
            proc.communicate()
            duration = round(time.monotonic() - start, 3)
            logger.error("Build timed out after %ds and was killed", timeout_seconds)
            return BuildOutcome(
                success=False,
                output="",
                exit_code=-1,
                duration_seconds=duration,
                timed_out=True,
                error=f"Build timed out after {timeout_seconds}s",
            )

        duration = round(time.monotonic() - start, 3)
        outcome = BuildOutcome(
            success=proc.returncode == 0,
            output=(stdout or "") + (stderr or ""),
            exit_code=proc.returncode,
            duration_seconds=duration,
        )
        logger.info("Build complete | exit=%d | time=%.2fs", outcome.exit_code, duration)
        return outcome

    logger.error(last_error)
    return BuildOutcome(
        success=False,
        exit_code=-1,
        duration_seconds=round(time.monotonic() - start, 3),
        error=last_error,
    )
