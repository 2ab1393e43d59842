"""
Errors
======
Exceptions raised at collaborator boundaries.

None of these escape ConvergenceController.run(): the controller turns
each of them into an unfixed diagnostic or a failed build outcome.
"""


class BuildFixerError(Exception):
    """Base class for all repair-session errors."""


class LLMUnavailableError(BuildFixerError):
    """The LLM client is not configured, or every retry failed."""


class RepairApplyError(BuildFixerError):
    """Backup or overwrite of a repaired file failed; the file is untouched."""

    def __init__(self, file_path: str, message: str) -> None:
        super().__init__(f"{file_path}: {message}")
        self.file_path = file_path
