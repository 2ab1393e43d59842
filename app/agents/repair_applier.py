"""
Repair Applier
==============
Writes one repaired file to disk, keeping a restorable copy of the original.

Order of operations (crash safety):
    1. new == original → no-op, returns None
    2. write original to <path>.backup.<time_ns>
    3. write new content to a sibling temp file with the original mode bits
    4. os.replace() the temp file over the original

If step 2 fails the live file is never touched. If steps 3–4 fail the
temp file is removed and the live file keeps its original content.
Either failure raises RepairApplyError.
"""
import os
import shutil
import time
import logging
from typing import Optional

from app.core.constants import BACKUP_INFIX
from app.core.errors import RepairApplyError
from app.models.repair_record import RepairRecord

logger = logging.getLogger(__name__)


class RepairApplier:

    def apply(
        self,
        file_path: str,
        new_content: str,
        original_content: str,
        message: str = "",
        display_path: str = "",
        strategy: str = "",
        rule: Optional[str] = None,
    ) -> Optional[RepairRecord]:
        """
        Replace ``file_path`` with ``new_content`` after backing it up.

        Parameters
        ----------
        file_path : str
            Absolute path of the file on disk.
        new_content : str
            Repaired content.
        original_content : str
            Content the repair was computed from.
        message : str
            Originating diagnostic message (stored in the record).
        display_path : str
            Path recorded in the RepairRecord (defaults to ``file_path``).
        strategy, rule : str
            How the repair was produced.

        Returns
        -------
        RepairRecord | None
            None if the content is unchanged.

        Raises
        ------
        RepairApplyError
            Backup or overwrite failed; the live file is unchanged.
        """
        if new_content == original_content:
            return None

        backup_path = self._backup_path(file_path)
        try:
            with open(backup_path, "x", encoding="utf-8", newline="") as f:
                f.write(original_content)
        except OSError as e:
            logger.error("Backup of %s failed, skipping repair: %s", file_path, e)
            raise RepairApplyError(file_path, f"backup failed: {e}") from e

        tmp_path = f"{file_path}.tmp.{os.getpid()}"
        try:
            with open(tmp_path, "w", encoding="utf-8", newline="") as f:
                f.write(new_content)
            shutil.copymode(file_path, tmp_path)
            os.replace(tmp_path, file_path)
        except OSError as e:
            logger.error("Overwrite of %s failed, original kept: %s", file_path, e)
            try:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
            except OSError:
                logger.warning("Could not remove temp file %s", tmp_path, exc_info=True)
            raise RepairApplyError(file_path, f"overwrite failed: {e}") from e

        logger.info("Repaired %s (backup: %s)", display_path or file_path, backup_path)
        return RepairRecord(
            file=display_path or file_path,
            message=message,
            backup_path=backup_path,
            strategy=strategy,
            rule=rule,
        )

    @staticmethod
    def _backup_path(file_path: str) -> str:
        """<path>.backup.<time_ns>, suffixed -1, -2, ... if that name is taken."""
        base = f"{file_path}{BACKUP_INFIX}{time.time_ns()}"
        candidate = base
        n = 0
        while os.path.exists(candidate):
            n += 1
            candidate = f"{base}-{n}"
        return candidate
