"""
Repair Record Model
===================
Audit entry for one applied repair. Created by the RepairApplier right after
the live file was replaced; never mutated afterwards.

Fields:
    file            — diagnostic file path (as reported by the build tool)
    message         — message of the diagnostic that triggered the repair
    backup_path     — absolute path of the pre-repair copy
    strategy        — "generative" or "rule"
    rule            — RepairRule name when strategy == "rule"
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict


class RepairRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    file: str
    message: str
    backup_path: str
    strategy: str = ""
    rule: Optional[str] = None
