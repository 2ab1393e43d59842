"""
Diagnostic Model
================
Pydantic model for one normalized build/lint problem.
This is the contract between the diagnostic parser and everything downstream.

Fields:
    file            — path relative to the build root, as the tool printed it
    line            — 1-based line number
    column          — 1-based column number
    message         — raw tool message
    rule_id         — lint rule name; None for type-checker output
    severity        — error / warning
    source_format   — which parse branch produced the record

Identity:
    Two diagnostics are the same occurrence when file, line and message are
    equal. Column and rule_id are excluded: a repair elsewhere on the line
    can shift the column without touching the defect.
"""
from enum import Enum
from typing import Optional, Tuple
from pydantic import BaseModel


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class SourceFormat(str, Enum):
    LINT = "lint"
    TYPE_CHECKER = "type-checker"


class Diagnostic(BaseModel):
    file: str
    line: int
    column: int = 1
    message: str
    rule_id: Optional[str] = None
    severity: Severity = Severity.ERROR
    source_format: SourceFormat = SourceFormat.LINT

    @property
    def identity(self) -> Tuple[str, int, str]:
        return (self.file, self.line, self.message)

    @property
    def location(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"
