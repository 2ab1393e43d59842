"""
Diagnostic Parser
=================
Converts raw build output into normalized Diagnostic records.

A Next.js build interleaves two diagnostic grammars in one stream:

    Lint-style (next lint / eslint):
        ./src/components/Create.tsx
        2:18  Error: 'screen' is defined but never used.  @typescript-eslint/no-unused-vars
        5:3  Warning: Unexpected any. Specify a different type.  @typescript-eslint/no-explicit-any

    Type-checker-style (tsc):
        ./src/components/Create.tsx:1:8
        Type error: Duplicate identifier 'React'.

Each grammar has its own tagged branch. A new grammar gets a new branch,
not a more general regex.

Contract:
    - DETERMINISTIC: same output → same diagnostics, in discovery order.
    - No LLM allowed in this layer.
    - Tolerant: unparseable lines are skipped, never raises.
    - No de-duplication: the stall check compares multisets.
"""
import re
import logging
from typing import Optional

from app.core.constants import LOOKAHEAD_LINES, SOURCE_EXTENSIONS, TYPE_ERROR_PREFIX
from app.models.diagnostic import Diagnostic, Severity, SourceFormat

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------
_ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")

_EXT = "|".join(SOURCE_EXTENSIONS)

# A line that is nothing but a source file path
_LINT_HEADER = re.compile(rf"^(\S.*\.(?:{_EXT}))$")

# 2:18  Error: 'screen' is defined but never used.  @typescript-eslint/no-unused-vars
_LINT_DETAIL = re.compile(
    r"^\s*(\d+):(\d+)\s+(Error|Warning):\s+(.+?)\s+(@?[\w-]+(?:/[\w-]+)*)\s*$"
)

# ./src/components/Create.tsx:1:8
_TYPE_LOCATION = re.compile(rf"^(\S.*\.(?:{_EXT})):(\d+):(\d+)$")


def _clean(line: str) -> str:
    """Strip colour escapes and trailing whitespace / carriage returns."""
    return _ANSI_ESCAPE.sub("", line).rstrip()


# ---------------------------------------------------------------------------
# Lint-style branch
# ---------------------------------------------------------------------------
def _parse_lint_block(lines: list[str], header_index: int) -> list[Diagnostic]:
    """Collect detail lines following the file header at ``header_index``."""
    file_path = lines[header_index]
    found: list[Diagnostic] = []

    end = min(len(lines), header_index + 1 + LOOKAHEAD_LINES)
    for j in range(header_index + 1, end):
        detail = lines[j]
        m = _LINT_DETAIL.match(detail)
        if m:
            line_num, col_num, severity, message, rule = m.groups()
            found.append(Diagnostic(
                file=file_path,
                line=int(line_num),
                column=int(col_num),
                message=message.strip(),
                rule_id=rule,
                severity=Severity(severity.lower()),
                source_format=SourceFormat.LINT,
            ))
            continue

        if not detail.strip() or _LINT_HEADER.match(detail) or _TYPE_LOCATION.match(detail):
            break

    return found


# ---------------------------------------------------------------------------
# Type-checker-style branch
# ---------------------------------------------------------------------------
def _parse_type_error(lines: list[str], index: int) -> Optional[Diagnostic]:
    """Pair a ``file:line:col`` line with the ``Type error:`` line right after it."""
    m = _TYPE_LOCATION.match(lines[index])
    if not m or index + 1 >= len(lines):
        return None

    next_line = lines[index + 1].lstrip()
    if not next_line.startswith(TYPE_ERROR_PREFIX):
        return None

    file_path, line_num, col_num = m.groups()
    return Diagnostic(
        file=file_path,
        line=int(line_num),
        column=int(col_num),
        message=next_line[len(TYPE_ERROR_PREFIX):].strip(),
        rule_id=None,
        severity=Severity.ERROR,
        source_format=SourceFormat.TYPE_CHECKER,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def parse_diagnostics(raw_output: str) -> list[Diagnostic]:
    """
    Parse combined build output into Diagnostic records.

    Parameters
    ----------
    raw_output : str
        Combined stdout + stderr of one build invocation.

    Returns
    -------
    list[Diagnostic]
        Diagnostics in discovery order. Empty list if nothing matched.
        Never raises.
    """
    if not raw_output or not raw_output.strip():
        return []

    diagnostics: list[Diagnostic] = []
    lines = [_clean(line) for line in raw_output.splitlines()]

    for i, line in enumerate(lines):
        try:
            if _LINT_HEADER.match(line):
                diagnostics.extend(_parse_lint_block(lines, i))
                continue

            type_error = _parse_type_error(lines, i)
            if type_error is not None:
                diagnostics.append(type_error)
        except Exception as e:
            logger.warning("Skipping unparseable line %d: %s", i + 1, e, exc_info=True)

    logger.info(
        "Parsed %d diagnostic(s) from build output (%d lines)",
        len(diagnostics), len(lines),
    )
    return diagnostics
