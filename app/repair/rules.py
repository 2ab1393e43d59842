"""
Repair Rules
============
Deterministic, non-generative repairs for the diagnostics a generated
React / Next.js component most often trips over.

Each rule is a pure function (diagnostic, content) -> content. Rules that
work on the reported line keep the line count unchanged, so line numbers of
later diagnostics in the same round stay valid.

Dispatch:
    1. rule_id match (lint-style diagnostics)
    2. message substring match (type-checker diagnostics have no rule id)
    3. no match → None, the caller reports the diagnostic as unfixed

Exactly one rule fires per diagnostic.
"""
import re
import logging
from enum import Enum
from typing import Callable, Optional

from app.models.diagnostic import Diagnostic

logger = logging.getLogger(__name__)


class RepairRule(str, Enum):
    UNUSED_IMPORT = "unused_import"
    EXPLICIT_ANY = "explicit_any"
    UNESCAPED_ENTITY = "unescaped_entity"
    HEAD_ELEMENT = "head_element"
    DUPLICATE_REACT_IMPORT = "duplicate_react_import"
    DUPLICATE_DEFAULT_EXPORT = "duplicate_default_export"


_RULE_IDS: dict[str, RepairRule] = {
    "@typescript-eslint/no-unused-vars": RepairRule.UNUSED_IMPORT,
    "no-unused-vars": RepairRule.UNUSED_IMPORT,
    "@typescript-eslint/no-explicit-any": RepairRule.EXPLICIT_ANY,
    "react/no-unescaped-entities": RepairRule.UNESCAPED_ENTITY,
    "@next/next/no-head-element": RepairRule.HEAD_ELEMENT,
}


def match_rule(diagnostic: Diagnostic) -> Optional[RepairRule]:
    """Return the single rule that handles ``diagnostic``, or None."""
    if diagnostic.rule_id and diagnostic.rule_id in _RULE_IDS:
        return _RULE_IDS[diagnostic.rule_id]

    message = diagnostic.message
    if "Duplicate identifier 'React'" in message:
        return RepairRule.DUPLICATE_REACT_IMPORT
    if ("Duplicate identifier" in message and "export" in message) \
            or "multiple default exports" in message:
        return RepairRule.DUPLICATE_DEFAULT_EXPORT
    return None


# ---------------------------------------------------------------------------
# Line helpers
# ---------------------------------------------------------------------------
def _replace_line(content: str, line_number: int, transform: Callable[[str], str]) -> str:
    """Apply ``transform`` to one 1-based line; out-of-range lines are left alone."""
    lines = content.split("\n")
    idx = line_number - 1
    if idx < 0 or idx >= len(lines):
        return content
    lines[idx] = transform(lines[idx])
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# UNUSED_IMPORT
# ---------------------------------------------------------------------------
_UNUSED_NAME = re.compile(r"'([\w$]+)' is (?:defined|assigned a value) but never used")
_NAMED_IMPORT = re.compile(r"^(\s*import\s+)(?:([\w$]+)\s*,\s*)?\{([^}]*)\}(\s*from\s+.+)$")


def remove_unused_import(diagnostic: Diagnostic, content: str) -> str:
    m = _UNUSED_NAME.search(diagnostic.message)
    if not m:
        return content
    name = m.group(1)

    def _strip(line: str) -> str:
        im = _NAMED_IMPORT.match(line)
        if not im:
            return line
        prefix, default, named, source = im.groups()
        specifiers = [s.strip() for s in named.split(",") if s.strip()]
        # "useState" and "useState as useLocalState" both bind a single name
        kept = [s for s in specifiers if s.split(" as ")[-1].strip() != name]
        if len(kept) == len(specifiers):
            return line
        if kept:
            head = f"{default}, " if default else ""
            return f"{prefix}{head}{{ {', '.join(kept)} }}{source}"
        if default:
            return f"{prefix}{default}{source}"
        return ""

    return _replace_line(content, diagnostic.line, _strip)


# ---------------------------------------------------------------------------
# EXPLICIT_ANY
# ---------------------------------------------------------------------------
_ANY_ANNOTATION = re.compile(r"(:\s*|\bas\s+|<)any\b")


def narrow_explicit_any(diagnostic: Diagnostic, content: str) -> str:
    return _replace_line(
        content,
        diagnostic.line,
        lambda line: _ANY_ANNOTATION.sub(r"\1unknown", line),
    )


# ---------------------------------------------------------------------------
# UNESCAPED_ENTITY
# ---------------------------------------------------------------------------
# Tags and {expressions} are code; everything between them is JSX text
_JSX_CODE_SEGMENT = re.compile(r"(<[^>]*>|\{[^}]*\})")


def escape_jsx_entities(diagnostic: Diagnostic, content: str) -> str:
    message = diagnostic.message
    escape_double = "`\"`" in message
    escape_single = "`'`" in message
    if not escape_double and not escape_single:
        escape_double = escape_single = True

    def _escape_text(text: str) -> str:
        if escape_double:
            text = text.replace('"', "&quot;")
        if escape_single:
            text = text.replace("'", "&apos;")
        return text

    def _escape(line: str) -> str:
        parts = _JSX_CODE_SEGMENT.split(line)
        # split() with one capture group alternates text, code, text, ...
        return "".join(
            part if i % 2 else _escape_text(part)
            for i, part in enumerate(parts)
        )

    return _replace_line(content, diagnostic.line, _escape)


# ---------------------------------------------------------------------------
# HEAD_ELEMENT
# ---------------------------------------------------------------------------
_HEAD_IMPORT = "import Head from 'next/head';"
_HEAD_IMPORT_RE = re.compile(r"""^\s*import\s+Head\s+from\s+['"]next/head['"]""", re.MULTILINE)
_HEAD_OPEN = re.compile(r"<head(?=[\s>])")
_HEAD_CLOSE = re.compile(r"</head\s*>")


def use_head_component(diagnostic: Diagnostic, content: str) -> str:
    fixed = _HEAD_OPEN.sub("<Head", content)
    fixed = _HEAD_CLOSE.sub("</Head>", fixed)

    if not _HEAD_IMPORT_RE.search(fixed):
        lines = fixed.split("\n")
        react_idx = next(
            (i for i, line in enumerate(lines) if line.startswith("import React")), None
        )
        if react_idx is None:
            import_idxs = [i for i, line in enumerate(lines) if line.startswith("import ")]
            react_idx = import_idxs[-1] if import_idxs else -1
        lines.insert(react_idx + 1, _HEAD_IMPORT)
        fixed = "\n".join(lines)

    return fixed


# ---------------------------------------------------------------------------
# DUPLICATE_REACT_IMPORT
# ---------------------------------------------------------------------------
_REACT_NAMED = re.compile(r"import\s+React\s*,\s*\{([^}]*)\}")


def merge_react_imports(diagnostic: Diagnostic, content: str) -> str:
    lines = content.split("\n")
    react_idxs = [i for i, line in enumerate(lines) if line.strip().startswith("import React")]
    if len(react_idxs) < 2:
        return content

    named: list[str] = []
    for i in react_idxs:
        m = _REACT_NAMED.search(lines[i])
        if m:
            for name in (n.strip() for n in m.group(1).split(",")):
                if name and name not in named:
                    named.append(name)

    if named:
        merged = f"import React, {{ {', '.join(named)} }} from 'react';"
    else:
        merged = "import React from 'react';"

    first = react_idxs[0]
    drop = set(react_idxs[1:])
    out = []
    for i, line in enumerate(lines):
        if i == first:
            out.append(merged)
        elif i not in drop:
            out.append(line)
    return "\n".join(out)


# ---------------------------------------------------------------------------
# DUPLICATE_DEFAULT_EXPORT
# ---------------------------------------------------------------------------
def drop_duplicate_default_exports(diagnostic: Diagnostic, content: str) -> str:
    lines = content.split("\n")
    export_idxs = [i for i, line in enumerate(lines) if line.strip().startswith("export default")]
    if len(export_idxs) < 2:
        return content
    drop = set(export_idxs[:-1])
    return "\n".join(line for i, line in enumerate(lines) if i not in drop)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------
_TRANSFORMS: dict[RepairRule, Callable[[Diagnostic, str], str]] = {
    RepairRule.UNUSED_IMPORT: remove_unused_import,
    RepairRule.EXPLICIT_ANY: narrow_explicit_any,
    RepairRule.UNESCAPED_ENTITY: escape_jsx_entities,
    RepairRule.HEAD_ELEMENT: use_head_component,
    RepairRule.DUPLICATE_REACT_IMPORT: merge_react_imports,
    RepairRule.DUPLICATE_DEFAULT_EXPORT: drop_duplicate_default_exports,
}


def apply_rule(rule: RepairRule, diagnostic: Diagnostic, content: str) -> str:
    """Run one rule. Returns ``content`` unchanged when the rule finds nothing to do."""
    fixed = _TRANSFORMS[rule](diagnostic, content)
    if fixed == content:
        logger.debug("Rule %s made no change at %s", rule.value, diagnostic.location)
    return fixed
