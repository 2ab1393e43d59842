"""
LLM Prompts
===========
Prompt text for generative compilation repairs.

Prompt Design Rules:
    - Fix only the reported diagnostic
    - Keep component behaviour unchanged
    - Return the COMPLETE file body, not a diff
    - No explanations, no markdown fences: the reply is written to disk as-is
"""
from app.models.diagnostic import Diagnostic


SYSTEM_PROMPT = (
    "You are an expert TypeScript and React developer repairing a component that "
    "was generated from a legacy JSP page and now fails the Next.js build.\n"
    "\n"
    "HARD RULES — you MUST follow ALL of these:\n"
    "1. Fix ONLY the reported compilation or lint error.\n"
    "2. Keep the component's behaviour and markup unchanged.\n"
    "3. Follow TypeScript and React best practices.\n"
    "4. Keep the existing formatting and comments.\n"
    "5. Return the COMPLETE repaired file content and nothing else.\n"
    "6. Do NOT add explanations or markdown code fences."
)


def extract_snippet(content: str, line_number: int, context: int = 3) -> str:
    """
    Extract ±context lines around ``line_number`` with line numbers prefixed.

    The reported line is marked with ``>>>``.
    """
    lines = content.splitlines()
    if not lines:
        return ""

    idx = max(0, min(line_number - 1, len(lines) - 1))
    start = max(0, idx - context)
    end = min(len(lines), idx + context + 1)

    snippet_lines: list[str] = []
    for i in range(start, end):
        line_num = i + 1
        prefix = ">>>" if line_num == line_number else "   "
        snippet_lines.append(f"{prefix} {line_num:4} | {lines[i]}")

    return "\n".join(snippet_lines)


def build_fix_prompt(diagnostic: Diagnostic, file_content: str) -> str:
    """
    Build the repair prompt for one diagnostic.

    Parameters
    ----------
    diagnostic : Diagnostic
        The problem to repair.
    file_content : str
        Current on-disk content of ``diagnostic.file``.

    Returns
    -------
    str
        Prompt asking for the complete repaired file.
    """
    parts: list[str] = [SYSTEM_PROMPT]

    parts.append(
        "ERROR:\n"
        f"File: {diagnostic.file}\n"
        f"Location: line {diagnostic.line}, column {diagnostic.column}\n"
        f"Message: {diagnostic.message}"
    )
    if diagnostic.rule_id:
        parts.append(f"RULE: {diagnostic.rule_id}")

    parts.append(f"ERROR CONTEXT:\n{extract_snippet(file_content, diagnostic.line)}")
    parts.append(f"FULL FILE CONTENT:\n```typescript\n{file_content}\n```")
    parts.append("Repaired complete file content:")

    return "\n\n".join(parts)
