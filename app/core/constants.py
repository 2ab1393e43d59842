"""
Constants
Centralised storage for diagnostic parsing limits, repair strategy names and backup naming.
"""
# Lines scanned after a lint-style file header looking for its detail lines
LOOKAHEAD_LINES = 10

TYPE_ERROR_PREFIX = "Type error:"
SOURCE_EXTENSIONS = ("ts", "tsx", "js", "jsx")

BACKUP_INFIX = ".backup."

STRATEGY_GENERATIVE = "generative"
STRATEGY_RULE = "rule"

STOP_SUCCESS = "success"
STOP_NO_DIAGNOSTICS = "no_diagnostics"
STOP_STALLED = "stalled"
STOP_BUDGET_EXHAUSTED = "budget_exhausted"
