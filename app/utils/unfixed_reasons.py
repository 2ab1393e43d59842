"""
Unfixed Reasons
===============
Standardised constants for why a diagnostic was not repaired.

Used by UnfixedDiagnostic.reason so the session report gives clean,
machine-readable reasons.
"""


# ---------------------------------------------------------------------------
# Unfixed Reason Constants
# ---------------------------------------------------------------------------
NO_CHANGE = "NO_CHANGE"
NO_MATCHING_RULE = "NO_MATCHING_RULE"
GENERATION_FAILED = "GENERATION_FAILED"
READ_FAILED = "READ_FAILED"
APPLY_FAILED = "APPLY_FAILED"
OUT_OF_SCOPE = "OUT_OF_SCOPE"

ALL_UNFIXED_REASONS = frozenset({
    NO_CHANGE,
    NO_MATCHING_RULE,
    GENERATION_FAILED,
    READ_FAILED,
    APPLY_FAILED,
    OUT_OF_SCOPE,
})
