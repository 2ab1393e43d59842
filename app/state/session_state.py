"""
Session State
Mutable state of one repair session. Owned by a single ConvergenceController.run()
call: created when the run starts, dropped when it returns.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from app.models.diagnostic import Diagnostic
from app.models.repair_record import RepairRecord
from app.models.session_report import UnfixedDiagnostic
from app.utils.unfixed_reasons import ALL_UNFIXED_REASONS, NO_CHANGE

logger = logging.getLogger(__name__)


@dataclass
class SessionState:
    attempts: int = 0
    previous_diagnostics: Optional[List[Diagnostic]] = None
    fixed_files: List[RepairRecord] = field(default_factory=list)
    # Keyed by Diagnostic.identity; a later round overwrites the earlier reason
    unfixed: Dict[Tuple[str, int, str], UnfixedDiagnostic] = field(default_factory=dict)

    def record_fixed(self, record: RepairRecord, diagnostic: Optional[Diagnostic] = None) -> None:
        self.fixed_files.append(record)
        if diagnostic is not None:
            self.unfixed.pop(diagnostic.identity, None)

    def record_unfixed(self, diagnostic: Diagnostic, reason: str, detail: str = "") -> None:
        if reason not in ALL_UNFIXED_REASONS:
            # unknown reasons from an injected selector are kept as detail
            logger.warning("Unknown unfixed reason %r for %s", reason, diagnostic.location)
            detail = f"{reason}: {detail}" if detail else str(reason)
            reason = NO_CHANGE

        key = diagnostic.identity
        # pop first so the entry moves to the end (latest attempt order)
        self.unfixed.pop(key, None)
        self.unfixed[key] = UnfixedDiagnostic(diagnostic=diagnostic, reason=reason, detail=detail)

    def unfixed_list(self) -> List[UnfixedDiagnostic]:
        return list(self.unfixed.values())
