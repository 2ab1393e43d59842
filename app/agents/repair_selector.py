"""
Repair Strategy Selector
========================
Chooses how one diagnostic is repaired and produces candidate file content.

Decision policy:
    1. Generative repair when the LLM client is enabled and AI repair is
       switched on: the full file plus the diagnostic go into one prompt,
       the raw reply is the candidate content.
    2. Rule-based repair when the LLM is unavailable, raises anything, or
       replies with nothing: exactly one rule from app.repair.rules, or no change.

The selector does NOT:
    - Write files (that's the RepairApplier's job)
    - Decide whether the session continues (that's the controller's job)

A failed or no-op repair is reported through RepairOutcome.reason, never raised.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from app.core import config
from app.core.constants import STRATEGY_GENERATIVE, STRATEGY_RULE
from app.core.errors import LLMUnavailableError
from app.llm.client import LLMClient
from app.llm.prompts import build_fix_prompt
from app.models.diagnostic import Diagnostic
from app.repair.rules import RepairRule, apply_rule, match_rule
from app.utils.unfixed_reasons import GENERATION_FAILED, NO_CHANGE, NO_MATCHING_RULE

logger = logging.getLogger(__name__)


@dataclass
class RepairOutcome:
    """Candidate content for one diagnostic and how it was produced."""
    content: str
    changed: bool
    strategy: str = ""
    rule: Optional[RepairRule] = None
    reason: str = ""
    detail: str = ""


class RepairStrategySelector:
    """
    Parameters
    ----------
    client : LLMClient or None
        Generative collaborator. None means rule table only.
    use_ai : bool
        Master switch for generative repair (ENABLE_AI_REPAIR).
    """

    def __init__(
        self,
        client: Optional[LLMClient] = None,
        use_ai: bool = config.ENABLE_AI_REPAIR,
    ) -> None:
        self.client = client
        self.use_ai = use_ai

    @property
    def generative_available(self) -> bool:
        return bool(self.use_ai and self.client is not None and self.client.is_enabled)

    async def select_and_repair(self, diagnostic: Diagnostic, content: str) -> RepairOutcome:
        """
        Produce candidate content for ``diagnostic``.

        Parameters
        ----------
        diagnostic : Diagnostic
            The problem to repair.
        content : str
            Current on-disk content of the diagnostic's file.

        Returns
        -------
        RepairOutcome
            ``changed`` is False when no strategy produced different content.
        """
        generation_error = ""
        if self.generative_available:
            try:
                candidate = await self.client.generate(build_fix_prompt(diagnostic, content))
            except LLMUnavailableError as e:
                generation_error = str(e)
                logger.warning(
                    "Generative repair failed for %s, trying rules: %s", diagnostic.location, e
                )
            except Exception as e:
                # any other collaborator failure degrades the same way
                generation_error = f"{type(e).__name__}: {e}"
                logger.error(
                    "Generative repair raised for %s, trying rules: %s",
                    diagnostic.location, e, exc_info=True,
                )
            else:
                if candidate:
                    changed = candidate != content
                    return RepairOutcome(
                        content=candidate,
                        changed=changed,
                        strategy=STRATEGY_GENERATIVE,
                        reason="" if changed else NO_CHANGE,
                    )
                generation_error = "empty response"
                logger.warning("Generative repair returned nothing for %s", diagnostic.location)

        outcome = self._repair_with_rules(diagnostic, content)
        if not outcome.changed and generation_error:
            outcome.reason = GENERATION_FAILED
            outcome.detail = generation_error
        return outcome

    @staticmethod
    def _repair_with_rules(diagnostic: Diagnostic, content: str) -> RepairOutcome:
        rule = match_rule(diagnostic)
        if rule is None:
            logger.info("No repair rule for %s: %s", diagnostic.location, diagnostic.message)
            return RepairOutcome(
                content=content,
                changed=False,
                strategy=STRATEGY_RULE,
                reason=NO_MATCHING_RULE,
            )

        fixed = apply_rule(rule, diagnostic, content)
        changed = fixed != content
        return RepairOutcome(
            content=fixed,
            changed=changed,
            strategy=STRATEGY_RULE,
            rule=rule,
            reason="" if changed else NO_CHANGE,
        )
