"""Rule execution engine.

Evaluates the rules that apply to a request in rounds: each round skips rules
whose dependencies failed or were skipped, executes rules whose dependencies
all succeeded, and defers the rest until a later round.
"""

import logging
from collections.abc import Sequence
from pathlib import Path

from ..exceptions import RuleEngineStateError
from .models import (
    DepositType,
    NumberedRule,
    RuleEvaluation,
    RuleEvaluationStatus,
    RuleResult,
    RuleResultStatus,
    ValidationLevel,
)

logger = logging.getLogger(__name__)


class RuleEngine:
    """Scheduler for a validated rule catalog."""

    def validate_rules(
        self,
        bag_dir: Path,
        rules: Sequence[NumberedRule],
        deposit_type: DepositType,
        level: ValidationLevel,
    ) -> list[RuleEvaluation]:
        """Evaluate the applicable rules against a bag.

        Args:
            bag_dir: Root directory of the bag
            rules: Validated rule catalog
            deposit_type: Package variant of the request
            level: Validation context of the request

        Returns:
            One RuleEvaluation per applicable rule, in catalog order

        Raises:
            RuleEngineStateError: If a round makes no progress
        """
        active = [rule for rule in rules if rule.applies_to(deposit_type, level)]

        logger.info(f"Validating {bag_dir} as {deposit_type.value} ({level.value})")
        logger.info(f"Running {len(active)} of {len(rules)} rules")

        evaluations: dict[str, RuleEvaluation] = {}
        skip_dependents: set[str] = set()
        remaining = list(active)

        while remaining:
            resolved = []

            for rule in remaining:
                if self._must_skip(rule, evaluations, skip_dependents):
                    logger.debug(f"Skipping rule {rule.number}")
                    evaluations[rule.number] = RuleEvaluation.skipped(rule.number)
                    resolved.append(rule)
                elif self._can_execute(rule, evaluations):
                    logger.debug(f"Executing rule {rule.number}")
                    result = self._execute(rule, bag_dir)
                    evaluations[rule.number] = self._to_evaluation(rule, result)
                    if result.status == RuleResultStatus.SKIP_DEPENDENCIES:
                        skip_dependents.add(rule.number)
                    resolved.append(rule)

            if not resolved:
                unresolved = [rule.number for rule in remaining]
                logger.error(f"No progress evaluating rules, unreachable: {unresolved}")
                raise RuleEngineStateError(unresolved)

            resolved_ids = {id(rule) for rule in resolved}
            remaining = [rule for rule in remaining if id(rule) not in resolved_ids]

        results = [evaluations[rule.number] for rule in active]
        failures = sum(1 for e in results if e.status == RuleEvaluationStatus.FAILURE)
        logger.info(f"Validation of {bag_dir} completed with {failures} failed rules")

        return results

    @staticmethod
    def _must_skip(rule: NumberedRule, evaluations: dict[str, RuleEvaluation], skip_dependents: set[str]) -> bool:
        for dependency in rule.dependencies:
            if dependency in skip_dependents:
                return True
            evaluation = evaluations.get(dependency)
            if evaluation and evaluation.status in (RuleEvaluationStatus.FAILURE, RuleEvaluationStatus.SKIPPED):
                return True
        return False

    @staticmethod
    def _can_execute(rule: NumberedRule, evaluations: dict[str, RuleEvaluation]) -> bool:
        return all(
            dependency in evaluations and evaluations[dependency].status == RuleEvaluationStatus.SUCCESS
            for dependency in rule.dependencies
        )

    @staticmethod
    def _execute(rule: NumberedRule, bag_dir: Path) -> RuleResult:
        try:
            return rule.rule(bag_dir)
        except Exception as e:
            logger.exception(f"Rule {rule.number} failed with error: {e}")
            return RuleResult.error(str(e) or type(e).__name__, e)

    @staticmethod
    def _to_evaluation(rule: NumberedRule, result: RuleResult) -> RuleEvaluation:
        if result.status == RuleResultStatus.ERROR:
            message = "\n".join(result.messages) or f"Rule {rule.number} failed"
            logger.debug(f"Rule {rule.number} failed: {message}")
            return RuleEvaluation.failure(rule.number, message)
        return RuleEvaluation.success(rule.number)
