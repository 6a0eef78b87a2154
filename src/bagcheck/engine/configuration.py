"""Static consistency checks for a rule catalog.

Runs once when the catalog is loaded. Every problem found is collected and
reported together in a single RuleEngineConfigurationError.
"""

import itertools
import logging
from collections.abc import Sequence

from ..exceptions import RuleEngineConfigurationError
from .models import REQUEST_DEPOSIT_TYPES, DepositType, NumberedRule, ValidationLevel

logger = logging.getLogger(__name__)


def _deposit_types_overlap(first: DepositType, second: DepositType) -> bool:
    if DepositType.ALL in (first, second):
        return True
    return first == second


def find_duplicate_rules(rules: Sequence[NumberedRule]) -> list[str]:
    """Return problems for numbers shared by rules with overlapping variants."""
    groups: dict[str, list[NumberedRule]] = {}
    for rule in rules:
        groups.setdefault(rule.number, []).append(rule)

    problems = []
    for number, group in groups.items():
        if len(group) < 2:
            continue

        overlapping = any(
            _deposit_types_overlap(a.deposit_type, b.deposit_type)
            for a, b in itertools.combinations(group, 2)
        )
        if overlapping:
            types = ", ".join(rule.deposit_type.value for rule in group)
            problems.append(f"Duplicate rule number {number} with overlapping deposit types ({types})")

    return problems


def find_unresolved_dependencies(rules: Sequence[NumberedRule]) -> list[str]:
    """Return problems for rules depending on numbers not active alongside them.

    The check runs for every deposit type and validation level combination, so a
    dependency restricted to one variant only satisfies dependents that are
    restricted to that same variant.
    """
    failures: dict[str, list[str]] = {}

    for deposit_type, level in itertools.product(REQUEST_DEPOSIT_TYPES, ValidationLevel):
        active = [rule for rule in rules if rule.applies_to(deposit_type, level)]
        active_numbers = {rule.number for rule in active}

        for rule in active:
            missing = [dep for dep in rule.dependencies if dep not in active_numbers]
            if missing:
                combination = f"{deposit_type.value}/{level.value}"
                failures.setdefault(rule.number, []).append(f"{combination} missing {', '.join(missing)}")

    return [
        f"Rule {number} has unresolved dependencies: {'; '.join(details)}"
        for number, details in failures.items()
    ]


def validate_rule_configuration(rules: Sequence[NumberedRule]) -> None:
    """Validate a rule catalog.

    Args:
        rules: The complete, ordered rule catalog

    Raises:
        RuleEngineConfigurationError: Listing every duplicate and unresolved dependency
    """
    problems = find_duplicate_rules(rules) + find_unresolved_dependencies(rules)

    if problems:
        for problem in problems:
            logger.error(problem)
        raise RuleEngineConfigurationError(problems)

    logger.debug(f"Rule configuration with {len(rules)} rules is valid")
