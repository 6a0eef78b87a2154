"""Rule engine: rule model, catalog validation and scheduling."""

from .configuration import validate_rule_configuration
from .models import (
    BagValidatorRule,
    DepositType,
    NumberedRule,
    RuleEvaluation,
    RuleEvaluationStatus,
    RuleResult,
    RuleResultStatus,
    ValidationContext,
    ValidationLevel,
    numbered_rule,
)
from .rule_engine import RuleEngine

__all__ = [
    "BagValidatorRule",
    "DepositType",
    "NumberedRule",
    "RuleEngine",
    "RuleEvaluation",
    "RuleEvaluationStatus",
    "RuleResult",
    "RuleResultStatus",
    "ValidationContext",
    "ValidationLevel",
    "numbered_rule",
    "validate_rule_configuration",
]
