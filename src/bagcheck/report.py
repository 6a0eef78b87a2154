"""Validation report returned to API and CLI callers."""

from dataclasses import dataclass, field
from typing import Any

from .engine.models import DepositType, RuleEvaluation, RuleEvaluationStatus


@dataclass
class RuleViolation:
    """A failed rule and its message."""
    rule: str
    violation: str

    def to_dict(self) -> dict[str, str]:
        return {"rule": self.rule, "violation": self.violation}


@dataclass
class ValidationReport:
    """Outcome of validating one bag."""
    bag_location: str
    name: str
    info_package_type: DepositType
    profile_version: str
    rule_violations: list[RuleViolation] = field(default_factory=list)
    evaluations: list[RuleEvaluation] = field(default_factory=list)  # Every applicable rule, in catalog order

    @property
    def is_compliant(self) -> bool:
        return not self.rule_violations

    @classmethod
    def from_evaluations(
        cls,
        bag_location: str,
        name: str,
        info_package_type: DepositType,
        profile_version: str,
        evaluations: list[RuleEvaluation],
    ) -> "ValidationReport":
        violations = [
            RuleViolation(evaluation.number, evaluation.message or "")
            for evaluation in evaluations
            if evaluation.status == RuleEvaluationStatus.FAILURE
        ]
        return cls(bag_location, name, info_package_type, profile_version, violations, list(evaluations))

    def count(self, status: RuleEvaluationStatus) -> int:
        return sum(1 for evaluation in self.evaluations if evaluation.status == status)

    def to_dict(self) -> dict[str, Any]:
        return {
            "bagLocation": self.bag_location,
            "name": self.name,
            "profileVersion": self.profile_version,
            "infoPackageType": self.info_package_type.value,
            "isCompliant": self.is_compliant,
            "ruleViolations": [violation.to_dict() for violation in self.rule_violations],
        }
