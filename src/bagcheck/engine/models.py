"""Core types of the rule engine: applicability tags, rule outcomes and verdicts."""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class DepositType(str, Enum):
    """Package variant a rule applies to; ALL means unrestricted."""
    DEPOSIT = "DEPOSIT"
    MIGRATION = "MIGRATION"
    ALL = "ALL"


class ValidationContext(str, Enum):
    """Validation context a rule applies to; ALWAYS means unrestricted."""
    ALWAYS = "ALWAYS"
    STAND_ALONE = "STAND_ALONE"
    WITH_DATA_STATION_CONTEXT = "WITH_DATA_STATION_CONTEXT"


class ValidationLevel(str, Enum):
    """Validation context requested by a caller."""
    STAND_ALONE = "STAND_ALONE"
    WITH_DATA_STATION_CONTEXT = "WITH_DATA_STATION_CONTEXT"


# Variants a request may ask for
REQUEST_DEPOSIT_TYPES = (DepositType.DEPOSIT, DepositType.MIGRATION)


class RuleResultStatus(str, Enum):
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"
    SKIP_DEPENDENCIES = "SKIP_DEPENDENCIES"


@dataclass(frozen=True)
class RuleResult:
    """Outcome of executing a single rule body."""
    status: RuleResultStatus
    messages: tuple[str, ...] = ()
    exception: BaseException | None = None

    @classmethod
    def ok(cls) -> "RuleResult":
        return cls(RuleResultStatus.SUCCESS)

    @classmethod
    def error(cls, messages: str | list[str], exception: BaseException | None = None) -> "RuleResult":
        if isinstance(messages, str):
            messages = [messages]
        return cls(RuleResultStatus.ERROR, tuple(messages), exception)

    @classmethod
    def skip_dependencies(cls) -> "RuleResult":
        """Success for this rule, but every dependent rule must be skipped."""
        return cls(RuleResultStatus.SKIP_DEPENDENCIES)


BagValidatorRule = Callable[[Path], RuleResult]


@dataclass(frozen=True)
class NumberedRule:
    """A rule body registered under a requirement number with its applicability."""
    number: str
    rule: BagValidatorRule = field(compare=False)
    dependencies: tuple[str, ...] = ()
    deposit_type: DepositType = DepositType.ALL
    context: ValidationContext = ValidationContext.ALWAYS

    def applies_to(self, deposit_type: DepositType, level: ValidationLevel) -> bool:
        """Check whether this rule is active for a request."""
        type_matches = self.deposit_type in (DepositType.ALL, deposit_type)
        context_matches = (
            self.context == ValidationContext.ALWAYS
            or self.context.value == level.value
        )
        return type_matches and context_matches


def numbered_rule(
    number: str,
    rule: BagValidatorRule,
    *dependencies: str,
    deposit_type: DepositType = DepositType.ALL,
    context: ValidationContext = ValidationContext.ALWAYS,
) -> NumberedRule:
    """Shorthand used by the catalog: ``numbered_rule("2.2(a)", body, "2.1")``."""
    return NumberedRule(number, rule, tuple(dependencies), deposit_type, context)


class RuleEvaluationStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    SKIPPED = "SKIPPED"


@dataclass(frozen=True)
class RuleEvaluation:
    """Final verdict for one in-scope rule after scheduling."""
    number: str
    status: RuleEvaluationStatus
    message: str | None = None

    @classmethod
    def success(cls, number: str) -> "RuleEvaluation":
        return cls(number, RuleEvaluationStatus.SUCCESS)

    @classmethod
    def failure(cls, number: str, message: str) -> "RuleEvaluation":
        return cls(number, RuleEvaluationStatus.FAILURE, message)

    @classmethod
    def skipped(cls, number: str) -> "RuleEvaluation":
        return cls(number, RuleEvaluationStatus.SKIPPED)

    def to_dict(self) -> dict:
        return {
            "rule": self.number,
            "status": self.status.value,
            "message": self.message,
        }
