"""Unit tests for the round based rule engine."""

from pathlib import Path

import pytest

from bagcheck.engine import (
    DepositType,
    RuleEngine,
    RuleEvaluationStatus,
    RuleResult,
    ValidationContext,
    ValidationLevel,
    numbered_rule,
)
from bagcheck.exceptions import RuleEngineStateError

BAG = Path("/tmp/some-bag")


def ok(path):
    return RuleResult.ok()


def fail(path):
    return RuleResult.error("something is wrong")


def skip(path):
    return RuleResult.skip_dependencies()


def explode(path):
    raise RuntimeError("rule body crashed")


def statuses(evaluations):
    return {e.number: e.status for e in evaluations}


class TestRuleEngine:
    """Test rule scheduling and outcome mapping."""

    @pytest.fixture
    def engine(self):
        return RuleEngine()

    def test_fault_in_rule_skips_dependents_only(self, engine):
        """A raising rule fails, its dependents are skipped, independent rules run."""
        rules = [
            numbered_rule("1.1", ok),
            numbered_rule("1.2", explode),
            numbered_rule("1.3", ok, "1.2"),
            numbered_rule("1.4", ok),
        ]

        result = engine.validate_rules(BAG, rules, DepositType.DEPOSIT, ValidationLevel.STAND_ALONE)

        assert statuses(result) == {
            "1.1": RuleEvaluationStatus.SUCCESS,
            "1.2": RuleEvaluationStatus.FAILURE,
            "1.3": RuleEvaluationStatus.SKIPPED,
            "1.4": RuleEvaluationStatus.SUCCESS,
        }
        assert result[1].message == "rule body crashed"

    def test_results_follow_catalog_order(self, engine):
        """Rules declared before their dependencies still report in catalog order."""
        rules = [
            numbered_rule("2", ok, "1"),
            numbered_rule("1", ok),
        ]

        result = engine.validate_rules(BAG, rules, DepositType.DEPOSIT, ValidationLevel.STAND_ALONE)

        assert [e.number for e in result] == ["2", "1"]
        assert all(e.status == RuleEvaluationStatus.SUCCESS for e in result)

    def test_failure_message_joins_messages(self, engine):
        rules = [numbered_rule("1", lambda path: RuleResult.error(["first", "second"]))]

        result = engine.validate_rules(BAG, rules, DepositType.DEPOSIT, ValidationLevel.STAND_ALONE)

        assert result[0].status == RuleEvaluationStatus.FAILURE
        assert result[0].message == "first\nsecond"

    def test_exception_without_message_uses_class_name(self, engine):
        def raise_bare(path):
            raise KeyError()

        rules = [numbered_rule("1", raise_bare)]

        result = engine.validate_rules(BAG, rules, DepositType.DEPOSIT, ValidationLevel.STAND_ALONE)

        assert result[0].message == "KeyError"

    def test_skip_dependencies_is_success_and_skips_transitively(self, engine):
        rules = [
            numbered_rule("1", skip),
            numbered_rule("2", ok, "1"),
            numbered_rule("3", ok, "2"),
            numbered_rule("4", ok),
        ]

        result = engine.validate_rules(BAG, rules, DepositType.DEPOSIT, ValidationLevel.STAND_ALONE)

        assert statuses(result) == {
            "1": RuleEvaluationStatus.SUCCESS,
            "2": RuleEvaluationStatus.SKIPPED,
            "3": RuleEvaluationStatus.SKIPPED,
            "4": RuleEvaluationStatus.SUCCESS,
        }

    def test_failed_dependency_skips_even_with_other_successes(self, engine):
        rules = [
            numbered_rule("1", ok),
            numbered_rule("2", fail),
            numbered_rule("3", ok, "1", "2"),
        ]

        result = engine.validate_rules(BAG, rules, DepositType.DEPOSIT, ValidationLevel.STAND_ALONE)

        assert statuses(result)["3"] == RuleEvaluationStatus.SKIPPED

    def test_skipped_rules_are_not_executed(self, engine):
        calls = []

        def record(path):
            calls.append(path)
            return RuleResult.ok()

        rules = [numbered_rule("1", fail), numbered_rule("2", record, "1")]

        engine.validate_rules(BAG, rules, DepositType.DEPOSIT, ValidationLevel.STAND_ALONE)

        assert calls == []

    def test_rule_receives_bag_directory(self, engine):
        seen = []
        rules = [numbered_rule("1", lambda path: seen.append(path) or RuleResult.ok())]

        engine.validate_rules(BAG, rules, DepositType.DEPOSIT, ValidationLevel.STAND_ALONE)

        assert seen == [BAG]

    def test_same_number_disjoint_variants_runs_one(self, engine):
        """Exactly one of two same-numbered rules runs for each variant."""
        calls = []

        def track(name):
            def rule(path):
                calls.append(name)
                return RuleResult.ok()
            return rule

        rules = [
            numbered_rule("2.4", track("deposit"), deposit_type=DepositType.DEPOSIT),
            numbered_rule("2.4", track("migration"), deposit_type=DepositType.MIGRATION),
        ]

        deposit = engine.validate_rules(BAG, rules, DepositType.DEPOSIT, ValidationLevel.STAND_ALONE)
        migration = engine.validate_rules(BAG, rules, DepositType.MIGRATION, ValidationLevel.STAND_ALONE)

        assert calls == ["deposit", "migration"]
        assert len(deposit) == 1
        assert len(migration) == 1

    def test_data_station_rules_only_run_with_context(self, engine):
        rules = [
            numbered_rule("1", ok),
            numbered_rule("4.1", ok, "1", context=ValidationContext.WITH_DATA_STATION_CONTEXT),
            numbered_rule("5", ok, context=ValidationContext.STAND_ALONE),
        ]

        stand_alone = engine.validate_rules(BAG, rules, DepositType.DEPOSIT, ValidationLevel.STAND_ALONE)
        with_context = engine.validate_rules(
            BAG, rules, DepositType.DEPOSIT, ValidationLevel.WITH_DATA_STATION_CONTEXT
        )

        assert [e.number for e in stand_alone] == ["1", "5"]
        assert [e.number for e in with_context] == ["1", "4.1"]

    def test_empty_catalog(self, engine):
        assert engine.validate_rules(BAG, [], DepositType.DEPOSIT, ValidationLevel.STAND_ALONE) == []

    def test_unreachable_dependency_raises_state_error(self, engine):
        """A dependency that is never evaluated leaves the engine without progress."""
        rules = [
            numbered_rule("1", ok),
            numbered_rule("2", ok, "missing"),
        ]

        with pytest.raises(RuleEngineStateError) as exc_info:
            engine.validate_rules(BAG, rules, DepositType.DEPOSIT, ValidationLevel.STAND_ALONE)

        assert exc_info.value.unresolved == ["2"]

    def test_dependency_cycle_raises_state_error(self, engine):
        rules = [
            numbered_rule("1", ok, "2"),
            numbered_rule("2", ok, "1"),
        ]

        with pytest.raises(RuleEngineStateError):
            engine.validate_rules(BAG, rules, DepositType.DEPOSIT, ValidationLevel.STAND_ALONE)
