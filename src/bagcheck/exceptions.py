"""Exception types raised by bagcheck."""


class BagcheckError(Exception):
    """Base class for all bagcheck errors."""


class RuleEngineConfigurationError(BagcheckError):
    """The rule catalog is inconsistent; raised before any bag is validated."""

    def __init__(self, problems: list[str]):
        self.problems = list(problems)
        super().__init__("Rule configuration is invalid:\n" + "\n".join(f" - {p}" for p in self.problems))


class RuleEngineStateError(BagcheckError):
    """A validation round resolved no rules, leaving the given numbers unreachable."""

    def __init__(self, unresolved: list[str]):
        self.unresolved = list(unresolved)
        super().__init__(f"Rules could not be resolved: {', '.join(self.unresolved)}")


class BagNotFoundError(BagcheckError):
    """The bag location does not exist or cannot be read."""


class DataverseError(BagcheckError):
    """A request to the data station failed."""


class DataverseNotFoundError(DataverseError):
    """The data station reported that a requested resource does not exist."""
