"""Organizational identifier prefix validation."""

from ..config import OtherIdPrefix


class OrganizationIdentifierPrefixValidator:
    """Checks that a user only deposits identifiers with one of their configured prefixes."""

    def __init__(self, other_id_prefixes: list[OtherIdPrefix]):
        self.other_id_prefixes = list(other_id_prefixes)

    def has_valid_prefix(self, user: str, identifier: str) -> bool:
        return any(
            user == prefix.user and identifier.startswith(prefix.prefix)
            for prefix in self.other_id_prefixes
        )
