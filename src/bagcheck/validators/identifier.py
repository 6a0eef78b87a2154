"""Check digit validation for DAI, ORCID and ISNI person identifiers."""

import logging
import re
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

DAI_PREFIX = "info:eu-repo/dai/nl/"
ORCID_DOMAINS = frozenset({"orcid.org", "www.orcid.org"})
ISNI_DOMAINS = frozenset({"isni.org", "www.isni.org"})
DIGITS = re.compile(r"[0-9]+")


def _check_character(check: int) -> str:
    return "X" if check == 10 else str(check)


def _host_and_path(value: str) -> tuple[str | None, str]:
    """Split a URI into host and path; plain identifiers have no host."""
    try:
        parsed = urlparse(value)
        return parsed.hostname, parsed.path
    except ValueError:
        return None, value


def dai_check_digit(digits: str) -> str:
    """Compute the DAI check character for a string of digits.

    Digits are weighted from the right with the repeating sequence 2..9.
    """
    total = sum(
        int(digit) * (index % 8 + 2)
        for index, digit in enumerate(reversed(digits))
    )
    return _check_character((11 - total % 11) % 11)


def mod11_2_check_digit(digits: str) -> str:
    """Compute the ISO 7064 MOD 11-2 check character used by ORCID and ISNI."""
    total = 0
    for digit in digits:
        total = (total + int(digit)) * 2
    return _check_character((12 - total % 11) % 11)


def is_valid_mod11_2(value: str) -> bool:
    if len(value) != 16 or not DIGITS.fullmatch(value[:15]):
        return False
    return mod11_2_check_digit(value[:15]) == value[15].upper()


class IdentifierValidator:
    """Validates person identifiers found in dataset.xml.

    All methods return False for malformed input instead of raising.
    """

    def validate_dai(self, value: str) -> bool:
        identifier = value.strip()
        if identifier.startswith(DAI_PREFIX):
            identifier = identifier[len(DAI_PREFIX):]

        # no fixed length, so nine digit DAIs such as 123456789 are accepted
        if len(identifier) < 2 or not DIGITS.fullmatch(identifier[:-1]):
            return False

        return dai_check_digit(identifier[:-1]) == identifier[-1].upper()

    def validate_orcid(self, value: str) -> bool:
        identifier = value.strip()
        host, path = _host_and_path(identifier)

        if host is not None:
            if host not in ORCID_DOMAINS:
                logger.debug(f"ORCID {value} has unrecognized host {host}")
                return False
            identifier = path[1:]

        return is_valid_mod11_2(identifier.replace("-", ""))

    def validate_isni(self, value: str) -> bool:
        identifier = value.strip()
        host, path = _host_and_path(identifier)

        if host is not None:
            if host not in ISNI_DOMAINS:
                logger.debug(f"ISNI {value} has unrecognized host {host}")
                return False
            identifier = path.replace("/isni/", "", 1)

        return is_valid_mod11_2(re.sub(r"[\s-]", "", identifier))
