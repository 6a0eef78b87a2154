"""License URI checks against the supported list and the data station."""

import logging
import re
from collections.abc import Iterable
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

_TRAILING_SLASHES = re.compile(r"/+$")


def normalize_license(license_uri: str) -> str:
    """Strip surrounding whitespace and trailing slashes."""
    return _TRAILING_SLASHES.sub("", license_uri.strip())


class LicenseValidator:
    """Validates license URIs against a fixed list of supported licenses."""

    def __init__(self, licenses: Iterable[str]):
        self.licenses = frozenset(normalize_license(uri) for uri in licenses)

    def is_valid_uri(self, license_uri: str) -> bool:
        try:
            parsed = urlparse(license_uri.strip())
        except ValueError:
            logger.debug(f"URI syntax error for uri {license_uri}")
            return False
        return bool(parsed.scheme) and not any(c.isspace() for c in license_uri.strip())

    def is_valid_license(self, license_uri: str) -> bool:
        return normalize_license(license_uri) in self.licenses

    @staticmethod
    def is_active_in(license_uri: str, data_station_licenses: list[dict]) -> bool:
        """Check a license against the active licenses reported by the data station."""
        active = {
            normalize_license(item["uri"])
            for item in data_station_licenses
            if item.get("active") and item.get("uri")
        }
        normalized = normalize_license(license_uri)
        logger.debug(f"Normalized license from {license_uri} to {normalized}")
        return normalized in active
