"""Pure validators used by rule bodies."""

from .identifier import IdentifierValidator
from .license import LicenseValidator, normalize_license
from .polygon import PolygonValidationResult, validate_polygon_list
from .prefix import OrganizationIdentifierPrefixValidator

__all__ = [
    "IdentifierValidator",
    "LicenseValidator",
    "OrganizationIdentifierPrefixValidator",
    "PolygonValidationResult",
    "normalize_license",
    "validate_polygon_list",
]
