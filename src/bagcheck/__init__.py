"""bagcheck - Rule based validator for DANS deposit bags.

bagcheck verifies BagIt packages against the DANS bag profile: directory
layout, bag-info fields, XML schema conformance, identifier checksums,
geometry and licensing, optionally enriched with data station lookups.
"""

__version__ = "0.1.0"
__author__ = "bagcheck developers"
__description__ = "Rule based validator for DANS deposit bags"

from bagcheck.config import BagcheckConfig

__all__ = [
    "__version__",
    "__author__",
    "__description__",
    "BagcheckConfig",
]
