"""Read BagIt structure and bag-info.txt through the LOC bagit library."""

import logging
from pathlib import Path

import bagit

logger = logging.getLogger(__name__)


class BagItMetadataReader:
    """Opens bags with bagit and exposes the fields rule bodies need."""

    def get_bag(self, path: Path) -> bagit.Bag:
        """Open a bag; raises bagit.BagError when it cannot be read."""
        return bagit.Bag(str(path))

    def verify_bag(self, path: Path) -> None:
        """Verify structure, completeness and checksums.

        Raises:
            bagit.BagValidationError: If the bag is not valid
            bagit.BagError: If the bag cannot be opened
        """
        bag = self.get_bag(path)
        bag.validate(processes=1)

    def get_field(self, path: Path, key: str) -> list[str]:
        """Return all bag-info.txt values for a label, matched case-insensitively."""
        bag = self.get_bag(path)
        values: list[str] = []

        for label, value in bag.info.items():
            if label.lower() != key.lower():
                continue
            if isinstance(value, list):
                values.extend(value)
            else:
                values.append(value)

        logger.debug(f"Found {len(values)} values for {key} in {path}")
        return values

    def get_single_field(self, path: Path, key: str) -> str | None:
        values = self.get_field(path, key)
        return values[0] if values else None

    def get_manifest_algorithms(self, path: Path) -> list[str]:
        return list(self.get_bag(path).algorithms)
