"""Access to original-filepaths.txt, which maps renamed payload files to their original paths."""

import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from .files import FileService

logger = logging.getLogger(__name__)

ORIGINAL_FILEPATHS = "original-filepaths.txt"


@dataclass(frozen=True)
class OriginalFilePathItem:
    original_filename: PurePosixPath
    renamed_filename: PurePosixPath


class OriginalFilepathsService:
    """Reads original-filepaths.txt lines of the form ``<renamed> <original>``."""

    def __init__(self, file_service: FileService):
        self.file_service = file_service

    def exists(self, bag_dir: Path) -> bool:
        return self.file_service.exists(bag_dir / ORIGINAL_FILEPATHS)

    def get_mapping(self, bag_dir: Path) -> list[OriginalFilePathItem]:
        content = self.file_service.read_text(bag_dir / ORIGINAL_FILEPATHS)
        items = []

        for line in content.splitlines():
            parts = line.strip().split(maxsplit=1)
            if len(parts) != 2:
                if line.strip():
                    logger.debug(f"Ignoring malformed line in {ORIGINAL_FILEPATHS}: {line!r}")
                continue
            renamed, original = parts
            items.append(OriginalFilePathItem(PurePosixPath(original), PurePosixPath(renamed)))

        return items

    def get_mappings_from_original_to_renamed(self, bag_dir: Path) -> dict[PurePosixPath, PurePosixPath]:
        """Map original paths to renamed paths; empty when the file is absent."""
        if not self.exists(bag_dir):
            return {}
        return {item.original_filename: item.renamed_filename for item in self.get_mapping(bag_dir)}
