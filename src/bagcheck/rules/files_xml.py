"""Rule bodies that compare metadata/files.xml with the payload."""

import logging
import posixpath
from collections import Counter
from pathlib import Path, PurePosixPath

from ..engine.models import BagValidatorRule, RuleResult
from ..services.files import FileService
from ..services.files_xml import FilesXmlService
from ..services.original_filepaths import OriginalFilepathsService

logger = logging.getLogger(__name__)


def _normalize(path: PurePosixPath) -> PurePosixPath:
    return PurePosixPath(posixpath.normpath(str(path)))


def _join(paths) -> str:
    return ", ".join(sorted(str(p) for p in paths))


class FilesXmlRules:
    def __init__(
        self,
        file_service: FileService,
        files_xml_service: FilesXmlService,
        original_filepaths_service: OriginalFilepathsService,
    ):
        self.file_service = file_service
        self.files_xml_service = files_xml_service
        self.original_filepaths_service = original_filepaths_service

    def _payload_paths(self, path: Path) -> set[PurePosixPath]:
        return {
            PurePosixPath(p.relative_to(path).as_posix())
            for p in self.file_service.list_files_recursively(path / "data")
        }

    def _described_paths(self, path: Path) -> set[PurePosixPath]:
        """files.xml paths, translated to the renamed payload paths where a mapping exists."""
        mapping = self.original_filepaths_service.get_mappings_from_original_to_renamed(path)
        described = set()
        for filepath in self.files_xml_service.read_filepaths(path):
            normalized = _normalize(filepath)
            described.add(mapping.get(normalized, normalized))
        return described

    def describes_only_payload_files(self) -> BagValidatorRule:
        def rule(path: Path) -> RuleResult:
            payload = self._payload_paths(path)
            described = self._described_paths(path)
            only_in_xml = described - payload
            logger.debug(f"Difference between files.xml content and filesystem entries: {only_in_xml}")

            if only_in_xml:
                return RuleResult.error(
                    f"files.xml: entries found that do not describe payload files: {{{_join(only_in_xml)}}}"
                )
            return RuleResult.ok()

        return rule

    def no_duplicates_and_every_payload_file_is_described(self) -> BagValidatorRule:
        def rule(path: Path) -> RuleResult:
            errors = []

            counts = Counter(_normalize(p) for p in self.files_xml_service.read_filepaths(path))
            duplicates = [p for p, count in counts.items() if count > 1]
            if duplicates:
                errors.append(f"files.xml: duplicate entries found: {{{_join(duplicates)}}}")

            missing = self._payload_paths(path) - self._described_paths(path)
            logger.debug(f"Difference between filesystem entries and files.xml content: {missing}")
            if missing:
                errors.append(f"files.xml does not describe all payload files: {{{_join(missing)}}}")

            if errors:
                return RuleResult.error(errors)
            return RuleResult.ok()

        return rule
