"""Rule bodies for bag structure, bag-info.txt and payload checks."""

import logging
import re
import uuid
from datetime import datetime
from pathlib import Path, PurePosixPath

import bagit

from ..engine.models import BagValidatorRule, RuleResult
from ..services.bag_metadata import BagItMetadataReader
from ..services.files import FileService
from ..services.files_xml import FilesXmlService
from ..services.original_filepaths import ORIGINAL_FILEPATHS, OriginalFilepathsService
from ..validators.prefix import OrganizationIdentifierPrefixValidator

logger = logging.getLogger(__name__)

INVALID_FILENAME_CHARACTERS = ':*?"<>|;#'
# yyyy-MM-ddTHH:mm:ss.SSS followed by Z or an offset
CREATED_DATE_TIME = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}(Z|[+-]\d{2}:\d{2})")


def _relative(path: Path, base: Path) -> PurePosixPath:
    return PurePosixPath(path.relative_to(base).as_posix())


def _join(paths) -> str:
    return ", ".join(sorted(str(p) for p in paths))


class BagRules:
    """Factories for rules that inspect the bag itself rather than its XML metadata."""

    def __init__(
        self,
        bag_metadata_reader: BagItMetadataReader,
        file_service: FileService,
        original_filepaths_service: OriginalFilepathsService,
        files_xml_service: FilesXmlService,
        prefix_validator: OrganizationIdentifierPrefixValidator,
    ):
        self.bag_metadata_reader = bag_metadata_reader
        self.file_service = file_service
        self.original_filepaths_service = original_filepaths_service
        self.files_xml_service = files_xml_service
        self.prefix_validator = prefix_validator

    def bag_is_valid(self) -> BagValidatorRule:
        def rule(path: Path) -> RuleResult:
            logger.debug(f"Verifying bag {path}")
            try:
                self.bag_metadata_reader.verify_bag(path)
            except bagit.BagError as e:
                return RuleResult.error(f"Bag is not valid: {e}", e)
            return RuleResult.ok()

        return rule

    def contains_dir(self, directory: Path) -> BagValidatorRule:
        def rule(path: Path) -> RuleResult:
            if not self.file_service.is_directory(path / directory):
                return RuleResult.error(f"Path '{directory.as_posix()}' is not a directory")
            return RuleResult.ok()

        return rule

    def contains_file(self, file: Path) -> BagValidatorRule:
        def rule(path: Path) -> RuleResult:
            if not self.file_service.is_file(path / file):
                return RuleResult.error(f"Path '{file.as_posix()}' is not a file")
            return RuleResult.ok()

        return rule

    def bag_info_exists_and_is_well_formed(self) -> BagValidatorRule:
        def rule(path: Path) -> RuleResult:
            if not self.file_service.is_file(path / "bag-info.txt"):
                return RuleResult.error("bag-info.txt does not exist")

            try:
                self.bag_metadata_reader.get_bag(path)
            except (bagit.BagError, UnicodeDecodeError) as e:
                return RuleResult.error(f"bag-info.txt exists but is malformed: {e}", e)
            return RuleResult.ok()

        return rule

    def bag_info_created_element_is_iso8601_date(self) -> BagValidatorRule:
        def rule(path: Path) -> RuleResult:
            created = self.bag_metadata_reader.get_single_field(path, "Created")
            logger.debug(f"Trying to parse date {created} to see if it is valid")

            if created is None or not CREATED_DATE_TIME.fullmatch(created):
                return RuleResult.error(f"Date '{created}' is not valid")

            try:
                datetime.fromisoformat(created)
            except ValueError as e:
                return RuleResult.error(f"Date '{created}' is not valid", e)
            return RuleResult.ok()

        return rule

    def bag_info_contains_exactly_one_of(self, key: str) -> BagValidatorRule:
        def rule(path: Path) -> RuleResult:
            items = self.bag_metadata_reader.get_field(path, key)
            if len(items) != 1:
                return RuleResult.error(
                    f"bag-info.txt must contain exactly one '{key}' element; number found: {len(items)}"
                )
            return RuleResult.ok()

        return rule

    def bag_info_contains_at_most_one_of(self, key: str) -> BagValidatorRule:
        """Absence skips dependent rules, since there is nothing to check further."""
        def rule(path: Path) -> RuleResult:
            items = self.bag_metadata_reader.get_field(path, key)
            if not items:
                return RuleResult.skip_dependencies()
            if len(items) > 1:
                return RuleResult.error(f"bag-info.txt may contain at most one element: '{key}'")
            return RuleResult.ok()

        return rule

    def bag_info_is_version_of_is_valid_urn_uuid(self) -> BagValidatorRule:
        def rule(path: Path) -> RuleResult:
            items = self.bag_metadata_reader.get_field(path, "Is-Version-Of")
            invalid = [item for item in items if not _is_urn_uuid(item)]

            if invalid:
                return RuleResult.error(
                    f"bag-info.txt Is-Version-Of value must be a valid URN: Invalid items {{{', '.join(invalid)}}}"
                )
            return RuleResult.ok()

        return rule

    def contains_nothing_else_than(self, directory: Path, allowed: list[str]) -> BagValidatorRule:
        allowed_paths = {PurePosixPath(p) for p in allowed}

        def rule(path: Path) -> RuleResult:
            base = path / directory
            found = {_relative(p, base) for p in self.file_service.list_all_files_and_directories(base)}
            not_allowed = found - allowed_paths
            logger.debug(f"Found items that are not allowed in path {base}: {not_allowed}")

            if not_allowed:
                return RuleResult.error(
                    f"Directory {directory.as_posix()} contains files or directories that are not allowed: "
                    f"{_join(not_allowed)}"
                )
            return RuleResult.ok()

        return rule

    def does_not_contain(self, directory: Path, forbidden: list[str]) -> BagValidatorRule:
        forbidden_paths = {PurePosixPath(p) for p in forbidden}

        def rule(path: Path) -> RuleResult:
            base = path / directory
            found = {_relative(p, base) for p in self.file_service.list_all_files_and_directories(base)}
            present = found & forbidden_paths

            if present:
                return RuleResult.error(
                    f"Directory {directory.as_posix()} contains files or directories that are not allowed: "
                    f"{_join(present)}"
                )
            return RuleResult.ok()

        return rule

    def has_only_valid_file_names(self) -> BagValidatorRule:
        def rule(path: Path) -> RuleResult:
            invalid = [
                _relative(p, path)
                for p in self.file_service.list_files_recursively(path / "data")
                if any(c in p.name for c in INVALID_FILENAME_CHARACTERS)
            ]
            if invalid:
                return RuleResult.error(f"Payload files must have valid characters. Invalid ones: {_join(invalid)}")
            return RuleResult.ok()

        return rule

    def optional_file_is_utf8_decodable(self, file: Path) -> BagValidatorRule:
        """Skips dependent rules when the file is absent."""
        def rule(path: Path) -> RuleResult:
            target = path / file
            if not self.file_service.exists(target):
                return RuleResult.skip_dependencies()

            try:
                self.file_service.read_text(target)
            except UnicodeDecodeError as e:
                return RuleResult.error(f"Input not valid UTF-8: {e}", e)
            return RuleResult.ok()

        return rule

    def is_original_filepaths_file_complete(self) -> BagValidatorRule:
        def rule(path: Path) -> RuleResult:
            if not self.original_filepaths_service.exists(path):
                return RuleResult.skip_dependencies()

            mapping = self.original_filepaths_service.get_mapping(path)
            files_xml_paths = set(self.files_xml_service.read_filepaths(path))
            actual_files = {_relative(p, path) for p in self.file_service.list_files_recursively(path / "data")}

            renamed_files = {item.renamed_filename for item in mapping}
            original_files = {item.original_filename for item in mapping}

            physical_differ = actual_files != renamed_files
            original_differ = files_xml_paths != original_files

            if not (physical_differ or original_differ):
                return RuleResult.ok()

            lines = []
            if physical_differ:
                lines.append(
                    f"  - Physical file paths in {ORIGINAL_FILEPATHS} not equal to payload in data dir. Difference - "
                    f"only in payload: {{{_join(actual_files - renamed_files)}}}, "
                    f"only in physical-bag-relative-path: {{{_join(renamed_files - actual_files)}}}"
                )
            if original_differ:
                lines.append(
                    f"  - Original file paths in {ORIGINAL_FILEPATHS} not equal to filepaths in files.xml. "
                    "Difference - "
                    f"only in files.xml: {{{_join(files_xml_paths - original_files)}}}, "
                    f"only in original-bag-relative-path: {{{_join(original_files - files_xml_paths)}}}"
                )

            return RuleResult.error(f"{ORIGINAL_FILEPATHS} errors: \n" + "\n".join(lines))

        return rule

    def contains_not_just_md5_manifest(self) -> BagValidatorRule:
        def rule(path: Path) -> RuleResult:
            algorithms = self.bag_metadata_reader.get_manifest_algorithms(path)
            logger.debug(f"Manifest algorithms of {path}: {algorithms}")

            if not any(algorithm.lower() != "md5" for algorithm in algorithms):
                return RuleResult.error("The bag contains no manifests or only a MD5 manifest")
            return RuleResult.ok()

        return rule

    def organizational_identifier_prefix_is_valid(self) -> BagValidatorRule:
        def rule(path: Path) -> RuleResult:
            identifier = self.bag_metadata_reader.get_single_field(path, "Has-Organizational-Identifier")
            user = self.bag_metadata_reader.get_single_field(path, "Data-Station-User-Account")

            if identifier is None or user is None:
                return RuleResult.skip_dependencies()

            if not self.prefix_validator.has_valid_prefix(user, identifier):
                return RuleResult.error(
                    f"No valid prefix given for value of 'Has-Organizational-Identifier': {identifier}"
                )
            return RuleResult.ok()

        return rule


def _is_urn_uuid(value: str) -> bool:
    scheme, _, specific = value.partition(":")
    if scheme.lower() != "urn" or not specific.startswith("uuid:"):
        return False
    try:
        uuid.UUID(specific[len("uuid:"):])
    except ValueError:
        return False
    return True
