"""Rule bodies that consult the data station (Dataverse) the bag is deposited into."""

import calendar
import logging
import re
from datetime import datetime, timezone
from pathlib import Path

from ..config import DataverseConfig
from ..engine.models import BagValidatorRule, RuleResult
from ..services.bag_metadata import BagItMetadataReader
from ..services.dataverse import DataverseClient
from ..services.xml_reader import NAMESPACE_DCTERMS, XSI_TYPE, XmlReader, text_content
from ..validators.license import LicenseValidator
from .dataset_xml import DATASET_XML

logger = logging.getLogger(__name__)

URN_UUID_PREFIX = "urn:uuid:"
ROOT_DATAVERSE = "root"
PARTIAL_DATE = re.compile(r"(?P<year>\d{4})(-(?P<month>\d{2}))?")


def add_months(moment: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the length of the target month."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def _parse_date(value: str) -> datetime:
    """Parse a full or partial ISO 8601 date; partial dates start at their first instant."""
    text = value.strip()
    partial = PARTIAL_DATE.fullmatch(text)
    if partial:
        parsed = datetime(int(partial["year"]), int(partial["month"] or 1), 1)
    else:
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _roles_of(assignments: list[dict], user: str) -> list[str]:
    return [
        assignment.get("_roleAlias")
        for assignment in assignments
        if assignment.get("assignee", "").replace("@", "", 1) == user
    ]


def _other_id(dataset: dict) -> str | None:
    blocks = (dataset.get("latestVersion") or {}).get("metadataBlocks") or {}
    fields = (blocks.get("dansDataVaultMetadata") or {}).get("fields", [])
    for item in fields:
        if item.get("typeName") == "dansOtherId" and isinstance(item.get("value"), str):
            value = item["value"]
            return None if value in ("", "null") else value
    return None


class DatastationRules:
    """Factories for rules that need a live data station.

    Data station failures are not caught here; they surface as rule failures.
    """

    def __init__(
        self,
        bag_metadata_reader: BagItMetadataReader,
        dataverse_client: DataverseClient,
        dataverse_config: DataverseConfig,
        xml_reader: XmlReader,
        license_validator: LicenseValidator,
        now=None,
    ):
        self.bag_metadata_reader = bag_metadata_reader
        self.dataverse_client = dataverse_client
        self.dataverse_config = dataverse_config
        self.xml_reader = xml_reader
        self.license_validator = license_validator
        self._now = now or (lambda: datetime.now(timezone.utc))

    def _find_dataset(self, is_version_of: str) -> dict | None:
        """Resolve an Is-Version-Of URN to the dataset carrying the matching SWORD token."""
        if not is_version_of.startswith(URN_UUID_PREFIX):
            raise ValueError("Is-Version-Of is not a urn:uuid")

        token = "sword:" + is_version_of[len(URN_UUID_PREFIX):]
        items = self.dataverse_client.search_by_sword_token(token)
        if not items:
            return None
        return self.dataverse_client.get_dataset(items[0]["global_id"])

    def user_is_authorized_to_create_dataset(self) -> BagValidatorRule:
        def rule(path: Path) -> RuleResult:
            user = self.bag_metadata_reader.get_single_field(path, "Data-Station-User-Account")
            if user is None:
                return RuleResult.skip_dependencies()

            assignments = self.dataverse_client.get_dataverse_role_assignments(ROOT_DATAVERSE)
            roles = _roles_of(assignments, user)
            logger.debug(f"Roles of user '{user}' on the root dataverse: {roles}")

            expected = self.dataverse_config.allowed_creator_role
            if expected not in roles:
                return RuleResult.error(
                    f"User '{user}' does not have the correct role for creating datasets "
                    f"(expected: {expected}, found: {roles})"
                )
            return RuleResult.ok()

        return rule

    def bag_exists_in_datastation(self) -> BagValidatorRule:
        def rule(path: Path) -> RuleResult:
            is_version_of = self.bag_metadata_reader.get_single_field(path, "Is-Version-Of")
            if is_version_of is None:
                return RuleResult.skip_dependencies()

            dataset = self._find_dataset(is_version_of)
            if dataset is None:
                logger.debug(f"Dataset with sword token '{is_version_of}' not found")
                return RuleResult.error(
                    "If 'Is-Version-Of' is specified, it must be a valid SWORD token in the data station; "
                    f"no tokens were found: {is_version_of}"
                )
            return RuleResult.ok()

        return rule

    def organizational_identifier_exists_in_dataset(self) -> BagValidatorRule:
        def rule(path: Path) -> RuleResult:
            is_version_of = self.bag_metadata_reader.get_single_field(path, "Is-Version-Of")
            dataset = self._find_dataset(is_version_of)
            if dataset is None:
                return RuleResult.error("Expected a dataset, but got nothing")

            org_identifier = self.bag_metadata_reader.get_single_field(path, "Has-Organizational-Identifier")
            other_id = _other_id(dataset)

            if other_id != org_identifier:
                return RuleResult.error(
                    "Mismatch between 'dansOtherId' in dataverse and 'Has-Organizational-Identifier' in dataset: "
                    f"'{org_identifier}' vs '{other_id}'. They must either both be the same or both be absent"
                )
            return RuleResult.ok()

        return rule

    def user_is_authorized_to_update_dataset(self) -> BagValidatorRule:
        def rule(path: Path) -> RuleResult:
            user = self.bag_metadata_reader.get_single_field(path, "Data-Station-User-Account")
            is_version_of = self.bag_metadata_reader.get_single_field(path, "Is-Version-Of")
            if user is None or is_version_of is None:
                return RuleResult.skip_dependencies()

            dataset = self._find_dataset(is_version_of)
            if dataset is None:
                return RuleResult.error(
                    "If 'Is-Version-Of' is specified, it must be a valid SWORD token in the data station; "
                    f"no tokens were found: {is_version_of}"
                )

            persistent_id = dataset["latestVersion"]["datasetPersistentId"]
            roles = _roles_of(self.dataverse_client.get_dataset_role_assignments(persistent_id), user)
            logger.debug(f"Roles of user '{user}' on dataset {persistent_id}: {roles}")

            expected = self.dataverse_config.allowed_editor_role
            if expected not in roles:
                return RuleResult.error(
                    f"User '{user}' does not have the correct role for updating datasets "
                    f"(expected: {expected}, found: {roles})"
                )
            return RuleResult.ok()

        return rule

    def embargo_period_within_limits(self) -> BagValidatorRule:
        def rule(path: Path) -> RuleResult:
            months = self.dataverse_client.get_max_embargo_duration_in_months()
            document = self.xml_reader.read_xml_file(path / DATASET_XML)
            available = self.xml_reader.xpath_texts(document, "ddm:profile/ddm:available")
            if not available:
                return RuleResult.ok()

            limit = add_months(self._now(), months)
            logger.debug(f"Checking available date {available[0]} against embargo limit {limit}")
            if _parse_date(available[0]) >= limit:
                return RuleResult.error("Date available is further in the future than the Embargo Period allows")
            return RuleResult.ok()

        return rule

    def license_allowed_by_datastation(self) -> BagValidatorRule:
        def rule(path: Path) -> RuleResult:
            document = self.xml_reader.read_xml_file(path / DATASET_XML)
            prefix = document.lookup_prefix(NAMESPACE_DCTERMS)
            licenses = [
                text_content(element).strip()
                for element in self.xml_reader.xpath(document, "ddm:dcmiMetadata/dcterms:license")
                if prefix is not None and element.get(XSI_TYPE) == f"{prefix}:URI"
            ]
            licenses = [uri for uri in licenses if self.license_validator.is_valid_uri(uri)]

            data_station_licenses = self.dataverse_client.get_licenses()
            invalid = [
                uri for uri in licenses
                if not LicenseValidator.is_active_in(uri, data_station_licenses)
            ]

            if invalid:
                return RuleResult.error(
                    f"Invalid licenses found that are not available in the data station: {invalid}"
                )
            return RuleResult.ok()

        return rule
