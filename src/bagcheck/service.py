"""Validation service: wires the rule catalog to the engine and produces reports."""

import logging
import os
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import requests

from .config import BagcheckConfig
from .engine import DepositType, NumberedRule, RuleEngine, ValidationLevel, validate_rule_configuration
from .exceptions import BagNotFoundError
from .report import ValidationReport
from .rules import BagRules, DatasetXmlRules, DatastationRules, FilesXmlRules, XmlSchemaRules, build_rule_catalog
from .services import (
    BagItMetadataReader,
    DataverseClient,
    FileService,
    FilesXmlService,
    OriginalFilepathsService,
    XmlReader,
    XmlSchemaValidator,
)
from .validators import IdentifierValidator, LicenseValidator, OrganizationIdentifierPrefixValidator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationRequest:
    """A request to validate one bag directory."""
    bag_location: Path
    deposit_type: DepositType = DepositType.DEPOSIT
    level: ValidationLevel = ValidationLevel.STAND_ALONE


class RuleEngineService:
    """Validates bags against a fixed catalog.

    The catalog is checked for duplicates and unresolved dependencies when the
    service is created, so a misconfigured catalog never validates a bag.
    """

    def __init__(
        self,
        rules: Sequence[NumberedRule],
        profile_version: str,
        engine: RuleEngine | None = None,
        file_service: FileService | None = None,
    ):
        validate_rule_configuration(rules)
        self.rules = tuple(rules)
        self.profile_version = profile_version
        self.engine = engine or RuleEngine()
        self.file_service = file_service or FileService()

    def active_rules(self, deposit_type: DepositType, level: ValidationLevel) -> list[NumberedRule]:
        return [rule for rule in self.rules if rule.applies_to(deposit_type, level)]

    def validate_bag(self, request: ValidationRequest) -> ValidationReport:
        """Validate the bag a request points to.

        Raises:
            BagNotFoundError: If the location is not a readable directory
            RuleEngineStateError: If the engine cannot make progress
        """
        bag_dir = Path(request.bag_location)
        if not self.file_service.is_directory(bag_dir) or not os.access(bag_dir, os.R_OK | os.X_OK):
            raise BagNotFoundError(f"Bag directory not found or not readable: {bag_dir}")

        evaluations = self.engine.validate_rules(bag_dir, self.rules, request.deposit_type, request.level)

        report = ValidationReport.from_evaluations(
            bag_location=str(bag_dir),
            name=bag_dir.name,
            info_package_type=request.deposit_type,
            profile_version=self.profile_version,
            evaluations=evaluations,
        )
        logger.info(f"Bag {bag_dir.name} compliant: {report.is_compliant}")
        return report


def build_service(
    config: BagcheckConfig,
    session: requests.Session | None = None,
    schema_validator: XmlSchemaValidator | None = None,
    preload_schemas: bool = False,
) -> RuleEngineService:
    """Build the service with the default catalog and its collaborators.

    With preload_schemas, every configured XML schema is compiled up front
    so that a long running server does not pay for it on the first request.
    """
    file_service = FileService()
    xml_reader = XmlReader()
    bag_metadata_reader = BagItMetadataReader()
    files_xml_service = FilesXmlService(xml_reader)
    original_filepaths_service = OriginalFilepathsService(file_service)
    license_validator = LicenseValidator(config.validation.licenses)
    schema_validator = schema_validator or XmlSchemaValidator(config.xml_schemas.build_map())
    if preload_schemas:
        schema_validator.load_schemas()
    dataverse_client = DataverseClient(config.dataverse, session=session)

    rules = build_rule_catalog(
        bag=BagRules(
            bag_metadata_reader,
            file_service,
            original_filepaths_service,
            files_xml_service,
            OrganizationIdentifierPrefixValidator(config.validation.other_id_prefixes),
        ),
        schema=XmlSchemaRules(file_service, xml_reader, schema_validator),
        dataset_xml=DatasetXmlRules(xml_reader, license_validator, IdentifierValidator()),
        files_xml=FilesXmlRules(file_service, files_xml_service, original_filepaths_service),
        datastation=DatastationRules(
            bag_metadata_reader,
            dataverse_client,
            config.dataverse,
            xml_reader,
            license_validator,
        ),
    )

    return RuleEngineService(rules, config.validation.profile_version, file_service=file_service)
