"""Rule bodies that check metadata files against their XML schemas."""

import logging
from pathlib import Path

from ..engine.models import BagValidatorRule, RuleResult
from ..services.files import FileService
from ..services.xml_reader import XmlReader
from ..services.xml_schema import XmlSchemaValidator

logger = logging.getLogger(__name__)


class XmlSchemaRules:
    def __init__(self, file_service: FileService, xml_reader: XmlReader, schema_validator: XmlSchemaValidator):
        self.file_service = file_service
        self.xml_reader = xml_reader
        self.schema_validator = schema_validator

    def xml_file_conforms_to_schema(self, file: Path, schema_name: str) -> BagValidatorRule:
        def rule(path: Path) -> RuleResult:
            logger.debug(f"Validating {path / file} against schema {schema_name}")
            document = self.xml_reader.read_xml_file(path / file)
            errors = self.schema_validator.validate_document(document, schema_name)

            if errors:
                details = "\n".join(f" - {error}" for error in errors)
                return RuleResult.error(f"{file.name} does not conform to {schema_name}: \n{details}")
            return RuleResult.ok()

        return rule

    def xml_file_if_exists_conforms_to_schema(self, file: Path, schema_name: str) -> BagValidatorRule:
        conforms = self.xml_file_conforms_to_schema(file, schema_name)

        def rule(path: Path) -> RuleResult:
            if not self.file_service.exists(path / file):
                return RuleResult.ok()
            return conforms(path)

        return rule
