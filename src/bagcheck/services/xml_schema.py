"""XML Schema validation with lazily loaded, cached schemas."""

import logging
import threading

import xmlschema

from .xml_reader import XmlDocument

logger = logging.getLogger(__name__)


class XmlSchemaValidator:
    """Validates documents against schemas registered by name.

    Schemas are compiled on first use and cached; the cache is shared by
    concurrent validation requests.
    """

    def __init__(self, schema_locations: dict[str, str]):
        self.schema_locations = dict(schema_locations)
        self._schemas: dict[str, xmlschema.XMLSchema] = {}
        self._lock = threading.Lock()

    def get_schema(self, schema_name: str) -> xmlschema.XMLSchema:
        """Return the compiled schema for a name.

        Raises:
            KeyError: If no location is configured for the name
            xmlschema.XMLSchemaException: If the schema cannot be loaded
        """
        with self._lock:
            schema = self._schemas.get(schema_name)
            if schema is None:
                location = self.schema_locations[schema_name]
                logger.info(f"Loading XML schema {schema_name} from {location}")
                schema = xmlschema.XMLSchema(location)
                self._schemas[schema_name] = schema
            return schema

    def load_schemas(self) -> None:
        """Eagerly load every configured schema, logging the ones that fail."""
        for schema_name in self.schema_locations:
            try:
                self.get_schema(schema_name)
            except Exception:
                logger.exception(f"Unable to load XML schema {schema_name}")

    def validate_document(self, document: XmlDocument, schema_name: str) -> list[str]:
        """Return the validation errors of a document, empty when it conforms."""
        schema = self.get_schema(schema_name)
        errors = []
        for error in schema.iter_errors(document.root):
            errors.append(error.reason or error.message)
        logger.debug(f"Found {len(errors)} schema errors against {schema_name}")
        return errors
