"""Rule bodies that inspect metadata/dataset.xml."""

import logging
import re
from collections.abc import Callable
from pathlib import Path
from urllib.parse import urlparse
from xml.etree.ElementTree import Element

from ..engine.models import BagValidatorRule, RuleResult
from ..services.xml_reader import (
    NAMESPACE_DCTERMS,
    NAMESPACE_ID_TYPE,
    XSI_TYPE,
    XmlDocument,
    XmlReader,
    local_name,
    text_content,
)
from ..validators.identifier import IdentifierValidator
from ..validators.license import LicenseValidator
from ..validators.polygon import validate_polygon_list

logger = logging.getLogger(__name__)

DATASET_XML = Path("metadata/dataset.xml")

DOI_PATTERN = re.compile(r"^10(\.\d+)+/.+")
ARCHIS_MAX_LENGTH = 10
ACCEPTED_PROTOCOLS = ("http", "https")
URI_TYPES = frozenset({"dcterms:URI", "dcterms:URL", "URI", "URL"})

RD_SRS_NAME = "urn:ogc:def:crs:EPSG::28992"
RD_X_RANGE = (-7000, 300000)
RD_Y_RANGE = (289000, 629000)

RIGHTS_HOLDER_ROLE = "RightsHolder"


def _typed_identifiers(document: XmlDocument, reader: XmlReader, id_type: str) -> list[Element]:
    """dcterms:identifier elements whose xsi:type names an identifier-type vocabulary term."""
    prefix = document.lookup_prefix(NAMESPACE_ID_TYPE) or "id-type"
    expected = f"{prefix}:{id_type}"
    return [
        element
        for element in reader.xpath(document, "ddm:dcmiMetadata/dcterms:identifier")
        if element.get(XSI_TYPE) == expected
    ]


class DatasetXmlRules:
    """Factories for rules over the dataset metadata (DDM) document."""

    def __init__(
        self,
        xml_reader: XmlReader,
        license_validator: LicenseValidator,
        identifier_validator: IdentifierValidator,
    ):
        self.xml_reader = xml_reader
        self.license_validator = license_validator
        self.identifier_validator = identifier_validator

    def _read(self, path: Path) -> XmlDocument:
        return self.xml_reader.read_xml_file(path / DATASET_XML)

    def contains_exactly_one_supported_license(self) -> BagValidatorRule:
        def rule(path: Path) -> RuleResult:
            document = self._read(path)
            licenses = self.xml_reader.xpath(document, "ddm:dcmiMetadata/dcterms:license")
            if not licenses:
                return RuleResult.error("No licenses found")

            # the xsi:type value uses whatever prefix the document binds to dcterms
            prefix = document.lookup_prefix(NAMESPACE_DCTERMS)
            uri_licenses = [
                text_content(element).strip()
                for element in licenses
                if prefix is not None and element.get(XSI_TYPE) == f"{prefix}:URI"
            ]
            uri_licenses = [uri for uri in uri_licenses if self.license_validator.is_valid_uri(uri)]
            logger.debug(f"Found {len(uri_licenses)} licenses with a URI type")

            if not uri_licenses:
                return RuleResult.error('No license with xsi:type="dcterms:URI"')
            if len(uri_licenses) > 1:
                return RuleResult.error('More than one license with xsi:type="dcterms:URI"')
            if not self.license_validator.is_valid_license(uri_licenses[0]):
                return RuleResult.error(f"Found unknown or unsupported license: {uri_licenses[0]}")
            return RuleResult.ok()

        return rule

    def dois_are_valid(self) -> BagValidatorRule:
        def rule(path: Path) -> RuleResult:
            document = self._read(path)
            invalid = [
                text_content(element)
                for element in _typed_identifiers(document, self.xml_reader, "DOI")
                if not DOI_PATTERN.match(text_content(element))
            ]
            logger.debug(f"Identifiers (DOI) that do not match the pattern: {invalid}")

            if invalid:
                return RuleResult.error(f"dataset.xml: Invalid DOIs: {', '.join(invalid)}")
            return RuleResult.ok()

        return rule

    def _identifiers_are_valid(
        self, expression: str, is_valid: Callable[[str], bool], label: str
    ) -> BagValidatorRule:
        def rule(path: Path) -> RuleResult:
            document = self._read(path)
            invalid = [
                value
                for value in self.xml_reader.xpath_texts(document, expression)
                if not is_valid(value)
            ]
            logger.debug(f"{label} {invalid}")

            if invalid:
                return RuleResult.error(f"{label}{', '.join(invalid)}")
            return RuleResult.ok()

        return rule

    def dais_are_valid(self) -> BagValidatorRule:
        return self._identifiers_are_valid(
            ".//dcx-dai:DAI", self.identifier_validator.validate_dai, "Invalid DAIs: "
        )

    def isnis_are_valid(self) -> BagValidatorRule:
        return self._identifiers_are_valid(
            ".//dcx-dai:ISNI", self.identifier_validator.validate_isni, "Invalid ISNI(s): "
        )

    def orcids_are_valid(self) -> BagValidatorRule:
        return self._identifiers_are_valid(
            ".//dcx-dai:ORCID", self.identifier_validator.validate_orcid, "Invalid ORCID(s): "
        )

    def polygon_pos_lists_are_well_formed(self) -> BagValidatorRule:
        def rule(path: Path) -> RuleResult:
            document = self._read(path)
            messages = []
            for pos_list in self.xml_reader.xpath_texts(document, ".//dcx-gml:spatial//gml:posList"):
                result = validate_polygon_list(pos_list)
                if not result.is_valid:
                    messages.append(result.message)

            if messages:
                return RuleResult.error("Invalid posList: " + "\n".join(messages))
            return RuleResult.ok()

        return rule

    def polygons_in_same_multi_surface_have_same_srs_name(self) -> BagValidatorRule:
        def rule(path: Path) -> RuleResult:
            document = self._read(path)
            mixed = 0
            for surface in self.xml_reader.xpath(document, ".//gml:MultiSurface"):
                srs_names = {
                    polygon.get("srsName")
                    for polygon in self.xml_reader.xpath(surface, ".//gml:Polygon")
                    if polygon.get("srsName") is not None
                }
                logger.debug(f"Found unique srsName values: {srs_names}")
                if len(srs_names) > 1:
                    mixed += 1

            if mixed:
                return RuleResult.error(
                    "dataset.xml: Found MultiSurface element containing polygons with different srsNames"
                )
            return RuleResult.ok()

        return rule

    def points_have_at_least_two_values(self) -> BagValidatorRule:
        def rule(path: Path) -> RuleResult:
            document = self._read(path)
            parents = document.parent_map()
            points = self.xml_reader.xpaths(document, [
                ".//gml:Point/gml:pos",
                ".//gml:lowerCorner",
                ".//gml:upperCorner",
            ])

            errors = []
            for point in points:
                parent = parents.get(point)
                is_rd = parent is not None and parent.get("srsName") == RD_SRS_NAME
                error = _check_point(point, is_rd)
                if error:
                    errors.append(error)

            logger.debug(f"Errors while validating points: {errors}")
            if errors:
                return RuleResult.error(errors)
            return RuleResult.ok()

        return rule

    def archis_identifiers_have_at_most_10_characters(self) -> BagValidatorRule:
        def rule(path: Path) -> RuleResult:
            document = self._read(path)
            too_long = [
                text_content(element)
                for element in _typed_identifiers(document, self.xml_reader, "ARCHIS-ZAAK-IDENTIFICATIE")
                if len(text_content(element)) > ARCHIS_MAX_LENGTH
            ]
            logger.debug(f"Invalid Archis identifiers: {too_long}")

            if too_long:
                return RuleResult.error([
                    f"dataset.xml: Archis identifier must be 10 or fewer characters long: {value}"
                    for value in too_long
                ])
            return RuleResult.ok()

        return rule

    def all_urls_are_valid(self) -> BagValidatorRule:
        def rule(path: Path) -> RuleResult:
            document = self._read(path)
            errors = [
                error
                for error in (_check_url(value) for value in self._collect_urls(document))
                if error is not None
            ]
            logger.debug(f"Invalid URIs found: {errors}")

            if errors:
                return RuleResult.error(errors)
            return RuleResult.ok()

        return rule

    def _collect_urls(self, document: XmlDocument) -> list[str]:
        values = []
        for element in document.root.iter():
            if element.get("href") is not None:
                values.append(element.get("href"))
        for subject in self.xml_reader.xpath(document, ".//ddm:subject"):
            values.extend(subject.get(name) for name in ("schemeURI", "valueURI") if subject.get(name) is not None)
        for element in document.root.iter():
            if element.get(XSI_TYPE) in URI_TYPES or element.get("scheme") in URI_TYPES:
                values.append(text_content(element).strip())
        return values

    def _rights_holder_in_element(self, document: XmlDocument) -> bool:
        return any(
            text.strip()
            for text in self.xml_reader.xpath_texts(document, "ddm:dcmiMetadata//dcterms:rightsHolder")
        )

    def _rights_holder_in_author_role(self, document: XmlDocument) -> bool:
        return any(
            text.strip() == RIGHTS_HOLDER_ROLE
            for text in self.xml_reader.xpath_texts(document, ".//dcx-dai:author/dcx-dai:role")
        )

    def has_rights_holder_in_element_or_author_role(self) -> BagValidatorRule:
        def rule(path: Path) -> RuleResult:
            document = self._read(path)
            in_role = self._rights_holder_in_author_role(document)
            in_element = self._rights_holder_in_element(document)
            logger.debug(f"Rights holder in role: {in_role}, in rightsHolder element: {in_element}")

            if not (in_role or in_element):
                return RuleResult.error(
                    "No RightsHolder found in <dcx-dai:role> element nor in <dcterms:rightsHolder> element"
                )
            return RuleResult.ok()

        return rule

    def has_rights_holder_in_author_role(self) -> BagValidatorRule:
        def rule(path: Path) -> RuleResult:
            if not self._rights_holder_in_author_role(self._read(path)):
                return RuleResult.error("No RightsHolder found in <dcx-dai:role>")
            return RuleResult.ok()

        return rule

    def has_no_rights_holder_author_role(self) -> BagValidatorRule:
        def rule(path: Path) -> RuleResult:
            if self._rights_holder_in_author_role(self._read(path)):
                return RuleResult.error(
                    "Found RightsHolder in <dcx-dai:role>; use a <dcterms:rightsHolder> element instead"
                )
            return RuleResult.ok()

        return rule


def _check_point(point: Element, is_rd: bool) -> str | None:
    name = local_name(point.tag)
    text = text_content(point)

    try:
        coordinates = [float(part) for part in text.split()]
    except ValueError:
        return f"{name} has non numeric coordinates: {text}"

    if len(coordinates) < 2:
        return f"{name} has less than two coordinates: {text}"

    if is_rd:
        x, y = coordinates[0], coordinates[1]
        if not (RD_X_RANGE[0] <= x <= RD_X_RANGE[1] and RD_Y_RANGE[0] <= y <= RD_Y_RANGE[1]):
            return f"{name} is outside RD bounds: {text}"

    return None


def _check_url(value: str) -> str | None:
    if not value or any(c.isspace() for c in value):
        return f"dataset.xml: '{value}' is not a valid uri"
    try:
        scheme = urlparse(value).scheme
    except ValueError:
        return f"dataset.xml: '{value}' is not a valid uri"

    if scheme.lower() not in ACCEPTED_PROTOCOLS:
        return (
            f"dataset.xml: protocol '{scheme}' in uri '{value}' is not one of the accepted protocols "
            f"[{', '.join(ACCEPTED_PROTOCOLS)}]"
        )
    return None
