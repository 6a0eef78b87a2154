"""Unit tests for dataset.xml rules."""

from pathlib import Path

import pytest

from bagcheck.engine import RuleResultStatus
from bagcheck.rules import DatasetXmlRules
from bagcheck.services import XmlReader
from bagcheck.validators import IdentifierValidator, LicenseValidator

NAMESPACES = (
    'xmlns:ddm="http://easy.dans.knaw.nl/schemas/md/ddm/" '
    'xmlns:dc="http://purl.org/dc/elements/1.1/" '
    'xmlns:dcterms="http://purl.org/dc/terms/" '
    'xmlns:dcx-dai="http://easy.dans.knaw.nl/schemas/dcx/dai/" '
    'xmlns:dcx-gml="http://easy.dans.knaw.nl/schemas/dcx/gml/" '
    'xmlns:gml="http://www.opengis.net/gml" '
    'xmlns:id-type="http://easy.dans.knaw.nl/schemas/vocab/identifier-type/" '
    'xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"'
)

LICENSE = '<dcterms:license xsi:type="dcterms:URI">http://creativecommons.org/licenses/by/4.0</dcterms:license>'


@pytest.fixture
def rules():
    return DatasetXmlRules(
        XmlReader(),
        LicenseValidator(["http://creativecommons.org/licenses/by/4.0"]),
        IdentifierValidator(),
    )


@pytest.fixture
def write_dataset(tmp_path):
    """Write a dataset.xml with the given profile and dcmiMetadata content."""
    def write(dcmi: str = "", profile: str = "", namespaces: str = NAMESPACES) -> Path:
        metadata = tmp_path / "metadata"
        metadata.mkdir(exist_ok=True)
        (metadata / "dataset.xml").write_text(
            f'<?xml version="1.0"?>\n<ddm:DDM {namespaces}>'
            f"<ddm:profile>{profile}</ddm:profile>"
            f"<ddm:dcmiMetadata>{dcmi}</ddm:dcmiMetadata>"
            "</ddm:DDM>",
            encoding="utf-8",
        )
        return tmp_path

    return write


def messages(result):
    return list(result.messages)


class TestLicense:
    """Test the single supported license rule."""

    def test_one_supported_license(self, rules, write_dataset):
        bag = write_dataset(LICENSE)
        assert rules.contains_exactly_one_supported_license()(bag).status == RuleResultStatus.SUCCESS

    def test_trailing_slash(self, rules, write_dataset):
        bag = write_dataset(LICENSE.replace("4.0<", "4.0/<"))
        assert rules.contains_exactly_one_supported_license()(bag).status == RuleResultStatus.SUCCESS

    def test_document_prefix_for_dcterms(self, rules, write_dataset):
        namespaces = NAMESPACES.replace('xmlns:dcterms=', 'xmlns:dct=')
        bag = write_dataset(
            '<dct:license xsi:type="dct:URI">http://creativecommons.org/licenses/by/4.0</dct:license>',
            namespaces=namespaces,
        )
        assert rules.contains_exactly_one_supported_license()(bag).status == RuleResultStatus.SUCCESS

    def test_no_licenses(self, rules, write_dataset):
        bag = write_dataset()
        assert messages(rules.contains_exactly_one_supported_license()(bag)) == ["No licenses found"]

    def test_no_uri_license(self, rules, write_dataset):
        bag = write_dataset("<dcterms:license>CC-BY</dcterms:license>")
        assert messages(rules.contains_exactly_one_supported_license()(bag)) == [
            'No license with xsi:type="dcterms:URI"'
        ]

    def test_two_licenses(self, rules, write_dataset):
        bag = write_dataset(LICENSE + LICENSE)
        assert messages(rules.contains_exactly_one_supported_license()(bag)) == [
            'More than one license with xsi:type="dcterms:URI"'
        ]

    def test_unsupported_license(self, rules, write_dataset):
        bag = write_dataset('<dcterms:license xsi:type="dcterms:URI">http://example.org/mine</dcterms:license>')
        assert messages(rules.contains_exactly_one_supported_license()(bag)) == [
            "Found unknown or unsupported license: http://example.org/mine"
        ]


class TestIdentifiers:
    """Test DOI, DAI, ISNI, ORCID and Archis identifier rules."""

    def test_valid_doi(self, rules, write_dataset):
        bag = write_dataset('<dcterms:identifier xsi:type="id-type:DOI">10.17026/dans-12345</dcterms:identifier>')
        assert rules.dois_are_valid()(bag).status == RuleResultStatus.SUCCESS

    def test_invalid_doi(self, rules, write_dataset):
        bag = write_dataset(
            '<dcterms:identifier xsi:type="id-type:DOI">doi:10.17026/dans-12345</dcterms:identifier>'
            '<dcterms:identifier xsi:type="id-type:DOI">11.1234/x</dcterms:identifier>'
            '<dcterms:identifier>not-a-doi</dcterms:identifier>'
        )
        assert messages(rules.dois_are_valid()(bag)) == [
            "dataset.xml: Invalid DOIs: doi:10.17026/dans-12345, 11.1234/x"
        ]

    def test_dais(self, rules, write_dataset):
        author = "<dcx-dai:author><dcx-dai:DAI>{}</dcx-dai:DAI></dcx-dai:author>"
        profile = "<dcx-dai:creatorDetails>{}</dcx-dai:creatorDetails>"
        bag = write_dataset(profile=profile.format(
            author.format("info:eu-repo/dai/nl/123456789") + author.format("123456788")
        ))
        assert messages(rules.dais_are_valid()(bag)) == ["Invalid DAIs: 123456788"]

    def test_isnis(self, rules, write_dataset):
        bag = write_dataset(
            "<dcx-dai:contributorDetails><dcx-dai:author>"
            "<dcx-dai:ISNI>http://isni.org/isni/000000012281955X</dcx-dai:ISNI>"
            "<dcx-dai:ISNI>000000012281955Y</dcx-dai:ISNI>"
            "</dcx-dai:author></dcx-dai:contributorDetails>"
        )
        assert messages(rules.isnis_are_valid()(bag)) == ["Invalid ISNI(s): 000000012281955Y"]

    def test_orcids(self, rules, write_dataset):
        bag = write_dataset(profile=(
            "<dcx-dai:creatorDetails><dcx-dai:author>"
            "<dcx-dai:ORCID>https://orcid.org/0000-0002-1825-0097</dcx-dai:ORCID>"
            "</dcx-dai:author><dcx-dai:author>"
            "<dcx-dai:ORCID>https://orcid.org/0000-0002-1825-0098</dcx-dai:ORCID>"
            "</dcx-dai:author></dcx-dai:creatorDetails>"
        ))
        assert messages(rules.orcids_are_valid()(bag)) == [
            "Invalid ORCID(s): https://orcid.org/0000-0002-1825-0098"
        ]

    def test_archis_identifiers(self, rules, write_dataset):
        bag = write_dataset(
            '<dcterms:identifier xsi:type="id-type:ARCHIS-ZAAK-IDENTIFICATIE">1234567890</dcterms:identifier>'
            '<dcterms:identifier xsi:type="id-type:ARCHIS-ZAAK-IDENTIFICATIE">12345678901</dcterms:identifier>'
        )
        assert messages(rules.archis_identifiers_have_at_most_10_characters()(bag)) == [
            "dataset.xml: Archis identifier must be 10 or fewer characters long: 12345678901"
        ]


class TestGeometry:
    """Test GML rules."""

    def test_pos_lists(self, rules, write_dataset):
        bag = write_dataset(
            "<dcx-gml:spatial><gml:Polygon><gml:exterior><gml:LinearRing>"
            "<gml:posList>1 2 3 4 5 6 7 8 1 2</gml:posList>"
            "</gml:LinearRing></gml:exterior></gml:Polygon></dcx-gml:spatial>"
            "<dcx-gml:spatial><gml:Polygon><gml:exterior><gml:LinearRing>"
            "<gml:posList>1 2 3 4 5 6 7 8</gml:posList>"
            "</gml:LinearRing></gml:exterior></gml:Polygon></dcx-gml:spatial>"
        )

        result = rules.polygon_pos_lists_are_well_formed()(bag)

        assert result.status == RuleResultStatus.ERROR
        assert result.messages[0].startswith("Invalid posList: Found posList with unequal first and last pairs.")

    def test_valid_pos_lists(self, rules, write_dataset):
        bag = write_dataset(
            "<dcx-gml:spatial><gml:Polygon><gml:exterior><gml:LinearRing>"
            "<gml:posList>1 2 3 4 5 6 7 8 1 2</gml:posList>"
            "</gml:LinearRing></gml:exterior></gml:Polygon></dcx-gml:spatial>"
        )
        assert rules.polygon_pos_lists_are_well_formed()(bag).status == RuleResultStatus.SUCCESS

    def test_multi_surface_srs_names(self, rules, write_dataset):
        polygon = '<gml:surfaceMember><gml:Polygon srsName="{}"/></gml:surfaceMember>'
        bag = write_dataset(
            "<dcx-gml:spatial><gml:MultiSurface>"
            + polygon.format("urn:ogc:def:crs:EPSG::28992")
            + polygon.format("urn:ogc:def:crs:EPSG::4326")
            + "</gml:MultiSurface></dcx-gml:spatial>"
        )
        assert messages(rules.polygons_in_same_multi_surface_have_same_srs_name()(bag)) == [
            "dataset.xml: Found MultiSurface element containing polygons with different srsNames"
        ]

    def test_multi_surface_same_srs_name(self, rules, write_dataset):
        polygon = '<gml:surfaceMember><gml:Polygon srsName="urn:ogc:def:crs:EPSG::28992"/></gml:surfaceMember>'
        bag = write_dataset(
            f"<dcx-gml:spatial><gml:MultiSurface>{polygon}{polygon}</gml:MultiSurface></dcx-gml:spatial>"
        )
        assert rules.polygons_in_same_multi_surface_have_same_srs_name()(bag).status == RuleResultStatus.SUCCESS

    def test_points(self, rules, write_dataset):
        rd = 'srsName="urn:ogc:def:crs:EPSG::28992"'
        bag = write_dataset(
            f"<dcx-gml:spatial><gml:Point {rd}><gml:pos>126466 529006</gml:pos></gml:Point></dcx-gml:spatial>"
            f"<dcx-gml:spatial><gml:Point {rd}><gml:pos>-8000 529006</gml:pos></gml:Point></dcx-gml:spatial>"
            "<dcx-gml:spatial><gml:Point><gml:pos>52.1</gml:pos></gml:Point></dcx-gml:spatial>"
            "<dcx-gml:spatial><gml:Point><gml:pos>north east</gml:pos></gml:Point></dcx-gml:spatial>"
            "<dcx-gml:spatial><gml:Envelope><gml:lowerCorner>4.3 52.1</gml:lowerCorner>"
            "<gml:upperCorner>5</gml:upperCorner></gml:Envelope></dcx-gml:spatial>"
        )

        assert messages(rules.points_have_at_least_two_values()(bag)) == [
            "pos is outside RD bounds: -8000 529006",
            "pos has less than two coordinates: 52.1",
            "pos has non numeric coordinates: north east",
            "upperCorner has less than two coordinates: 5",
        ]


class TestUrls:
    """Test URL rule."""

    def test_valid_urls(self, rules, write_dataset):
        bag = write_dataset(
            '<ddm:subject schemeURI="http://vocab.example.org" valueURI="https://vocab.example.org/1">x</ddm:subject>'
            '<dcterms:isFormatOf xsi:type="dcterms:URI">https://example.org/a</dcterms:isFormatOf>'
            '<ddm:relation href="https://example.org/b">b</ddm:relation>'
        )
        assert rules.all_urls_are_valid()(bag).status == RuleResultStatus.SUCCESS

    def test_invalid_urls(self, rules, write_dataset):
        bag = write_dataset(
            '<ddm:relation href="ftp://example.org/b">b</ddm:relation>'
            '<dcterms:isFormatOf xsi:type="dcterms:URI">not a uri</dcterms:isFormatOf>'
        )
        assert messages(rules.all_urls_are_valid()(bag)) == [
            "dataset.xml: protocol 'ftp' in uri 'ftp://example.org/b' is not one of the accepted protocols "
            "[http, https]",
            "dataset.xml: 'not a uri' is not a valid uri",
        ]


class TestRightsHolder:
    """Test the rights holder rules for deposits and migrations."""

    AUTHOR_ROLE = (
        "<dcx-dai:creatorDetails><dcx-dai:author><dcx-dai:role>RightsHolder</dcx-dai:role>"
        "</dcx-dai:author></dcx-dai:creatorDetails>"
    )

    def test_in_element(self, rules, write_dataset):
        bag = write_dataset("<dcterms:rightsHolder>DANS</dcterms:rightsHolder>")
        assert rules.has_rights_holder_in_element_or_author_role()(bag).status == RuleResultStatus.SUCCESS
        assert messages(rules.has_rights_holder_in_author_role()(bag)) == [
            "No RightsHolder found in <dcx-dai:role>"
        ]
        assert rules.has_no_rights_holder_author_role()(bag).status == RuleResultStatus.SUCCESS

    def test_in_author_role(self, rules, write_dataset):
        bag = write_dataset(profile=self.AUTHOR_ROLE)
        assert rules.has_rights_holder_in_element_or_author_role()(bag).status == RuleResultStatus.SUCCESS
        assert rules.has_rights_holder_in_author_role()(bag).status == RuleResultStatus.SUCCESS
        assert rules.has_no_rights_holder_author_role()(bag).status == RuleResultStatus.ERROR

    def test_missing(self, rules, write_dataset):
        bag = write_dataset("<dcterms:rightsHolder>   </dcterms:rightsHolder>")
        assert messages(rules.has_rights_holder_in_element_or_author_role()(bag)) == [
            "No RightsHolder found in <dcx-dai:role> element nor in <dcterms:rightsHolder> element"
        ]
