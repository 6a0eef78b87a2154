"""The numbered rule catalog of the DANS bag profile."""

from pathlib import Path

from ..engine.models import DepositType, NumberedRule, ValidationContext, numbered_rule
from .bag import BagRules
from .datastation import DatastationRules
from .dataset_xml import DATASET_XML, DatasetXmlRules
from .files_xml import FilesXmlRules
from .schema import XmlSchemaRules

DEPOSIT = DepositType.DEPOSIT
MIGRATION = DepositType.MIGRATION
DATA_STATION = ValidationContext.WITH_DATA_STATION_CONTEXT

METADATA_DIR = Path("metadata")
FILES_XML = Path("metadata/files.xml")

MIGRATION_METADATA_FILES = [
    "dataset.xml",
    "files.xml",
    "provenance.xml",
    "amd.xml",
    "emd.xml",
    "original",
    "original/dataset.xml",
    "original/files.xml",
    "depositor-info",
    "depositor-info/agreements.xml",
    "depositor-info/depositor-agreement.pdf",
    "depositor-info/message-from-depositor.txt",
    "license.html",
    "license.txt",
    "license.pdf",
]

DEPOSIT_METADATA_FILES = ["dataset.xml", "files.xml"]


def build_rule_catalog(
    bag: BagRules,
    schema: XmlSchemaRules,
    dataset_xml: DatasetXmlRules,
    files_xml: FilesXmlRules,
    datastation: DatastationRules,
) -> tuple[NumberedRule, ...]:
    """Assemble the catalog in evaluation report order."""
    return (
        # bag structure and bag-info.txt
        numbered_rule("1.1.1", bag.bag_is_valid()),
        numbered_rule("1.2.1", bag.bag_info_exists_and_is_well_formed()),
        numbered_rule("1.2.2(a)", bag.bag_info_contains_exactly_one_of("Created"), "1.2.1"),
        numbered_rule("1.2.2(b)", bag.bag_info_created_element_is_iso8601_date(), "1.2.2(a)"),
        numbered_rule("1.2.3", bag.bag_info_contains_at_most_one_of("Data-Station-User-Account"), "1.2.1"),
        numbered_rule("1.2.4(a)", bag.bag_info_contains_at_most_one_of("Is-Version-Of"), "1.2.1"),
        numbered_rule("1.2.4(b)", bag.bag_info_is_version_of_is_valid_urn_uuid(), "1.2.4(a)"),
        numbered_rule("1.2.5(a)", bag.bag_info_contains_at_most_one_of("Has-Organizational-Identifier"), "1.2.1"),
        numbered_rule(
            "1.2.5(b)",
            bag.bag_info_contains_at_most_one_of("Has-Organizational-Identifier-Version"),
            "1.2.5(a)",
        ),
        numbered_rule("1.3.1", bag.contains_not_just_md5_manifest(), "1.1.1"),

        # metadata directory and payload
        numbered_rule("2.1", bag.contains_dir(METADATA_DIR), "1.1.1"),
        numbered_rule("2.2(a)", bag.contains_file(DATASET_XML), "2.1"),
        numbered_rule("2.2(b)", bag.contains_file(FILES_XML), "2.1"),
        numbered_rule(
            "2.4", bag.contains_nothing_else_than(METADATA_DIR, MIGRATION_METADATA_FILES), "2.1",
            deposit_type=MIGRATION,
        ),
        numbered_rule(
            "2.4", bag.contains_nothing_else_than(METADATA_DIR, DEPOSIT_METADATA_FILES), "2.1",
            deposit_type=DEPOSIT,
        ),
        numbered_rule("2.5", bag.has_only_valid_file_names(), "2.1"),
        numbered_rule("2.6.1", bag.optional_file_is_utf8_decodable(Path("original-filepaths.txt")), "1.1.1"),
        numbered_rule("2.6.2", bag.is_original_filepaths_file_complete(), "2.6.1", "2.2(b)"),

        # dataset.xml
        numbered_rule("3.1.1", schema.xml_file_conforms_to_schema(DATASET_XML, "dataset.xml"), "1.1.1", "2.2(a)"),
        numbered_rule("3.1.2", dataset_xml.contains_exactly_one_supported_license(), "3.1.1"),
        numbered_rule("3.1.3", dataset_xml.dois_are_valid(), "3.1.1"),
        numbered_rule("3.1.4(a)", dataset_xml.dais_are_valid(), "3.1.1"),
        numbered_rule("3.1.4(b)", dataset_xml.isnis_are_valid(), "3.1.1"),
        numbered_rule("3.1.4(c)", dataset_xml.orcids_are_valid(), "3.1.1"),
        numbered_rule("3.1.5", dataset_xml.polygon_pos_lists_are_well_formed(), "3.1.1"),
        numbered_rule("3.1.6", dataset_xml.polygons_in_same_multi_surface_have_same_srs_name(), "3.1.1"),
        numbered_rule("3.1.7", dataset_xml.points_have_at_least_two_values(), "3.1.1"),
        numbered_rule("3.1.8", dataset_xml.archis_identifiers_have_at_most_10_characters(), "3.1.1"),
        numbered_rule("3.1.9", dataset_xml.all_urls_are_valid(), "3.1.1"),
        numbered_rule(
            "3.1.10(a)", dataset_xml.has_rights_holder_in_element_or_author_role(), "3.1.1",
            deposit_type=DEPOSIT,
        ),
        numbered_rule(
            "3.1.10(b)", dataset_xml.has_rights_holder_in_author_role(), "3.1.1",
            deposit_type=MIGRATION,
        ),
        numbered_rule("3.1.11", dataset_xml.has_no_rights_holder_author_role(), "3.1.1", deposit_type=DEPOSIT),

        # files.xml
        numbered_rule("3.2.1", schema.xml_file_conforms_to_schema(FILES_XML, "files.xml"), "1.1.1", "2.2(b)"),
        numbered_rule("3.2.2", files_xml.describes_only_payload_files(), "3.2.1"),
        numbered_rule("3.2.3", files_xml.no_duplicates_and_every_payload_file_is_described(), "3.2.1"),

        # optional migration metadata
        numbered_rule(
            "3.3.1",
            schema.xml_file_if_exists_conforms_to_schema(
                Path("metadata/depositor-info/agreements.xml"), "agreements.xml"
            ),
            deposit_type=MIGRATION,
        ),
        numbered_rule(
            "3.3.2", schema.xml_file_if_exists_conforms_to_schema(Path("metadata/amd.xml"), "amd.xml"),
            deposit_type=MIGRATION,
        ),
        numbered_rule(
            "3.3.3", schema.xml_file_if_exists_conforms_to_schema(Path("metadata/emd.xml"), "emd.xml"),
            deposit_type=MIGRATION,
        ),
        numbered_rule(
            "3.3.4",
            schema.xml_file_if_exists_conforms_to_schema(Path("metadata/provenance.xml"), "provenance.xml"),
            deposit_type=MIGRATION,
        ),

        # data station context
        numbered_rule(
            "4.1", bag.bag_info_contains_exactly_one_of("Data-Station-User-Account"), "1.2.1",
            context=DATA_STATION,
        ),
        numbered_rule("4.2", datastation.user_is_authorized_to_create_dataset(), "4.1", context=DATA_STATION),
        numbered_rule(
            "4.3", bag.organizational_identifier_prefix_is_valid(), "4.1", "1.2.5(a)",
            context=DATA_STATION,
        ),
        numbered_rule("4.4(a)", datastation.bag_exists_in_datastation(), "4.1", context=DATA_STATION),
        numbered_rule(
            "4.4(b)", datastation.organizational_identifier_exists_in_dataset(), "4.1", "4.4(a)",
            context=DATA_STATION,
        ),
        numbered_rule(
            "4.4(c)", datastation.user_is_authorized_to_update_dataset(), "4.1", "4.4(a)",
            context=DATA_STATION,
        ),
        numbered_rule(
            "4.5", datastation.embargo_period_within_limits(), "3.1.1",
            deposit_type=DEPOSIT, context=DATA_STATION,
        ),
        numbered_rule("4.6", datastation.license_allowed_by_datastation(), "3.1.2", context=DATA_STATION),
        numbered_rule(
            "4.7", bag.does_not_contain(Path("data"), ["original-metadata.zip"]), "1.1.1",
            deposit_type=DEPOSIT,
        ),
    )
