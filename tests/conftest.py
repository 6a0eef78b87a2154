"""Shared fixtures: DANS bags built with bagit in a temporary directory."""

from pathlib import Path
from unittest.mock import Mock

import bagit
import pytest

from bagcheck.config import BagcheckConfig
from bagcheck.service import build_service
from bagcheck.services import XmlSchemaValidator

DATASET_XML = """<?xml version="1.0" encoding="UTF-8"?>
<ddm:DDM xmlns:ddm="http://easy.dans.knaw.nl/schemas/md/ddm/"
         xmlns:dc="http://purl.org/dc/elements/1.1/"
         xmlns:dcterms="http://purl.org/dc/terms/"
         xmlns:dcx-dai="http://easy.dans.knaw.nl/schemas/dcx/dai/"
         xmlns:dcx-gml="http://easy.dans.knaw.nl/schemas/dcx/gml/"
         xmlns:gml="http://www.opengis.net/gml"
         xmlns:id-type="http://easy.dans.knaw.nl/schemas/vocab/identifier-type/"
         xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">
    <ddm:profile>
        <dc:title>Test dataset</dc:title>
        <dcx-dai:creatorDetails>
            <dcx-dai:author>
                <dcx-dai:initials>J</dcx-dai:initials>
                <dcx-dai:surname>Doe</dcx-dai:surname>
                <dcx-dai:DAI>info:eu-repo/dai/nl/123456789</dcx-dai:DAI>
            </dcx-dai:author>
        </dcx-dai:creatorDetails>
        <ddm:available>2020-01-01</ddm:available>
    </ddm:profile>
    <ddm:dcmiMetadata>
        <dcterms:rightsHolder>DANS</dcterms:rightsHolder>
        <dcterms:license xsi:type="dcterms:URI">http://creativecommons.org/licenses/by/4.0</dcterms:license>
    </ddm:dcmiMetadata>
</ddm:DDM>
"""

FILES_XML_HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<files xmlns="http://easy.dans.knaw.nl/schemas/bag/metadata/files/">\n'
)


def files_xml(*filepaths: str) -> str:
    entries = "".join(f'    <file filepath="{filepath}"/>\n' for filepath in filepaths)
    return FILES_XML_HEADER + entries + "</files>\n"


DEFAULT_BAG_INFO = {"Created": "2023-05-01T12:00:00.000+02:00"}


def build_bag(
    root: Path,
    name: str = "bag",
    payload: dict[str, str] | None = None,
    metadata: dict[str, str] | None = None,
    bag_info: dict | None = None,
    checksums: list[str] | None = None,
    tag_files: dict[str, str] | None = None,
) -> Path:
    """Create a bag with the given payload, then add metadata and tag files.

    Files added after bagging are not in the tag manifest, which bagit accepts.
    """
    bag_dir = root / name
    bag_dir.mkdir(parents=True)

    if payload is None:
        payload = {"file1.txt": "one", "sub/file2.txt": "two"}
    for relative, content in payload.items():
        target = bag_dir / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")

    bagit.make_bag(
        str(bag_dir),
        bag_info=dict(DEFAULT_BAG_INFO if bag_info is None else bag_info),
        checksums=checksums or ["sha1"],
    )

    if metadata is None:
        metadata = {
            "dataset.xml": DATASET_XML,
            "files.xml": files_xml(*(f"data/{p}" for p in payload)),
        }
    for relative, content in metadata.items():
        target = bag_dir / "metadata" / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")

    for relative, content in (tag_files or {}).items():
        (bag_dir / relative).write_text(content, encoding="utf-8")

    return bag_dir


@pytest.fixture
def bag_factory(tmp_path):
    """Build bags below tmp_path; see build_bag for the arguments."""
    counter = {"n": 0}

    def factory(**kwargs) -> Path:
        counter["n"] += 1
        kwargs.setdefault("name", f"bag{counter['n']}")
        return build_bag(tmp_path, **kwargs)

    return factory


@pytest.fixture
def valid_bag(bag_factory) -> Path:
    return bag_factory()


@pytest.fixture
def dataset_xml() -> str:
    """A dataset.xml that passes every dataset.xml rule."""
    return DATASET_XML


@pytest.fixture
def make_files_xml():
    return files_xml


@pytest.fixture
def schema_validator():
    """Schema validator that accepts every document, so tests need no network access."""
    validator = Mock(spec=XmlSchemaValidator)
    validator.validate_document.return_value = []
    return validator


@pytest.fixture
def service(schema_validator):
    return build_service(BagcheckConfig(), schema_validator=schema_validator)
