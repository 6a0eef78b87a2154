"""Collaborators that give rule bodies access to bags and the data station."""

from .bag_metadata import BagItMetadataReader
from .dataverse import DataverseClient
from .files import FileService
from .files_xml import FilesXmlService
from .original_filepaths import OriginalFilepathsService
from .xml_reader import XmlDocument, XmlReader
from .xml_schema import XmlSchemaValidator

__all__ = [
    "BagItMetadataReader",
    "DataverseClient",
    "FileService",
    "FilesXmlService",
    "OriginalFilepathsService",
    "XmlDocument",
    "XmlReader",
    "XmlSchemaValidator",
]
