"""Rule libraries and the numbered rule catalog."""

from .bag import BagRules
from .catalog import build_rule_catalog
from .datastation import DatastationRules
from .dataset_xml import DatasetXmlRules
from .files_xml import FilesXmlRules
from .schema import XmlSchemaRules

__all__ = [
    "BagRules",
    "DatasetXmlRules",
    "DatastationRules",
    "FilesXmlRules",
    "XmlSchemaRules",
    "build_rule_catalog",
]
