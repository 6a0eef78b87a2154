"""Secure XML parsing and ElementPath lookups for bag metadata files."""

import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from xml.etree.ElementTree import Element

from defusedxml.ElementTree import iterparse as defused_iterparse

logger = logging.getLogger(__name__)

NAMESPACE_DC = "http://purl.org/dc/elements/1.1/"
NAMESPACE_DCX_DAI = "http://easy.dans.knaw.nl/schemas/dcx/dai/"
NAMESPACE_DDM = "http://easy.dans.knaw.nl/schemas/md/ddm/"
NAMESPACE_DCTERMS = "http://purl.org/dc/terms/"
NAMESPACE_XSI = "http://www.w3.org/2001/XMLSchema-instance"
NAMESPACE_ID_TYPE = "http://easy.dans.knaw.nl/schemas/vocab/identifier-type/"
NAMESPACE_DCX_GML = "http://easy.dans.knaw.nl/schemas/dcx/gml/"
NAMESPACE_FILES_XML = "http://easy.dans.knaw.nl/schemas/bag/metadata/files/"
NAMESPACE_OPENGIS = "http://www.opengis.net/gml"

NAMESPACES = {
    "dc": NAMESPACE_DC,
    "dcx-dai": NAMESPACE_DCX_DAI,
    "ddm": NAMESPACE_DDM,
    "dcterms": NAMESPACE_DCTERMS,
    "xsi": NAMESPACE_XSI,
    "id-type": NAMESPACE_ID_TYPE,
    "dcx-gml": NAMESPACE_DCX_GML,
    "files": NAMESPACE_FILES_XML,
    "gml": NAMESPACE_OPENGIS,
}

XSI_TYPE = f"{{{NAMESPACE_XSI}}}type"


def local_name(tag: str) -> str:
    """Tag name without its {namespace} part."""
    return tag.rsplit("}", 1)[-1]


def namespace_of(tag: str) -> str | None:
    if tag.startswith("{"):
        return tag[1:].split("}", 1)[0]
    return None


def text_content(element: Element) -> str:
    """Concatenated text of an element and all of its descendants."""
    return "".join(element.itertext())


@dataclass
class XmlDocument:
    """Parsed XML document with the namespace prefixes it declares."""
    root: Element
    prefixes: dict[str, str] = field(default_factory=dict)

    def lookup_prefix(self, namespace_uri: str) -> str | None:
        """Return the prefix the document binds to a namespace URI, if any."""
        for prefix, uri in self.prefixes.items():
            if uri == namespace_uri and prefix:
                return prefix
        return None

    def parent_map(self) -> dict[Element, Element]:
        return {child: parent for parent in self.root.iter() for child in parent}


class XmlReader:
    """Parses XML with defusedxml and evaluates ElementPath expressions."""

    def read_xml_file(self, path: Path) -> XmlDocument:
        logger.debug(f"Reading XML file {path}")
        with open(path, "rb") as f:
            return self._parse(f)

    def read_xml_string(self, content: str | bytes) -> XmlDocument:
        if isinstance(content, str):
            content = content.encode("utf-8")
        return self._parse(io.BytesIO(content))

    def _parse(self, source) -> XmlDocument:
        root = None
        prefixes: dict[str, str] = {}

        for event, item in defused_iterparse(source, events=("start", "start-ns")):
            if event == "start-ns":
                prefix, uri = item
                prefixes.setdefault(prefix, uri)
            elif root is None:
                root = item

        return XmlDocument(root, prefixes)

    def xpath(self, node: Element | XmlDocument, expression: str) -> list[Element]:
        """Evaluate an ElementPath expression using the well-known prefixes."""
        if isinstance(node, XmlDocument):
            node = node.root
        return node.findall(expression, NAMESPACES)

    def xpaths(self, node: Element | XmlDocument, expressions: list[str]) -> list[Element]:
        results: list[Element] = []
        for expression in expressions:
            results.extend(self.xpath(node, expression))
        return results

    def xpath_texts(self, node: Element | XmlDocument, expression: str) -> list[str]:
        return [text_content(element) for element in self.xpath(node, expression)]
