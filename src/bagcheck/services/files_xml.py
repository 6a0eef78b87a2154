"""Reads the filepath attributes of metadata/files.xml."""

from pathlib import Path, PurePosixPath

from .xml_reader import NAMESPACE_FILES_XML, XmlReader, local_name, namespace_of

FILES_XML = Path("metadata/files.xml")


class FilesXmlService:
    """Extracts described file paths; files.xml may or may not use its namespace."""

    def __init__(self, xml_reader: XmlReader):
        self.xml_reader = xml_reader

    def read_filepaths(self, bag_dir: Path) -> list[PurePosixPath]:
        document = self.xml_reader.read_xml_file(bag_dir / FILES_XML)
        root = document.root

        if local_name(root.tag) != "files" or namespace_of(root.tag) not in (NAMESPACE_FILES_XML, None):
            return []

        paths = []
        for child in root:
            if local_name(child.tag) != "file" or namespace_of(child.tag) != namespace_of(root.tag):
                continue
            filepath = child.get("filepath")
            if filepath is not None:
                paths.append(PurePosixPath(filepath))

        return paths
