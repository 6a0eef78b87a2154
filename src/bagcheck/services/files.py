"""File system access used by rule bodies and the upload handling."""

import logging
import zipfile
from pathlib import Path
from typing import BinaryIO

logger = logging.getLogger(__name__)


class FileService:
    """Thin wrapper around the file system.

    Missing paths raise FileNotFoundError, other I/O problems raise OSError.
    """

    def is_directory(self, path: Path) -> bool:
        return path.is_dir()

    def is_file(self, path: Path) -> bool:
        return path.is_file()

    def exists(self, path: Path) -> bool:
        return path.exists()

    def list_files_recursively(self, path: Path) -> list[Path]:
        """List regular files below a directory, sorted."""
        if not path.is_dir():
            raise FileNotFoundError(f"Directory not found: {path}")
        return sorted(p for p in path.rglob("*") if p.is_file())

    def list_all_files_and_directories(self, path: Path) -> list[Path]:
        """List files and directories below a directory, excluding the directory itself."""
        if not path.is_dir():
            raise FileNotFoundError(f"Directory not found: {path}")
        return sorted(path.rglob("*"))

    def read_bytes(self, path: Path) -> bytes:
        return path.read_bytes()

    def read_text(self, path: Path) -> str:
        """Read a file as strict UTF-8; raises UnicodeDecodeError on invalid input."""
        return path.read_bytes().decode("utf-8")

    def extract_zip_file(self, stream: BinaryIO, target_dir: Path) -> Path:
        """Extract a zipped bag and return the bag directory.

        The archive must contain exactly one top-level directory. Entries that
        would land outside target_dir are rejected.

        Args:
            stream: Seekable binary stream with the zip archive
            target_dir: Existing, empty directory to extract into

        Returns:
            Path to the extracted bag directory

        Raises:
            ValueError: If the archive is not a usable bag archive
        """
        root = target_dir.resolve()

        try:
            with zipfile.ZipFile(stream) as archive:
                for member in archive.namelist():
                    destination = (root / member).resolve()
                    if not destination.is_relative_to(root):
                        raise ValueError(f"Zip entry escapes extraction directory: {member}")
                archive.extractall(root)
        except zipfile.BadZipFile as e:
            raise ValueError(f"Upload is not a valid zip file: {e}")

        entries = [p for p in root.iterdir() if not p.name.startswith("__MACOSX")]
        directories = [p for p in entries if p.is_dir()]
        if len(entries) != 1 or len(directories) != 1:
            raise ValueError(
                f"Zip file must contain exactly one top-level directory, found: {sorted(p.name for p in entries)}"
            )

        logger.debug(f"Extracted bag to {directories[0]}")
        return directories[0]
