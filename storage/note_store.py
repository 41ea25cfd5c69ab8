"""Storage interface for the notes vault and its local filesystem backend."""
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)


def join_path(folder: str, name: str) -> str:
    """Join a vault folder and a child name with '/' separators."""
    folder = folder.strip('/')
    if not folder:
        return name
    return f"{folder}/{name}"


def basename(path: str) -> str:
    """Last component of a vault path."""
    return path.rsplit('/', 1)[-1]


class NoteStore(ABC):
    """
    Hierarchical namespace of text files.

    Paths are vault-relative and use '/' as separator.
    """

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Check whether a file exists at the path."""

    @abstractmethod
    def read(self, path: str) -> str:
        """Read a file as UTF-8 text."""

    @abstractmethod
    def create(self, path: str, content: str) -> None:
        """
        Create a new file.

        Raises:
            FileExistsError: If a file already exists at the path
        """

    @abstractmethod
    def modify(self, path: str, content: str) -> None:
        """
        Replace the content of an existing file.

        Raises:
            FileNotFoundError: If no file exists at the path
        """

    @abstractmethod
    def list_children(self, folder: str) -> List[str]:
        """Paths of the files directly inside a folder (not recursive)."""


class LocalNoteStore(NoteStore):
    """Note store backed by a directory on the local filesystem."""

    def __init__(self, root: str):
        """
        Initialize the store.

        Args:
            root: Directory that holds the vault
        """
        self.root = Path(root)
        logger.info(f"Initialized LocalNoteStore at: {self.root}")

    def exists(self, path: str) -> bool:
        return self._resolve(path).exists()

    def read(self, path: str) -> str:
        return self._resolve(path).read_text(encoding='utf-8')

    def create(self, path: str, content: str) -> None:
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        # 'x' mode fails if the file already exists
        with target.open('x', encoding='utf-8') as handle:
            handle.write(content)

    def modify(self, path: str, content: str) -> None:
        target = self._resolve(path)
        if not target.is_file():
            raise FileNotFoundError(f"No file to modify at: {path}")
        target.write_text(content, encoding='utf-8')

    def list_children(self, folder: str) -> List[str]:
        directory = self._resolve(folder)
        if not directory.is_dir():
            return []

        return sorted(
            join_path(folder, child.name)
            for child in directory.iterdir()
            if child.is_file()
        )

    def _resolve(self, path: str) -> Path:
        return self.root / path.strip('/')
