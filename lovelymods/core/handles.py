# lovelymods/core/handles.py
import asyncio
import os
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import AsyncIterator, Tuple, Union

from loguru import logger

from .models import DiskFile, FilePayload


class HandleError(Exception):
    """Base class for directory/file handle failures."""


class HandleNotFoundError(HandleError):
    """Raised when a named child does not exist (or is not of the requested kind)."""


class PickerCancelledError(HandleError):
    """Raised when the user dismisses the folder picker or access is refused."""


class HandleKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


class FileHandle(ABC):
    name: str

    @abstractmethod
    async def get_file(self) -> FilePayload:
        """Returns a readable payload for this file."""


class DirectoryHandle(ABC):
    """A directory capability: lookup by name and enumeration of immediate children."""
    name: str

    @abstractmethod
    async def get_file_child(self, name: str) -> FileHandle:
        pass

    @abstractmethod
    async def get_directory_child(self, name: str) -> "DirectoryHandle":
        pass

    @abstractmethod
    def children(self) -> AsyncIterator[Tuple[str, HandleKind, Union[FileHandle, "DirectoryHandle"]]]:
        """Yields (name, kind, handle) for each child in enumeration order."""


class DirectorySource(ABC):
    """Something that can hand out a directory, usually by asking the user."""

    @abstractmethod
    async def pick(self, mode: str = "read", start_in: str = "downloads") -> DirectoryHandle:
        """Returns a directory handle or raises PickerCancelledError."""


# --- Local file system implementation ---

def _is_real(path: Path, check) -> bool:
    """Kind check that treats symlinks as absent."""
    return not path.is_symlink() and check(path)


class LocalFileHandle(FileHandle):
    def __init__(self, path: Path):
        self.path = path
        self.name = path.name

    async def get_file(self) -> FilePayload:
        return DiskFile(name=self.name, path=self.path)

    def __repr__(self):
        return f"LocalFileHandle({str(self.path)!r})"


class LocalDirectoryHandle(DirectoryHandle):
    """DirectoryHandle backed by a real directory. Blocking calls run in a worker thread."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.name = self.path.name

    async def get_file_child(self, name: str) -> FileHandle:
        child = self.path / name
        if not await asyncio.to_thread(_is_real, child, Path.is_file):
            raise HandleNotFoundError(f"No file named '{name}' in {self.path}")
        return LocalFileHandle(child)

    async def get_directory_child(self, name: str) -> "LocalDirectoryHandle":
        child = self.path / name
        if not await asyncio.to_thread(_is_real, child, Path.is_dir):
            raise HandleNotFoundError(f"No directory named '{name}' in {self.path}")
        return LocalDirectoryHandle(child)

    async def children(self):
        try:
            entries = await asyncio.to_thread(lambda: list(os.scandir(self.path)))
        except FileNotFoundError as e:
            raise HandleNotFoundError(f"Directory vanished: {self.path}") from e

        for entry in entries:
            entry_path = Path(entry.path)
            # Links are never followed, so the tree stays acyclic
            if entry.is_symlink():
                logger.trace(f"Ignoring symlink entry: {entry_path}")
                continue
            if entry.is_dir():
                yield entry.name, HandleKind.DIRECTORY, LocalDirectoryHandle(entry_path)
            elif entry.is_file():
                yield entry.name, HandleKind.FILE, LocalFileHandle(entry_path)
            else:
                logger.trace(f"Skipping special file: {entry_path}")

    def __repr__(self):
        return f"LocalDirectoryHandle({str(self.path)!r})"


class StaticDirectorySource(DirectorySource):
    """Hands out a fixed path. Used by the CLI and by tests in place of a dialog."""

    def __init__(self, path: Path):
        self.path = Path(path)

    async def pick(self, mode: str = "read", start_in: str = "downloads") -> LocalDirectoryHandle:
        if not self.path.is_dir():
            raise PickerCancelledError(f"Not a readable directory: {self.path}")
        if mode == "read" and not os.access(self.path, os.R_OK):
            raise PickerCancelledError(f"Permission denied: {self.path}")
        logger.debug(f"Static source picked {self.path} (mode={mode}, start_in={start_in})")
        return LocalDirectoryHandle(self.path)
