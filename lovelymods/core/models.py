# lovelymods/core/models.py
import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Union


class FilePayload(ABC):
    """A named, readable blob. Subclasses decide where the bytes come from."""
    name: str

    @abstractmethod
    async def text(self) -> str:
        pass


@dataclass
class DiskFile(FilePayload):
    """File payload backed by a file on disk; read lazily."""
    name: str
    path: Path

    async def text(self) -> str:
        return await asyncio.to_thread(self.path.read_text, encoding="utf-8", errors="replace")


@dataclass
class MemoryFile(FilePayload):
    """File payload synthesised in memory (e.g. the exclusion marker)."""
    name: str
    content: str

    async def text(self) -> str:
        return self.content


@dataclass
class DirectoryNode:
    """A materialised directory: child name -> DirectoryNode | FilePayload."""
    children: Dict[str, "Node"] = field(default_factory=dict)

    def __getitem__(self, name: str) -> "Node":
        return self.children[name]

    def __contains__(self, name: str) -> bool:
        return name in self.children

    def __len__(self) -> int:
        return len(self.children)

    def count_files(self) -> int:
        total = 0
        for child in self.children.values():
            total += child.count_files() if isinstance(child, DirectoryNode) else 1
        return total


Node = Union[DirectoryNode, FilePayload]


class ScriptOutcome(str, Enum):
    EXECUTED = "executed"
    REJECTED = "rejected"       # screened out (ffi / jit)
    FAILED = "failed"           # raised during execution
    UNAVAILABLE = "unavailable" # no Lua runtime


@dataclass
class ScriptResult:
    """Outcome of one script found while walking a mod tree."""
    mod_name: str
    path: str
    outcome: ScriptOutcome
    error: Optional[str] = None
