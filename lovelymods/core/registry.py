# lovelymods/core/registry.py
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from loguru import logger

from .models import DirectoryNode, MemoryFile

REFERENCE_DUMP_KEY = "Dump from Lovely"
EXCLUSION_MARKER = "dont_patch.txt"
EXCLUSION_MARKER_CONTENT = "true"


class ModRegistry:
    """
    Mod name -> materialised tree, owned by whoever drives the app.

    Not thread-safe: every mutation happens on the caller's thread. Callers
    that move work onto threads must serialise add/clear/mark_excluded.
    """

    def __init__(self):
        self._mods: Dict[str, DirectoryNode] = {}
        self._listeners: List[Callable[[], None]] = []

    # --- Observers ---

    def subscribe(self, callback: Callable[[], None]) -> None:
        self._listeners.append(callback)

    def _notify_changed(self) -> None:
        for callback in list(self._listeners):
            try:
                callback()
            except Exception:
                logger.exception("Registry listener raised.")

    # --- Mutation ---

    def add(self, name: str, tree: DirectoryNode) -> None:
        self._store(name, tree)
        self._notify_changed()

    def add_many(self, trees: Dict[str, DirectoryNode]) -> None:
        """Adds several mods and notifies listeners once."""
        for name, tree in trees.items():
            self._store(name, tree)
        self._notify_changed()

    def _store(self, name: str, tree: DirectoryNode) -> None:
        if name in self._mods:
            logger.info(f"Replacing mod '{name}' in registry.")
        else:
            logger.info(f"Added mod '{name}' ({tree.count_files()} files).")
        self._mods[name] = tree

    def clear(self) -> None:
        logger.info(f"Clearing {len(self._mods)} mods from registry.")
        self._mods = {}
        self._notify_changed()

    # --- Exclusion marking ---

    @property
    def has_reference_dump(self) -> bool:
        return REFERENCE_DUMP_KEY in self._mods

    def can_mark(self, name: str) -> bool:
        """True if `name` may carry an exclusion checkbox right now."""
        return self.has_reference_dump and name != REFERENCE_DUMP_KEY and name in self._mods

    def mark_excluded(self, name: str) -> bool:
        """Drops the dont_patch.txt marker into the mod's top level. Returns False if not allowed."""
        if not self.can_mark(name):
            logger.debug(f"Ignoring exclusion request for '{name}' (dump loaded: {self.has_reference_dump}).")
            return False
        self._mods[name].children[EXCLUSION_MARKER] = MemoryFile(EXCLUSION_MARKER, EXCLUSION_MARKER_CONTENT)
        logger.info(f"Marked mod '{name}' as excluded from patching.")
        return True

    def is_excluded(self, name: str) -> bool:
        tree = self._mods.get(name)
        return tree is not None and EXCLUSION_MARKER in tree

    # --- Read access ---

    def get(self, name: str) -> Optional[DirectoryNode]:
        return self._mods.get(name)

    def names(self) -> List[str]:
        return list(self._mods.keys())

    def items(self) -> List[Tuple[str, DirectoryNode]]:
        return list(self._mods.items())

    def __contains__(self, name: str) -> bool:
        return name in self._mods

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._mods)
