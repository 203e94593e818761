# lovelymods/core/tree_builder.py
from typing import Dict, List, Optional

from loguru import logger

from .handles import DirectoryHandle, DirectorySource, HandleKind, HandleNotFoundError
from .models import DirectoryNode
from .notify import LogNotifier, Notifier
from .registry import REFERENCE_DUMP_KEY, ModRegistry
from ..config.schema import AppConfig

MOD_MANIFEST = "lovely.toml"
MOD_LOADER_DIR = "lovely"
COMPATIBILITY_MARKER = "webcompatible"
DUMP_INSTRUCTIONS = "Click the checkboxes next to the mods that were in provided dump."


async def is_mod(directory: DirectoryHandle) -> bool:
    """A directory is a mod if it has lovely.toml or a lovely/ folder at its root."""
    try:
        await directory.get_file_child(MOD_MANIFEST)
        return True
    except HandleNotFoundError:
        pass
    try:
        await directory.get_directory_child(MOD_LOADER_DIR)
        return True
    except HandleNotFoundError:
        return False


async def build_tree(directory: DirectoryHandle,
                     is_root: bool = False,
                     warn_if_incompatible: bool = True,
                     notifier: Optional[Notifier] = None) -> DirectoryNode:
    """
    Materialises `directory` into a DirectoryNode, depth-first and sequentially.

    At a mod root the `webcompatible` marker is looked up; when it is missing and
    `warn_if_incompatible` is set, the notifier gets a warning. Construction
    carries on either way.
    """
    if is_root:
        try:
            await directory.get_file_child(COMPATIBILITY_MARKER)
        except HandleNotFoundError:
            logger.debug(f"No {COMPATIBILITY_MARKER} marker in '{directory.name}'.")
            if warn_if_incompatible:
                (notifier or LogNotifier()).notify(f"Mod {directory.name} may not be web compatible.")

    node = DirectoryNode()
    async for name, kind, child in directory.children():
        if kind is HandleKind.DIRECTORY:
            node.children[name] = await build_tree(child)
        else:
            node.children[name] = await child.get_file()
    return node


class ModLoader:
    """Picks folders, turns them into trees and files them in the registry."""

    def __init__(self,
                 registry: ModRegistry,
                 source: DirectorySource,
                 notifier: Optional[Notifier] = None,
                 config: Optional[AppConfig] = None):
        self.registry = registry
        self.source = source
        self.notifier = notifier or LogNotifier()
        self.config = config or AppConfig()

    async def add_mod_directory(self) -> List[str]:
        """
        Asks for a folder and registers it.

        A folder that is itself a mod becomes one entry; otherwise each immediate
        subdirectory is treated as its own mod. Loose files next to them are ignored.
        Returns the names that were added.
        """
        picked = await self.source.pick(mode="read", start_in=self.config.start_in)
        warn = self.config.warn_incompatible
        trees: Dict[str, DirectoryNode] = {}

        if await is_mod(picked):
            logger.info(f"'{picked.name}' is a single mod.")
            trees[picked.name] = await build_tree(picked, True, warn, self.notifier)
        else:
            logger.info(f"'{picked.name}' is not a mod; treating subfolders as mods.")
            async for name, kind, child in picked.children():
                if kind is HandleKind.DIRECTORY:
                    trees[name] = await build_tree(child, True, warn, self.notifier)

        if not trees:
            logger.warning(f"No mods found in '{picked.name}'.")
        self.registry.add_many(trees)
        return list(trees.keys())

    async def load_reference_dump(self) -> DirectoryNode:
        """Loads a Lovely dump folder as the reference tree, replacing any earlier one."""
        picked = await self.source.pick(mode="read", start_in=self.config.start_in)
        tree = await build_tree(picked, True, False, self.notifier)
        self.registry.add(REFERENCE_DUMP_KEY, tree)
        self.notifier.notify(DUMP_INSTRUCTIONS)
        return tree
