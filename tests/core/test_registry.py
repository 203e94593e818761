# tests/core/test_registry.py
import asyncio

from lovelymods.core.models import DirectoryNode, MemoryFile
from lovelymods.core.registry import EXCLUSION_MARKER, REFERENCE_DUMP_KEY


def _registry_with(registry, *names):
    for name in names:
        registry.add(name, DirectoryNode({"main.lua": MemoryFile("main.lua", "")}))
    return registry


def test_mark_excluded_without_dump_is_noop(registry):
    _registry_with(registry, "X")
    assert registry.mark_excluded("X") is False
    assert EXCLUSION_MARKER not in registry.get("X")


def test_mark_excluded_injects_marker(registry):
    _registry_with(registry, "X", REFERENCE_DUMP_KEY)

    assert registry.mark_excluded("X") is True
    marker = registry.get("X")[EXCLUSION_MARKER]
    assert isinstance(marker, MemoryFile)
    assert marker.name == "dont_patch.txt"
    assert asyncio.run(marker.text()) == "true"


def test_mark_excluded_is_idempotent(registry):
    _registry_with(registry, "X", REFERENCE_DUMP_KEY)
    registry.mark_excluded("X")
    first = dict(registry.get("X").children)
    registry.mark_excluded("X")
    assert registry.get("X").children == first
    assert len(registry.get("X")) == 2


def test_dump_itself_is_never_markable(registry):
    _registry_with(registry, REFERENCE_DUMP_KEY)
    assert registry.can_mark(REFERENCE_DUMP_KEY) is False
    assert registry.mark_excluded(REFERENCE_DUMP_KEY) is False
    assert not registry.is_excluded(REFERENCE_DUMP_KEY)


def test_unknown_mod_is_not_markable(registry):
    _registry_with(registry, REFERENCE_DUMP_KEY)
    assert registry.mark_excluded("ghost") is False
    assert "ghost" not in registry


def test_clear_empties_and_notifies(registry, mocker):
    _registry_with(registry, "X", "Y")
    listener = mocker.Mock()
    registry.subscribe(listener)

    registry.clear()

    assert len(registry) == 0
    assert registry.has_reference_dump is False
    listener.assert_called_once_with()


def test_broken_listener_does_not_block_others(registry, mocker):
    good = mocker.Mock()
    registry.subscribe(mocker.Mock(side_effect=RuntimeError("ui gone")))
    registry.subscribe(good)
    _registry_with(registry, "X")
    good.assert_called_once_with()


