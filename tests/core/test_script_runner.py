# tests/core/test_script_runner.py
import asyncio

import pytest

from lovelymods.core.handles import StaticDirectorySource
from lovelymods.core.models import DirectoryNode, MemoryFile, ScriptOutcome
from lovelymods.core.script_runner import ScriptRunner, find_scripts, is_restricted_source
from lovelymods.core.tree_builder import ModLoader


@pytest.mark.parametrize("source", [
    'local ffi = require("ffi")',
    "local ffi = require('ffi')",
    "local ffi = require ( 'ffi' )",
    "if jit then print(jit.version) end",
    "local x = jit",
])
def test_restricted_sources(source):
    assert is_restricted_source(source) is True


@pytest.mark.parametrize("source", [
    "lovely.log('hello')",
    "local jitter = 1",
    "local myjit = require('jitter')",
    'require("ffix")',
    "",
])
def test_unrestricted_sources(source):
    assert is_restricted_source(source) is False


def test_find_scripts_walks_depth_first_with_paths():
    tree = DirectoryNode({
        "main.lua": MemoryFile("main.lua", ""),
        "lovely": DirectoryNode({"hooks.lua": MemoryFile("hooks.lua", ""), "patch.toml": MemoryFile("patch.toml", "")}),
        "readme.md": MemoryFile("readme.md", ""),
    })
    assert [path for path, _ in find_scripts(tree)] == ["main.lua", "lovely/hooks.lua"]


def test_run_script_without_runtime(registry, notifier):
    result = ScriptRunner(registry, None, notifier).run_script("Mod", "print(1)")
    assert result.outcome is ScriptOutcome.UNAVAILABLE
    assert len(notifier.messages) == 1
    assert "not available" in notifier.messages[0]


def test_run_script_rejects_ffi_without_creating_state(registry, notifier, fake_runtime):
    result = ScriptRunner(registry, fake_runtime, notifier).run_script("Native", "require('ffi')")
    assert result.outcome is ScriptOutcome.REJECTED
    assert fake_runtime.states == []
    assert notifier.messages == ['Mod "Native" uses LuaJIT/FFI or jit APIs and cannot be run.']


def test_run_script_uses_fresh_state_each_time(registry, notifier, fake_runtime):
    runner = ScriptRunner(registry, fake_runtime, notifier)
    runner.run_script("A", "x = 1")
    runner.run_script("B", "x = 2")
    assert len(fake_runtime.states) == 2
    assert fake_runtime.states[0] is not fake_runtime.states[1]
    assert fake_runtime.states[0]["globals"]["last"] == "x = 1"


def test_run_script_failure_is_reported_not_raised(registry, notifier, fake_runtime):
    result = ScriptRunner(registry, fake_runtime, notifier).run_script("Broken", "boom()", "main.lua")
    assert result.outcome is ScriptOutcome.FAILED
    assert "boom" in result.error
    assert notifier.messages == ['Error running mod "Broken": boom: script blew up']


def test_run_all_scripts_end_to_end(tmp_path, build_dir, registry, notifier, fake_runtime):
    mods = build_dir(tmp_path / "Mods", {
        "Alpha": {"lovely.toml": "", "webcompatible": "", "main.lua": "boom()", "native.lua": "require('ffi')"},
        "Beta": {"lovely.toml": "", "webcompatible": "", "src": {"init.lua": "lovely.log('beta')"}},
    })
    asyncio.run(ModLoader(registry, StaticDirectorySource(mods), notifier).add_mod_directory())
    before = {name: dict(tree.children) for name, tree in registry.items()}

    results = asyncio.run(ScriptRunner(registry, fake_runtime, notifier).run_all_scripts())

    outcomes = {(r.mod_name, r.path): r.outcome for r in results}
    assert outcomes == {
        ("Alpha", "main.lua"): ScriptOutcome.FAILED,
        ("Alpha", "native.lua"): ScriptOutcome.REJECTED,
        ("Beta", "src/init.lua"): ScriptOutcome.EXECUTED,
    }
    assert fake_runtime.executed == ["lovely.log('beta')"]
    assert {name: dict(tree.children) for name, tree in registry.items()} == before


def test_run_all_scripts_survives_unreadable_file(registry, notifier, fake_runtime, mocker):
    bad = MemoryFile("bad.lua", "")
    mocker.patch.object(bad, "text", side_effect=OSError("disk went away"))
    registry.add("Flaky", DirectoryNode({"bad.lua": bad, "good.lua": MemoryFile("good.lua", "ok()")}))

    results = asyncio.run(ScriptRunner(registry, fake_runtime, notifier).run_all_scripts())

    assert [r.outcome for r in results] == [ScriptOutcome.FAILED, ScriptOutcome.EXECUTED]
    assert fake_runtime.executed == ["ok()"]


def test_state_is_created_for_the_running_mod(registry, notifier, fake_runtime):
    ScriptRunner(registry, fake_runtime, notifier).run_script("Talisman", "x = 1")
    assert fake_runtime.states[0]["owner"] == "Talisman"
