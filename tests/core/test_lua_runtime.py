# tests/core/test_lua_runtime.py
import pytest
from loguru import logger

from lovelymods.core.lua_runtime import LUPA_AVAILABLE, get_default_runtime
from lovelymods.core.models import ScriptOutcome
from lovelymods.core.script_runner import ScriptRunner

# Skip all tests in this module if lupa is not available
pytestmark = pytest.mark.skipif(not LUPA_AVAILABLE, reason="lupa library not installed")


@pytest.fixture
def log_lines():
    lines = []
    handler_id = logger.add(lambda msg: lines.append(msg.strip()), level="INFO", format="{level}|{message}")
    yield lines
    logger.remove(handler_id)


def test_stub_namespace_shape():
    runtime = get_default_runtime()
    state = runtime.create_state()
    assert state.eval("lovely.log ~= nil and lovely.warn ~= nil") is True
    assert state.eval("type(lovely.config)") == "table"
    assert state.eval("next(lovely.config)") is None


def test_log_and_warn_forward_to_logger(log_lines):
    runtime = get_default_runtime()
    runtime.execute(runtime.create_state(), "lovely.log('hello'); lovely.warn(42); lovely.log(nil)")
    assert "INFO|[lovely][hello]" in log_lines
    assert "WARNING|[lovely][42]" in log_lines
    assert "INFO|[lovely][nil]" in log_lines


def test_globals_do_not_leak_between_scripts(registry, notifier):
    runner = ScriptRunner(registry, get_default_runtime(), notifier)
    first = runner.run_script("A", "leaked = 'yes'")
    second = runner.run_script("B", "assert(leaked == nil, 'global leaked')")
    assert first.outcome is ScriptOutcome.EXECUTED
    assert second.outcome is ScriptOutcome.EXECUTED
    assert notifier.messages == []


def test_lua_error_becomes_failed_result(registry, notifier):
    result = ScriptRunner(registry, get_default_runtime(), notifier).run_script("Bad", "error('kaboom')")
    assert result.outcome is ScriptOutcome.FAILED
    assert "kaboom" in result.error
    assert notifier.messages[0].startswith('Error running mod "Bad":')


def test_syntax_error_becomes_failed_result(registry, notifier):
    result = ScriptRunner(registry, get_default_runtime(), notifier).run_script("Bad", "local = = 1")
    assert result.outcome is ScriptOutcome.FAILED


def test_scripts_cannot_reach_stub_internals(registry, notifier):
    runner = ScriptRunner(registry, get_default_runtime(), notifier)
    via_getter = runner.run_script("Sneaky", "local get = python and python.as_attrgetter or function(o) return o end\n"
                                              "local g = get(lovely.log).__globals__")
    direct = runner.run_script("Sneaky", "local g = lovely.log.__globals__")
    assert via_getter.outcome is ScriptOutcome.FAILED
    assert direct.outcome is ScriptOutcome.FAILED
    assert "__globals__" in direct.error


def test_script_output_is_tagged_with_mod_name():
    lines = []
    handler_id = logger.add(lambda msg: lines.append(msg.strip()), level="INFO", format="{extra[lua_mod]}|{message}",
                            filter=lambda record: "lua_mod" in record["extra"])
    try:
        runtime = get_default_runtime()
        runtime.execute(runtime.create_state("Talisman"), "lovely.log('ready')")
    finally:
        logger.remove(handler_id)
    assert lines == ["Talisman|[lovely][ready]"]
