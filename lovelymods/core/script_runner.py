# lovelymods/core/script_runner.py
import re
from typing import Iterator, List, Optional, Tuple

from loguru import logger

from .lua_runtime import InterpreterRuntime
from .models import DirectoryNode, FilePayload, ScriptOutcome, ScriptResult
from .notify import LogNotifier, Notifier
from .registry import ModRegistry

SCRIPT_EXTENSION = ".lua"

# Plain text patterns, not a parse: comments and strings count too.
_FFI_REQUIRE = re.compile(r"""require\s*\(\s*["']ffi["']\s*\)""")
_JIT_TOKEN = re.compile(r"\bjit\b")


def is_restricted_source(text: str) -> bool:
    """True if the script pulls in LuaJIT's ffi module or mentions `jit` as a word."""
    return bool(_FFI_REQUIRE.search(text) or _JIT_TOKEN.search(text))


def find_scripts(tree: DirectoryNode, prefix: str = "") -> Iterator[Tuple[str, FilePayload]]:
    """Depth-first walk yielding (relative path, payload) for every .lua file."""
    for name, child in tree.children.items():
        path = f"{prefix}/{name}" if prefix else name
        if isinstance(child, DirectoryNode):
            yield from find_scripts(child, path)
        elif name.endswith(SCRIPT_EXTENSION):
            yield path, child


class ScriptRunner:
    """Screens and runs the Lua scripts of every registered mod, one state per script."""

    def __init__(self,
                 registry: ModRegistry,
                 runtime: Optional[InterpreterRuntime],
                 notifier: Optional[Notifier] = None):
        self.registry = registry
        self.runtime = runtime
        self.notifier = notifier or LogNotifier()

    def run_script(self, mod_name: str, text: str, path: str = "") -> ScriptResult:
        if self.runtime is None:
            logger.error("No Lua runtime configured; cannot run mod scripts.")
            self.notifier.notify("Lua runtime is not available. Install 'lupa' to run mod scripts.")
            return ScriptResult(mod_name, path, ScriptOutcome.UNAVAILABLE)

        if is_restricted_source(text):
            logger.warning(f"Rejected {path or 'script'} from mod '{mod_name}': LuaJIT/FFI usage.")
            self.notifier.notify(f'Mod "{mod_name}" uses LuaJIT/FFI or jit APIs and cannot be run.')
            return ScriptResult(mod_name, path, ScriptOutcome.REJECTED)

        state = self.runtime.create_state(mod_name)
        try:
            self.runtime.execute(state, text)
        except Exception as e:
            logger.error(f"Error running mod {mod_name} ({path or 'script'}): {e}")
            self.notifier.notify(f'Error running mod "{mod_name}": {e}')
            return ScriptResult(mod_name, path, ScriptOutcome.FAILED, error=str(e))

        logger.debug(f"Ran {path or 'script'} from mod '{mod_name}'.")
        return ScriptResult(mod_name, path, ScriptOutcome.EXECUTED)

    async def run_all_scripts(self) -> List[ScriptResult]:
        """Runs every .lua file in every mod. A failing file never stops the others."""
        results: List[ScriptResult] = []
        for mod_name, tree in self.registry.items():
            for path, payload in find_scripts(tree):
                try:
                    text = await payload.text()
                except OSError as e:
                    logger.error(f"Could not read {path} from mod '{mod_name}': {e}")
                    self.notifier.notify(f'Error running mod "{mod_name}": {e}')
                    results.append(ScriptResult(mod_name, path, ScriptOutcome.FAILED, error=str(e)))
                    continue
                results.append(self.run_script(mod_name, text, path))

        executed = sum(1 for r in results if r.outcome is ScriptOutcome.EXECUTED)
        logger.info(f"Script run finished: {executed}/{len(results)} executed.")
        return results
