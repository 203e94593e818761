# lovelymods/core/lua_runtime.py
from abc import ABC, abstractmethod
from typing import Any, Optional

from loguru import logger

# --- lupa Initialization ---
try:
    import lupa
    LUPA_AVAILABLE = True
except ImportError:
    logger.warning("lupa library not found. Lua mod scripts cannot be run.")
    lupa = None # type: ignore
    LUPA_AVAILABLE = False

STUB_NAMESPACE = "lovely"


class InterpreterRuntime(ABC):
    """Creates isolated interpreter states and runs source text in them."""

    @abstractmethod
    def create_state(self, owner: str = "") -> Any:
        """Returns a new isolated state; `owner` names the mod for log output."""

    @abstractmethod
    def execute(self, state: Any, source: str) -> None:
        """Runs `source` in `state`. Script errors are raised."""


def _stub_log(tostring, script_logger):
    def log(msg=None):
        script_logger.info(f"[lovely][{tostring(msg)}]")
    return log


def _stub_warn(tostring, script_logger):
    def warn(msg=None):
        script_logger.warning(f"[lovely][{tostring(msg)}]")
    return warn


def _deny_private_attributes(obj, attr_name, is_setting):
    # Scripts only ever call the stubs; no reaching into __globals__ and friends
    if isinstance(attr_name, str) and attr_name.startswith("_"):
        raise AttributeError(f"access to '{attr_name}' is not allowed")
    return attr_name


class LupaRuntime(InterpreterRuntime):
    """
    Lua 5.x through lupa. Every state is a brand new LuaRuntime seeded with the
    `lovely` stub table:

        lovely.log(msg)   -> INFO log line
        lovely.warn(msg)  -> WARNING log line
        lovely.config     -> empty table
    """

    def __init__(self):
        if not LUPA_AVAILABLE:
            raise RuntimeError("lupa is not installed")

    def create_state(self, owner: str = "") -> "lupa.LuaRuntime":
        lua = lupa.LuaRuntime(unpack_returned_tuples=True, register_eval=False, register_builtins=False,
                              attribute_filter=_deny_private_attributes)
        tostring = lua.globals().tostring
        script_logger = logger.bind(lua_mod=owner or "?")
        lua.globals()[STUB_NAMESPACE] = lua.table_from({
            "log": _stub_log(tostring, script_logger),
            "warn": _stub_warn(tostring, script_logger),
            "config": lua.table(),
        })
        logger.trace("Created fresh Lua state with lovely stub.")
        return lua

    def execute(self, state: "lupa.LuaRuntime", source: str) -> None:
        state.execute(source)


def get_default_runtime() -> Optional[InterpreterRuntime]:
    """Returns the lupa-backed runtime, or None when lupa can't be imported."""
    if not LUPA_AVAILABLE:
        return None
    return LupaRuntime()
