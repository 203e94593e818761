# lovelymods/services/async_utils.py
import asyncio
from typing import Any, Coroutine, TypeVar

from loguru import logger

T = TypeVar("T")

def run_coroutine(coro: Coroutine[Any, Any, T]) -> T:
    """
    Drives a core coroutine to completion on the calling thread.

    The Qt layer calls this from slots: dialogs opened by the picker must live on
    the GUI thread, and the core never runs two operations at once.
    """
    name = getattr(coro, "__qualname__", type(coro).__name__)
    logger.debug(f"Running coroutine {name}")
    return asyncio.run(coro)
