# lovelymods/services/logging.py
import sys
from typing import Optional

from loguru import logger

from ..config.paths import get_user_log_dir

SCRIPT_LOG_KEY = "lua_mod" # extra key bound by the Lua stub namespace


def is_script_output(record) -> bool:
    """True for lines emitted by a mod script through lovely.log / lovely.warn."""
    return SCRIPT_LOG_KEY in record["extra"]


def setup_logging(verbose: bool = False, console_level: Optional[str] = None):
    """
    Configures Loguru sinks.

    * console: `console_level` (INFO by default; the CLI passes WARNING so its
      own result lines stay readable), DEBUG with `verbose`
    * lovelymods_<date>.log: everything at DEBUG
    * lua_scripts_<date>.log: only mod script output, tagged with the mod name
    """
    log_level = "DEBUG" if verbose else (console_level or "INFO")
    log_dir = get_user_log_dir()

    logger.remove()

    logger.add(
        sys.stderr,
        level=log_level,
        format="<level>{level: <8}</level> | <cyan>{extra[lua_mod]}</cyan> - <level>{message}</level>",
        filter=is_script_output,
        colorize=True,
        enqueue=True
    )
    logger.add(
        sys.stderr,
        level=log_level,
        format="<level>{level: <8}</level> | <cyan>{name}:{function}:{line}</cyan> - <level>{message}</level>",
        filter=lambda record: not is_script_output(record),
        colorize=True,
        enqueue=True
    )

    try:
        logger.add(
            str(log_dir / "lovelymods_{time:YYYY-MM-DD}.log"),
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}",
            rotation="1 day",
            retention="7 days",
            compression="zip",
            enqueue=True,
            encoding="utf-8"
        )
        logger.add(
            str(log_dir / "lua_scripts_{time:YYYY-MM-DD}.log"),
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[lua_mod]} | {message}",
            filter=is_script_output,
            rotation="1 day",
            retention="7 days",
            enqueue=True,
            encoding="utf-8"
        )
    except Exception as e:
        logger.error(f"Could not configure file logging in {log_dir}: {e}")
        logger.warning("File logging disabled.")
        return
    logger.info(f"Logging initialized. Console level: {log_level}. Log dir: {log_dir}")
