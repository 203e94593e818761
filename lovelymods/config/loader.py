# lovelymods/config/loader.py
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError
from loguru import logger

from .schema import AppConfig
from .paths import START_HINTS, get_user_config_file, is_valid_start_hint

_cached_config: Optional[AppConfig] = None

# Environment overrides, applied after the file
ENV_START_IN = "LOVELYMODS_START_IN"
ENV_WARN_INCOMPATIBLE = "LOVELYMODS_WARN_INCOMPATIBLE"


def _read_config_file(config_path: Path) -> Dict[str, Any]:
    """Returns the raw settings dict; a corrupt file is moved aside and treated as empty."""
    if not config_path.exists():
        logger.info("No user config found. Using default settings.")
        return {}
    logger.info(f"Loading user configuration from: {config_path}")
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        return data
    except (json.JSONDecodeError, ValueError, OSError) as e:
        logger.error(f"Failed to load user config file {config_path}: {e}")
        backup_path = config_path.with_suffix(".json.corrupted")
        try:
            backup_path.unlink(missing_ok=True)
            config_path.rename(backup_path)
            logger.info(f"Backed up corrupted config to: {backup_path}")
        except OSError as backup_err:
            logger.error(f"Failed to backup corrupted config: {backup_err}")
        return {}


def _sanitize(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Keeps the settings that make sense and drops the rest one by one, so a
    stale start folder doesn't also throw away the window geometry.
    """
    clean: Dict[str, Any] = {}
    for key, value in raw.items():
        if key not in AppConfig.model_fields:
            logger.warning(f"Ignoring unknown config key '{key}'.")
        elif key == "start_in":
            if isinstance(value, str) and is_valid_start_hint(value):
                clean[key] = value
            else:
                logger.warning(f"start_in '{value}' is neither one of {START_HINTS} nor a folder; using default.")
        elif key == "warn_incompatible":
            if isinstance(value, bool):
                clean[key] = value
            else:
                logger.warning(f"warn_incompatible must be true/false, got {value!r}; using default.")
        elif key == "window_geometry":
            if value is None:
                continue
            try:
                bytes.fromhex(value)
                clean[key] = value.encode("ascii")
            except (TypeError, ValueError, AttributeError):
                logger.warning("Stored window geometry is not valid hex; it will be reset.")
    return clean


def _apply_env_overrides(settings: Dict[str, Any]) -> Dict[str, Any]:
    start_in = os.environ.get(ENV_START_IN)
    if start_in:
        if is_valid_start_hint(start_in):
            settings["start_in"] = start_in
        else:
            logger.warning(f"{ENV_START_IN}='{start_in}' is not a known location; ignored.")
    warn = os.environ.get(ENV_WARN_INCOMPATIBLE)
    if warn is not None:
        settings["warn_incompatible"] = warn.strip().lower() not in ("0", "false", "no", "off")
    return settings


def load_config() -> AppConfig:
    """Loads the application configuration."""
    global _cached_config
    if _cached_config:
        return _cached_config

    settings = _apply_env_overrides(_sanitize(_read_config_file(get_user_config_file())))
    try:
        _cached_config = AppConfig(**settings)
    except ValidationError as e:
        logger.error(f"Configuration validation failed: {e}")
        _cached_config = AppConfig()
    logger.info(f"Configuration loaded: start_in={_cached_config.start_in}, warn_incompatible={_cached_config.warn_incompatible}")
    return _cached_config


def save_config(config: AppConfig) -> None:
    """Writes settings atomically. Geometry is stored as the hex text Qt produced."""
    config_path = get_user_config_file()
    payload = config.model_dump(mode="json")
    logger.info(f"Saving configuration to: {config_path}")
    temp_file_path: Optional[Path] = None
    try:
        # Temp file must live in the target's directory for os.replace to be atomic
        with tempfile.NamedTemporaryFile(mode='w', encoding='utf-8', dir=config_path.parent,
                                         prefix=f".{config_path.name}_tmp", suffix=".json", delete=False) as temp_f:
            temp_file_path = Path(temp_f.name)
            json.dump(payload, temp_f, indent=4)
            temp_f.flush()
            os.fsync(temp_f.fileno())
        os.replace(temp_file_path, config_path)
        temp_file_path = None
    except OSError as e:
        logger.error(f"Failed to save configuration to {config_path}: {e}")
    finally:
        if temp_file_path and temp_file_path.exists():
            try: temp_file_path.unlink()
            except OSError as unlink_err: logger.error(f"Failed to remove temporary config file {temp_file_path}: {unlink_err}")


def get_config() -> AppConfig:
    """Returns the cached configuration object, loading if necessary."""
    if _cached_config is None:
        return load_config()
    return _cached_config


def reset_config_cache() -> None:
    """Forgets the cached config so the next get_config() re-reads the file."""
    global _cached_config
    _cached_config = None
