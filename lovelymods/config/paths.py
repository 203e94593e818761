# lovelymods/config/paths.py
import os
import sys
from pathlib import Path

def _get_app_name() -> str:
    return "LovelyMods"

def get_user_data_dir() -> Path:
    """Get the per-user application data directory (created if missing)."""
    override = os.environ.get("LOVELYMODS_DATA_DIR")
    if override:
        path = Path(override)
    elif sys.platform == "win32":
        appdata_path = os.environ.get("APPDATA")
        base = Path(appdata_path) if appdata_path else Path.home() / "AppData/Roaming"
        path = base / _get_app_name()
    else:
        xdg = os.environ.get("XDG_DATA_HOME")
        base = Path(xdg) if xdg else Path.home() / ".local/share"
        path = base / _get_app_name().lower()

    path.mkdir(parents=True, exist_ok=True)
    return path

def get_user_config_file() -> Path:
    """Get the path to the user's config.json file."""
    return get_user_data_dir() / "config.json"

def get_user_log_dir() -> Path:
    """Get the path to the user's log directory."""
    path = get_user_data_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path

START_HINTS = ("downloads", "documents", "desktop", "home")

def _well_known_folders() -> dict:
    home = Path.home()
    return {"downloads": home / "Downloads", "documents": home / "Documents", "desktop": home / "Desktop", "home": home}

def is_valid_start_hint(hint: str) -> bool:
    """A hint is one of START_HINTS or an existing folder."""
    return hint.lower() in START_HINTS or Path(hint).expanduser().is_dir()

def resolve_start_location(hint: str) -> Path:
    """Maps a picker start hint ("downloads", "documents", "home" or a path) to a folder."""
    candidate = _well_known_folders().get(hint.lower(), Path(hint).expanduser())
    return candidate if candidate.is_dir() else Path.home()
