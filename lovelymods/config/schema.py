# lovelymods/config/schema.py
from typing import Optional

from pydantic import BaseModel

class AppConfig(BaseModel):
    start_in: str = "downloads" # Folder picker start location: downloads, documents, home or a path
    warn_incompatible: bool = True # Alert when a mod root lacks the webcompatible marker
    window_geometry: Optional[bytes] = None # QMainWindow.saveGeometry() as hex bytes
