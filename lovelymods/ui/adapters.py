# lovelymods/ui/adapters.py
from pathlib import Path

from PySide6.QtCore import QStandardPaths
from PySide6.QtWidgets import QFileDialog, QMessageBox, QWidget
from loguru import logger

from ..config.paths import resolve_start_location
from ..core.handles import DirectorySource, LocalDirectoryHandle, PickerCancelledError
from ..core.notify import Notifier


def _start_directory(start_in: str) -> str:
    if start_in.lower() == "downloads":
        location = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.DownloadLocation)
        if location:
            return location
    return str(resolve_start_location(start_in))


class QtDirectoryPicker(DirectorySource):
    """Folder picker backed by QFileDialog. Must be awaited on the GUI thread."""

    def __init__(self, parent: QWidget | None = None, title: str = "Select Mod Folder"):
        self.parent = parent
        self.title = title

    async def pick(self, mode: str = "read", start_in: str = "downloads") -> LocalDirectoryHandle:
        options = QFileDialog.Option.ShowDirsOnly
        if mode == "read":
            options |= QFileDialog.Option.ReadOnly
        folder = QFileDialog.getExistingDirectory(self.parent, self.title, _start_directory(start_in), options)
        if not folder:
            raise PickerCancelledError("Folder selection cancelled.")
        path = Path(folder)
        if not path.is_dir():
            raise PickerCancelledError(f"Selected path is not accessible: {path}")
        logger.info(f"User picked folder: {path}")
        return LocalDirectoryHandle(path)


class QtNotifier(Notifier):
    """Shows each notification as a modal message box."""

    def __init__(self, parent: QWidget | None = None):
        self.parent = parent

    def notify(self, message: str) -> None:
        logger.info(f"Alert: {message}")
        QMessageBox.information(self.parent, "Lovely Mods", message)
