# lovelymods/ui/windows/main_window.py
from PySide6.QtWidgets import (QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
                             QPushButton, QLabel, QMessageBox, QStatusBar)
from PySide6.QtGui import QKeySequence
from PySide6.QtCore import Slot, QByteArray

from loguru import logger

from ..adapters import QtDirectoryPicker, QtNotifier
from ..widgets.mod_list import ModListWidget
from ...config.loader import get_config, save_config
from ...core.handles import PickerCancelledError
from ...core.lua_runtime import get_default_runtime
from ...core.models import ScriptOutcome
from ...core.registry import ModRegistry
from ...core.script_runner import ScriptRunner
from ...core.tree_builder import ModLoader
from ...services.async_utils import run_coroutine


class MainWindow(QMainWindow):
    """Main application window: mod list plus the load/clear/run actions."""

    def __init__(self, parent: QWidget | None = None):
        super().__init__(parent)
        self.setWindowTitle("Lovely Mods")

        self.config = get_config()
        self.registry = ModRegistry()
        self.notifier = QtNotifier(self)
        self.loader = ModLoader(self.registry, QtDirectoryPicker(self), self.notifier, self.config)
        self.dump_loader = ModLoader(self.registry, QtDirectoryPicker(self, "Select Lovely Dump Folder"),
                                     self.notifier, self.config)
        self.runner = ScriptRunner(self.registry, get_default_runtime(), self.notifier)

        self._setup_ui()
        self._setup_menus()
        self._setup_statusbar()
        self._connect_signals()
        self._load_state()
        logger.info("MainWindow initialized.")

    def _setup_ui(self):
        central = QWidget(); layout = QVBoxLayout(central); self.setCentralWidget(central)
        layout.addWidget(QLabel("Mods"))
        self.mod_list = ModListWidget(self.registry)
        layout.addWidget(self.mod_list)
        buttons = QHBoxLayout()
        self.add_button = QPushButton("Add Mods...")
        self.dump_button = QPushButton("Use Lovely Dump...")
        self.clear_button = QPushButton("Clear Mods")
        self.run_button = QPushButton("Run Lua Scripts")
        for button in (self.add_button, self.dump_button, self.clear_button, self.run_button):
            buttons.addWidget(button)
        layout.addLayout(buttons)

    def _setup_menus(self):
        file_menu = self.menuBar().addMenu("&File")
        file_menu.addAction("&Add Mods...", self.add_mods, QKeySequence.StandardKey.Open)
        file_menu.addAction("Use Lovely &Dump...", self.use_lovely_dump)
        file_menu.addSeparator(); file_menu.addAction("&Quit", self.close, QKeySequence.StandardKey.Quit)
        help_menu = self.menuBar().addMenu("&Help"); help_menu.addAction("&About", self._show_about_dialog)

    def _setup_statusbar(self):
        self.status_bar = QStatusBar(self); self.setStatusBar(self.status_bar)
        self.status_label = QLabel("Ready"); self.status_bar.addWidget(self.status_label, 1)

    def _connect_signals(self):
        self.add_button.clicked.connect(self.add_mods)
        self.dump_button.clicked.connect(self.use_lovely_dump)
        self.clear_button.clicked.connect(self.clear_mods)
        self.run_button.clicked.connect(self.run_scripts)
        self.mod_list.mod_excluded.connect(lambda name: self._show_status_message(f"'{name}' will not be patched.", 4000))
        self.registry.subscribe(lambda: self._show_status_message(f"{len(self.registry)} mods loaded."))

    # --- State ---
    def _load_state(self):
        if self.config.window_geometry:
            geom = QByteArray.fromHex(self.config.window_geometry)
            if not self.restoreGeometry(geom): logger.warning("Failed to restore window geometry."); self.resize(640, 480)
        else: self.resize(640, 480)

    def update_config_before_save(self):
        try: self.config.window_geometry = bytes(self.saveGeometry().toHex())
        except Exception as e: logger.error(f"Could not save window geometry: {e}")

    def closeEvent(self, event):
        logger.info("Close event triggered. Saving state...")
        self.update_config_before_save(); save_config(self.config); event.accept()

    # --- Actions ---
    @Slot()
    def add_mods(self):
        try:
            added = run_coroutine(self.loader.add_mod_directory())
        except PickerCancelledError as e:
            logger.info(f"Add mods cancelled: {e}"); self._show_status_message("Cancelled.", 3000); return
        except Exception as e:
            logger.exception("Failed to add mod directory.")
            QMessageBox.warning(self, "Add Mods", f"Could not load mods:\n{e}"); return
        self._show_status_message(f"Added {len(added)} mod(s).", 4000)

    @Slot()
    def use_lovely_dump(self):
        try:
            run_coroutine(self.dump_loader.load_reference_dump())
        except PickerCancelledError as e:
            logger.info(f"Dump selection cancelled: {e}"); self._show_status_message("Cancelled.", 3000)
        except Exception as e:
            logger.exception("Failed to load Lovely dump.")
            QMessageBox.warning(self, "Lovely Dump", f"Could not load dump:\n{e}")

    @Slot()
    def clear_mods(self):
        self.registry.clear()

    @Slot()
    def run_scripts(self):
        self._show_status_message("Running Lua scripts...")
        try:
            results = run_coroutine(self.runner.run_all_scripts())
        except Exception as e:
            logger.exception("Script run aborted.")
            QMessageBox.warning(self, "Run Lua Scripts", f"Script run aborted:\n{e}"); return
        counts = {outcome: sum(1 for r in results if r.outcome is outcome) for outcome in ScriptOutcome}
        self._show_status_message(
            f"Scripts: {counts[ScriptOutcome.EXECUTED]} ran, {counts[ScriptOutcome.REJECTED]} rejected, "
            f"{counts[ScriptOutcome.FAILED]} failed.", 0)

    @Slot()
    def _show_about_dialog(self):
        from ... import __version__; QMessageBox.about(self, "About Lovely Mods", f"<b>Lovely Mods v{__version__}</b><br><br>Assemble mod folders and try their Lua scripts.")

    def _show_status_message(self, message: str, timeout: int = 0):
        self.status_label.setText(message)
        if timeout > 0: self.status_bar.showMessage(message, timeout)
