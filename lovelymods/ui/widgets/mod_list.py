# lovelymods/ui/widgets/mod_list.py
from PySide6.QtWidgets import QListWidget, QListWidgetItem, QAbstractItemView
from PySide6.QtCore import Qt, Signal, Slot
from loguru import logger

from ...core.registry import ModRegistry


class ModListWidget(QListWidget):
    """Lists registered mods. Once a Lovely dump is loaded every other mod gets a checkbox."""

    # Emitted with the mod name after it has been marked excluded
    mod_excluded = Signal(str)

    def __init__(self, registry: ModRegistry, parent=None):
        super().__init__(parent)
        self.registry = registry
        self.setSelectionMode(QAbstractItemView.SelectionMode.NoSelection)
        self.setAlternatingRowColors(True)
        self.itemChanged.connect(self._on_item_changed)
        self.registry.subscribe(self.refresh)

    @Slot()
    def refresh(self):
        """Rebuilds the list from the registry."""
        self.blockSignals(True)
        try:
            self.clear()
            for name in self.registry.names():
                item = QListWidgetItem(name)
                if self.registry.can_mark(name):
                    item.setFlags(item.flags() | Qt.ItemFlag.ItemIsUserCheckable)
                    state = Qt.CheckState.Checked if self.registry.is_excluded(name) else Qt.CheckState.Unchecked
                    item.setCheckState(state)
                self.addItem(item)
        finally:
            self.blockSignals(False)
        logger.debug(f"Mod list refreshed with {self.count()} entries.")

    @Slot(QListWidgetItem)
    def _on_item_changed(self, item: QListWidgetItem):
        # Unchecking leaves the marker in place; it is only ever added
        if item.checkState() != Qt.CheckState.Checked:
            return
        name = item.text()
        if self.registry.mark_excluded(name):
            self.mod_excluded.emit(name)
