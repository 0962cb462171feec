from typing import Final

from PySide6.QtCore import QAbstractTableModel, QModelIndex, QPersistentModelIndex, Qt

from brewsearch.core.brew_types import IconState, ResultItem

_BASE_GLYPH: Final[str] = "📦"
_STATE_GLYPHS: Final[dict[IconState, str]] = {
    IconState.DISABLED: "🛑",
    IconState.OUTDATED: "⚠️",
    IconState.INSTALLED: "✅",
    IconState.UPDATE: "⬆️",
}


def icon_text(state: IconState) -> str:
    """Returns the glyph badge for an item state."""
    badge = _STATE_GLYPHS.get(state)
    return f"{_BASE_GLYPH}{badge}" if badge else _BASE_GLYPH


class ResultTableModel(QAbstractTableModel):
    """Table model backed by ResultItem rows, filled batch by batch."""

    _HEADERS = ("", "Name", "Details")

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self._rows: list[ResultItem] = []

    def rowCount(
        self,
        /,
        parent: QModelIndex | QPersistentModelIndex = QModelIndex(),
    ) -> int:
        if parent.isValid():
            return 0
        return len(self._rows)

    def columnCount(
        self,
        /,
        parent: QModelIndex | QPersistentModelIndex = QModelIndex(),
    ) -> int:
        if parent.isValid():
            return 0
        return len(self._HEADERS)

    def data(
        self,
        index: QModelIndex | QPersistentModelIndex,
        /,
        role: int = Qt.ItemDataRole.DisplayRole,
    ) -> object | None:
        if not index.isValid():
            return None

        row = self._rows[index.row()]
        if role == Qt.ItemDataRole.ToolTipRole:
            return row.subtext
        if role != Qt.ItemDataRole.DisplayRole:
            return None

        column = index.column()
        if column == 0:
            return icon_text(row.icon)
        if column == 1:
            return row.text
        if column == 2:
            return row.subtext
        return None

    def headerData(
        self,
        section: int,
        orientation: Qt.Orientation,
        role: int = Qt.ItemDataRole.DisplayRole,
    ):
        if role != Qt.ItemDataRole.DisplayRole:
            return None
        if orientation != Qt.Orientation.Horizontal:
            return None
        if 0 <= section < len(self._HEADERS):
            return self._HEADERS[section]
        return None

    def clear(self) -> None:
        self.beginResetModel()
        self._rows = []
        self.endResetModel()

    def append_items(self, items: list[ResultItem]) -> None:
        """Appends a batch after the rows already shown."""
        if not items:
            return
        first = len(self._rows)
        self.beginInsertRows(QModelIndex(), first, first + len(items) - 1)
        self._rows.extend(items)
        self.endInsertRows()

    def item_at(self, row: int) -> ResultItem | None:
        if 0 <= row < len(self._rows):
            return self._rows[row]
        return None
