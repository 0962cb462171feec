from PySide6.QtCore import QPoint, Qt, QTimer
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QAbstractItemView,
    QHeaderView,
    QLineEdit,
    QMainWindow,
    QMenu,
    QPlainTextEdit,
    QSplitter,
    QTableView,
    QVBoxLayout,
    QWidget,
)

from brewsearch.application.search_controller import SearchController
from brewsearch.core.brew_types import ResultItem
from brewsearch.presentation.table_models import ResultTableModel


class MainWindow(QMainWindow):
    """Main application window: a query line above a live result table."""

    _QUERY_DEBOUNCE_MS = 150

    def __init__(self, controller: SearchController) -> None:
        super().__init__()
        self.setWindowTitle("Homebrew Search")
        self.resize(820, 560)

        self.controller = controller

        self.line_edit_query = QLineEdit(self)
        self.line_edit_query.setPlaceholderText(f"{controller.trigger}<package>")
        self.line_edit_query.setClearButtonEnabled(True)

        self.model = ResultTableModel(self)
        self.table_view = QTableView(self)
        self.table_view.setModel(self.model)
        self._polish_result_table()

        self.plain_text_log = QPlainTextEdit(self)
        self.plain_text_log.setReadOnly(True)
        self.plain_text_log.setUndoRedoEnabled(False)
        self.plain_text_log.setMaximumBlockCount(2000)

        splitter = QSplitter(Qt.Orientation.Vertical, self)
        splitter.addWidget(self.table_view)
        splitter.addWidget(self.plain_text_log)
        splitter.setStretchFactor(0, 4)
        splitter.setStretchFactor(1, 1)

        central = QWidget(self)
        layout = QVBoxLayout(central)
        layout.addWidget(self.line_edit_query)
        layout.addWidget(splitter)
        self.setCentralWidget(central)

        # Typing restarts the timer; the search runs once input settles.
        self._query_timer = QTimer(self)
        self._query_timer.setSingleShot(True)
        self._query_timer.setInterval(self._QUERY_DEBOUNCE_MS)
        self._query_timer.timeout.connect(self._run_search)
        self.line_edit_query.textChanged.connect(lambda _text: self._query_timer.start())
        self.line_edit_query.returnPressed.connect(self.on_return_pressed)

        self.table_view.doubleClicked.connect(self.on_result_double_clicked)
        self.table_view.customContextMenuRequested.connect(self.on_result_context_menu)

        self.controller.log.connect(self.plain_text_log.appendPlainText)
        self.controller.results_cleared.connect(self.model.clear)
        self.controller.batch_ready.connect(self.on_batch_ready)
        self.controller.search_started.connect(self.on_search_started)
        self.controller.search_finished.connect(self.on_search_finished)

        self.line_edit_query.setText(controller.trigger)
        self.line_edit_query.setFocus()

    def _polish_result_table(self) -> None:
        """Applies initial settings to the result table."""
        tv = self.table_view

        tv.verticalHeader().setVisible(False)

        hh = tv.horizontalHeader()
        hh.setStretchLastSection(True)
        hh.setSectionResizeMode(0, QHeaderView.ResizeMode.ResizeToContents)
        hh.setSectionResizeMode(1, QHeaderView.ResizeMode.Interactive)
        tv.setColumnWidth(1, 200)

        tv.setWordWrap(False)
        tv.setAlternatingRowColors(True)
        tv.setShowGrid(False)
        # Rows stay in match order.
        tv.setSortingEnabled(False)
        tv.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        tv.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        tv.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)

    def _run_search(self) -> None:
        self.controller.search(self.line_edit_query.text())

    def _selected_item(self) -> ResultItem | None:
        current = self.table_view.currentIndex()
        if not current.isValid():
            return None
        return self.model.item_at(current.row())

    def on_return_pressed(self) -> None:
        """Runs the first action of the selected (or first) result."""
        item = self._selected_item() or self.model.item_at(0)
        if item is not None:
            self.controller.activate(item)

    def on_result_double_clicked(self, index) -> None:
        item = self.model.item_at(index.row())
        if item is not None:
            self.controller.activate(item)

    def on_result_context_menu(self, pos: QPoint) -> None:
        """Shows every action of the clicked result."""
        index = self.table_view.indexAt(pos)
        item = self.model.item_at(index.row()) if index.isValid() else None
        if item is None or not item.actions:
            return

        menu = QMenu(self)
        for action in item.actions:
            menu_action = menu.addAction(action.text)
            menu_action.triggered.connect(
                lambda _checked=False, aid=action.id: self.controller.activate(item, aid)
            )
        menu.exec(self.table_view.viewport().mapToGlobal(pos))

    def on_batch_ready(self, items_obj: object) -> None:
        raw = items_obj if isinstance(items_obj, list) else []
        items = [item for item in raw if isinstance(item, ResultItem)]
        was_empty = self.model.rowCount() == 0
        self.model.append_items(items)
        if was_empty and self.model.rowCount() > 0:
            self.table_view.setCurrentIndex(self.model.index(0, 0))

    def on_search_started(self, query: str) -> None:
        self.statusBar().showMessage(f"Searching: {query or 'update'}")

    def on_search_finished(self, query: str, batches: int, skipped: int) -> None:
        count = self.model.rowCount()
        if count == 0:
            self.statusBar().showMessage("No results", 4000)
        elif skipped:
            self.statusBar().showMessage(f"{count} results ({skipped} batches failed)", 4000)
        else:
            self.statusBar().showMessage(f"{count} results", 2000)

    def closeEvent(self, event: QCloseEvent) -> None:
        self.controller.shutdown()
        super().closeEvent(event)
