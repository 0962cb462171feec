from typing import Final

from logly import logger
from PySide6.QtCore import QObject, QThread, Signal

from brewsearch.application.search_pipeline import BrewSearchPipeline
from brewsearch.core.brew_types import ResultItem
from brewsearch.core.cancellation import CancellationToken
from brewsearch.core.trigger import strip_trigger
from brewsearch.infra.qt_search_worker import SearchWorker

# Actions that change what brew reports, so cached names may be outdated.
_CACHE_INVALIDATING_ACTIONS: Final[frozenset[str]] = frozenset(
    {"install", "uninstall", "update"}
)


class SearchController(QObject):
    """Runs search queries in the background and exposes results via Qt signals."""

    log = Signal(str)
    results_cleared = Signal()
    batch_ready = Signal(object)  # list[ResultItem]
    search_started = Signal(str)
    search_finished = Signal(str, int, int)  # query, batches, skipped batches

    def __init__(self, pipeline: BrewSearchPipeline, parent: QObject | None = None):
        """Initializes the controller.

        Args:
            pipeline: Search pipeline shared by all queries.
            parent: Optional Qt parent object.
        """
        super().__init__(parent)
        self._pipeline = pipeline
        self._active_job_id = 0
        self._active_query = ""
        self._active_token: CancellationToken | None = None
        self._jobs: dict[int, tuple[QThread, SearchWorker]] = {}

    @property
    def trigger(self) -> str:
        return self._pipeline.settings.trigger

    def is_busy(self) -> bool:
        return bool(self._jobs)

    def search(self, text: str) -> None:
        """Starts a search for launcher input, superseding any running one.

        Input without the trigger prefix only clears the results.
        """
        self.cancel()
        self.results_cleared.emit()

        query = strip_trigger(text, self.trigger)
        if query is None:
            return

        self._active_job_id += 1
        job_id = self._active_job_id
        token = CancellationToken()
        self._active_token = token
        self._active_query = query

        self.search_started.emit(query)

        thread = QThread()
        worker = SearchWorker(self._pipeline.items(query, token), token, job_id=job_id)
        worker.moveToThread(thread)
        thread.started.connect(worker.run)

        worker.batch_ready.connect(self._on_batch_ready)
        worker.finished.connect(self._on_worker_finished)
        worker.finished.connect(thread.quit)
        worker.finished.connect(worker.deleteLater)
        thread.finished.connect(thread.deleteLater)
        thread.finished.connect(lambda jid=job_id: self._jobs.pop(jid, None))

        self._jobs[job_id] = (thread, worker)
        thread.start()

    def cancel(self) -> None:
        """Cancels the running query, if any."""
        if self._active_token is not None:
            self._active_token.cancel()
            self._active_token = None

    def shutdown(self) -> None:
        """Cancels the running query and waits for all worker threads."""
        self.cancel()
        for thread, _worker in list(self._jobs.values()):
            thread.quit()
            thread.wait()
        self._jobs.clear()

    def activate(self, item: ResultItem, action_id: str | None = None) -> bool:
        """Runs an item action. The first action is used if none is given.

        Returns:
            True if an action was run.
        """
        if action_id is None:
            action = item.actions[0] if item.actions else None
        else:
            action = item.action(action_id)
        if action is None:
            return False

        self.log.emit(f"$ {action.text} {item.text}")
        action.activate()
        if action.id in _CACHE_INVALIDATING_ACTIONS:
            self._pipeline.cache.invalidate()
        return True

    def _on_batch_ready(self, job_id: int, items: object) -> None:
        if job_id != self._active_job_id:
            return
        self.batch_ready.emit(items)

    def _on_worker_finished(self, job_id: int, batches: int, skipped: int) -> None:
        if job_id != self._active_job_id:
            return
        if skipped:
            logger.warning(f"{skipped} result batches skipped for {self._active_query!r}")
            self.log.emit(f"[warn] {skipped} result batches could not be loaded")
        self.search_finished.emit(self._active_query, batches, skipped)
