from typing import Iterable

from logly import logger
from PySide6.QtCore import QObject, Signal, Slot

from brewsearch.core.brew_types import ResultItem
from brewsearch.core.cancellation import CancellationToken


class SearchWorker(QObject):
    """Pulls result batches from a stream in a background Qt thread.

    The worker is meant to be moved to a `QThread` and started via a signal/slot.
    """

    batch_ready = Signal(int, object)  # job_id, list[ResultItem]
    finished = Signal(int, int, int)  # job_id, batches, skipped batches

    def __init__(
        self,
        stream: Iterable[list[ResultItem]],
        token: CancellationToken,
        job_id: int = 0,
    ):
        super().__init__()
        self._stream = stream
        self._token = token
        self._job_id = job_id

    @Slot()
    def run(self):
        """Iterates the stream and emits every batch until done or cancelled."""
        batches = 0
        try:
            for items in self._stream:
                if self._token.cancelled:
                    break
                batches += 1
                self.batch_ready.emit(self._job_id, items)
        except Exception:
            logger.exception(f"Search job {self._job_id} failed")

        skipped = getattr(self._stream, "skipped_batches", 0)
        logger.info(f"Search job {self._job_id} finished batches={batches} skipped={skipped}")
        self.finished.emit(self._job_id, batches, skipped)
