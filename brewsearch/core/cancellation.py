import threading


class CancellationToken:
    """Per-query cancellation flag shared between the host and the pipeline.

    The host calls `cancel()` when the query is superseded or closed; the
    pipeline polls `cancelled` at every suspension point.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()
