import time
from enum import Enum, auto
from typing import Callable, Protocol

from logly import logger

from brewsearch.config import SearchSettings
from brewsearch.core.brew_info_parser import match_details, parse_brew_info
from brewsearch.core.brew_types import RankedMatch, ResultItem
from brewsearch.core.cancellation import CancellationToken
from brewsearch.core.matcher import Matcher, rank_all
from brewsearch.core.name_cache import NameCache
from brewsearch.core.result_items import (
    TerminalLauncher,
    UrlOpener,
    build_result_item,
    build_update_item,
)
from brewsearch.infra.brew import require_brew_executable
from brewsearch.infra.brew_process import BrewClient


class BrewService(Protocol):
    def list_names(self) -> list[str]: ...

    def fetch_info(self, names: list[str], token: CancellationToken) -> str | None: ...


class BrewSearchPipeline:
    """Turns queries into streams of Homebrew result batches.

    One pipeline serves every query of the application. The name cache is the
    only state shared between queries.
    """

    def __init__(
        self,
        client: BrewService,
        launcher: TerminalLauncher,
        url_opener: UrlOpener,
        settings: SearchSettings | None = None,
        cache: NameCache | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initializes the pipeline.

        Args:
            client: Runs the brew listing and info commands.
            launcher: Opens terminal commands for item actions.
            url_opener: Opens URLs for item actions.
            settings: Search tunables. Defaults are used if omitted.
            cache: Name cache to share. A new one is created if omitted.
            clock: Time source of the created cache.
        """
        self.settings = settings or SearchSettings()
        self.client = client
        self.launcher = launcher
        self.url_opener = url_opener
        self.cache = cache or NameCache(
            client.list_names,
            clock=clock,
            max_age_sec=self.settings.cache_max_age_sec,
        )

    def items(self, query: str, token: CancellationToken) -> "ResultStream":
        """Returns the result stream for a query (without the trigger)."""
        return ResultStream(self, query, token)

    def rank(self, query: str) -> list[RankedMatch]:
        """Ranks the cached names against the query, best first."""
        matcher = Matcher(query, fuzzy=self.settings.fuzzy)
        with self.cache.locked() as names:
            return rank_all(matcher, names)


def create_pipeline(
    launcher: TerminalLauncher,
    url_opener: UrlOpener,
    settings: SearchSettings | None = None,
) -> BrewSearchPipeline:
    """Creates a pipeline backed by the installed brew.

    Raises:
        BrewNotFoundError: If Homebrew is not installed.
    """
    settings = settings or SearchSettings()
    brew = require_brew_executable()
    logger.debug(f"Found Homebrew executable at {brew}")
    client = BrewClient(brew, poll_interval_sec=settings.poll_interval_sec)
    return BrewSearchPipeline(client, launcher, url_opener, settings=settings)


class _State(Enum):
    INIT = auto()
    SHORTCUT = auto()
    RANKING = auto()
    BATCHING = auto()
    DONE = auto()


class ResultStream:
    """Lazily produces result batches for one query, best matches first.

    Every `next()` call yields one non-empty `list[ResultItem]`. Nothing is
    produced after the token is cancelled, and cancellation ends the stream
    without an error.
    """

    def __init__(self, pipeline: BrewSearchPipeline, query: str, token: CancellationToken):
        self._pipeline = pipeline
        self._query = query.strip()
        self._token = token
        self._state = _State.INIT
        # Ascending score order, so the best names are popped off the end.
        self._remaining: list[str] = []
        self.ranked: list[RankedMatch] = []
        self.skipped_batches = 0

    @property
    def done(self) -> bool:
        return self._state is _State.DONE

    def __iter__(self) -> "ResultStream":
        return self

    def __next__(self) -> list[ResultItem]:
        while True:
            if self._state is _State.INIT:
                self._state = _State.RANKING if self._query else _State.SHORTCUT

            elif self._state is _State.SHORTCUT:
                self._state = _State.DONE
                return [build_update_item(self._pipeline.launcher)]

            elif self._state is _State.RANKING:
                if self._token.cancelled:
                    self._state = _State.DONE
                    continue
                self.ranked = self._pipeline.rank(self._query)
                self._remaining = [r.name for r in reversed(self.ranked)]
                logger.debug(f"Ranked query={self._query!r} matches={len(self.ranked)}")
                self._state = _State.BATCHING

            elif self._state is _State.BATCHING:
                if not self._remaining or self._token.cancelled:
                    self._state = _State.DONE
                    continue
                items = self._next_batch()
                if items is None:
                    self._state = _State.DONE
                    continue
                if items:
                    return items

            else:
                raise StopIteration

    def _take_names(self) -> list[str]:
        size = self._pipeline.settings.batch_size
        names = self._remaining[-size:]
        del self._remaining[-size:]
        names.reverse()
        return names

    def _next_batch(self) -> list[ResultItem] | None:
        """Fetches and builds the next batch.

        Returns:
            The new items (possibly empty when nothing matched or the fetch
            failed), or None if the query was cancelled.
        """
        names = self._take_names()
        try:
            output = self._pipeline.client.fetch_info(names, self._token)
        except OSError:
            logger.exception("brew info could not be started, skipping batch")
            self.skipped_batches += 1
            return []

        if output is None or self._token.cancelled:
            return None

        info = parse_brew_info(output)
        if info is None:
            logger.warning(f"Unparsable brew info output, skipping names={' '.join(names)}")
            self.skipped_batches += 1
            return []

        # Names are unique after ranking, so ids never repeat within a stream.
        return [
            build_result_item(detail, self._pipeline.launcher, self._pipeline.url_opener)
            for detail in match_details(names, info)
        ]
