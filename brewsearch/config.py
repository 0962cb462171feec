import os
from dataclasses import dataclass
from typing import Final

from logly import logger

BREW_EXECUTABLE_NAME: Final[str] = "brew"
DEFAULT_TRIGGER: Final[str] = "brew "

BATCH_SIZE: Final[int] = 10
NAME_CACHE_MAX_AGE_SEC: Final[float] = 60.0
FETCH_POLL_INTERVAL_SEC: Final[float] = 0.01
LIST_TIMEOUT_SEC: Final[int] = 60
TERMINATE_GRACE_SEC: Final[float] = 2.0

FORMULA_INFO_URL: Final[str] = "https://formulae.brew.sh/formula/{name}"
CASK_INFO_URL: Final[str] = "https://formulae.brew.sh/cask/{name}"

_TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True, slots=True)
class SearchSettings:
    """Tunables of the search pipeline.

    Attributes:
        batch_size: Maximum number of names sent to one `brew info` call.
        cache_max_age_sec: Age after which the cached name list is refreshed.
        poll_interval_sec: Wait tick while a `brew info` call is running.
        fuzzy: Whether the matcher tolerates typos.
        trigger: Keyword prefix that activates the search.
    """

    batch_size: int = BATCH_SIZE
    cache_max_age_sec: float = NAME_CACHE_MAX_AGE_SEC
    poll_interval_sec: float = FETCH_POLL_INTERVAL_SEC
    fuzzy: bool = False
    trigger: str = DEFAULT_TRIGGER

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "SearchSettings":
        """Builds settings from `BREWSEARCH_*` environment variables.

        Invalid values are ignored and the defaults are kept.
        """
        env = os.environ if environ is None else environ

        batch_size = BATCH_SIZE
        raw = env.get("BREWSEARCH_BATCH_SIZE", "").strip()
        if raw:
            try:
                batch_size = int(raw)
            except ValueError:
                batch_size = 0
            if batch_size < 1:
                logger.warning(f"Ignoring invalid BREWSEARCH_BATCH_SIZE={raw!r}")
                batch_size = BATCH_SIZE

        fuzzy = env.get("BREWSEARCH_FUZZY", "").strip().lower() in _TRUTHY

        trigger = env.get("BREWSEARCH_TRIGGER", "").strip()
        trigger = f"{trigger} " if trigger else DEFAULT_TRIGGER

        return cls(batch_size=batch_size, fuzzy=fuzzy, trigger=trigger)
