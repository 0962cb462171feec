import os
import subprocess

from logly import logger

from brewsearch.config import (
    FETCH_POLL_INTERVAL_SEC,
    LIST_TIMEOUT_SEC,
    TERMINATE_GRACE_SEC,
)
from brewsearch.core.brew_names_parser import parse_brew_names, sanitize
from brewsearch.core.cancellation import CancellationToken

from .brew import build_brew_argv

_LIST_SUBCOMMANDS = ("casks", "formulae")


def _brew_env() -> dict[str, str]:
    """Environment for non-interactive brew calls."""
    env = dict(os.environ)
    env["HOMEBREW_NO_AUTO_UPDATE"] = "1"
    env["HOMEBREW_NO_ENV_HINTS"] = "1"
    env["HOMEBREW_NO_COLOR"] = "1"
    return env


def _decode(data: bytes | None) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


def _first_line(text: str) -> str:
    for line in sanitize(text).splitlines():
        if line.strip():
            return line.strip()
    return ""


class BrewClient:
    """Runs the two brew commands the search pipeline depends on."""

    def __init__(
        self,
        brew: str,
        poll_interval_sec: float = FETCH_POLL_INTERVAL_SEC,
        list_timeout_sec: float = LIST_TIMEOUT_SEC,
        terminate_grace_sec: float = TERMINATE_GRACE_SEC,
    ):
        self._brew = brew
        self._poll_interval_sec = poll_interval_sec
        self._list_timeout_sec = list_timeout_sec
        self._terminate_grace_sec = terminate_grace_sec

    def _popen(self, argv: list[str]) -> subprocess.Popen:
        return subprocess.Popen(
            argv,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            stdin=subprocess.DEVNULL,
            env=_brew_env(),
        )

    def list_names(self) -> list[str]:
        """Lists all known cask and formula names.

        Both listings run concurrently. A listing that fails to start, times out
        or exits non-zero contributes whatever it printed.
        """
        procs: list[tuple[str, subprocess.Popen]] = []
        for subcommand in _LIST_SUBCOMMANDS:
            argv = build_brew_argv(subcommand, brew=self._brew)
            try:
                procs.append((subcommand, self._popen(argv)))
            except OSError:
                logger.exception(f"Failed to start brew {subcommand}")

        names: list[str] = []
        for subcommand, proc in procs:
            try:
                stdout, stderr = proc.communicate(timeout=self._list_timeout_sec)
            except subprocess.TimeoutExpired:
                logger.warning(f"brew {subcommand} timed out")
                proc.kill()
                stdout, stderr = proc.communicate()

            if proc.returncode != 0:
                logger.warning(
                    f"brew {subcommand} failed returncode={proc.returncode} "
                    f"stderr={_first_line(_decode(stderr))!r}"
                )
            names.extend(parse_brew_names(_decode(stdout)))
        return names

    def _terminate(self, proc: subprocess.Popen) -> None:
        proc.terminate()
        try:
            proc.communicate(timeout=self._terminate_grace_sec)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.communicate()

    def fetch_info(self, names: list[str], token: CancellationToken) -> str | None:
        """Runs `brew info --json=v2` for the given names.

        The wait polls `token` every tick. On cancellation the process is
        terminated and reaped.

        Args:
            names: Package names to look up.
            token: Cancellation token of the running query.

        Returns:
            The decoded stdout, or None if the query was cancelled.

        Raises:
            OSError: If the process cannot be started.
        """
        if token.cancelled:
            return None

        argv = build_brew_argv("info", "--json=v2", *names, brew=self._brew)
        logger.info(f"Starting brew info names={' '.join(names)}")
        proc = self._popen(argv)

        while True:
            try:
                stdout, stderr = proc.communicate(timeout=self._poll_interval_sec)
                break
            except subprocess.TimeoutExpired:
                if token.cancelled:
                    logger.debug("brew info cancelled, terminating")
                    self._terminate(proc)
                    return None

        if proc.returncode != 0:
            # brew reports unknown names on stderr and still prints the rest.
            logger.warning(
                f"brew info returncode={proc.returncode} "
                f"stderr={_first_line(_decode(stderr))!r}"
            )
        logger.info(f"brew info finished returncode={proc.returncode}")
        return _decode(stdout)
