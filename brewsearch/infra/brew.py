import shutil

from brewsearch.config import BREW_EXECUTABLE_NAME


class BrewNotFoundError(RuntimeError):
    """Raised when no Homebrew executable can be found."""


def find_brew_executable() -> str | None:
    """Finds the Homebrew executable on `PATH`.

    Returns:
        The executable path, or None if Homebrew is not installed.
    """
    return shutil.which(BREW_EXECUTABLE_NAME)


def require_brew_executable() -> str:
    """Returns the Homebrew executable path.

    Raises:
        BrewNotFoundError: If Homebrew is not on `PATH`.
    """
    exe = find_brew_executable()
    if not exe:
        raise BrewNotFoundError("Homebrew executable not found.")
    return exe


def build_brew_argv(*args: str, brew: str | None = None) -> list[str]:
    """Builds an argv list to run a brew subcommand.

    Args:
        args: Subcommand and its arguments.
        brew: brew executable path/name. If omitted, the bare name is used.

    Returns:
        Argument vector suitable for `subprocess.Popen(...)`.
    """
    return [brew or BREW_EXECUTABLE_NAME, *args]
