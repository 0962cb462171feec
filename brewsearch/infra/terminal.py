import os
import shutil
import subprocess
import sys

from logly import logger


def find_terminal_executable() -> str | None:
    """Finds a terminal emulator on non-macOS systems.

    Prefers `$TERMINAL` when set, otherwise the Debian-style
    `x-terminal-emulator` alternative.
    """
    preferred = os.environ.get("TERMINAL", "").strip()
    if preferred:
        found = shutil.which(preferred)
        if found:
            return found
    return shutil.which("x-terminal-emulator")


def _applescript_quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def build_terminal_argv(command: str, platform: str | None = None) -> list[str]:
    """Builds an argv list that runs a shell command in a new terminal window.

    Args:
        command: Shell command line to run.
        platform: `sys.platform` value. If omitted, the current one is used.

    Returns:
        Argument vector suitable for `subprocess.Popen(...)`.

    Raises:
        RuntimeError: If no terminal emulator can be found.
    """
    platform = platform or sys.platform
    if platform == "darwin":
        script = (
            f'tell application "Terminal" to do script {_applescript_quote(command)}\n'
            'tell application "Terminal" to activate'
        )
        return ["osascript", "-e", script]

    terminal = find_terminal_executable()
    if not terminal:
        raise RuntimeError("No terminal emulator found. Set $TERMINAL.")
    return [terminal, "-e", "sh", "-c", command]


class SubprocessTerminalLauncher:
    """Opens brew commands in a detached terminal window."""

    def run_terminal(self, command: str) -> None:
        try:
            argv = build_terminal_argv(command)
            logger.info(f"Launching terminal command={command}")
            subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except (OSError, RuntimeError):
            logger.exception("Failed to launch terminal")
