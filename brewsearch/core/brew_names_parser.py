import re

# brew may colorize warnings even when stdout is not a tty.
_ANSI_OSC_RE = re.compile(r"\x1b\][^\x07]*(?:\x07|\x1b\\)")
_ANSI_CSI_RE = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]")
_ANSI_2CHAR_RE = re.compile(r"\x1b[@-Z\\-_]")


def sanitize(text: str) -> str:
    """Normalizes newlines and strips common ANSI escape sequences."""
    if not text:
        return ""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _ANSI_OSC_RE.sub("", text)
    text = _ANSI_CSI_RE.sub("", text)
    text = _ANSI_2CHAR_RE.sub("", text)
    return text


def parse_brew_names(text: str) -> list[str]:
    """Parses `brew casks` / `brew formulae` output into package names.

    The commands print one name per line. Blank lines, lines with whitespace
    inside and `==>` / `Warning:` / `Error:` banners are skipped.
    """
    names: list[str] = []
    for line in sanitize(text).splitlines():
        s = line.strip()
        if not s:
            continue
        if s.startswith("==>") or s.startswith(("Warning:", "Error:")):
            continue
        if any(ch.isspace() for ch in s):
            continue
        names.append(s)
    return names
