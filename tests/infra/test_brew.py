import pytest

from brewsearch.infra import brew
from brewsearch.infra.brew import (
    BrewNotFoundError,
    build_brew_argv,
    find_brew_executable,
    require_brew_executable,
)


def test_find_brew_executable_uses_path_lookup(monkeypatch) -> None:
    def fake_which(name: str) -> str | None:
        return {"brew": "/opt/homebrew/bin/brew"}.get(name)

    monkeypatch.setattr(brew.shutil, "which", fake_which)

    assert find_brew_executable() == "/opt/homebrew/bin/brew"
    assert require_brew_executable() == "/opt/homebrew/bin/brew"


def test_require_brew_executable_raises_when_missing(monkeypatch) -> None:
    monkeypatch.setattr(brew.shutil, "which", lambda _: None)

    assert find_brew_executable() is None
    with pytest.raises(BrewNotFoundError):
        require_brew_executable()


def test_build_brew_argv_uses_provided_executable() -> None:
    argv = build_brew_argv("info", "--json=v2", "wget", brew="/usr/local/bin/brew")

    assert argv == ["/usr/local/bin/brew", "info", "--json=v2", "wget"]


def test_build_brew_argv_defaults_to_bare_name() -> None:
    assert build_brew_argv("casks") == ["brew", "casks"]
