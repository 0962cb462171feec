from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from brewsearch.config import CASK_INFO_URL, FORMULA_INFO_URL


class PackageKind(Enum):
    """The two Homebrew catalogs.

    Each member carries the id prefix, the display label, the key holding the
    package name in `brew info --json=v2` output and the formulae.brew.sh URL
    template.
    """

    FORMULA = ("f.", "Formula", "name", FORMULA_INFO_URL)
    CASK = ("c.", "Cask", "token", CASK_INFO_URL)

    def __init__(self, prefix: str, label: str, name_key: str, info_url: str):
        self.prefix = prefix
        self.label = label
        self.name_key = name_key
        self.info_url = info_url


class IconState(Enum):
    """Badge shown next to a result, highest precedence first."""

    DISABLED = "disabled"
    OUTDATED = "outdated"
    INSTALLED = "installed"
    UPDATE = "update"
    NONE = "none"


@dataclass(frozen=True, slots=True)
class RankedMatch:
    """A cached package name that matched the query, with its score."""

    name: str
    score: float


@dataclass(frozen=True, slots=True)
class PackageDetail:
    """Represents one entry of `brew info --json=v2` output.

    Attributes:
        kind: Catalog the entry came from.
        name: Formula name or cask token.
        desc: One-line description (may be empty).
        homepage: Project homepage URL (may be empty).
        installed: Whether any version is installed.
        outdated: Whether the installed version is outdated.
        disabled: Whether the package is disabled upstream.
    """

    kind: PackageKind
    name: str
    desc: str = ""
    homepage: str = ""
    installed: bool = False
    outdated: bool = False
    disabled: bool = False


@dataclass(frozen=True, slots=True)
class ItemAction:
    """An action offered for a result item."""

    id: str
    text: str
    callback: Callable[[], None] = field(compare=False, repr=False)

    def activate(self) -> None:
        self.callback()


@dataclass(frozen=True, slots=True)
class ResultItem:
    """A result row handed to the search host."""

    id: str
    text: str
    subtext: str
    icon: IconState = IconState.NONE
    actions: tuple[ItemAction, ...] = ()

    def action(self, action_id: str) -> ItemAction | None:
        for action in self.actions:
            if action.id == action_id:
                return action
        return None
