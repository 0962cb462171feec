import shlex
from typing import Final, Protocol

from brewsearch.config import BREW_EXECUTABLE_NAME

from .brew_types import IconState, ItemAction, PackageDetail, ResultItem

SUBTEXT_SEPARATOR: Final[str] = " · "
UPDATE_ITEM_ID: Final[str] = "update"


class TerminalLauncher(Protocol):
    def run_terminal(self, command: str) -> None: ...


class UrlOpener(Protocol):
    def open_url(self, url: str) -> None: ...


def icon_state(detail: PackageDetail) -> IconState:
    if detail.disabled:
        return IconState.DISABLED
    if detail.outdated:
        return IconState.OUTDATED
    if detail.installed:
        return IconState.INSTALLED
    return IconState.NONE


def build_subtext(detail: PackageDetail) -> str:
    """Joins the kind label, the status tokens and the description."""
    tokens = [detail.kind.label]
    if detail.installed:
        tokens.append("Installed")
    if detail.outdated:
        tokens.append("Outdated")
    if detail.disabled:
        tokens.append("DISABLED")
    if detail.desc:
        tokens.append(detail.desc)
    return SUBTEXT_SEPARATOR.join(tokens)


def build_actions(
    detail: PackageDetail,
    launcher: TerminalLauncher,
    url_opener: UrlOpener,
    brew: str = BREW_EXECUTABLE_NAME,
) -> tuple[ItemAction, ...]:
    """Builds the action list shared by formulae and casks.

    Disabled packages can't be installed or uninstalled, and the homepage
    action is left out when the record has none.
    """
    quoted = shlex.quote(detail.name)
    actions: list[ItemAction] = []

    if not detail.disabled:
        if detail.installed:
            command = f"{brew} uninstall {quoted} || exec $SHELL"
            actions.append(
                ItemAction("uninstall", "Uninstall", lambda: launcher.run_terminal(command))
            )
        else:
            command = f"{brew} install {quoted} || exec $SHELL"
            actions.append(
                ItemAction("install", "Install", lambda: launcher.run_terminal(command))
            )

    info_command = f"{brew} info {quoted} ; exec $SHELL"
    actions.append(
        ItemAction(
            "info_local",
            "Info (Terminal)",
            lambda: launcher.run_terminal(info_command),
        )
    )

    if detail.homepage:
        homepage = detail.homepage
        actions.append(
            ItemAction("homepage", "Project homepage", lambda: url_opener.open_url(homepage))
        )

    info_url = detail.kind.info_url.format(name=detail.name)
    actions.append(
        ItemAction("info_online", "Info (Browser)", lambda: url_opener.open_url(info_url))
    )
    return tuple(actions)


def build_result_item(
    detail: PackageDetail,
    launcher: TerminalLauncher,
    url_opener: UrlOpener,
    brew: str = BREW_EXECUTABLE_NAME,
) -> ResultItem:
    return ResultItem(
        id=detail.kind.prefix + detail.name,
        text=detail.name,
        subtext=build_subtext(detail),
        icon=icon_state(detail),
        actions=build_actions(detail, launcher, url_opener, brew),
    )


def build_update_item(
    launcher: TerminalLauncher, brew: str = BREW_EXECUTABLE_NAME
) -> ResultItem:
    """Builds the item offered for an empty query."""
    command = f"{brew} update && {brew} upgrade"
    return ResultItem(
        id=UPDATE_ITEM_ID,
        text="Update",
        subtext="Update and upgrade.",
        icon=IconState.UPDATE,
        actions=(ItemAction("update", "Update", lambda: launcher.run_terminal(command)),),
    )
