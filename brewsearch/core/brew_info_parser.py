import json
from dataclasses import dataclass, field
from typing import Any

from .brew_types import PackageDetail, PackageKind


@dataclass(frozen=True, slots=True)
class BrewInfo:
    """The two arrays of a `brew info --json=v2` document."""

    casks: list[dict[str, Any]] = field(default_factory=list)
    formulae: list[dict[str, Any]] = field(default_factory=list)


def _is_info_document(value: object) -> bool:
    return isinstance(value, dict) and (
        isinstance(value.get("casks"), list) or isinstance(value.get("formulae"), list)
    )


def find_info_document(text: str) -> dict[str, Any] | None:
    """Finds the `brew info --json=v2` object in noisy output.

    brew may print notices before the document, and those can contain
    bracketed or braced fragments. Decoding is tried at every '{' until an
    object with a `casks` or `formulae` array turns up.

    Args:
        text: stdout of `brew info --json=v2`.

    Returns:
        The document, or None if the text holds none.
    """
    decoder = json.JSONDecoder()
    start = text.find("{")
    while start != -1:
        try:
            value, _ = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            value = None
        if _is_info_document(value):
            return value
        start = text.find("{", start + 1)
    return None


def _records(value: object) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def parse_brew_info(text: str) -> BrewInfo | None:
    """Parses `brew info --json=v2` output.

    Args:
        text: stdout of the command (may contain extra non-JSON lines).

    Returns:
        The cask and formula records, or None if the output has no JSON object
        with at least one of the `casks`/`formulae` arrays.
    """
    data = find_info_document(text)
    if data is None:
        return None
    return BrewInfo(casks=_records(data.get("casks")), formulae=_records(data.get("formulae")))


def _text(value: object) -> str:
    if isinstance(value, str):
        return value.strip()
    return ""


def is_installed(kind: PackageKind, record: dict[str, Any]) -> bool:
    """Derives the install state of a record.

    Casks carry a single nullable `installed` version, formulae an array of
    installed kegs.
    """
    installed = record.get("installed")
    if kind is PackageKind.CASK:
        return installed is not None
    return isinstance(installed, list) and len(installed) > 0


def detail_from_record(kind: PackageKind, record: dict[str, Any]) -> PackageDetail:
    """Builds a `PackageDetail` from one `brew info` record."""
    return PackageDetail(
        kind=kind,
        name=_text(record.get(kind.name_key)),
        desc=_text(record.get("desc")),
        homepage=_text(record.get("homepage")),
        installed=is_installed(kind, record),
        outdated=record.get("outdated") is True,
        disabled=record.get("disabled") is True,
    )


def _find(records: list[dict[str, Any]], key: str, name: str) -> dict[str, Any] | None:
    for record in records:
        if record.get(key) == name:
            return record
    return None


def match_details(names: list[str], info: BrewInfo) -> list[PackageDetail]:
    """Associates requested names with their records.

    For each name, in order, the cask with that token and then the formula with
    that name are emitted. Names found in neither array are dropped.
    """
    details: list[PackageDetail] = []
    for name in names:
        cask = _find(info.casks, PackageKind.CASK.name_key, name)
        if cask is not None:
            details.append(detail_from_record(PackageKind.CASK, cask))

        formula = _find(info.formulae, PackageKind.FORMULA.name_key, name)
        if formula is not None:
            details.append(detail_from_record(PackageKind.FORMULA, formula))
    return details
