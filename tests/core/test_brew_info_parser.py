from brewsearch.core.brew_info_parser import (
    BrewInfo,
    detail_from_record,
    find_info_document,
    is_installed,
    match_details,
    parse_brew_info,
)
from brewsearch.core.brew_types import PackageDetail, PackageKind


def _formula(name: str, installed: list | None = None, **fields) -> dict:
    record = {
        "name": name,
        "desc": f"{name} description",
        "homepage": f"https://{name}.example.org",
        "installed": installed if installed is not None else [],
        "outdated": False,
        "disabled": False,
    }
    record.update(fields)
    return record


def _cask(token: str, installed: str | None = None, **fields) -> dict:
    record = {
        "token": token,
        "desc": f"{token} app",
        "homepage": f"https://{token}.example.com",
        "installed": installed,
        "outdated": False,
        "disabled": False,
    }
    record.update(fields)
    return record


def test_find_info_document_skips_noise_before_json() -> None:
    text = "==> Auto-updating Homebrew...\n{broken\n" + '{"casks":[],"formulae":[]}'

    assert find_info_document(text) == {"casks": [], "formulae": []}


def test_find_info_document_skips_arrays_and_unrelated_objects() -> None:
    text = '==> Tapped [1] tap {"note": 1}\n{"casks":[],"formulae":[{"name":"wget"}]}'

    assert find_info_document(text) == {"casks": [], "formulae": [{"name": "wget"}]}
    assert parse_brew_info(text) == BrewInfo(casks=[], formulae=[{"name": "wget"}])


def test_find_info_document_returns_none_without_json() -> None:
    assert find_info_document("Error: No available formula") is None


def test_parse_brew_info_reads_both_arrays_and_drops_non_objects() -> None:
    text = '{"casks":[{"token":"firefox"},"junk"],"formulae":[{"name":"wget"},3]}'

    info = parse_brew_info(text)

    assert info == BrewInfo(casks=[{"token": "firefox"}], formulae=[{"name": "wget"}])


def test_parse_brew_info_accepts_a_single_array() -> None:
    info = parse_brew_info('{"formulae":[{"name":"wget"}]}')

    assert info == BrewInfo(casks=[], formulae=[{"name": "wget"}])


def test_parse_brew_info_returns_none_for_unexpected_structure() -> None:
    assert parse_brew_info("") is None
    assert parse_brew_info("[1, 2]") is None
    assert parse_brew_info('{"items": []}') is None
    assert parse_brew_info('{"casks": "nope", "formulae": null}') is None


def test_cask_installed_state_depends_on_null() -> None:
    assert is_installed(PackageKind.CASK, _cask("firefox", installed=None)) is False
    assert is_installed(PackageKind.CASK, _cask("firefox", installed="128.0")) is True
    assert is_installed(PackageKind.CASK, {"token": "firefox"}) is False


def test_formula_installed_state_depends_on_array_length() -> None:
    assert is_installed(PackageKind.FORMULA, _formula("wget", installed=[])) is False
    assert (
        is_installed(PackageKind.FORMULA, _formula("wget", installed=[{"version": "1.24"}]))
        is True
    )
    assert is_installed(PackageKind.FORMULA, {"name": "wget", "installed": None}) is False


def test_detail_from_record_reads_flags_and_text() -> None:
    record = _formula("wget", installed=[{"version": "1.24"}], outdated=True, desc=" Fetcher ")

    detail = detail_from_record(PackageKind.FORMULA, record)

    assert detail == PackageDetail(
        kind=PackageKind.FORMULA,
        name="wget",
        desc="Fetcher",
        homepage="https://wget.example.org",
        installed=True,
        outdated=True,
        disabled=False,
    )


def test_detail_from_record_tolerates_missing_fields() -> None:
    detail = detail_from_record(PackageKind.CASK, {"token": "zed", "desc": None})

    assert detail == PackageDetail(kind=PackageKind.CASK, name="zed")


def test_match_details_keeps_name_order_and_drops_unknown_names() -> None:
    info = BrewInfo(
        casks=[_cask("docker"), _cask("firefox")],
        formulae=[_formula("wget"), _formula("docker")],
    )

    details = match_details(["wget", "missing", "docker", "firefox"], info)

    assert [(d.kind, d.name) for d in details] == [
        (PackageKind.FORMULA, "wget"),
        (PackageKind.CASK, "docker"),
        (PackageKind.FORMULA, "docker"),
        (PackageKind.CASK, "firefox"),
    ]


def test_match_details_does_not_match_across_name_keys() -> None:
    # A cask is looked up by token only, a formula by name only.
    info = BrewInfo(casks=[{"name": "wget"}], formulae=[{"token": "firefox"}])

    assert match_details(["wget", "firefox"], info) == []
