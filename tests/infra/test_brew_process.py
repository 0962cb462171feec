import subprocess

import pytest

from brewsearch.core.cancellation import CancellationToken
from brewsearch.infra import brew_process
from brewsearch.infra.brew_process import BrewClient


class _FakeProcess:
    """Finishes after `ticks` timed-out communicate() calls."""

    def __init__(
        self,
        argv: list[str],
        stdout: bytes = b"",
        stderr: bytes = b"",
        returncode: int = 0,
        ticks: int = 0,
        on_tick=None,
    ) -> None:
        self.argv = argv
        self._stdout = stdout
        self._stderr = stderr
        self._final_returncode = returncode
        self._ticks = ticks
        self._on_tick = on_tick
        self.returncode: int | None = None
        self.terminated = False
        self.killed = False
        self.timeouts: list[float | None] = []

    def communicate(self, timeout: float | None = None) -> tuple[bytes, bytes]:
        self.timeouts.append(timeout)
        if self.terminated or self.killed:
            self.returncode = -15
            return b"", b""
        if self._ticks > 0:
            self._ticks -= 1
            if self._on_tick is not None:
                self._on_tick()
            raise subprocess.TimeoutExpired(cmd=self.argv, timeout=timeout)
        self.returncode = self._final_returncode
        return self._stdout, self._stderr

    def terminate(self) -> None:
        self.terminated = True

    def kill(self) -> None:
        self.killed = True


class _PopenRecorder:
    def __init__(self, factory) -> None:
        self._factory = factory
        self.processes: list[_FakeProcess] = []
        self.kwargs: list[dict] = []

    def __call__(self, argv: list[str], **kwargs) -> _FakeProcess:
        self.kwargs.append(kwargs)
        proc = self._factory(argv)
        self.processes.append(proc)
        return proc


def _install_popen(monkeypatch, factory) -> _PopenRecorder:
    recorder = _PopenRecorder(factory)
    monkeypatch.setattr(brew_process.subprocess, "Popen", recorder)
    return recorder


def test_list_names_concatenates_casks_then_formulae(monkeypatch) -> None:
    outputs = {"casks": b"firefox\ndocker\n", "formulae": b"wget\ndocker\n"}
    recorder = _install_popen(
        monkeypatch, lambda argv: _FakeProcess(argv, stdout=outputs[argv[1]])
    )

    names = BrewClient("/opt/homebrew/bin/brew").list_names()

    assert names == ["firefox", "docker", "wget", "docker"]
    assert [p.argv for p in recorder.processes] == [
        ["/opt/homebrew/bin/brew", "casks"],
        ["/opt/homebrew/bin/brew", "formulae"],
    ]
    assert recorder.kwargs[0]["env"]["HOMEBREW_NO_AUTO_UPDATE"] == "1"


def test_list_names_accepts_failed_listing_output(monkeypatch) -> None:
    def factory(argv: list[str]) -> _FakeProcess:
        if argv[1] == "casks":
            return _FakeProcess(argv, stderr=b"Error: no casks", returncode=1)
        return _FakeProcess(argv, stdout=b"wget\n")

    _install_popen(monkeypatch, factory)

    assert BrewClient("brew").list_names() == ["wget"]


def test_list_names_survives_a_listing_that_cannot_start(monkeypatch) -> None:
    def factory(argv: list[str]) -> _FakeProcess:
        if argv[1] == "formulae":
            raise FileNotFoundError(argv[0])
        return _FakeProcess(argv, stdout=b"firefox\n")

    _install_popen(monkeypatch, factory)

    assert BrewClient("brew").list_names() == ["firefox"]


def test_list_names_kills_a_hanging_listing(monkeypatch) -> None:
    recorder = _install_popen(monkeypatch, lambda argv: _FakeProcess(argv, ticks=1))

    assert BrewClient("brew", list_timeout_sec=5).list_names() == []
    assert all(p.killed for p in recorder.processes)


def test_fetch_info_runs_brew_info_and_polls_until_done(monkeypatch) -> None:
    recorder = _install_popen(
        monkeypatch,
        lambda argv: _FakeProcess(argv, stdout=b'{"casks":[],"formulae":[]}', ticks=3),
    )

    output = BrewClient("brew", poll_interval_sec=0.01).fetch_info(
        ["wget", "curl"], CancellationToken()
    )

    assert output == '{"casks":[],"formulae":[]}'
    proc = recorder.processes[0]
    assert proc.argv == ["brew", "info", "--json=v2", "wget", "curl"]
    assert proc.timeouts == [0.01, 0.01, 0.01, 0.01]
    assert not proc.terminated


def test_fetch_info_returns_output_of_non_zero_exit(monkeypatch) -> None:
    _install_popen(
        monkeypatch,
        lambda argv: _FakeProcess(
            argv, stdout=b'{"formulae":[]}', stderr=b"Error: No formula", returncode=1
        ),
    )

    assert BrewClient("brew").fetch_info(["nope"], CancellationToken()) == '{"formulae":[]}'


def test_fetch_info_terminates_process_on_cancellation(monkeypatch) -> None:
    token = CancellationToken()
    recorder = _install_popen(
        monkeypatch, lambda argv: _FakeProcess(argv, ticks=100, on_tick=token.cancel)
    )

    output = BrewClient("brew", terminate_grace_sec=1.5).fetch_info(["wget"], token)

    assert output is None
    proc = recorder.processes[0]
    assert proc.terminated
    assert not proc.killed
    assert proc.timeouts[-1] == 1.5
    assert proc.returncode is not None


def test_fetch_info_kills_process_that_ignores_terminate(monkeypatch) -> None:
    token = CancellationToken()

    class _Stubborn(_FakeProcess):
        def communicate(self, timeout=None):
            if self.terminated and not self.killed:
                raise subprocess.TimeoutExpired(cmd=self.argv, timeout=timeout)
            return super().communicate(timeout)

    recorder = _install_popen(
        monkeypatch, lambda argv: _Stubborn(argv, ticks=100, on_tick=token.cancel)
    )

    assert BrewClient("brew").fetch_info(["wget"], token) is None
    assert recorder.processes[0].killed


def test_fetch_info_does_not_start_when_already_cancelled(monkeypatch) -> None:
    recorder = _install_popen(monkeypatch, lambda argv: _FakeProcess(argv))
    token = CancellationToken()
    token.cancel()

    assert BrewClient("brew").fetch_info(["wget"], token) is None
    assert recorder.processes == []


def test_fetch_info_propagates_start_failure(monkeypatch) -> None:
    def factory(argv: list[str]) -> _FakeProcess:
        raise FileNotFoundError(argv[0])

    _install_popen(monkeypatch, factory)

    with pytest.raises(OSError):
        BrewClient("brew").fetch_info(["wget"], CancellationToken())
