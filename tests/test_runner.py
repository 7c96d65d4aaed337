"""SubprocessRunner 테스트 — subprocess.run 호출 인자와 오류 변환."""

import subprocess
import sys

import pytest

from browser_provisioner import runner as runner_module
from browser_provisioner.errors import CommandError
from browser_provisioner.provisioner.models import ProvisionerSettings
from browser_provisioner.provisioner.provisioner import DefaultBrowserProvisioner
from browser_provisioner.runner import SubprocessRunner


class RecordingRun:
    """subprocess.run 대체 — 호출을 기록하고 raises가 있으면 던진다."""

    def __init__(self, raises=None):
        self.calls = []
        self._raises = raises

    def __call__(self, cmd, **kwargs):
        self.calls.append((cmd, kwargs))
        if self._raises:
            raise self._raises
        return subprocess.CompletedProcess(cmd, 0)


@pytest.fixture
def recording_run(monkeypatch):
    run = RecordingRun()
    monkeypatch.setattr(runner_module.subprocess, "run", run)
    return run


def test_env_is_merged_over_process_environment(monkeypatch, recording_run):
    monkeypatch.setenv("KEEP_ME", "1")

    SubprocessRunner().playwright("install", "chromium", env={"PLAYWRIGHT_BROWSERS_PATH": "/opt/pw"})

    cmd, kwargs = recording_run.calls[0]
    assert cmd == [sys.executable, "-m", "playwright", "install", "chromium"]
    assert kwargs["check"] is True
    assert kwargs["env"]["PLAYWRIGHT_BROWSERS_PATH"] == "/opt/pw"
    assert kwargs["env"]["KEEP_ME"] == "1"


def test_no_env_inherits_process_environment(recording_run):
    SubprocessRunner().run("echo", ["hi"])
    assert recording_run.calls[0][1]["env"] is None


def test_provisioner_install_dir_reaches_subprocess(tmp_path, recording_run):
    install_dir = tmp_path / "custom"
    settings = ProvisionerSettings(cacheEnabled=False, installDir=install_dir)

    DefaultBrowserProvisioner(runner=SubprocessRunner(), settings=settings).ensure_installed("chromium")

    cmd, kwargs = recording_run.calls[0]
    assert cmd[-3:] == ["install", "--with-deps", "chromium"]
    assert kwargs["env"]["PLAYWRIGHT_BROWSERS_PATH"] == str(install_dir)


@pytest.mark.parametrize(
    "error",
    [
        FileNotFoundError("no such file"),
        PermissionError("Permission denied"),
        subprocess.CalledProcessError(2, ["x"]),
        subprocess.TimeoutExpired(["x"], 5),
    ],
)
def test_failures_become_command_error(monkeypatch, error):
    monkeypatch.setattr(runner_module.subprocess, "run", RecordingRun(raises=error))
    with pytest.raises(CommandError):
        SubprocessRunner(timeout=5).run("x", [])


def test_called_process_error_keeps_returncode(monkeypatch):
    error = subprocess.CalledProcessError(3, ["x"])
    monkeypatch.setattr(runner_module.subprocess, "run", RecordingRun(raises=error))
    with pytest.raises(CommandError) as exc_info:
        SubprocessRunner().run("x", [])
    assert exc_info.value.returncode == 3
