"""테스트용 가짜 협력 객체 (캐시, 명령 실행기)."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from browser_provisioner.cache.client import RemoteCache
from browser_provisioner.errors import CommandError
from browser_provisioner.runner import CommandRunner


class FakeRunner(CommandRunner):
    """실행된 playwright 서브커맨드를 기록한다. fail_on에 든 서브커맨드는 실패."""

    def __init__(self, fail_on: tuple[str, ...] = (), error: Optional[Exception] = None):
        self.calls: list[list[str]] = []
        self.envs: list[Optional[dict[str, str]]] = []
        self._fail_on = set(fail_on)
        self._error = error

    def run(self, command: str, args: list[str], env: Optional[dict[str, str]] = None) -> int:
        self.calls.append(list(args))
        self.envs.append(env)
        subcommand = args[2] if len(args) > 2 else ""
        if subcommand in self._fail_on:
            raise self._error or CommandError(f"{subcommand} exited with 1", returncode=1)
        return 0

    @property
    def subcommands(self) -> list[str]:
        return [c[2] for c in self.calls]


class FakeCache(RemoteCache):
    """restore 시 matched 키를 반환하고 populate 항목을 설치 디렉토리에 만든다."""

    def __init__(
        self,
        matched: Optional[str] = None,
        populate: tuple[str, ...] = (),
        restore_error: Optional[Exception] = None,
        save_error: Optional[Exception] = None,
    ):
        self.matched = matched
        self.populate = populate
        self.restore_error = restore_error
        self.save_error = save_error
        self.restore_calls: list[tuple[list[Path], str, list[str]]] = []
        self.save_calls: list[tuple[list[Path], str]] = []

    def restore(self, paths, key, restore_keys):
        self.restore_calls.append((list(paths), key, list(restore_keys)))
        if self.restore_error:
            raise self.restore_error
        if self.matched:
            for name in self.populate:
                (paths[0] / name).mkdir(parents=True, exist_ok=True)
        return self.matched

    def save(self, paths, key):
        self.save_calls.append((list(paths), key))
        if self.save_error:
            raise self.save_error
