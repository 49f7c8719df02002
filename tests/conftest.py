from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from lunafirpay_deploy.settings import DeploySettings

SAMPLE_CONFIG = """\
server:
  port: 3000
database:
  host: localhost
  port: 3306
  user: root
  password: ""
  database: test
payment:
  name: "demo"
"""

GO_YQ_VERSION = "yq (https://github.com/mikefarah/yq/) version v4.44.3\n"
JQ_WRAPPER_YQ_VERSION = "yq 3.1.0\n"


class FakeRunner:
    """Records commands instead of running them.

    *tools* maps executable names to their PATH location (what ``which``
    finds). *failures* maps an argv prefix to the exit code it returns.
    *outputs* maps an argv prefix to captured stdout. *installs* maps an argv
    prefix to tools that appear on PATH once that command succeeds.
    """

    def __init__(
        self,
        tools: dict[str, str] | None = None,
        failures: dict[tuple[str, ...], int] | None = None,
        outputs: dict[tuple[str, ...], str] | None = None,
        installs: dict[tuple[str, ...], dict[str, str]] | None = None,
    ) -> None:
        self.tools = dict(tools or {})
        self.failures = dict(failures or {})
        self.outputs = dict(outputs or {})
        self.installs = dict(installs or {})
        self.calls: list[list[str]] = []
        self.envs: list[dict[str, str] | None] = []
        self.cwds: list[Path | None] = []
        self.spawned: list[tuple[list[str], Path, Path]] = []

    def which(self, name: str) -> str | None:
        return self.tools.get(name)

    def _match(self, table: dict, args: list[str]):
        for prefix, value in table.items():
            if tuple(args[: len(prefix)]) == prefix:
                return value
        return None

    def run(self, args, *, check=True, env=None, cwd=None, capture=False, quiet=False):
        self.calls.append(list(args))
        self.envs.append(env)
        self.cwds.append(cwd)
        rc = self._match(self.failures, args) or 0
        out = self._match(self.outputs, args) or ""
        if check and rc:
            raise subprocess.CalledProcessError(rc, args)
        if not rc:
            self.tools.update(self._match(self.installs, args) or {})
        return subprocess.CompletedProcess(args, rc, stdout=out, stderr="")

    def spawn_detached(self, args, *, cwd, log_path):
        self.spawned.append((list(args), cwd, log_path))
        return 4242

    def ran(self, *prefix: str) -> bool:
        return any(tuple(c[: len(prefix)]) == prefix for c in self.calls)


class StaticCredentials:
    """Answers prompts from a fixed mapping; unknown keys answer blank."""

    def __init__(self, **answers: str) -> None:
        self.answers = answers
        self.asked: list[tuple[str, bool]] = []

    def ask(self, key: str, label: str, *, secret: bool = False) -> str:
        self.asked.append((key, secret))
        return self.answers.get(key, "")


class FakeFetch:
    """Stands in for ``download``: writes a stub file and records the URL."""

    def __init__(self, tmp_path: Path) -> None:
        self.tmp_path = tmp_path
        self.urls: list[str] = []

    def __call__(self, url: str, *, prefix: str = "lunafirpay-", client=None) -> Path:
        self.urls.append(url)
        p = self.tmp_path / f"{prefix}{len(self.urls)}"
        p.write_text("#!/bin/sh\n", encoding="utf-8")
        return p


@pytest.fixture
def fake_fetch(tmp_path: Path) -> FakeFetch:
    d = tmp_path / "downloads"
    d.mkdir()
    return FakeFetch(d)


@pytest.fixture
def app_dir(tmp_path: Path) -> Path:
    root = tmp_path / "app"
    root.mkdir()
    (root / "config.yaml").write_text(SAMPLE_CONFIG, encoding="utf-8")
    (root / "app.js").write_text("console.log('hi')\n", encoding="utf-8")
    (root / "package.json").write_text('{"name": "lunafirpay"}\n', encoding="utf-8")
    return root


@pytest.fixture
def settings(app_dir: Path, tmp_path: Path) -> DeploySettings:
    unit_dir = tmp_path / "units"
    unit_dir.mkdir()
    return DeploySettings(
        workdir=app_dir,
        unit_dir=unit_dir,
        systemd_run_dir=tmp_path / "run-systemd",
        yq_install_path=tmp_path / "bin" / "yq",
    )


@pytest.fixture
def good_answers() -> StaticCredentials:
    return StaticCredentials(
        host="db.example.com", port="", user="svc", password="secret", database="lunafirpay"
    )
