"""System command runner.

All host mutations (package installs, systemctl, pkill, yq) go through a
``CommandRunner`` so orchestration can be exercised against a recording fake.
"""

from __future__ import annotations

import os
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import Protocol

from lunafirpay_deploy.logging import get_logger

log = get_logger(__name__)


class CommandRunner(Protocol):
    def which(self, name: str) -> str | None: ...

    def run(
        self,
        args: list[str],
        *,
        check: bool = True,
        env: dict[str, str] | None = None,
        cwd: Path | None = None,
        capture: bool = False,
        quiet: bool = False,
    ) -> subprocess.CompletedProcess: ...

    def spawn_detached(self, args: list[str], *, cwd: Path, log_path: Path) -> int: ...


class SubprocessRunner:
    """Runs commands on the local host with :mod:`subprocess`."""

    def which(self, name: str) -> str | None:
        return shutil.which(name)

    def run(
        self,
        args: list[str],
        *,
        check: bool = True,
        env: dict[str, str] | None = None,
        cwd: Path | None = None,
        capture: bool = False,
        quiet: bool = False,
    ) -> subprocess.CompletedProcess:
        """Run *args* to completion.

        *env* is merged over the current environment. *quiet* discards output
        instead of letting it reach the terminal; *capture* keeps it as text
        on the returned object. With *check* a non-zero exit raises
        :class:`subprocess.CalledProcessError`. A missing executable counts as
        exit status 127.
        """
        log.info("exec: %s", shlex.join(args))
        full_env = None
        if env:
            full_env = os.environ.copy()
            full_env.update(env)

        stdout = stderr = None
        if capture:
            stdout = stderr = subprocess.PIPE
        elif quiet:
            stdout = stderr = subprocess.DEVNULL

        try:
            return subprocess.run(
                args,
                check=check,
                env=full_env,
                cwd=cwd,
                stdout=stdout,
                stderr=stderr,
                text=True,
            )
        except FileNotFoundError:
            # Report a missing executable the way a shell would.
            log.warning("command not found: %s", args[0])
            if check:
                raise subprocess.CalledProcessError(127, args) from None
            return subprocess.CompletedProcess(args, 127, stdout="", stderr="")

    def spawn_detached(self, args: list[str], *, cwd: Path, log_path: Path) -> int:
        """Start *args* in its own session with output written to *log_path*.

        The child outlives this process; its pid is returned.
        """
        log.info("spawn: %s (log=%s)", shlex.join(args), log_path)
        with open(log_path, "wb") as out:
            proc = subprocess.Popen(
                args,
                cwd=cwd,
                stdin=subprocess.DEVNULL,
                stdout=out,
                stderr=subprocess.STDOUT,
                start_new_session=True,
            )
        return proc.pid
