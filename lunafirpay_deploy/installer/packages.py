"""Package installation through the host's package manager.

One ``PackageInstaller`` is built per run from the probed manager and reused
for every install; the manager is never re-probed.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass

from lunafirpay_deploy.logging import get_logger
from lunafirpay_deploy.system.runner import CommandRunner
from lunafirpay_deploy.types import PackageManager

log = get_logger(__name__)

BASELINE_PACKAGES = ("curl", "wget", "git")


def install_commands(pm: PackageManager, packages: list[str]) -> list[list[str]]:
    """Return the non-interactive command sequence installing *packages*."""
    pkgs = list(packages)
    if pm is PackageManager.APT:
        return [["sudo", "apt", "update"], ["sudo", "apt", "install", "-y", *pkgs]]
    if pm in (PackageManager.DNF, PackageManager.YUM):
        return [["sudo", pm.value, "install", "-y", *pkgs]]
    if pm is PackageManager.PACMAN:
        return [["sudo", "pacman", "-Sy", "--noconfirm", *pkgs]]
    if pm is PackageManager.APK:
        return [["sudo", "apk", "add", "--no-cache", *pkgs]]
    raise ValueError(f"Unknown package manager: {pm}")


@dataclass
class PackageInstaller:
    pm: PackageManager
    runner: CommandRunner

    def install(self, *packages: str, quiet: bool = False) -> None:
        """Install *packages*; raises CalledProcessError on the first failing step."""
        for cmd in install_commands(self.pm, list(packages)):
            self.runner.run(cmd, quiet=quiet)

    def try_install(self, *packages: str, quiet: bool = False) -> bool:
        try:
            self.install(*packages, quiet=quiet)
        except subprocess.CalledProcessError as exc:
            log.warning("install of %s failed (exit %s)", " ".join(packages), exc.returncode)
            return False
        return True

    def install_baseline(self) -> bool:
        # Some images lack wget or curl in their repos; one of them is enough.
        return self.try_install(*BASELINE_PACKAGES)
