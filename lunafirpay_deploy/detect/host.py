"""Host detection: package manager, CPU architecture, service manager.

Probing only reads host state (PATH lookups, ``uname -m``, one directory
check); nothing is installed here.
"""

from __future__ import annotations

import platform
from pathlib import Path

from lunafirpay_deploy.errors import UnsupportedArchitectureError, UnsupportedSystemError
from lunafirpay_deploy.system.runner import CommandRunner
from lunafirpay_deploy.types import Arch, PackageManager, ProbeReport

# First match wins. Where a host ships several front-ends (yum next to dnf,
# apk inside a Debian-based toolbox) the earlier entry is preferred.
PROBE_ORDER: tuple[PackageManager, ...] = (
    PackageManager.APK,
    PackageManager.PACMAN,
    PackageManager.YUM,
    PackageManager.DNF,
    PackageManager.APT,
)

_ARCH_ALIASES: dict[str, Arch] = {
    "x86_64": Arch.AMD64,
    "amd64": Arch.AMD64,
    "aarch64": Arch.ARM64,
    "arm64": Arch.ARM64,
}


def detect_package_manager(runner: CommandRunner) -> PackageManager:
    for pm in PROBE_ORDER:
        if runner.which(pm.value):
            return pm
    names = "/".join(pm.value for pm in PROBE_ORDER)
    raise UnsupportedSystemError(f"Unsupported system: none of {names} found")


def normalize_arch(machine: str) -> Arch:
    try:
        return _ARCH_ALIASES[machine.strip().lower()]
    except KeyError:
        raise UnsupportedArchitectureError(f"Unsupported architecture: {machine}") from None


def has_systemd(runner: CommandRunner, run_dir: Path = Path("/run/systemd/system")) -> bool:
    """True when systemd is both installed and the running init."""
    return runner.which("systemctl") is not None and run_dir.is_dir()


def probe_host(
    runner: CommandRunner,
    *,
    machine: str | None = None,
    systemd_run_dir: Path = Path("/run/systemd/system"),
) -> ProbeReport:
    pm = detect_package_manager(runner)
    machine = machine if machine is not None else platform.machine()
    arch = normalize_arch(machine)
    return ProbeReport(
        package_manager=pm,
        machine=machine,
        arch=arch,
        systemd=has_systemd(runner, systemd_run_dir),
    )
