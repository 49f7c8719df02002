"""yq installation: distro package first, upstream release binary second.

Only mikefarah's Go yq (v4+) can do the in-place ``strenv``/``env`` edit.
Debian and Ubuntu ship an unrelated Python jq wrapper under the same name,
so any candidate is checked with ``yq --version`` before it is used.
"""

from __future__ import annotations

import re
from pathlib import Path

from lunafirpay_deploy.installer.packages import PackageInstaller
from lunafirpay_deploy.logging import get_logger
from lunafirpay_deploy.system.fetch import download
from lunafirpay_deploy.system.runner import CommandRunner
from lunafirpay_deploy.types import Arch

log = get_logger(__name__)

_VERSION_RE = re.compile(r"version\s+v?(\d+)\.")


def is_mikefarah_yq(runner: CommandRunner, exe: str) -> bool:
    res = runner.run([exe, "--version"], check=False, capture=True)
    out = f"{res.stdout or ''}{res.stderr or ''}"
    if res.returncode != 0 or "mikefarah" not in out:
        return False
    m = _VERSION_RE.search(out)
    return m is not None and int(m.group(1)) >= 4


def _usable(runner: CommandRunner, install_path: Path) -> str | None:
    candidates = [runner.which("yq")]
    if install_path.exists():
        candidates.append(str(install_path))
    for exe in candidates:
        if exe and is_mikefarah_yq(runner, exe):
            return exe
    return None


def ensure_yq(
    installer: PackageInstaller,
    arch: Arch,
    *,
    release_url: str,
    install_path: Path,
    fetch=download,
) -> tuple[str, str | None]:
    """Make a usable yq available and return ``(executable, how)``.

    *how* is ``"package"`` or ``"binary"``, or None when a usable yq was
    already present. A foreign yq on PATH is left alone; the release binary
    goes to *install_path* and that path is returned.
    """
    runner = installer.runner
    exe = _usable(runner, install_path)
    if exe:
        log.info("yq already installed at %s", exe)
        return exe, None

    if runner.which("yq"):
        log.warning("yq on PATH is not mikefarah/yq v4; installing the release binary")
    elif installer.try_install("yq", quiet=True):
        exe = _usable(runner, install_path)
        if exe:
            return exe, "package"
        log.warning("repository yq is not mikefarah/yq v4; installing the release binary")

    url = release_url.format(arch=arch.value)
    log.warning("fetching %s", url)
    binary = fetch(url, prefix="yq-")
    try:
        runner.run(["sudo", "install", "-m", "0755", str(binary), str(install_path)])
    finally:
        binary.unlink(missing_ok=True)
    return str(install_path), "binary"
