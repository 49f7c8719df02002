"""Node environment preparation.

Installs the Node.js runtime when it is missing, then installs the
application's npm dependencies in the working directory via `npm ci`
(lockfile present) or `npm install`.
"""

from __future__ import annotations

from pathlib import Path

from lunafirpay_deploy.installer.packages import PackageInstaller
from lunafirpay_deploy.logging import get_logger
from lunafirpay_deploy.system.fetch import download
from lunafirpay_deploy.system.runner import CommandRunner
from lunafirpay_deploy.types import PackageManager

log = get_logger(__name__)


def ensure_node(
    installer: PackageInstaller,
    nodesource_urls: dict[str, str],
    *,
    fetch=download,
) -> bool:
    """Install Node.js unless `node` is already on PATH.

    Returns True when an install happened. Debian and RHEL families go through
    the NodeSource setup script; pacman and apk use their own repositories.
    """
    runner = installer.runner
    if runner.which("node"):
        log.info("node already installed")
        return False

    pm = installer.pm
    if pm.value in nodesource_urls:
        script = fetch(nodesource_urls[pm.value], prefix="nodesource-")
        try:
            if pm is PackageManager.APT:
                runner.run(["sudo", "-E", "bash", str(script)])
                runner.run(["sudo", "apt", "install", "-y", "nodejs"])
            else:
                runner.run(["sudo", "bash", str(script)])
                installer.install("nodejs")
        finally:
            script.unlink(missing_ok=True)
    else:
        installer.install("nodejs", "npm")
    return True


def tool_version(runner: CommandRunner, *cmd: str) -> str:
    res = runner.run(list(cmd), check=False, capture=True)
    out = (res.stdout or "").strip()
    if res.returncode != 0 or not out:
        return "installed"
    return out.splitlines()[0]


def prepare_node_env(root: Path, runner: CommandRunner) -> None:
    pkg = root / "package.json"
    if not pkg.exists():
        log.info("no package.json in %s; skipping npm install", root)
        return

    if (root / "package-lock.json").exists():
        runner.run(["npm", "ci"], cwd=root)
        return

    runner.run(["npm", "install"], cwd=root)
