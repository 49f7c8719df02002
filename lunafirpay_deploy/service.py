"""Start the application as a background service.

With systemd the app becomes a unit that restarts on failure and starts at
boot. Without it (Alpine, OpenWrt, containers) it runs as a detached process
that does not survive a reboot.
"""

from __future__ import annotations

import tempfile
from dataclasses import dataclass
from pathlib import Path

from lunafirpay_deploy.logging import get_logger
from lunafirpay_deploy.settings import DeploySettings
from lunafirpay_deploy.system.runner import CommandRunner

log = get_logger(__name__)


@dataclass
class LaunchResult:
    mode: str  # "systemd" | "detached"
    unit_path: Path | None = None
    log_path: Path | None = None
    pid: int | None = None


def render_unit(settings: DeploySettings, node_path: str) -> str:
    return (
        "[Unit]\n"
        f"Description={settings.display_name} Node Service\n"
        "After=network.target\n"
        "\n"
        "[Service]\n"
        "Type=simple\n"
        f"WorkingDirectory={settings.workdir}\n"
        f"ExecStart={node_path} {settings.entry_point}\n"
        "Restart=always\n"
        f"RestartSec={settings.restart_sec}\n"
        f"Environment=NODE_ENV={settings.node_env}\n"
        "\n"
        "[Install]\n"
        "WantedBy=multi-user.target\n"
    )


def install_systemd_service(settings: DeploySettings, runner: CommandRunner) -> LaunchResult:
    """Write the unit, reload systemd, enable and (re)start it.

    Any failing systemctl call propagates.
    """
    node_path = runner.which("node") or "/usr/bin/node"
    content = render_unit(settings, node_path)

    with tempfile.NamedTemporaryFile(
        "w", prefix=f"{settings.app_name}-", suffix=".service", delete=False, encoding="utf-8"
    ) as f:
        f.write(content)
        tmp_path = Path(f.name)
    try:
        runner.run(["sudo", "install", "-m", "0644", str(tmp_path), str(settings.unit_path)])
    finally:
        tmp_path.unlink(missing_ok=True)

    runner.run(["sudo", "systemctl", "daemon-reload"])
    runner.run(["sudo", "systemctl", "enable", settings.app_name])
    runner.run(["sudo", "systemctl", "restart", settings.app_name])
    log.info("systemd unit %s enabled and restarted", settings.unit_path)
    return LaunchResult(mode="systemd", unit_path=settings.unit_path)


def start_detached(settings: DeploySettings, runner: CommandRunner) -> LaunchResult:
    cmd = ["node", settings.entry_point]
    # pkill exits 1 when nothing matched.
    runner.run(["pkill", "-f", " ".join(cmd)], check=False, quiet=True)
    pid = runner.spawn_detached(cmd, cwd=settings.workdir, log_path=settings.log_path)
    log.info("started %s detached (pid %s)", " ".join(cmd), pid)
    return LaunchResult(mode="detached", log_path=settings.log_path, pid=pid)


def launch(settings: DeploySettings, runner: CommandRunner, *, systemd: bool) -> LaunchResult:
    if systemd:
        return install_systemd_service(settings, runner)
    return start_detached(settings, runner)
