"""Deployment orchestration: probe → dependencies → credentials → patch → launch.

Steps run strictly in order and the first failure ends the run. Nothing is
rolled back: packages already installed and a written backup stay in place.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console

from lunafirpay_deploy.credentials import CredentialProvider, collect_credentials
from lunafirpay_deploy.detect.host import probe_host
from lunafirpay_deploy.installer.env_node import ensure_node, prepare_node_env, tool_version
from lunafirpay_deploy.installer.packages import BASELINE_PACKAGES, PackageInstaller
from lunafirpay_deploy.installer.yq import ensure_yq
from lunafirpay_deploy.logging import get_logger
from lunafirpay_deploy.patcher import patch_database_config, require_config
from lunafirpay_deploy.service import LaunchResult, launch
from lunafirpay_deploy.settings import DeploySettings
from lunafirpay_deploy.system.fetch import download
from lunafirpay_deploy.system.runner import CommandRunner
from lunafirpay_deploy.types import DatabaseCredentials, ProbeReport

log = get_logger(__name__)


@dataclass
class DeployContext:
    settings: DeploySettings
    runner: CommandRunner
    credentials_provider: CredentialProvider
    console: Console = field(default_factory=Console)
    fetch: Callable[..., Path] = download
    machine: str | None = None  # overrides platform.machine(), for tests


@dataclass
class DeployOutcome:
    probe: ProbeReport
    credentials: DatabaseCredentials
    launch: LaunchResult
    installed: list[str] = field(default_factory=list)


def _ok(console: Console, msg: str) -> None:
    console.print(f"[green]✔[/green] {msg}")


def _warn(console: Console, msg: str) -> None:
    console.print(f"[yellow]⚠[/yellow] {msg}")


def run_deploy(ctx: DeployContext) -> DeployOutcome:
    s, runner, console = ctx.settings, ctx.runner, ctx.console
    console.rule(f"[bold]{s.display_name} deploy[/bold]")

    # Fail before any prompt or install when run from the wrong directory.
    require_config(s.config_path)

    probe = probe_host(runner, machine=ctx.machine, systemd_run_dir=s.systemd_run_dir)
    _ok(console, f"Package manager: {probe.package_manager.value}")
    _ok(console, f"Architecture: {probe.machine} -> {probe.arch.value}")
    installer = PackageInstaller(probe.package_manager, runner)

    console.print(f"Installing base tools ({'/'.join(BASELINE_PACKAGES)})…")
    if not installer.install_baseline():
        _warn(console, "Base tool install reported errors; continuing")

    console.print("\nEnter MySQL connection details")
    creds = collect_credentials(ctx.credentials_provider, default_port=s.default_db_port)

    installed: list[str] = []
    if ensure_node(installer, s.nodesource_urls, fetch=ctx.fetch):
        installed.append("node")
    _ok(console, f"Node: {tool_version(runner, 'node', '-v')}")
    _ok(console, f"NPM : {tool_version(runner, 'npm', '-v')}")

    yq_exe, how = ensure_yq(
        installer,
        probe.arch,
        release_url=s.yq_release_url,
        install_path=s.yq_install_path,
        fetch=ctx.fetch,
    )
    if how:
        installed.append(f"yq ({how})")
    _ok(console, f"yq: {tool_version(runner, yq_exe, '--version')}")

    console.print("\nInstalling npm dependencies…")
    prepare_node_env(s.workdir, runner)

    backup = patch_database_config(s.config_path, s.backup_path, creds, runner, yq=yq_exe)
    _ok(console, f"Backed up config -> {backup.name}")
    _ok(console, "database section updated")

    if probe.systemd:
        console.print("\nsystemd detected; installing service (starts at boot)")
    else:
        _warn(console, "systemd not detected; running detached (no start at boot)")
    result = launch(s, runner, systemd=probe.systemd)

    if result.mode == "systemd":
        console.print(f"Status: sudo systemctl status {s.app_name}")
        console.print(f"Logs:   sudo journalctl -u {s.app_name} -f")
    else:
        console.print(f"Logs:   tail -f {s.log_path.name}")

    console.rule("[green]Deploy complete[/green]")
    console.print(f"Config backup: {backup.name}")
    log.info("deploy finished mode=%s installed=%s", result.mode, installed)
    return DeployOutcome(probe=probe, credentials=creds, launch=result, installed=installed)
