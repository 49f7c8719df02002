"""lunafirpay-deploy CLI: one-shot provisioning of the LunaFirPay Node service.

Run it from the application's root directory (where ``config.yaml`` and
``app.js`` live). It takes no flags; database details are prompted for.
"""

from __future__ import annotations

import shlex
import subprocess

import httpx
import typer
from rich import print as rprint
from rich.console import Console
from rich.markup import escape

from lunafirpay_deploy.core import DeployContext, run_deploy
from lunafirpay_deploy.credentials import ConsolePrompter
from lunafirpay_deploy.errors import DeployError
from lunafirpay_deploy.logging import get_logger, set_level
from lunafirpay_deploy.settings import DeploySettings
from lunafirpay_deploy.system.runner import SubprocessRunner

app = typer.Typer(add_completion=False, help="Provision and start LunaFirPay on this host")
console = Console()
log = get_logger(__name__)


@app.command()
def deploy() -> None:
    """Install prerequisites, configure the database and start the service."""
    try:
        settings = DeploySettings.from_env()
        set_level(settings.log_level)
        ctx = DeployContext(
            settings=settings,
            runner=SubprocessRunner(),
            credentials_provider=ConsolePrompter(console),
            console=console,
        )
        run_deploy(ctx)
    except DeployError as exc:
        rprint(f"[red]❌ {escape(str(exc))}[/red]")
        raise typer.Exit(code=exc.exit_code) from None
    except subprocess.CalledProcessError as exc:
        cmd = exc.cmd if isinstance(exc.cmd, str) else shlex.join(exc.cmd)
        log.error("command failed: %s (exit %s)", cmd, exc.returncode)
        rprint(f"[red]❌ command `{cmd}` failed with exit code {exc.returncode}[/red]")
        raise typer.Exit(code=1) from None
    except httpx.HTTPError as exc:
        log.error("download failed: %s", exc)
        rprint(f"[red]❌ download failed: {escape(str(exc))}[/red]")
        raise typer.Exit(code=1) from None
    except OSError as exc:
        log.error("os error: %s", exc)
        rprint(f"[red]❌ {escape(str(exc))}[/red]")
        raise typer.Exit(code=1) from None
    except KeyboardInterrupt:
        rprint("\n[yellow]Interrupted[/yellow]")
        raise typer.Exit(code=130) from None


if __name__ == "__main__":
    app()
