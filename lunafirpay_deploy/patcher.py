"""Patch the ``database`` section of the application's YAML config.

The edit is delegated to ``yq -i`` so every other key keeps its formatting.
Collected values reach yq through its environment (``strenv``/``env``), never
through the expression text, so quotes in a password cannot break the edit
and the password never shows up in a process listing.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from lunafirpay_deploy.errors import ConfigNotFoundError
from lunafirpay_deploy.logging import get_logger
from lunafirpay_deploy.system.runner import CommandRunner
from lunafirpay_deploy.types import DatabaseCredentials

log = get_logger(__name__)

# env() parses its value as YAML, so the port lands as an integer.
YQ_EXPRESSION = (
    ".database.host = strenv(LUNAFIRPAY_DB_HOST) |"
    " .database.port = env(LUNAFIRPAY_DB_PORT) |"
    " .database.user = strenv(LUNAFIRPAY_DB_USER) |"
    " .database.password = strenv(LUNAFIRPAY_DB_PASSWORD) |"
    " .database.database = strenv(LUNAFIRPAY_DB_NAME)"
)


def require_config(config_path: Path) -> None:
    if not config_path.is_file():
        raise ConfigNotFoundError(
            f"{config_path.name} not found in {config_path.parent} "
            "(run this from the application's root directory)"
        )


def backup_config(config_path: Path, backup_path: Path) -> Path:
    """Copy *config_path* to *backup_path*, replacing any earlier backup."""
    shutil.copyfile(config_path, backup_path)
    log.info("backed up %s -> %s", config_path, backup_path)
    return backup_path


def patch_database_config(
    config_path: Path,
    backup_path: Path,
    creds: DatabaseCredentials,
    runner: CommandRunner,
    *,
    yq: str = "yq",
) -> Path:
    """Back up *config_path*, then set the five ``database.*`` keys in place.

    Returns the backup path. A yq failure propagates as CalledProcessError;
    the backup is already written by then.
    """
    require_config(config_path)
    backup_config(config_path, backup_path)
    runner.run([yq, "-i", YQ_EXPRESSION, str(config_path)], env=creds.yq_environment())
    log.info("database section updated in %s", config_path)
    return backup_path
