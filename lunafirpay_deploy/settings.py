"""Fixed parameters of a deployment run.

The CLI takes no flags; these defaults describe the one application this
tool provisions. Tests construct ``DeploySettings`` directly with a temporary
``workdir`` and unit directory.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

from lunafirpay_deploy.errors import InvalidFieldError
from lunafirpay_deploy.types import PackageManager

NODESOURCE_DEB = "https://deb.nodesource.com/setup_18.x"
NODESOURCE_RPM = "https://rpm.nodesource.com/setup_18.x"
YQ_RELEASE_URL = "https://github.com/mikefarah/yq/releases/latest/download/yq_linux_{arch}"


class DeploySettings(BaseModel):
    app_name: str = "lunafirpay"
    display_name: str = "LunaFirPay"
    config_file: str = "config.yaml"
    entry_point: str = "app.js"
    workdir: Path = Field(default_factory=Path.cwd)

    unit_dir: Path = Path("/etc/systemd/system")
    systemd_run_dir: Path = Path("/run/systemd/system")
    restart_sec: int = 3
    node_env: str = "production"

    yq_install_path: Path = Path("/usr/local/bin/yq")
    yq_release_url: str = YQ_RELEASE_URL
    nodesource_urls: dict[str, str] = Field(
        default_factory=lambda: {
            PackageManager.APT.value: NODESOURCE_DEB,
            PackageManager.DNF.value: NODESOURCE_RPM,
            PackageManager.YUM.value: NODESOURCE_RPM,
        }
    )

    default_db_port: int = 3306
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, v):
        return v.strip().upper() if isinstance(v, str) else v

    @classmethod
    def from_env(cls) -> DeploySettings:
        raw = os.environ.get("LUNAFIRPAY_LOG_LEVEL", "INFO")
        try:
            return cls(log_level=raw)
        except ValidationError:
            raise InvalidFieldError(
                f"LUNAFIRPAY_LOG_LEVEL must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL; got {raw!r}"
            ) from None

    @property
    def config_path(self) -> Path:
        return self.workdir / self.config_file

    @property
    def backup_path(self) -> Path:
        return self.workdir / f"{self.config_file}.bak"

    @property
    def unit_name(self) -> str:
        return f"{self.app_name}.service"

    @property
    def unit_path(self) -> Path:
        return self.unit_dir / self.unit_name

    @property
    def log_path(self) -> Path:
        return self.workdir / f"{self.app_name}.log"
