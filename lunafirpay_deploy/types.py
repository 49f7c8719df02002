"""Shared Pydantic models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class PackageManager(str, Enum):
    APT = "apt"
    DNF = "dnf"
    YUM = "yum"
    PACMAN = "pacman"
    APK = "apk"


class Arch(str, Enum):
    """Architecture tag, spelled the way yq names its release binaries."""

    AMD64 = "amd64"
    ARM64 = "arm64"


class ProbeReport(BaseModel):
    package_manager: PackageManager
    machine: str
    arch: Arch
    systemd: bool = False


class DatabaseCredentials(BaseModel):
    host: str
    port: int = Field(default=3306, ge=1, le=65535)
    user: str
    password: str = Field(default="", repr=False)
    database: str

    def yq_environment(self) -> dict[str, str]:
        """Values handed to ``yq`` via ``strenv``/``env`` instead of argv."""
        return {
            "LUNAFIRPAY_DB_HOST": self.host,
            "LUNAFIRPAY_DB_PORT": str(self.port),
            "LUNAFIRPAY_DB_USER": self.user,
            "LUNAFIRPAY_DB_PASSWORD": self.password,
            "LUNAFIRPAY_DB_NAME": self.database,
        }
