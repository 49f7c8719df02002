"""Deployment error taxonomy.

Every error here is fatal to the run; the CLI prints the message and exits
with ``exit_code``.
"""

from __future__ import annotations


class DeployError(Exception):
    exit_code: int = 1


class UnsupportedSystemError(DeployError):
    """No known package manager was found on PATH."""


class UnsupportedArchitectureError(DeployError):
    """The host CPU family has no prebuilt yq binary."""


class MissingRequiredFieldError(DeployError):
    """Host, user or database name was left empty."""


class InvalidFieldError(DeployError):
    """A collected value is present but malformed (e.g. a non-numeric port)."""


class ConfigNotFoundError(DeployError):
    """The application config file is not in the working directory."""
