"""Database credential collection.

``collect_credentials`` owns the defaulting and validation rules; where the
raw answers come from is a ``CredentialProvider`` (the terminal in production,
a fixed mapping in tests).
"""

from __future__ import annotations

from typing import Protocol

from rich.console import Console
from rich.prompt import Prompt

from lunafirpay_deploy.errors import InvalidFieldError, MissingRequiredFieldError
from lunafirpay_deploy.types import DatabaseCredentials

FIELDS: list[tuple[str, str, bool]] = [
    # (key, label, secret)
    ("host", "MySQL Host", False),
    ("port", "MySQL Port (default {port})", False),
    ("user", "MySQL user", False),
    ("password", "MySQL password", True),
    ("database", "Database name", False),
]

REQUIRED = ("host", "user", "database")


class CredentialProvider(Protocol):
    def ask(self, key: str, label: str, *, secret: bool = False) -> str: ...


class ConsolePrompter:
    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def ask(self, key: str, label: str, *, secret: bool = False) -> str:
        return Prompt.ask(label, console=self.console, password=secret, default="", show_default=False)


def collect_credentials(provider: CredentialProvider, default_port: int = 3306) -> DatabaseCredentials:
    """Ask for each field once, in order, then validate.

    A blank port means *default_port*. Blank host, user or database name
    raises :class:`MissingRequiredFieldError`; there is no re-prompt.
    """
    answers: dict[str, str] = {}
    for key, label, secret in FIELDS:
        value = provider.ask(key, label.format(port=default_port), secret=secret)
        # Passwords are taken verbatim; surrounding spaces may be significant.
        answers[key] = value if secret else value.strip()

    missing = [k for k in REQUIRED if not answers[k]]
    if missing:
        raise MissingRequiredFieldError(f"{' / '.join(missing)} must not be empty")

    port_raw = answers["port"] or str(default_port)
    try:
        port = int(port_raw)
    except ValueError:
        raise InvalidFieldError(f"port must be a number, got {port_raw!r}") from None
    if not 1 <= port <= 65535:
        raise InvalidFieldError(f"port out of range: {port}")

    return DatabaseCredentials(
        host=answers["host"],
        port=port,
        user=answers["user"],
        password=answers["password"],
        database=answers["database"],
    )
