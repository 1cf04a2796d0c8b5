from __future__ import annotations

import dataclasses
import os

from dbcli.errors import ConfigError


def resolve_secret(raw: str) -> str:
    """
    Allow ``${ENV_VAR}`` syntax for secrets so passwords stay out of shell
    history.  A leading ``$$`` escapes it: ``$${abc}`` is the literal
    password ``${abc}``.  Anything else is returned untouched.
    """
    if raw.startswith("$${") and raw.endswith("}"):
        return raw[1:]
    if raw.startswith("${") and raw.endswith("}"):
        name = raw[2:-1]
        value = os.getenv(name)
        if value is None:
            raise ConfigError(f"Environment variable {name!r} referenced by password is not set")
        return value
    return raw


@dataclasses.dataclass(frozen=True)
class ExecutionConfig:
    """
    Immutable run parameters.  Nothing here talks to the database.

    ``interval`` is in milliseconds; ``times`` may be zero, meaning the
    statements are extracted but never executed.
    """

    url: str
    username: str = ""
    password: str = ""
    times: int = 1
    interval: int = 0
    create_new_connections: bool = False
    show_results: bool = True

    def __post_init__(self) -> None:
        if not self.url or not self.url.strip():
            raise ConfigError("A JDBC url is required")
        if self.times < 0:
            raise ConfigError(f"times must be >= 0, got {self.times}")
        if self.interval < 0:
            raise ConfigError(f"interval must be >= 0, got {self.interval}")
        object.__setattr__(self, "password", resolve_secret(self.password))

    @property
    def interval_seconds(self) -> float:
        return self.interval / 1000.0
