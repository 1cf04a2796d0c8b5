from __future__ import annotations

import typing as t


class DbcliError(RuntimeError):
    """Root of every error the command reports with exit code 1."""


class ConfigError(DbcliError):
    """Raised for any user‑visible configuration problem."""


class FileReadError(DbcliError):
    """An input file is missing, not a regular file, or unreadable."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot read {path}: {reason}")
        self.path = path
        self.reason = reason


class UnsupportedDriverError(DbcliError):
    """The connection URL does not start with a known ``jdbc:<driver>:`` prefix."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Unsupported JDBC type: {url!r}")
        self.url = url


class ExecutionError(DbcliError):
    """Base for failures that abort a run; keeps the attempted statements."""

    def __init__(self, message: str, statements: t.Sequence[str] = ()) -> None:
        super().__init__(message)
        self.statements: list[str] = list(statements)


class DatabaseError(ExecutionError):
    """Connection or statement failure reported by the database driver."""

    def __init__(
        self,
        message: str,
        statements: t.Sequence[str] = (),
        statement: str | None = None,
    ) -> None:
        super().__init__(message, statements)
        self.statement = statement


class ExecutionCancelled(ExecutionError):
    """The run was interrupted while pausing between statements."""
