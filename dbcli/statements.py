"""
Turn command-line inputs (literal SQL or ``.sql`` files) into an ordered list
of individual statements.

The splitter is deliberately naive: a line that ends with ``;`` always closes
the current statement, and a ``;`` anywhere splits a statement in two.
Semicolons inside string literals or in procedural bodies (``CREATE
PROCEDURE ... BEGIN ...; END``) are *not* understood and will break such
statements apart.
"""
from __future__ import annotations

import logging
import os
import pathlib
import typing as t

from dbcli.errors import FileReadError

log = logging.getLogger(__name__)

SQL_SEPARATOR = ";"
COMMENT_PREFIXES = ("-", "#")


def read_source(path: str | os.PathLike) -> str:
    """Return the UTF‑8 text of *path* or raise :class:`FileReadError`."""
    p = pathlib.Path(path)
    if not p.exists():
        raise FileReadError(str(path), "no such file")
    if not p.is_file():
        raise FileReadError(str(path), "not a regular file")
    try:
        return p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise FileReadError(str(path), str(exc)) from exc


def _is_comment(line: str) -> bool:
    return line.startswith(COMMENT_PREFIXES)


def fold_lines(sql: str) -> list[str]:
    """
    Drop blank and comment lines from *sql* and glue continuation lines onto
    the statement they belong to.

    Lines are trimmed and joined without any separator, so ``SELECT *`` and
    ``FROM t;`` become ``SELECT *FROM t;``.
    """
    folded: list[str] = []
    for raw in sql.splitlines():
        line = raw.strip()
        if not line or _is_comment(line):
            continue
        if not folded or folded[-1].endswith(SQL_SEPARATOR):
            folded.append(line)
        else:
            folded[-1] += line
    return folded


def split_statements(chunks: t.Iterable[str]) -> list[str]:
    """Split every chunk on line breaks and ``;``; keep trimmed, non-blank pieces."""
    out: list[str] = []
    for chunk in chunks:
        for line in chunk.splitlines():
            for piece in line.split(SQL_SEPARATOR):
                piece = piece.strip()
                if piece:
                    out.append(piece)
    return out


def _file_chunks(paths: t.Iterable[str]) -> t.Iterator[str]:
    for path in paths:
        if not path.strip():
            continue
        try:
            text = read_source(path)
        except FileReadError as exc:
            log.warning("Read file error, skipped. File: %s (%s)", exc.path, exc.reason)
            continue
        yield from fold_lines(text)


def extract(inputs: t.Sequence[str], from_file: bool = False) -> list[str]:
    """
    Return the statements contained in *inputs*, in input order.

    With *from_file* every input is a path; unreadable files are logged and
    contribute nothing.  Otherwise every input is SQL text.
    """
    if not inputs:
        return []
    chunks = _file_chunks(inputs) if from_file else inputs
    return split_statements(chunks)
