#!/usr/bin/env python3
"""
dbcli – database command line tool.

    dbcli -j jdbc:mysql://localhost:3306/test -u root -p secret "SELECT 1; SELECT 2"
    dbcli -j jdbc:postgresql://db/app -f -t 10 -i 500 -c migrations/*.sql

Every input is either SQL text or, with ``-f``, a file of SQL statements.
The statements run in order, ``--times`` times over, and the process exits
with 1 as soon as anything fails.
"""
from __future__ import annotations

import contextlib
import logging
import signal
import sys
import typing as t

import click

from dbcli import __version__
from dbcli.config import ExecutionConfig
from dbcli.errors import DbcliError
from dbcli.runner import ExecutionContext, Runner
from dbcli.statements import extract

log = logging.getLogger("dbcli")

LOG_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)
    log.setLevel(level)


@contextlib.contextmanager
def _cancel_on_signals(ctx: ExecutionContext):
    """
    The first SIGINT / SIGTERM stops the run at the next statement boundary.
    A second one puts the previous handlers back and raises
    :class:`KeyboardInterrupt` at once, which also breaks out of a statement
    or connect that hangs.
    """
    previous: dict[int, t.Any] = {}

    def _restore() -> None:
        for sig, handler in previous.items():
            signal.signal(sig, signal.SIG_DFL if handler is None else handler)

    def _handler(signum, _frame):
        name = signal.Signals(signum).name
        if ctx.cancelled.is_set():
            log.warning("Received %s again, interrupting.", name)
            _restore()
            raise KeyboardInterrupt
        log.warning("Received %s, stopping before the next statement.", name)
        ctx.cancelled.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            previous[sig] = signal.signal(sig, _handler)
        except ValueError:
            # not the main thread
            pass
    try:
        yield ctx
    finally:
        _restore()


@click.command(
    context_settings={"help_option_names": ["-h", "--help"]},
    help="Database Command Line Tool",
)
@click.option("-j", "--jdbc", "url", required=True, help="Database JDBC url to connect.")
@click.option(
    "-u", "--username", default="", envvar="DBCLI_USERNAME",
    help="Database username to connect.",
)
@click.option(
    "-p", "--password", default="", envvar="DBCLI_PASSWORD",
    help="Database password to connect; ${VAR} reads it from the environment, $${...} is a literal ${...}.",
)
@click.option("-f", "--file", "from_file", is_flag=True, help="Execute SQL statements in files.")
@click.option(
    "-t", "--times", type=click.IntRange(min=0), default=1, show_default=True,
    help="Execute times.",
)
@click.option(
    "-i", "--interval", type=click.IntRange(min=0), default=0, show_default=True,
    help="Interval time between SQL executions in milliseconds.",
)
@click.option(
    "-c", "--connection", "new_connections", is_flag=True,
    help="Create new JDBC connections for every request.",
)
@click.option(
    "-r/-R", "--results/--no-results", default=True, show_default=True,
    help="Show execution results.",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.version_option(__version__, "-V", "--version", prog_name="dbcli")
@click.argument("inputs", nargs=-1, required=True)
@click.pass_context
def main(
    click_ctx: click.Context,
    url: str,
    username: str,
    password: str,
    from_file: bool,
    times: int,
    interval: int,
    new_connections: bool,
    results: bool,
    verbose: bool,
    inputs: t.Tuple[str, ...],
) -> int:
    _configure_logging(verbose)

    statements = extract(inputs, from_file=from_file)
    log.info("Following SQL(s) will be executed:\n%s\n", "\n".join(statements))

    try:
        config = ExecutionConfig(
            url=url,
            username=username,
            password=password,
            times=times,
            interval=interval,
            create_new_connections=new_connections,
            show_results=results,
        )
        with _cancel_on_signals(ExecutionContext(logger=log)) as ctx:
            Runner(config, ctx).run(statements)
    except DbcliError as exc:
        log.error("Execute SQL(s) error. SQL(s):\n%s", statements, exc_info=exc)
        click_ctx.exit(1)
    return 0


def entrypoint(argv: t.Sequence[str] | None = None) -> int:
    """
    Invoke :func:`main` and map every failure, usage errors included, to
    exit code 1.
    """
    try:
        rv = main.main(args=list(argv) if argv is not None else None, prog_name="dbcli", standalone_mode=False)
    except click.exceptions.Abort:
        click.echo("Aborted!", err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return 1
    return rv or 0


def run() -> None:
    sys.exit(entrypoint())


if __name__ == "__main__":
    run()
