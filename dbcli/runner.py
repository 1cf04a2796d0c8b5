from __future__ import annotations

import dataclasses
import logging
import threading
import time
import typing as t

from dbcli.config import ExecutionConfig
from dbcli.driver import connection, select_driver
from dbcli.errors import DatabaseError, ExecutionCancelled
from dbcli.render import column_labels, render_result_set, render_update_count
from dbcli.statements import SQL_SEPARATOR

log = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


@dataclasses.dataclass
class ExecutionContext:
    """
    Everything the runner needs from the outside world: where to log, how to
    turn a URL into a driver, and the event that cancels a run.
    """

    logger: logging.Logger = log
    select_driver: t.Callable[[str], t.Any] = select_driver
    cancelled: threading.Event = dataclasses.field(default_factory=threading.Event)


@dataclasses.dataclass(frozen=True)
class ExecutionOutcome:
    statement: str
    elapsed_ms: int
    columns: tuple[str, ...] = ()
    rows: tuple[tuple[t.Any, ...], ...] | None = None
    update_count: int | None = None

    @property
    def has_result_set(self) -> bool:
        return self.rows is not None


@dataclasses.dataclass
class RunSummary:
    executions: int = 0
    connections: int = 0
    elapsed_ms: int = 0


class Runner:
    """
    Executes a fixed list of statements ``config.times`` times, either on one
    shared connection or on a fresh connection per statement.

    The first driver error stops everything: no further statements and no
    further iterations are attempted.
    """

    def __init__(self, config: ExecutionConfig, context: ExecutionContext | None = None) -> None:
        self.config = config
        self.ctx = context or ExecutionContext()

    @property
    def logger(self) -> logging.Logger:
        return self.ctx.logger

    def run(self, statements: t.Sequence[str]) -> RunSummary:
        statements = list(statements)
        driver = self.ctx.select_driver(self.config.url)
        summary = RunSummary()

        if not statements or self.config.times == 0:
            self.logger.info("Nothing to execute.")
            return summary

        start = time.perf_counter()
        current: str | None = None
        try:
            if self.config.create_new_connections:
                for _ in range(self.config.times):
                    for stmt in statements:
                        current = stmt
                        self._pause(statements)
                        started = self._announce(stmt)
                        with self._connect(driver, summary) as conn:
                            self._execute(conn, stmt, summary, started)
            else:
                with self._connect(driver, summary) as conn:
                    for _ in range(self.config.times):
                        for stmt in statements:
                            current = stmt
                            self._pause(statements)
                            self._execute(conn, stmt, summary, self._announce(stmt))
        except driver.errors as exc:
            raise DatabaseError(str(exc), statements, statement=current) from exc
        except KeyboardInterrupt as exc:
            self.ctx.cancelled.set()
            raise ExecutionCancelled("Execution interrupted.", statements) from exc

        if self.ctx.cancelled.is_set():
            raise ExecutionCancelled("Execution cancelled.", statements)

        summary.elapsed_ms = _elapsed_ms(start)
        self.logger.debug(
            "Run finished: %d execution(s) on %d connection(s) in %d ms",
            summary.executions, summary.connections, summary.elapsed_ms,
        )
        return summary

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _connect(self, driver, summary: RunSummary):
        summary.connections += 1
        return connection(
            driver,
            self.config.url,
            self.config.username,
            self.config.password,
            logger=self.logger,
        )

    def _pause(self, statements: list[str]) -> None:
        """Wait ``interval`` ms before a statement; stop if the run is cancelled."""
        cancelled = self.ctx.cancelled
        if cancelled.is_set():
            raise ExecutionCancelled("Execution cancelled.", statements)
        if self.config.interval <= 0:
            return
        try:
            interrupted = cancelled.wait(self.config.interval_seconds)
        except KeyboardInterrupt as exc:
            cancelled.set()
            raise ExecutionCancelled("Execution interrupted.", statements) from exc
        if interrupted:
            raise ExecutionCancelled("Execution cancelled.", statements)

    def _announce(self, statement: str) -> float:
        self.logger.info("Executing SQL: %s", statement)
        return time.perf_counter()

    def _execute(
        self,
        conn,
        statement: str,
        summary: RunSummary,
        start: float | None = None,
    ) -> ExecutionOutcome:
        """
        Run one statement.  *start* is when the statement was announced; with
        a connection per statement it precedes the connect, so the reported
        time cost includes connection setup.
        """
        sql = statement[:-1] if statement.endswith(SQL_SEPARATOR) else statement
        if start is None:
            start = self._announce(statement)
        with conn.cursor() as cur:
            cur.execute(sql)
            if cur.description is not None:
                # always drain the result so the connection stays usable
                columns = tuple(column_labels(cur.description))
                rows = tuple(tuple(r) for r in cur.fetchall())
                outcome = ExecutionOutcome(statement, _elapsed_ms(start), columns=columns, rows=rows)
            else:
                outcome = ExecutionOutcome(statement, _elapsed_ms(start), update_count=cur.rowcount)
        summary.executions += 1
        self.logger.info("Executed SQL: %s\tTime cost: %d ms.", statement, outcome.elapsed_ms)
        if self.config.show_results:
            self._render(outcome)
        return outcome

    def _render(self, outcome: ExecutionOutcome) -> None:
        if not self.logger.isEnabledFor(logging.INFO):
            return
        if outcome.has_result_set:
            self.logger.info(render_result_set(outcome.columns, outcome.rows or ()))
        else:
            self.logger.info(render_update_count(outcome.update_count))


def run(
    statements: t.Sequence[str],
    config: ExecutionConfig,
    context: ExecutionContext | None = None,
) -> RunSummary:
    """Execute *statements* according to *config*; see :class:`Runner`."""
    return Runner(config, context).run(statements)
