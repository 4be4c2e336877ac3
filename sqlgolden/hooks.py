"""SQLAlchemy capture hook feeding a :class:`~sqlgolden.recorder.QueryRecorder`."""

from __future__ import annotations

from typing import Any, Callable, Mapping

from sqlalchemy import event
from sqlalchemy.engine import Connection, Engine

from .recorder import QueryRecorder

__all__ = ["attach", "detach", "placeholder_for"]

_PLACEHOLDERS = {"qmark": "?", "format": "%s"}

Listener = Callable[..., None]


def placeholder_for(paramstyle: str) -> str | None:
    """Positional placeholder token for a DB-API paramstyle, None for named styles."""

    return _PLACEHOLDERS.get(paramstyle)


def _record(recorder: QueryRecorder, statement: str, parameters: Any, placeholder: str | None) -> None:
    if placeholder is None or parameters is None or isinstance(parameters, Mapping):
        recorder.record_capture(statement)
        return
    recorder.record_capture(statement, tuple(parameters), placeholder=placeholder)


def attach(engine: Engine, recorder: QueryRecorder) -> Listener:
    """Record every statement *engine* executes into *recorder*.

    The listener closes over *recorder*, so several engines can feed several
    recorders without any shared lookup table. Keep the returned listener to
    :func:`detach` it later.
    """

    def _after_cursor_execute(
        conn: Connection,
        cursor: object,
        statement: str,
        parameters: Any,
        context: object,
        executemany: bool,
    ) -> None:
        placeholder = placeholder_for(conn.dialect.paramstyle)
        if executemany:
            for params in parameters or ():
                _record(recorder, statement, params, placeholder)
        else:
            _record(recorder, statement, parameters, placeholder)

    event.listen(engine, "after_cursor_execute", _after_cursor_execute)
    return _after_cursor_execute


def detach(engine: Engine, listener: Listener) -> None:
    event.remove(engine, "after_cursor_execute", listener)
