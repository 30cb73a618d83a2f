"""Composable query options and the statement helpers the repositories share.

An option is a callable that takes a SELECT statement and returns it with one
more condition, ordering or window applied. Column names are resolved against
the tables the statement selects from.
"""

from datetime import datetime
from functools import reduce
from typing import Any, Callable, Iterable, List, Optional, Sequence

import sqlalchemy as sa
from sqlalchemy.orm import sessionmaker
from sqlalchemy.sql import Select

from rainbow.errors import RecordNotFoundError, RecordNotUpdatedError

Option = Callable[[Select], Select]


def _column(statement: Select, name: str):
    for source in statement.get_final_froms():
        columns = getattr(source, "c", None)
        if columns is not None and name in columns:
            return columns[name]
    return sa.column(name)


def _identity(statement: Select) -> Select:
    return statement


def _where(name: str, build: Callable[[Any], Any]) -> Option:
    def option(statement: Select) -> Select:
        return statement.where(build(_column(statement, name)))

    return option


def _order(name: str, descending: bool) -> Option:
    def option(statement: Select) -> Select:
        col = _column(statement, name)
        return statement.order_by(col.desc() if descending else col.asc())

    return option


def apply_options(statement: Select, options: Iterable[Option]) -> Select:
    """Apply each option to ``statement`` in turn and return the result."""
    return reduce(lambda stmt, option: option(stmt), options, statement)


def with_tag_order_by_desc() -> Option:
    """Order by tag, highest first."""
    return _order("tag", True)


def with_order_by_asc() -> Option:
    """Order by id, lowest first."""
    return _order("id", False)


def with_order_by_desc() -> Option:
    """Order by id, highest first."""
    return _order("id", True)


def with_modify_order_by_desc() -> Option:
    """Order by modification time, latest first."""
    return _order("gmt_modified", True)


def with_offset(offset: int) -> Option:
    """Skip the first ``offset`` rows; zero or less skips nothing."""
    if offset <= 0:
        return _identity
    return lambda statement: statement.offset(offset)


def with_created_before(moment: datetime) -> Option:
    """Keep rows created strictly before ``moment``."""
    return _where("gmt_create", lambda col: col < moment)


def with_created_after(moment: datetime) -> Option:
    """Keep rows created strictly after ``moment``."""
    return _where("gmt_create", lambda col: col > moment)


def with_public() -> Option:
    """Keep public rows only."""
    return _where("is_public", lambda col: col == sa.true())


def with_enable(enable: int) -> Option:
    """Keep rows whose enable flag equals ``enable``."""
    return _where("enable", lambda col: col == enable)


def with_role(role: int) -> Option:
    """Keep rows with the given role."""
    return _where("role", lambda col: col == role)


def with_limit(limit: int) -> Option:
    """Return at most ``limit`` rows; zero or less means no limit."""
    if limit <= 0:
        return _identity
    return lambda statement: statement.limit(limit)


def with_id_in(*ids: int) -> Option:
    """Keep rows whose id is one of ``ids``."""
    values = list(ids)
    return _where("id", lambda col: col.in_(values))


def with_name(name: str) -> Option:
    """Keep rows with exactly this name; an empty name keeps everything."""
    if not name:
        return _identity
    return _where("name", lambda col: col == name)


def with_path(path: str) -> Option:
    """Keep rows with exactly this path; an empty path keeps everything."""
    if not path:
        return _identity
    return _where("path", lambda col: col == path)


def with_name_in(*names: str) -> Option:
    """Keep rows whose name is one of ``names``; no names keeps everything."""
    if not names:
        return _identity
    values = list(names)
    return _where("name", lambda col: col.in_(values))


def with_label_in(*labels: str) -> Option:
    """Keep rows whose label is one of ``labels``; no labels keeps everything."""
    if not labels:
        return _identity
    values = list(labels)
    return _where("label", lambda col: col.in_(values))


def with_id(object_id: int) -> Option:
    """Keep the row with this id; zero keeps everything."""
    if object_id == 0:
        return _identity
    return _where("id", lambda col: col == object_id)


def with_user(user_id: str) -> Option:
    """Keep rows owned by ``user_id``; an empty id keeps everything."""
    if not user_id:
        return _identity
    return _where("user_id", lambda col: col == user_id)


def with_task(task_id: int) -> Option:
    """Keep rows of one task; zero keeps everything."""
    if task_id == 0:
        return _identity
    return _where("task_id", lambda col: col == task_id)


def with_task_like(task_id: int) -> Option:
    """Keep rows whose task id list contains the digits of ``task_id``."""
    if task_id == 0:
        return _identity
    return _where("task_ids", lambda col: col.like(f"%{task_id}%"))


def with_name_like(name: str) -> Option:
    """Keep rows whose name contains ``name``."""
    if not name:
        return _identity
    return _where("name", lambda col: col.like(f"%{name}%"))


def with_path_like(path: str) -> Option:
    """Keep rows whose path contains ``path``."""
    if not path:
        return _identity
    return _where("path", lambda col: col.like(f"%{path}%"))


def with_tag_like(tag: str) -> Option:
    """Keep rows whose tag contains ``tag``."""
    if not tag:
        return _identity
    return _where("tag", lambda col: col.like(f"%{tag}%"))


def with_namespace(namespace: str) -> Option:
    """Keep rows in ``namespace``; an empty namespace keeps everything."""
    if not namespace:
        return _identity
    return _where("namespace", lambda col: col == namespace)


def with_agent(agent: str) -> Option:
    """Keep rows assigned to the named agent; an empty name keeps everything."""
    if not agent:
        return _identity
    return _where("agent_name", lambda col: col == agent)


def with_status(status: str) -> Option:
    """Keep rows with this status; an empty status keeps everything."""
    if not status:
        return _identity
    return _where("status", lambda col: col == status)


class _Store:
    """Session handling and the generic statements every repository runs."""

    def __init__(self, engine: sa.engine.Engine) -> None:
        self.engine = engine
        self._sessions = sessionmaker(engine, expire_on_commit=False)

    def create(self, obj: Any) -> Any:
        now = datetime.now()
        obj.gmt_create = now
        obj.gmt_modified = now
        with self._sessions.begin() as session:
            session.add(obj)
        return obj

    def _select(self, model, criteria, options, eager) -> Select:
        statement = apply_options(sa.select(model), options).where(*criteria)
        if eager:
            statement = statement.options(*eager)
        return statement

    def find(
        self,
        model,
        *criteria,
        options: Sequence[Option] = (),
        order_by: Sequence[Any] = (),
        eager: Sequence[Any] = (),
    ) -> List[Any]:
        statement = self._select(model, criteria, options, eager).order_by(*order_by)
        with self._sessions() as session:
            return list(session.scalars(statement).unique())

    def first(
        self,
        model,
        *criteria,
        options: Sequence[Option] = (),
        eager: Sequence[Any] = (),
    ) -> Any:
        statement = (
            self._select(model, criteria, options, eager).order_by(model.id).limit(1)
        )
        with self._sessions() as session:
            found = session.scalars(statement).first()
        if found is None:
            raise RecordNotFoundError()
        return found

    def count(self, model, *criteria, options: Sequence[Option] = ()) -> int:
        inner = apply_options(sa.select(model), options).where(*criteria).subquery()
        statement = sa.select(sa.func.count()).select_from(inner)
        with self._sessions() as session:
            return int(session.scalar(statement) or 0)

    def execute(self, statement) -> int:
        with self._sessions.begin() as session:
            return session.execute(statement).rowcount

    def update(
        self,
        model,
        criteria: Sequence[Any],
        updates,
        *,
        resource_version: Optional[int] = None,
        touch: bool = True,
        require_match: bool = True,
    ) -> int:
        values = dict(updates)
        conditions = list(criteria)
        if touch:
            values["gmt_modified"] = datetime.now()
        if resource_version is not None:
            values["resource_version"] = resource_version + 1
            conditions.append(model.resource_version == resource_version)
        statement = (
            sa.update(model)
            .where(*conditions)
            .values(values)
            .execution_options(synchronize_session=False)
        )
        matched = self.execute(statement)
        if require_match and matched == 0:
            raise RecordNotUpdatedError()
        return matched

    def delete(self, model, *criteria) -> int:
        statement = (
            sa.delete(model)
            .where(*criteria)
            .execution_options(synchronize_session=False)
        )
        return self.execute(statement)