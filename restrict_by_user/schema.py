"""
Schema, result sources and result sets over SQLAlchemy.

A Schema maps monikers (usually the mapped class name) to ResultSources.
A ResultSource produces ResultSets: lazy, re-executable descriptions of a
SELECT that are only run against the database when materialised.

Usage:
    schema = Schema.from_base(session, Base)

    notes = schema.resultset("Notes").search(user_id=user.id)
    rows = await notes.all()
"""

from __future__ import annotations

import copy
from typing import Any, Iterable, Optional, Sequence, TYPE_CHECKING

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import DeclarativeBase

from .exceptions import UnknownMonikerError

if TYPE_CHECKING:
    from .applier import RestrictionApplier


class ResultSet:
    """
    Lazy query description for one source.

    Every narrowing method returns a new ResultSet; the receiver is never
    modified, so a ResultSet can be shared and re-executed freely.
    """

    def __init__(self, source: "ResultSource", statement: Optional[Select] = None):
        self.source = source
        self._statement = statement if statement is not None else select(source.model)

    def __repr__(self) -> str:
        return f"<ResultSet {self.source.moniker}>"

    @property
    def model(self) -> type:
        return self.source.model

    @property
    def statement(self) -> Select:
        """The underlying SELECT statement."""
        return self._statement

    def _derive(self, statement: Select) -> "ResultSet":
        return type(self)(self.source, statement)

    # ============================================================
    # NARROWING
    # ============================================================

    def search(self, *criteria: Any, **filters: Any) -> "ResultSet":
        """
        Narrow with SQL expressions and/or field=value filters.

        List, tuple and set values become IN clauses.

        Usage:
            rs.search(Note.title.like("%todo%"), user_id=user.id)
        """
        stmt = self._statement
        if criteria:
            stmt = stmt.where(*criteria)
        for field_name, value in filters.items():
            column = getattr(self.model, field_name)
            if isinstance(value, (list, tuple, set)):
                stmt = stmt.where(column.in_(value))
            else:
                stmt = stmt.where(column == value)
        return self._derive(stmt)

    def order_by(self, *clauses: Any) -> "ResultSet":
        return self._derive(self._statement.order_by(*clauses))

    def limit(self, limit: int) -> "ResultSet":
        return self._derive(self._statement.limit(limit))

    # ============================================================
    # MATERIALISATION
    # ============================================================

    @property
    def session(self) -> AsyncSession:
        return self.source.schema.session

    async def all(self) -> list[Any]:
        """Execute and return every matching row."""
        result = await self.session.execute(self._statement)
        return list(result.scalars().all())

    async def first(self) -> Any | None:
        """First row, honouring any limit already on the statement."""
        result = await self.session.execute(self._statement)
        return result.scalars().first()

    async def one_or_none(self) -> Any | None:
        result = await self.session.execute(self._statement)
        return result.scalar_one_or_none()

    async def count(self) -> int:
        """Count matching rows."""
        stmt = select(func.count()).select_from(self._statement.subquery())
        return await self.session.scalar(stmt) or 0

    async def find(self, pk: Any) -> Any | None:
        """Get a row by primary key, within this result set's criteria."""
        pk_columns = self.source.primary_key
        if len(pk_columns) != 1:
            raise ValueError(
                f"find() needs a single-column primary key, "
                f"'{self.source.moniker}' has {len(pk_columns)}"
            )
        return await self.search(pk_columns[0] == pk).one_or_none()


class ResultSource:
    """Result set provider for one mapped class."""

    resultset_class: type[ResultSet] = ResultSet

    def __init__(self, schema: "Schema", model: type, moniker: str):
        self.schema = schema
        self.model = model
        self.moniker = moniker

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.moniker}>"

    @property
    def primary_key(self) -> Sequence[Any]:
        return self.model.__mapper__.primary_key

    def resultset(self) -> ResultSet:
        """Unrestricted result set: every row of the source."""
        return self.resultset_class(self)

    def clone(self, schema: "Schema") -> "ResultSource":
        """Shallow copy bound to another schema."""
        clone = copy.copy(self)
        clone.schema = schema
        return clone


class Schema:
    """
    Registry of result sources sharing one database session.

    Usage:
        schema = Schema(session, [User, Note])
        schema.sources()           # ["User", "Note"]
        schema.resultset("Note")   # ResultSet over every note
    """

    source_class: type[ResultSource] = ResultSource

    def __init__(self, session: AsyncSession, models: Optional[Iterable[type]] = None):
        self.session = session
        self._sources: dict[str, ResultSource] = {}
        for model in models or ():
            self.register(model)

    @classmethod
    def from_base(cls, session: AsyncSession, base: type[DeclarativeBase]) -> "Schema":
        """Register every class mapped on a declarative base."""
        models = sorted(
            (mapper.class_ for mapper in base.registry.mappers),
            key=lambda model: model.__name__,
        )
        return cls(session, models)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} sources={self.sources()}>"

    def register(self, model: type, moniker: Optional[str] = None) -> ResultSource:
        """Register a mapped class (moniker defaults to the class name)."""
        moniker = moniker or model.__name__
        source = self._make_source(model, moniker)
        self._sources[moniker] = source
        return source

    def _make_source(self, model: type, moniker: str) -> ResultSource:
        return self.source_class(self, model, moniker)

    def sources(self) -> list[str]:
        """List registered monikers."""
        return list(self._sources.keys())

    def source(self, moniker: str) -> ResultSource:
        try:
            return self._sources[moniker]
        except KeyError:
            raise UnknownMonikerError(moniker, self.sources()) from None

    def resultset(self, moniker: str) -> ResultSet:
        return self.source(moniker).resultset()

    def clone(self) -> "Schema":
        """
        Copy sharing the session, with its own registry of cloned sources.

        The receiver and its sources are left untouched.
        """
        clone = copy.copy(self)
        clone._sources = {
            moniker: source.clone(clone)
            for moniker, source in self._sources.items()
        }
        return clone

    def restrict_by_user(
        self,
        user: Any,
        prefix: Optional[str] = None,
        applier: Optional["RestrictionApplier"] = None,
    ) -> "Schema":
        """
        Restricted copy of this schema for `user`.

        See restrict_by_user.applier.RestrictionApplier.restrict.
        """
        from .applier import default_applier

        return (applier or default_applier).restrict(self, user, prefix)
