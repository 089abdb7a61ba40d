import typing

import sqlalchemy as sa  # type: ignore
from sqlalchemy import exc as sa_exc  # type: ignore
from sqlalchemy import orm  # type: ignore
from sqlalchemy.orm import exc as orm_exc  # type: ignore

from ...exceptions import ConfigurationError, RecordInvalidError
from ...interfaces import RecordStore


def is_alien_clause(sa_mapper: orm.Mapper, expression: sa.sql.ClauseElement) -> bool:
    if not isinstance(expression, sa.Column):
        return True
    if expression.table is None:
        return True
    return expression.table not in sa_mapper.tables


def column_attribute_names(
    sa_mapper: orm.Mapper, include_primary_key: bool = False
) -> typing.FrozenSet[str]:
    names: typing.Set[str] = set()
    pkey_cols = set(sa_mapper.primary_key)
    for sa_attr in sa_mapper.attrs:
        if not isinstance(sa_attr, orm.ColumnProperty):
            continue
        expression = sa_attr.expression
        # we cannot perform updates on alien columns
        if is_alien_clause(sa_mapper, expression):
            continue
        if expression in pkey_cols and not include_primary_key:
            continue
        names.add(sa_attr.key)
    return frozenset(names)


class SQLARecordStore(RecordStore):
    """
    A :py:class:`RecordStore` backed by an SQLAlchemy session.  Records are instances
    of an instrumented class that has a column holding the source URL.

    The store flushes but never commits; transaction control is left to the caller.

    :param sqlalchemy.orm.session.Session session: The session records are loaded into and saved through.
    :param Type model_class: The SQLAlchemy-instrumented class of the records.
    :param str source_url_attr: The name of the attribute holding the source URL.
    :param bool flush: Whether to flush on every save and delete.
    """

    session: orm.Session
    model_class: typing.Type
    source_url_attr: str
    flush: bool
    _writable: typing.FrozenSet[str]

    def _source_url_clause(self, source_url: str):
        return getattr(self.model_class, self.source_url_attr) == source_url

    def find(self, source_url: str) -> typing.Optional[typing.Any]:
        return (
            self.session.query(self.model_class)
            .filter(self._source_url_clause(source_url))
            .one_or_none()
        )

    def find_or_initialize(self, source_url: str) -> typing.Any:
        record = self.find(source_url)
        if record is None:
            record = self.model_class()
            setattr(record, self.source_url_attr, source_url)
        return record

    def assign(self, record: typing.Any, attributes: typing.Mapping[str, typing.Any]) -> None:
        for name, value in attributes.items():
            if name == self.source_url_attr:
                raise RecordInvalidError(record, f"{name} identifies the record and cannot be mapped")
            if name not in self._writable:
                raise RecordInvalidError(
                    record, f"{name} is not a writable attribute of {self.model_class.__name__}"
                )
            setattr(record, name, value)

    def save(self, record: typing.Any) -> None:
        self.session.add(record)
        if self.flush:
            try:
                self.session.flush()
            except sa_exc.StatementError as e:
                raise RecordInvalidError(record, str(e.orig or e)) from e

    def delete(self, record: typing.Any) -> None:
        self.session.delete(record)
        if self.flush:
            try:
                self.session.flush()
            except sa_exc.StatementError as e:
                raise RecordInvalidError(record, str(e.orig or e)) from e

    def __init__(
        self,
        session: orm.Session,
        model_class: typing.Type,
        source_url_attr: str = "source_url",
        flush: bool = True,
    ):
        try:
            sa_mapper = orm.class_mapper(model_class)
        except orm_exc.UnmappedClassError:
            raise ConfigurationError(f"{model_class!r} is not an SQLAlchemy-instrumented class")
        if source_url_attr not in column_attribute_names(sa_mapper, include_primary_key=True):
            raise ConfigurationError(
                f"{model_class.__name__} has no column {source_url_attr} to hold the source URL"
            )
        self.session = session
        self.model_class = model_class
        self.source_url_attr = source_url_attr
        self.flush = flush
        self._writable = column_attribute_names(sa_mapper) - {source_url_attr}
