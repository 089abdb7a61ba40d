"""
materialist.implementations.sqlalchemy.declarative module contains a
facade implementation that is handy for use with SQLAlchemy.

Synopsis
--------

.. code-block:: python

   import sqlalchemy as sa
   from sqlalchemy import orm
   from materialist.implementations.sqlalchemy import declarative_with_defaults

   Base = orm.declarative_base()

   class Widget(Base):
       __tablename__ = "widgets"
       id = sa.Column(sa.Integer(), primary_key=True)
       source_url = sa.Column(sa.String(), nullable=False, unique=True)
       full_name = sa.Column(sa.String(), nullable=False)
       owner_id = sa.Column(sa.Integer(), nullable=True)

   session = orm.Session(...)
   decl = declarative_with_defaults(session, retries=2)

   @decl
   def widgets(m):
       m.materialize("name", as_="full_name")
       with m.link("owner") as owner:
           owner.materialize("id", as_="owner_id")
       m.use_model(Widget)

   decl.perform("widgets", url, "upsert")
   session.commit()
   decl.close()

"""
import typing

from sqlalchemy import orm  # type: ignore

from ...declarative import Declarative
from ...interfaces import RecordStore, ResourceResolver
from ...resolvers.http import HateoasResolver
from .core import SQLARecordStore


class SQLARecordStoreFactory:
    """
    Creates a :py:class:`SQLARecordStore` per model class, all sharing one session.
    Stores are cached so that the model inspection happens once per class.
    """

    session: orm.Session
    source_url_attr: str
    flush: bool
    _stores: typing.Dict[typing.Type, SQLARecordStore]

    def __call__(self, model_class: typing.Type) -> RecordStore:
        store = self._stores.get(model_class)
        if store is None:
            store = SQLARecordStore(
                self.session,
                model_class,
                source_url_attr=self.source_url_attr,
                flush=self.flush,
            )
            self._stores[model_class] = store
        return store

    def __init__(self, session: orm.Session, source_url_attr: str = "source_url", flush: bool = True):
        self.session = session
        self.source_url_attr = source_url_attr
        self.flush = flush
        self._stores = {}


def declarative_with_defaults(
    session: orm.Session,
    resolver: typing.Optional[ResourceResolver] = None,
    source_url_attr: str = "source_url",
    flush: bool = True,
    **resolver_kwargs: typing.Any,
) -> Declarative:
    """
    Builds a :py:class:`Declarative` that fetches over HTTP and persists through ``session``.

    :param sqlalchemy.orm.session.Session session: The session records are persisted through.
    :param Optional[ResourceResolver] resolver: A resolver to use instead of a :py:class:`HateoasResolver`.
    :param str source_url_attr: The name of the attribute holding the source URL on every model.
    :param bool flush: Whether to flush on every save and delete.
    :param resolver_kwargs: Keyword arguments for the :py:class:`HateoasResolver` created when ``resolver`` is omitted.
    """
    return Declarative(
        resolver=(resolver or HateoasResolver(**resolver_kwargs)),
        store_factory=SQLARecordStoreFactory(session, source_url_attr=source_url_attr, flush=flush),
    )
