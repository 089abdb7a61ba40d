"""
materialist.declarative module contains the DSL with which a record type
declares what it materializes, and a registry facade that keeps the compiled
declarations together with the collaborators needed to perform them.

Synopsis
--------

.. code-block:: python

   from materialist.declarative import Declarative

   decl = Declarative(resolver=resolver, store_factory=store_factory)

   @decl
   def widgets(m):
       m.materialize("name", as_="full_name")
       with m.link("owner") as owner:
           owner.materialize("id", as_="owner_id")
       m.use_model(Widget)
       m.after_upsert(notify_widget_changed)

   decl.perform("widgets", "http://example.com/widgets/1", "upsert")

"""
import contextlib
import logging
import typing

from .exceptions import ConfigurationError, InvalidDeclarationError
from .interfaces import RecordStoreFactory, ResourceResolver
from .materializer import perform
from .models import Action, FieldMapping, Hook, LinkMapping, MappingNode, MaterializerOptions

logger = logging.getLogger(__name__)


class MappingBuilder:
    """
    A :py:class:`MappingBuilder` accumulates the mapping nodes of one level of the
    mapping tree.  The root builder additionally holds the record-level options.

    Builders for nested links are handed out by :py:meth:`link`; whatever is
    declared against them ends up in the children of that link only.
    """

    _nodes: typing.List[MappingNode]
    _root: bool
    _model_class: typing.Optional[typing.Type] = None
    _after_upsert: typing.Optional[Hook] = None
    _after_destroy: typing.Optional[Hook] = None

    @property
    def nodes(self) -> typing.Tuple[MappingNode, ...]:
        return tuple(self._nodes)

    def materialize(self, key: str, as_: typing.Optional[str] = None) -> None:
        """
        Declares that the remote field ``key`` is copied into the attribute ``as_``.

        :param str key: The name of the remote field.
        :param Optional[str] as_: The name of the local attribute; defaults to ``key``.
        """
        if not key:
            raise InvalidDeclarationError("field key must not be empty")
        if as_ is not None and not as_:
            raise InvalidDeclarationError(f"alias for field {key} must not be empty")
        self._nodes.append(FieldMapping(key=key, alias=as_ or key))

    @contextlib.contextmanager
    def link(self, key: str) -> typing.Iterator["MappingBuilder"]:
        """
        Declares that the link relation ``key`` is followed.  The yielded builder
        declares what is taken from the linked resource.

        The link is attached once the ``with`` block completes; if the block raises,
        this builder is left untouched.

        :param str key: The name of the link relation.
        """
        if not key:
            raise InvalidDeclarationError("link key must not be empty")
        child = MappingBuilder(_root=False)
        yield child
        self._nodes.append(LinkMapping(key=key, children=child.nodes))

    def _ensure_root(self, what: str) -> None:
        if not self._root:
            raise InvalidDeclarationError(f"{what} can only be declared at the top level")

    def use_model(self, klass: typing.Type) -> None:
        self._ensure_root("model class")
        self._model_class = klass

    def after_upsert(self, callback: Hook) -> None:
        self._ensure_root("after_upsert hook")
        if not callable(callback):
            raise InvalidDeclarationError(f"after_upsert hook {callback!r} is not callable")
        self._after_upsert = callback

    def after_destroy(self, callback: Hook) -> None:
        self._ensure_root("after_destroy hook")
        if not callable(callback):
            raise InvalidDeclarationError(f"after_destroy hook {callback!r} is not callable")
        self._after_destroy = callback

    def build(self) -> MaterializerOptions:
        self._ensure_root("options")
        return MaterializerOptions(
            mapping=self.nodes,
            model_class=self._model_class,
            after_upsert=self._after_upsert,
            after_destroy=self._after_destroy,
        )

    def __init__(self, _root: bool = True):
        self._nodes = []
        self._root = _root


Declaration = typing.Callable[[MappingBuilder], None]


def build_options(declare: Declaration) -> MaterializerOptions:
    builder = MappingBuilder()
    declare(builder)
    return builder.build()


class Declarative:
    """
    The facade that keeps the compiled options of every declared record type,
    keyed by name, and performs materializations for them.

    :param ResourceResolver resolver: The resolver used to fetch resources.
    :param RecordStoreFactory store_factory: A callable that yields the store for a model class.
    """

    resolver: ResourceResolver
    store_factory: RecordStoreFactory
    _options: typing.Dict[str, MaterializerOptions]

    def register(self, name: str, options: MaterializerOptions) -> MaterializerOptions:
        if name in self._options:
            raise InvalidDeclarationError(f"materializer {name} is already declared")
        self._options[name] = options
        logger.debug("declared materializer %s", name)
        return options

    def query_options_by_name(self, name: str) -> MaterializerOptions:
        try:
            return self._options[name]
        except KeyError:
            raise ConfigurationError(f"no materializer known as {name}")

    @property
    def names(self) -> typing.Sequence[str]:
        return list(self._options)

    def perform(
        self, name: str, url: str, action: typing.Union[Action, str]
    ) -> typing.Optional[typing.Any]:
        """
        Upserts or destroys the record for ``url`` using the declaration registered as ``name``.

        :param str name: The name of the declaration.
        :param str url: The URL of the root resource.
        :param action: Either :py:attr:`Action.UPSERT` or :py:attr:`Action.DELETE`, or their values.
        :return: The upserted or destroyed record; ``None`` when there was nothing to destroy.
        """
        return perform(
            self.query_options_by_name(name), url, action, self.resolver, self.store_factory
        )

    def close(self) -> None:
        self.resolver.close()

    def __enter__(self) -> "Declarative":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @typing.overload
    def __call__(self, declare: Declaration) -> Declaration:
        ...  # pragma: nocover

    @typing.overload
    def __call__(
        self, declare: None = None, *, name: str
    ) -> typing.Callable[[Declaration], Declaration]:
        ...  # pragma: nocover

    def __call__(self, declare=None, *, name=None):
        def decorator(declare: Declaration) -> Declaration:
            self.register(name or declare.__name__, build_options(declare))
            return declare

        if declare is None:
            return decorator
        return decorator(declare)

    def __init__(self, resolver: ResourceResolver, store_factory: RecordStoreFactory):
        self.resolver = resolver
        self.store_factory = store_factory
        self._options = {}
