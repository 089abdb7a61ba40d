import logging
import typing

from .exceptions import ConfigurationError, ResourceNotFoundError, RootNotFoundError
from .interfaces import RecordStore, RecordStoreFactory, ResourceResolver
from .models import (
    Action,
    FieldMapping,
    LinkMapping,
    MappingNode,
    MaterializerOptions,
    Resource,
)

logger = logging.getLogger(__name__)


class Materializer:
    """
    A :py:class:`Materializer` reconciles the record for a single root URL
    with the remote resource graph, according to the options of a record type.

    :param str url: The URL of the root resource, which also identifies the record.
    :param MaterializerOptions options: The compiled declaration of the record type.
    :param ResourceResolver resolver: The resolver used to fetch resources.
    :param RecordStoreFactory store_factory: A callable that yields the store for the model class.
    """

    url: str
    options: MaterializerOptions
    resolver: ResourceResolver
    store_factory: RecordStoreFactory
    _store: typing.Optional[RecordStore] = None

    @property
    def store(self) -> RecordStore:
        if self._store is None:
            if self.options.model_class is None:
                raise ConfigurationError(f"no model class is declared to materialize {self.url}")
            self._store = self.store_factory(self.options.model_class)
        return self._store

    def upsert(self) -> typing.Any:
        store = self.store
        # resolve before touching the store so that a missing root leaves it intact
        attributes = self.attributes()
        record = store.find_or_initialize(self.url)
        store.assign(record, attributes)
        store.save(record)
        logger.info("upserted record for %s", self.url)
        if self.options.after_upsert is not None:
            self.options.after_upsert(record)
        return record

    def destroy(self) -> typing.Optional[typing.Any]:
        store = self.store
        record = store.find(self.url)
        if record is None:
            logger.debug("no record for %s, nothing to destroy", self.url)
            return None
        store.delete(record)
        logger.info("destroyed record for %s", self.url)
        if self.options.after_destroy is not None:
            self.options.after_destroy(record)
        return record

    def attributes(self) -> typing.Dict[str, typing.Any]:
        return self.build_attributes(self.resource_at(self.url), self.options.mapping)

    def build_attributes(
        self, resource: typing.Optional[Resource], mapping: typing.Sequence[MappingNode]
    ) -> typing.Dict[str, typing.Any]:
        """
        Flattens the resource according to the mapping, following links as needed.

        Nodes are applied in order; a later node overwrites whatever an earlier one
        produced for the same attribute name.

        :param Optional[Resource] resource: The resource to flatten; ``None`` stands for a missing linked resource.
        :param Sequence[MappingNode] mapping: The nodes to apply.
        :return: The flattened attributes.
        """
        result: typing.Dict[str, typing.Any] = {}
        if resource is None:
            return result

        for node in mapping:
            if isinstance(node, FieldMapping):
                result[node.alias] = resource.body.get(node.key)
            elif isinstance(node, LinkMapping):
                if node.key not in resource.links:
                    logger.debug("%s has no link %r, skipping", resource.url, node.key)
                    continue
                linked = self.resource_at(resource.links[node.key], allow_missing=True)
                result.update(self.build_attributes(linked, node.children))
            else:
                raise AssertionError("should never get here!")
        return result

    def resource_at(self, url: str, allow_missing: bool = False) -> typing.Optional[Resource]:
        logger.debug("fetching %s", url)
        try:
            return self.resolver.fetch(url)
        except ResourceNotFoundError as e:
            if not allow_missing:
                raise RootNotFoundError(url) from e
            logger.debug("linked resource %s is gone, contributing nothing", url)
            return None

    def __init__(
        self,
        url: str,
        options: MaterializerOptions,
        resolver: ResourceResolver,
        store_factory: RecordStoreFactory,
    ):
        self.url = url
        self.options = options
        self.resolver = resolver
        self.store_factory = store_factory


def perform(
    options: MaterializerOptions,
    url: str,
    action: typing.Union[Action, str],
    resolver: ResourceResolver,
    store_factory: RecordStoreFactory,
) -> typing.Optional[typing.Any]:
    """
    Materializes or destroys the record for ``url``.

    :param MaterializerOptions options: The compiled declaration of the record type.
    :param str url: The URL of the root resource.
    :param action: Either :py:attr:`Action.UPSERT` or :py:attr:`Action.DELETE`, or their values.
    :param ResourceResolver resolver: The resolver used to fetch resources.
    :param RecordStoreFactory store_factory: A callable that yields the store for the model class.
    :return: The upserted or destroyed record; ``None`` when there was nothing to destroy.
    """
    materializer = Materializer(url, options, resolver, store_factory)
    if Action(action) is Action.DELETE:
        return materializer.destroy()
    else:
        return materializer.upsert()
