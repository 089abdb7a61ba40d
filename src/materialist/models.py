"""
Classes in :py:mod:`materialist.models` are the plain data the materializer works on:
the nodes of a mapping tree, the per-type options compiled from a declaration, and
the transient representation of a fetched resource.
"""
import dataclasses
import enum
import typing

Hook = typing.Callable[[typing.Any], None]


@dataclasses.dataclass(frozen=True)
class FieldMapping:
    """
    :py:class:`FieldMapping` copies the remote field ``key`` of a resource body
    into the local attribute ``alias``.
    """

    key: str
    alias: str


@dataclasses.dataclass(frozen=True)
class LinkMapping:
    """
    :py:class:`LinkMapping` follows the link relation ``key`` of a resource and
    flattens the linked resource according to ``children``.
    """

    key: str
    children: typing.Tuple["MappingNode", ...] = ()


MappingNode = typing.Union[FieldMapping, LinkMapping]


@dataclasses.dataclass(frozen=True)
class MaterializerOptions:
    """
    Everything a record type declares, compiled once and shared read-only by
    every materialization for that type.
    """

    mapping: typing.Tuple[MappingNode, ...] = ()
    model_class: typing.Optional[typing.Type] = None
    after_upsert: typing.Optional[Hook] = None
    after_destroy: typing.Optional[Hook] = None


@dataclasses.dataclass(frozen=True)
class Resource:
    """
    A fetched HATEOAS document.

    :param str url: The URL the resource was fetched from.
    :param Mapping[str, Any] body: The fields of the document.
    :param Mapping[str, str] links: The link relations of the document mapped to their target URLs.
    """

    url: str
    body: typing.Mapping[str, typing.Any] = dataclasses.field(default_factory=dict)
    links: typing.Mapping[str, str] = dataclasses.field(default_factory=dict)


class Action(enum.Enum):
    UPSERT = "upsert"
    DELETE = "delete"
