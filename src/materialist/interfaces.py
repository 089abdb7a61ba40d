"""
This package contains the interface definitions that need to be
implemented by the collaborators of the materializer: something that fetches
resources, and something that persists records.

"""
import abc
import typing

from .models import Resource


class ResourceResolver(metaclass=abc.ABCMeta):
    """
    A :py:class:`ResourceResolver` fetches HATEOAS resources by URL.
    """

    @abc.abstractmethod
    def fetch(self, url: str) -> Resource:
        """
        Fetches the resource at the given URL.

        :param str url: The URL of the resource.
        :return: The fetched resource.
        :raises materialist.exceptions.ResourceNotFoundError: if no resource exists at the URL.
        """
        ...  # pragma: nocover

    def close(self) -> None:
        """
        Releases whatever the resolver holds on to, such as connections.
        """


class RecordStore(metaclass=abc.ABCMeta):
    """
    A :py:class:`RecordStore` persists the records of a single model class,
    each of which is identified by the URL of the resource it was materialized from.

    Records themselves are opaque to the materializer; every operation on them goes
    through the store.
    """

    @abc.abstractmethod
    def find(self, source_url: str) -> typing.Optional[typing.Any]:
        """
        Looks up the record for the given source URL.

        :param str source_url: The URL of the root resource.
        :return: The record, or ``None`` if there is none.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def find_or_initialize(self, source_url: str) -> typing.Any:
        """
        Looks up the record for the given source URL, or builds a fresh unsaved one.

        :param str source_url: The URL of the root resource.
        :return: The existing or the new record.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def assign(self, record: typing.Any, attributes: typing.Mapping[str, typing.Any]) -> None:
        """
        Sets the attributes of the record without persisting them.

        :param Any record: The target record.
        :param Mapping[str, Any] attributes: The attributes to set.
        :raises materialist.exceptions.RecordInvalidError: if an attribute cannot be set.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def save(self, record: typing.Any) -> None:
        """
        Persists the record.

        :raises materialist.exceptions.RecordInvalidError: if the record fails validation.
        """
        ...  # pragma: nocover

    @abc.abstractmethod
    def delete(self, record: typing.Any) -> None:
        """
        Removes the record.
        """
        ...  # pragma: nocover


RecordStoreFactory = typing.Callable[[typing.Type], RecordStore]
