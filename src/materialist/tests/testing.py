import typing

from ..exceptions import RecordInvalidError, ResourceNotFoundError
from ..interfaces import RecordStore, ResourceResolver
from ..models import Resource


class InMemoryResolver(ResourceResolver):
    resources: typing.Dict[str, Resource]
    fetched: typing.List[str]

    def add(
        self,
        url: str,
        body: typing.Optional[typing.Mapping[str, typing.Any]] = None,
        links: typing.Optional[typing.Mapping[str, str]] = None,
    ) -> Resource:
        resource = Resource(url=url, body=dict(body or {}), links=dict(links or {}))
        self.resources[url] = resource
        return resource

    def fetch(self, url: str) -> Resource:
        self.fetched.append(url)
        try:
            return self.resources[url]
        except KeyError:
            raise ResourceNotFoundError(url)

    def __init__(self):
        self.resources = {}
        self.fetched = []


class InMemoryRecord:
    source_url: str
    attributes: typing.Dict[str, typing.Any]
    persisted: bool
    destroyed: bool

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.source_url!r}, {self.attributes!r})"

    def __init__(self, source_url: str):
        self.source_url = source_url
        self.attributes = {}
        self.persisted = False
        self.destroyed = False


class InMemoryRecordStore(RecordStore):
    model_class: typing.Type
    records: typing.Dict[str, InMemoryRecord]
    required: typing.Sequence[str]
    saves: int

    def find(self, source_url: str) -> typing.Optional[InMemoryRecord]:
        return self.records.get(source_url)

    def find_or_initialize(self, source_url: str) -> InMemoryRecord:
        record = self.find(source_url)
        if record is None:
            record = self.model_class(source_url)
        return record

    def assign(self, record: typing.Any, attributes: typing.Mapping[str, typing.Any]) -> None:
        record.attributes.update(attributes)

    def save(self, record: typing.Any) -> None:
        for name in self.required:
            if record.attributes.get(name) is None:
                raise RecordInvalidError(record, f"{name} must not be null")
        record.persisted = True
        self.records[record.source_url] = record
        self.saves += 1

    def delete(self, record: typing.Any) -> None:
        del self.records[record.source_url]
        record.destroyed = True

    def __init__(
        self, model_class: typing.Type = InMemoryRecord, required: typing.Sequence[str] = ()
    ):
        self.model_class = model_class
        self.records = {}
        self.required = required
        self.saves = 0


class InMemoryRecordStoreFactory:
    stores: typing.Dict[typing.Type, InMemoryRecordStore]
    required: typing.Sequence[str]

    def __call__(self, model_class: typing.Type) -> InMemoryRecordStore:
        if model_class not in self.stores:
            self.stores[model_class] = InMemoryRecordStore(model_class, self.required)
        return self.stores[model_class]

    def __init__(self, required: typing.Sequence[str] = ()):
        self.stores = {}
        self.required = required


class HookRecorder:
    calls: typing.List[typing.Any]

    def __call__(self, record: typing.Any) -> None:
        self.calls.append(record)

    def __init__(self):
        self.calls = []
