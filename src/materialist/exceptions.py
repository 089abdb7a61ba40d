import abc
import typing


class MaterialistException(Exception, metaclass=abc.ABCMeta):
    @property
    @abc.abstractmethod
    def message(self) -> str:
        ...  # pragma: nocover

    def __str__(self):
        return self.message


class InvalidDeclarationError(MaterialistException):
    _message: str

    @property
    def message(self) -> str:
        return self._message

    def __init__(self, message: str):
        super().__init__(message)
        self._message = message


class ConfigurationError(MaterialistException):
    _message: str

    @property
    def message(self) -> str:
        return self._message

    def __init__(self, message: str):
        super().__init__(message)
        self._message = message


class ResourceNotFoundError(MaterialistException):
    url: str

    @property
    def message(self) -> str:
        return f"no resource found at {self.url}"

    def __init__(self, url: str):
        super().__init__(url)
        self.url = url


class RootNotFoundError(ResourceNotFoundError):
    @property
    def message(self) -> str:
        return f"root resource {self.url} does not exist"


class ResolverError(MaterialistException):
    url: str
    detail: str
    status_code: typing.Optional[int]

    @property
    def message(self) -> str:
        return f"failed to fetch {self.url}{f' (HTTP {self.status_code})' if self.status_code is not None else ''}: {self.detail}"

    def __init__(self, url: str, detail: str, status_code: typing.Optional[int] = None):
        super().__init__(url, detail, status_code)
        self.url = url
        self.detail = detail
        self.status_code = status_code


class RecordInvalidError(MaterialistException):
    record: typing.Any
    detail: str

    @property
    def message(self) -> str:
        return f"record {self.record!r} is invalid: {self.detail}"

    def __init__(self, record: typing.Any, detail: str):
        super().__init__(record, detail)
        self.record = record
        self.detail = detail
