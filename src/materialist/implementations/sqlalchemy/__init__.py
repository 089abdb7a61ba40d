from .core import SQLARecordStore  # noqa
from .declarative import SQLARecordStoreFactory, declarative_with_defaults  # noqa
