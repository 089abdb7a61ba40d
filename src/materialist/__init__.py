from .declarative import Declarative, MappingBuilder, build_options  # noqa
from .exceptions import (  # noqa
    ConfigurationError,
    InvalidDeclarationError,
    MaterialistException,
    RecordInvalidError,
    ResolverError,
    ResourceNotFoundError,
    RootNotFoundError,
)
from .materializer import Materializer, perform  # noqa
from .models import Action, FieldMapping, LinkMapping, MaterializerOptions, Resource  # noqa
