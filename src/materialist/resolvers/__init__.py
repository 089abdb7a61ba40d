from .http import HateoasResolver, parse_hateoas_document  # noqa
