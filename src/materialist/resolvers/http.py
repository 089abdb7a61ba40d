"""
materialist.resolvers.http module contains a :py:class:`ResourceResolver`
implementation that fetches HAL-style HATEOAS documents over HTTP with ``httpx``.

A document looks like this; everything but ``_links`` makes up the body:

.. code-block:: json

   {
     "name": "Widget",
     "_links": {
       "self": {"href": "http://example.com/widgets/1"},
       "owner": {"href": "http://example.com/owners/1"}
     }
   }

"""
import logging
import time
import typing
from urllib.parse import urljoin

import httpx

from ..exceptions import ResolverError, ResourceNotFoundError
from ..interfaces import ResourceResolver
from ..models import Resource

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Accept": "application/hal+json, application/json",
    "Cache-Control": "no-cache",
}

NOT_FOUND_STATUSES = frozenset({404, 410})


def _extract_href(url: str, value: typing.Any) -> typing.Optional[str]:
    if isinstance(value, list):
        if not value:
            return None
        value = value[0]
    if isinstance(value, str):
        href = value
    elif isinstance(value, dict) and isinstance(value.get("href"), str):
        href = value["href"]
    else:
        return None
    return urljoin(url, href)


def parse_hateoas_document(
    url: str, document: typing.Any, base_url: typing.Optional[str] = None
) -> Resource:
    """
    Splits a decoded HATEOAS document into its body and links.

    :param str url: The URL the document was requested from.
    :param Any document: The decoded JSON document.
    :param Optional[str] base_url: The URL relative links are resolved against, when it differs from ``url`` (e.g. after a redirect).
    :return: The resource.
    :raises ResolverError: if the document is not a JSON object or its ``_links`` is malformed.
    """
    if not isinstance(document, dict):
        raise ResolverError(url, "document is not a JSON object")
    body = {k: v for k, v in document.items() if k != "_links"}
    raw_links = document.get("_links") or {}
    if not isinstance(raw_links, dict):
        raise ResolverError(url, "_links is not a JSON object")
    links: typing.Dict[str, str] = {}
    for rel, value in raw_links.items():
        href = _extract_href(base_url or url, value)
        if href is not None:
            links[rel] = href
    return Resource(url=url, body=body, links=links)


class HateoasResolver(ResourceResolver):
    """
    Fetches resources with a GET request each, bypassing HTTP caches.

    :param Optional[httpx.Client] client: A client to use; one is created (and owned) if omitted.
    :param Optional[Mapping[str, str]] headers: Extra headers sent with every request.
    :param float timeout: The timeout in seconds for a created client.
    :param int retries: How many times a 429/5xx response or a transport error is retried.
    :param float retry_backoff: The base delay in seconds, doubled on every retry.
    :param Optional[httpx.BaseTransport] transport: A transport for a created client.
    """

    client: httpx.Client
    headers: typing.Dict[str, str]
    retries: int
    retry_backoff: float
    _owns_client: bool

    def _should_retry(self, resp: httpx.Response) -> bool:
        return resp.status_code == 429 or 500 <= resp.status_code <= 599

    def _sleep_backoff(self, attempt: int) -> None:
        time.sleep(self.retry_backoff * (2 ** attempt))

    def _get(self, url: str) -> httpx.Response:
        attempt = 0
        while True:
            try:
                resp = self.client.get(url, headers=self.headers)
            except httpx.TransportError as e:
                if attempt >= self.retries:
                    raise ResolverError(url, f"network error ({e})") from e
                logger.warning("network error fetching %s, retrying: %s", url, e)
                self._sleep_backoff(attempt)
                attempt += 1
                continue

            if self._should_retry(resp) and attempt < self.retries:
                logger.warning("HTTP %d fetching %s, retrying", resp.status_code, url)
                self._sleep_backoff(attempt)
                attempt += 1
                continue
            return resp

    def fetch(self, url: str) -> Resource:
        resp = self._get(url)
        if resp.status_code in NOT_FOUND_STATUSES:
            raise ResourceNotFoundError(url)
        if not resp.is_success:
            raise ResolverError(url, resp.text[:200], status_code=resp.status_code)
        try:
            document = resp.json()
        except ValueError as e:
            raise ResolverError(url, "invalid JSON response", status_code=resp.status_code) from e
        return parse_hateoas_document(url, document, base_url=str(resp.url))

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "HateoasResolver":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __init__(
        self,
        client: typing.Optional[httpx.Client] = None,
        *,
        headers: typing.Optional[typing.Mapping[str, str]] = None,
        timeout: float = 10.0,
        retries: int = 0,
        retry_backoff: float = 0.5,
        transport: typing.Optional[httpx.BaseTransport] = None,
    ):
        if client is None:
            client = httpx.Client(timeout=timeout, transport=transport, follow_redirects=True)
            self._owns_client = True
        else:
            self._owns_client = False
        self.client = client
        self.headers = dict(DEFAULT_HEADERS)
        if headers:
            self.headers.update(headers)
        self.retries = retries
        self.retry_backoff = retry_backoff
