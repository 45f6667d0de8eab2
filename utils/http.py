"""
Provider HTTP Module

Single-request JSON fetch used by every provider client. Any transport
failure, non-2xx status or undecodable body becomes ProviderUnavailable.
"""

import functools
import logging

import requests

from services.errors import ProviderUnavailable

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {'Accept': 'application/json', 'User-Agent': 'recipe-ingest/1.0'}


def fetch_json(provider, url, params=None, headers=None, timeout=10):
    """
    GET a URL and return the decoded JSON body.

    Args:
        provider: Provider name, used in errors and logs
        url: The URL to fetch
        params: Optional query parameters
        headers: Optional HTTP headers merged over the defaults
        timeout: Request timeout in seconds

    Returns:
        Decoded JSON (dict or list)

    Raises:
        ProviderUnavailable: For network errors, non-2xx responses or invalid JSON
    """
    merged_headers = dict(DEFAULT_HEADERS)
    if headers:
        merged_headers.update(headers)

    logger.debug("%s GET %s params=%s", provider, url, params)
    try:
        response = requests.get(url, params=params, headers=merged_headers, timeout=timeout)
        response.raise_for_status()
    except requests.HTTPError as e:
        status = e.response.status_code if e.response is not None else 'unknown'
        raise ProviderUnavailable(provider, f"HTTP {status}") from e
    except requests.RequestException as e:
        raise ProviderUnavailable(provider, str(e)) from e

    try:
        return response.json()
    except ValueError as e:
        raise ProviderUnavailable(provider, "invalid JSON response") from e


PAYLOAD_SHAPE_ERRORS = (AttributeError, IndexError, KeyError, TypeError, ValueError)


def guard_payload(method):
    """
    Decorate a provider client method so that a response body in an
    unexpected shape raises ProviderUnavailable instead of leaking a
    mapping error. The client must expose a ``name`` attribute.
    """
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except PAYLOAD_SHAPE_ERRORS as e:
            logger.debug("%s returned an unexpected payload: %r", self.name, e)
            raise ProviderUnavailable(self.name, "unexpected response shape") from e
    return wrapper
