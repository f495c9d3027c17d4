"""
Client implementation for the Harvest v2 REST API.

This module defines the :class:`HarvestClient` class which sends
authenticated requests to ``https://api.harvestapp.com/v2`` and
decodes the JSON responses.  Every verb performs exactly one HTTP
round trip; there is no caching, retry or rate-limit handling.

Usage
-----

.. code-block:: python

    from harvest_api_client import HarvestClient, PageEnvelope

    client = HarvestClient("123456", "personal-access-token")

    # A single object
    me = client.get("/users/me")

    # Every page of a collection
    entries = []
    page = PageEnvelope("time_entries")
    client.get_paginated(
        "/time_entries",
        {"from": "2024-01-01", "to": "2024-01-31"},
        page,
        lambda: entries.extend(page.items),
    )

Decoding
--------
Methods that expect a body return the decoded JSON document.  When a
``destination`` is passed it is populated in place as well: objects
exposing ``decode(data)`` are handed the document, a ``dict`` is
cleared and updated, and a ``list`` is cleared and extended.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Callable, Dict, Mapping, Optional
from urllib.parse import parse_qsl

import requests

from .arguments import Arguments, as_arguments
from .exceptions import DecodeError, HTTPStatusError, RequestBuildError, TransportError
from .pagination import Pageable, fetch_all_pages

logger = logging.getLogger(__name__)

CLIENT_VERSION = "1.1.2"
HARVEST_DOMAIN = "api.harvestapp.com"
HARVEST_API_VERSION = "v2"

JSON_CONTENT_TYPE = "application/json; charset=utf-8"


class HarvestClient:
    """A simple client for the Harvest v2 REST API.

    Parameters
    ----------
    account_id : str
        The Harvest account identifier.  Sent in the
        ``Harvest-Account-Id`` header on every request.
    access_token : str
        A personal access token or OAuth access token.  Sent as a
        bearer token in the ``Authorization`` header.
    refresh_token : str, optional
        The OAuth refresh token, kept for callers that manage token
        refresh themselves.  The client never uses it.
    session : requests.Session, optional
        The HTTP executor used to send requests.  Connection pooling,
        TLS, proxies and redirects are whatever this session does.  A
        fresh ``requests.Session`` is created when omitted.
    timeout : float, optional
        Timeout in seconds forwarded to the session for every request.
        ``None`` (the default) waits indefinitely.

    Notes
    -----
    The configuration is read-only after construction.  Argument sets
    and destinations passed to the request methods belong to the
    caller and must not be shared between overlapping calls.
    """

    def __init__(
        self,
        account_id: str,
        access_token: str,
        *,
        refresh_token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ) -> None:
        if not account_id:
            raise ValueError("account_id must be provided")
        if not access_token:
            raise ValueError("access_token must be provided")

        self.base_url = f"https://{HARVEST_DOMAIN}/{HARVEST_API_VERSION}"
        self.account_id = account_id
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **kwargs: Any) -> "HarvestClient":
        """Create a client from ``HARVEST_*`` environment variables.

        ``HARVEST_ACCOUNT_ID`` and ``HARVEST_ACCESS_TOKEN`` are required;
        ``HARVEST_REFRESH_TOKEN`` is optional.  Extra keyword arguments
        are passed to the constructor.
        """
        env = os.environ if environ is None else environ
        for name in ("HARVEST_ACCOUNT_ID", "HARVEST_ACCESS_TOKEN"):
            if not env.get(name):
                raise ValueError(f"{name} is required")
        kwargs.setdefault("refresh_token", env.get("HARVEST_REFRESH_TOKEN") or None)
        return cls(env["HARVEST_ACCOUNT_ID"], env["HARVEST_ACCESS_TOKEN"], **kwargs)

    # ------------------------------------------------------------------
    # Request construction
    # ------------------------------------------------------------------
    def headers(self) -> Dict[str, str]:
        """Return the headers applied to every request.

        These are the content negotiation, client identification,
        account and authorization headers.  They depend only on the
        client configuration, never on the method or path.
        """
        return {
            "Accept": "application/json",
            "User-Agent": f"harvest-api-client v{CLIENT_VERSION}",
            "Harvest-Account-Id": self.account_id,
            "Authorization": f"Bearer {self.access_token}",
        }

    def _prepare_url(self, path: str, method: Optional[str] = None) -> str:
        """Join ``path`` to the base URL.

        Absolute URLs are accepted only when they lie under the base
        URL, such as the ``links`` Harvest returns in page envelopes, so
        the credentials never reach another host.
        """
        if path.startswith("http://") or path.startswith("https://"):
            if not path.startswith(f"{self.base_url}/"):
                raise RequestBuildError(
                    f"Invalid {method or 'HTTP'} request {path}: URL is outside {self.base_url}",
                    method=method,
                    url=path,
                )
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def build_url(
        self,
        path: str,
        args: Optional[Mapping[str, Any]] = None,
        method: Optional[str] = None,
    ) -> str:
        """Build the full request URL including the encoded query arguments.

        A query already present in ``path`` is merged with ``args``;
        ``args`` wins on repeated names.
        """
        url, _, existing = self._prepare_url(path, method).partition("?")
        params = Arguments(parse_qsl(existing, keep_blank_values=True))
        params.update(as_arguments(args))
        query = params.to_query_string()
        if not query:
            return url
        return f"{url}?{query}"

    def _send(
        self,
        method: str,
        path: str,
        args: Optional[Mapping[str, Any]],
        *,
        data: Optional[bytes] = None,
        content_type: Optional[str] = None,
    ) -> requests.Response:
        """Prepare a request and send it through the session.

        Raises
        ------
        RequestBuildError
            If the URL or headers cannot form a valid request.
        TransportError
            If the session fails to complete the round trip.
        """
        url = self._prepare_url(path, method)
        headers = self.headers()
        if content_type:
            headers["Content-Type"] = content_type
        try:
            request = requests.Request(
                method, self.build_url(path, args, method), headers=headers, data=data
            )
            prepared = request.prepare()
        except (requests.RequestException, ValueError) as exc:
            raise RequestBuildError(f"Invalid {method} request {url}", method=method, url=url) from exc

        try:
            response = self.session.send(prepared, timeout=self.timeout)
        except requests.RequestException as exc:
            raise TransportError(
                f"HTTP request failure on {url}: {exc}", method=method, url=url
            ) from exc
        logger.debug("%s %s -> %s", method, url, response.status_code)
        return response

    # ------------------------------------------------------------------
    # Response handling
    # ------------------------------------------------------------------
    @staticmethod
    def _check_destination(destination: Any) -> None:
        if destination is None or isinstance(destination, (dict, list)):
            return
        if not callable(getattr(destination, "decode", None)):
            raise TypeError(
                f"destination must be a dict, a list or expose decode(data), got {type(destination).__name__}"
            )

    @staticmethod
    def _decode_into(destination: Any, data: Any) -> None:
        if destination is None:
            return
        if isinstance(destination, dict):
            if not isinstance(data, dict):
                raise TypeError(f"expected a JSON object, got {type(data).__name__}")
            destination.clear()
            destination.update(data)
        elif isinstance(destination, list):
            if not isinstance(data, list):
                raise TypeError(f"expected a JSON array, got {type(data).__name__}")
            destination[:] = data
        else:
            destination.decode(data)

    def _decode(
        self,
        response: requests.Response,
        destination: Any,
        *,
        method: str,
        url: str,
        context: str,
    ) -> Any:
        try:
            data = response.json()
            self._decode_into(destination, data)
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            body = response.text
            raise DecodeError(
                f"JSON decode failed on {context}: {body}", body=body, method=method, url=url
            ) from exc
        return data

    @staticmethod
    def _status_error(response: requests.Response, *, method: str, url: str) -> HTTPStatusError:
        body = response.text
        return HTTPStatusError(
            f"HTTP request failure on {url}: {body}",
            status_code=response.status_code,
            body=body,
            method=method,
            url=url,
        )

    # ------------------------------------------------------------------
    # Public verbs
    # ------------------------------------------------------------------
    def get(
        self,
        path: str,
        args: Optional[Mapping[str, Any]] = None,
        destination: Any = None,
    ) -> Any:
        """Perform a GET request and decode the JSON response.

        Parameters
        ----------
        path : str
            The API path relative to the base URL, e.g. ``"/users/me"``.
            Absolute URLs under the base URL (such as the ``links``
            Harvest returns in page envelopes) are accepted; any other
            host raises :class:`RequestBuildError`.
        args : mapping, optional
            Query arguments appended to the URL.
        destination : object, optional
            Populated in place with the decoded document.

        Returns
        -------
        Any
            The decoded JSON document.

        Raises
        ------
        RequestBuildError, TransportError
            If the request could not be built or sent.
        HTTPStatusError
            If the response status is not exactly 200.
        DecodeError
            If the body is not JSON or does not fit ``destination``.
        """
        self._check_destination(destination)
        url = self._prepare_url(path, "GET")
        response = self._send("GET", path, args)
        try:
            if response.status_code != 200:
                raise self._status_error(response, method="GET", url=url)
            return self._decode(response, destination, method="GET", url=url, context=url)
        finally:
            response.close()

    def get_paginated(
        self,
        path: str,
        args: Optional[Mapping[str, Any]],
        target: Pageable,
        after_fetch: Callable[[], None],
    ) -> int:
        """Fetch every page of a collection into ``target``.

        See :func:`harvest_api_client.pagination.fetch_all_pages`.
        """
        return fetch_all_pages(self, path, args, target, after_fetch)

    def send_json(
        self,
        method: str,
        path: str,
        args: Optional[Mapping[str, Any]] = None,
        payload: Any = None,
        destination: Any = None,
    ) -> Any:
        """Send ``payload`` as a JSON body with ``method`` and decode the reply.

        Any status from 200 to 299 is accepted, since creation and
        update endpoints answer with 201 or 204 as well as 200.  An
        empty response body is not decoded: ``None`` is returned and
        ``destination`` is left untouched.

        A ``payload`` of ``None`` sends an empty body.  Query ``args``
        are appended to the URL in addition to the body.
        """
        method = method.upper()
        self._check_destination(destination)
        url = self._prepare_url(path, method)
        try:
            data = b"" if payload is None else json.dumps(payload).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise RequestBuildError(f"Invalid {method} request {url}", method=method, url=url) from exc

        response = self._send(method, path, args, data=data, content_type=JSON_CONTENT_TYPE)
        try:
            if not 200 <= response.status_code <= 299:
                raise self._status_error(response, method=method, url=url)
            if not response.content:
                return None
            return self._decode(
                response, destination, method=method, url=url, context=f"{method} to {url}"
            )
        finally:
            response.close()

    def post(
        self,
        path: str,
        args: Optional[Mapping[str, Any]] = None,
        payload: Any = None,
        destination: Any = None,
    ) -> Any:
        """Perform a POST request.

        See :meth:`send_json` for full parameter documentation.
        """
        return self.send_json("POST", path, args, payload, destination)

    def put(
        self,
        path: str,
        args: Optional[Mapping[str, Any]] = None,
        payload: Any = None,
        destination: Any = None,
    ) -> Any:
        """Perform a PUT request.

        See :meth:`send_json` for full parameter documentation.
        """
        return self.send_json("PUT", path, args, payload, destination)

    def patch(
        self,
        path: str,
        args: Optional[Mapping[str, Any]] = None,
        payload: Any = None,
        destination: Any = None,
    ) -> Any:
        """Perform a PATCH request.

        See :meth:`send_json` for full parameter documentation.
        """
        return self.send_json("PATCH", path, args, payload, destination)

    def delete(self, path: str, args: Optional[Mapping[str, Any]] = None) -> None:
        """Perform a DELETE request.

        Succeeds only on status 200.  The response body is never decoded.
        """
        url = self._prepare_url(path, "DELETE")
        response = self._send("DELETE", path, args)
        try:
            if response.status_code != 200:
                raise self._status_error(response, method="DELETE", url=url)
        finally:
            response.close()
