"""
Remote Resource Client.

Thin authenticated wrapper around ``requests.Session`` for the Terraform Cloud
/ Enterprise v2 API. Every non-2xx answer becomes an ApiError carrying the
request and response so a failed call can be reproduced by hand.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

import requests

from tfcops.context import ClientContext
from tfcops.errors import ApiError, NotFoundError, ReadOnlyModeError, TransportError

logger = logging.getLogger(__name__)

JSON_API_CONTENT_TYPE = "application/vnd.api+json"


class RemoteClient:
    """
    HTTP client for one Terraform Cloud account.

    Example:
        ```python
        client = RemoteClient(ClientContext(token="..."))
        ws = client.get("/organizations/acme/workspaces/app-prod")
        ```
    """

    def __init__(self, context: ClientContext, session: Optional[requests.Session] = None):
        self.context = context
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {context.token}",
            "Content-Type": JSON_API_CONTENT_TYPE,
            "Accept": JSON_API_CONTENT_TYPE,
        })

    def url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.context.base_url}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Send one request and decode the JSON answer.

        Args:
            method: HTTP method
            path: Path below ``/api/v2`` (or an absolute URL)
            params: Query parameters
            body: JSON:API document to send

        Returns:
            The decoded response document; ``{}`` for empty answers (e.g. 204)

        Raises:
            ReadOnlyModeError: If the context is read-only and the method mutates
            NotFoundError: On HTTP 404
            ApiError: On any other status code of 300 or above
            TransportError: If no answer arrives or the body is not JSON
        """
        method = method.upper()
        if self.context.read_only and method != "GET":
            raise ReadOnlyModeError(method, path)

        url = self.url(path)
        data = json.dumps(body) if body is not None else None
        if self.context.debug:
            logger.debug(f"{method} {url} params={params} body={data}")

        try:
            response = self.session.request(
                method,
                url,
                params=params,
                data=data,
                timeout=self.context.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(method, url, e) from e

        if self.context.debug:
            logger.debug(f"{method} {url} -> {response.status_code} {response.text}")

        if response.status_code >= 300:
            error_cls = NotFoundError if response.status_code == 404 else ApiError
            raise error_cls(
                method=method,
                url=url,
                status_code=response.status_code,
                reason=response.reason or "",
                request_body=data,
                response_body=response.text,
            )

        if response.status_code == 204 or not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(method, url, e) from e

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.request("GET", path, params=params)

    def post(self, path: str, body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.request("POST", path, body=body)

    def patch(self, path: str, body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.request("PATCH", path, body=body)

    def delete(self, path: str, body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.request("DELETE", path, body=body)

    def paginate(self, path: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Collect ``data`` from every page of a list endpoint.

        Pages are requested until one comes back shorter than the page size.
        """
        page_size = self.context.page_size
        items: List[Dict[str, Any]] = []
        page = 1
        while True:
            query = dict(params or {})
            query["page[size]"] = page_size
            query["page[number]"] = page
            data = self.get(path, params=query).get("data") or []
            items.extend(data)
            if len(data) < page_size:
                break
            page += 1
        logger.debug(f"Fetched {len(items)} item(s) from {path} in {page} page(s)")
        return items
