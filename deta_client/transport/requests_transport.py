"""Default transport on a ``requests.Session``."""

from typing import Any, Dict, Mapping, Optional

import requests

from ..errors import TransportError
from ..utils.config import API_KEY_HEADER, COMPONENT_TRANSPORT, ERROR_BODY_EXCERPT, get_config
from ..utils.logging import get_smart_logger

logger = get_smart_logger(COMPONENT_TRANSPORT)


class RequestsTransport:
    """HTTP transport bound to one service URL and project key."""

    def __init__(self, base_url: str, api_key: str, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None,
                 user_agent: Optional[str] = None):
        config = get_config()
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout if timeout is not None else config.http_timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            API_KEY_HEADER: api_key,
            "Accept": "application/json",
            "User-Agent": user_agent or config.user_agent,
        })

    def _url(self, path: str) -> str:
        if not path.startswith('/'):
            path = '/' + path
        return f"{self.base_url}{path}"

    def _make_request(self, method: str, path: str, **kwargs) -> requests.Response:
        """Issue the request and map every failure to TransportError."""
        url = self._url(path)
        try:
            response = self.session.request(method=method, url=url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error("http_request_failed",
                         method=method,
                         path=path,
                         error=str(e),
                         error_type=type(e).__name__)
            raise TransportError(f"{method} {path} failed: {e}", method=method, path=path) from e

        if not response.ok:
            excerpt = response.text[:ERROR_BODY_EXCERPT] if response.text else ""
            logger.error("http_status_error",
                         method=method,
                         path=path,
                         status_code=response.status_code,
                         reason=response.reason,
                         body=excerpt)
            raise TransportError(
                f"{method} {path} returned {response.status_code} {response.reason}",
                status_code=response.status_code,
                body=excerpt,
                method=method,
                path=path,
            )

        logger.debug("http_request_completed",
                     method=method,
                     path=path,
                     status_code=response.status_code)
        return response

    def send(self, method: str, path: str, body: Any = None, *,
             params: Optional[Mapping[str, Any]] = None,
             content: Optional[bytes] = None,
             headers: Optional[Dict[str, str]] = None) -> Any:
        """Send a request and return the decoded JSON body.

        ``body`` is sent as JSON; ``content`` as raw bytes. An empty
        response body decodes to None.
        """
        kwargs: Dict[str, Any] = {}
        if params:
            kwargs['params'] = dict(params)
        if headers:
            kwargs['headers'] = headers
        if content is not None:
            kwargs['data'] = content
        elif body is not None:
            kwargs['json'] = body

        response = self._make_request(method, path, **kwargs)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            excerpt = response.text[:ERROR_BODY_EXCERPT]
            logger.error("http_response_not_json",
                         method=method,
                         path=path,
                         status_code=response.status_code,
                         content_type=response.headers.get('Content-Type', ''),
                         body=excerpt)
            raise TransportError(
                f"{method} {path} returned a non-JSON body",
                status_code=response.status_code,
                body=excerpt,
                method=method,
                path=path,
            ) from e

    def download(self, path: str, *, params: Optional[Mapping[str, Any]] = None) -> bytes:
        """GET ``path`` and return the raw bytes."""
        kwargs: Dict[str, Any] = {}
        if params:
            kwargs['params'] = dict(params)
        return self._make_request("GET", path, **kwargs).content

    def close(self):
        self.session.close()
