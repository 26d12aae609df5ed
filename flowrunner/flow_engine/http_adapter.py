"""
External Call Adapter - performs the HTTP calls of httpRequest nodes.

The executor only depends on `invoke(method, url, headers, body)`; any
failure surfaces as ExternalCallError and aborts the run.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from flowrunner.flow_engine.exceptions import ExternalCallError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


class ExternalCallAdapter(ABC):
    """Interface used by httpRequest nodes."""

    @abstractmethod
    async def invoke(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, Any]] = None,
        body: Any = None,
    ) -> Dict[str, Any]:
        """
        Perform a call.

        Returns:
            Dict with 'status', 'body' and 'headers'

        Raises:
            ExternalCallError: On transport failure or non-2xx response
        """


class HttpxCallAdapter(ExternalCallAdapter):
    """
    httpx based adapter.

    Usage:
        adapter = HttpxCallAdapter(timeout=10)
        response = await adapter.invoke('GET', 'https://api.example.com/items')

    A preconfigured AsyncClient can be injected (tests pass one built on
    httpx.MockTransport); otherwise a client is opened per call.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None,
                 timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self.client = client
        self.timeout = timeout

    async def invoke(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, Any]] = None,
        body: Any = None,
    ) -> Dict[str, Any]:
        request_kwargs = self._build_request(method, url, headers, body)
        logger.info(f"External call: {request_kwargs['method']} {url}")

        try:
            if self.client is not None:
                response = await self.client.request(**request_kwargs)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.request(**request_kwargs)
            response.raise_for_status()

        except httpx.HTTPStatusError as e:
            logger.error(f"External call returned {e.response.status_code}: {method} {url}")
            raise ExternalCallError(
                f"HTTP request failed: {method} {url}",
                cause=e,
                status_code=e.response.status_code,
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"External call failed: {method} {url} - {e}")
            raise ExternalCallError(f"HTTP request failed: {method} {url} - {e}", cause=e) from e

        return {
            'status': response.status_code,
            'body': _decode_body(response),
            'headers': dict(response.headers),
        }

    def _build_request(self, method: str, url: str, headers: Optional[Dict[str, Any]], body: Any) -> Dict[str, Any]:
        request_kwargs = {
            'method': (method or 'GET').upper(),
            'url': url,
            'headers': {str(k): str(v) for k, v in (headers or {}).items()},
        }

        if isinstance(body, (dict, list)):
            request_kwargs['json'] = body
        elif isinstance(body, (str, bytes)) and body != '':
            request_kwargs['content'] = body
        elif body not in (None, ''):
            request_kwargs['json'] = body

        return request_kwargs


def _decode_body(response: httpx.Response) -> Any:
    """JSON when the response parses as JSON, text otherwise."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
