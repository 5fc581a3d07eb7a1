"""Linkup API client.

Implements the API endpoints:
- POST /search          - Web search
- POST /fetch           - Fetch a single URL
- GET  /credits/balance - Remaining credits
"""

import json
import logging
import threading
from typing import Any, Optional, Type, TypeVar

from ..config import ClientConfig
from ..transport.deadline import Deadline
from ..transport.executor import RequestExecutor
from ..transport.http_client import RequestsTransport, Transport
from .schema import BalanceResponse, FetchRequest, RawResponse, SearchRequest

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LinkupClient:
    """HTTP client for the Linkup search API.

    Payloads are returned raw; use ``RawResponse.decode_into`` or
    ``search_structured`` to map them onto a typed shape.
    """

    def __init__(self, config: Optional[ClientConfig] = None, **kwargs: Any):
        """Initialize client.

        Args:
            config: Client configuration. Built from kwargs if omitted.
            **kwargs: ClientConfig fields, e.g. api_key="...".
        """
        self.config = config or ClientConfig(**kwargs)
        self._owns_transport = self.config.transport is None
        self._transport: Transport = self.config.transport or RequestsTransport(
            request_timeout=self.config.timeout
        )
        self._executor = RequestExecutor(
            self._transport,
            self.config.api_key,
            self.config.retry_policy,
        )

    @property
    def base_url(self) -> str:
        return self.config.base_url

    def search(
        self,
        request: SearchRequest,
        deadline: Optional[Deadline] = None,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> RawResponse:
        """Run a search.

        POST /search

        Args:
            request: Search parameters.
            deadline: Deadline for the whole call, retries included.
            timeout: Shorthand for a Deadline of this many seconds.
            cancel_event: Event that cancels the call when set.

        Returns:
            RawResponse with the exact JSON returned by the API.
        """
        request.validate()
        return self._post("/search", request.to_dict(), deadline, timeout, cancel_event)

    def search_structured(
        self,
        request: SearchRequest,
        shape: Type[T],
        deadline: Optional[Deadline] = None,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> T:
        """Run a search and decode the result into ``shape``.

        Raises:
            DecodeError: If the payload does not fit ``shape``.
        """
        response = self.search(request, deadline, timeout, cancel_event)
        return response.decode_into(shape)

    def fetch(
        self,
        request: FetchRequest,
        deadline: Optional[Deadline] = None,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> RawResponse:
        """Fetch a single page, usually returned as markdown.

        POST /fetch
        """
        request.validate()
        return self._post("/fetch", request.to_dict(), deadline, timeout, cancel_event)

    def get_balance(
        self,
        deadline: Optional[Deadline] = None,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> BalanceResponse:
        """Get the remaining credit balance.

        GET /credits/balance
        """
        payload = self._executor.execute(
            "GET",
            f"{self.base_url}/credits/balance",
            headers=self._headers(),
            deadline=self._deadline(deadline, timeout, cancel_event),
        )
        return RawResponse(payload).decode_into(BalanceResponse)

    def _post(
        self,
        path: str,
        body: dict[str, Any],
        deadline: Optional[Deadline],
        timeout: Optional[float],
        cancel_event: Optional[threading.Event],
    ) -> RawResponse:
        headers = self._headers()
        headers["Content-Type"] = "application/json"
        payload = self._executor.execute(
            "POST",
            f"{self.base_url}{path}",
            headers=headers,
            body=json.dumps(body).encode("utf-8"),
            deadline=self._deadline(deadline, timeout, cancel_event),
        )
        return RawResponse(payload)

    def _headers(self) -> dict[str, str]:
        return {"User-Agent": self.config.user_agent, "Accept": "application/json"}

    @staticmethod
    def _deadline(
        deadline: Optional[Deadline],
        timeout: Optional[float],
        cancel_event: Optional[threading.Event],
    ) -> Deadline:
        if deadline is not None:
            return deadline
        return Deadline(timeout=timeout, cancel_event=cancel_event)

    def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport:
            self._transport.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
