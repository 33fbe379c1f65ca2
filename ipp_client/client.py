"""Asynchronous IPP client carrying encoded messages over HTTP."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from ipp_proto import protocol
from ipp_proto.errors import IppStatusError
from ipp_proto.request import IppRequestResponse
from ipp_shared.constants import IPP_CONTENT_TYPE, STATUS_ERROR_THRESHOLD, DelimiterTag
from ipp_shared.uri import to_http_url

log = logging.getLogger("ipp_client")


class IppClient:
    """Posts IPP requests to one printer or print server."""

    def __init__(
        self,
        uri: str,
        timeout: float = 30,
        verify_tls: bool = True,
        username: Optional[str] = None,
        password: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            uri: Printer address (``ipp``, ``ipps``, ``http`` or ``https``).
            timeout: HTTP timeout in seconds.
            verify_tls: Verify the server certificate for ``ipps``/``https``.
            username: Optional user for HTTP basic authentication.
            password: Password matching ``username``.
            transport: Optional ``httpx`` transport, used by tests.
        """
        self.uri = uri
        self.url = to_http_url(uri)
        self.timeout = timeout
        self.verify_tls = verify_tls
        self.username = username
        self.password = password
        self.transport = transport

    def _http_client(self) -> httpx.AsyncClient:
        auth = httpx.BasicAuth(self.username, self.password or "") if self.username else None
        return httpx.AsyncClient(
            timeout=self.timeout,
            verify=self.verify_tls,
            auth=auth,
            transport=self.transport,
        )

    async def send_raw(self, request: IppRequestResponse) -> IppRequestResponse:
        """Send ``request`` and decode the response without checking its status.

        The request and its payload are streamed, so the document is never
        held in memory by the client.

        Args:
            request: Request built with :meth:`IppRequestResponse.new_request`.

        Returns:
            IppRequestResponse: Decoded response.

        Raises:
            ConnectionError: If the printer cannot be reached.
            httpx.HTTPStatusError: If the HTTP layer answers with an error.
            ProtocolError: If the response body is not a valid IPP message.
        """
        log.debug(
            "Sending operation 0x%04x (request id %d) to %s",
            request.header.operation_status,
            request.header.request_id,
            self.url,
        )
        async with self._http_client() as client:
            try:
                resp = await client.post(
                    self.url,
                    content=request.into_reader(),
                    headers={"Content-Type": IPP_CONTENT_TYPE},
                )
            except httpx.TransportError as exc:
                raise ConnectionError(
                    f"Failed to reach {self.url} (verify_tls={self.verify_tls}, timeout={self.timeout}s): {exc}"
                ) from exc
            resp.raise_for_status()
            body = resp.content

        response = protocol.decode(body)
        log.debug(
            "Received status 0x%04x for request id %d",
            response.header.operation_status,
            response.header.request_id,
        )
        return response

    async def send(self, request: IppRequestResponse) -> IppRequestResponse:
        """Send ``request`` and return the response if its status is successful.

        Raises:
            IppStatusError: If the response carries an error status code.
        """
        response = await self.send_raw(request)
        status = response.header.operation_status
        if status >= STATUS_ERROR_THRESHOLD:
            message = response.attributes.find(DelimiterTag.OPERATION_ATTRIBUTES, "status-message")
            text = message.value.as_string() if message is not None else None
            log.warning("IPP request to %s failed with status 0x%04x", self.url, status)
            raise IppStatusError(status, text)
        return response
