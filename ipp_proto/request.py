"""IPP request/response envelope."""

from __future__ import annotations

from typing import Any, Optional

from ipp_shared.constants import (
    ATTRIBUTES_CHARSET,
    ATTRIBUTES_NATURAL_LANGUAGE,
    DEFAULT_CHARSET,
    DEFAULT_NATURAL_LANGUAGE,
    INITIAL_REQUEST_ID,
    PRINTER_URI,
    DelimiterTag,
    IppVersion,
)
from ipp_shared.uri import normalize_printer_uri

from . import protocol
from .attribute import IppAttribute, IppAttributes
from .logging_config import log
from .payload import ChainedReader, IppPayload, PayloadReader
from .protocol import IppHeader
from .value import charset, natural_language, uri as uri_value


class IppRequestResponse:
    """Header, attribute groups and optional payload of one IPP exchange."""

    def __init__(
        self,
        header: IppHeader,
        attributes: Optional[IppAttributes] = None,
        payload: Optional[IppPayload] = None,
    ):
        self.header = header
        self.attributes = attributes if attributes is not None else IppAttributes()
        self.payload = payload

    @classmethod
    def new_request(
        cls,
        version: IppVersion,
        operation: int,
        uri: Optional[str] = None,
    ) -> "IppRequestResponse":
        """Build a request with the mandatory operation attributes.

        Args:
            version: Protocol version for the header.
            operation: Operation code.
            uri: Optional printer address; an ``http`` scheme is rewritten to
                ``ipp`` before it is stored as ``printer-uri``.

        Returns:
            IppRequestResponse: Request with charset, natural language and,
            when given, the printer uri in its operation-attributes group.
        """
        request = cls(IppHeader(version, int(operation), INITIAL_REQUEST_ID))
        request._add_bootstrap_attributes()
        if uri is not None:
            request.attributes.add(
                DelimiterTag.OPERATION_ATTRIBUTES,
                IppAttribute(PRINTER_URI, uri_value(normalize_printer_uri(uri))),
            )
        return request

    @classmethod
    def new_response(cls, version: IppVersion, status: int, request_id: int) -> "IppRequestResponse":
        """Build a response echoing ``request_id`` with the mandatory attributes."""
        response = cls(IppHeader(version, int(status), request_id))
        response._add_bootstrap_attributes()
        return response

    def _add_bootstrap_attributes(self) -> None:
        self.attributes.add(
            DelimiterTag.OPERATION_ATTRIBUTES,
            IppAttribute(ATTRIBUTES_CHARSET, charset(DEFAULT_CHARSET)),
        )
        self.attributes.add(
            DelimiterTag.OPERATION_ATTRIBUTES,
            IppAttribute(ATTRIBUTES_NATURAL_LANGUAGE, natural_language(DEFAULT_NATURAL_LANGUAGE)),
        )

    def add(self, tag: DelimiterTag, name: str, value) -> "IppRequestResponse":
        """Append ``name=value`` to the trailing ``tag`` group and return self."""
        self.attributes.add(tag, IppAttribute(name, value))
        return self

    def attach_payload(self, source: Any) -> None:
        """Attach document data; see :class:`PayloadReader` for accepted sources."""
        self.payload = source if isinstance(source, IppPayload) else IppPayload(source)

    def to_bytes(self) -> bytes:
        """Encode header and attributes; the payload is not included."""
        return protocol.encode(self)

    def into_reader(self) -> ChainedReader:
        """Return a reader producing the encoded message followed by the payload.

        The payload is consumed and streamed through, never copied into memory.
        """
        head = self.to_bytes()
        log.debug("IPP header size: %d", len(head))
        readers = [PayloadReader(head)]
        if self.payload is not None:
            log.debug("Adding payload to a reader chain")
            readers.append(self.payload.into_reader())
            self.payload = None
        return ChainedReader(*readers)

    def __repr__(self) -> str:
        return (
            f"IppRequestResponse(header={self.header!r}, groups={len(self.attributes)}, "
            f"payload={'yes' if self.payload is not None else 'no'})"
        )


def build_request(version: IppVersion, operation: int, uri: Optional[str] = None) -> IppRequestResponse:
    return IppRequestResponse.new_request(version, operation, uri)


def build_response(version: IppVersion, status: int, request_id: int) -> IppRequestResponse:
    return IppRequestResponse.new_response(version, status, request_id)
