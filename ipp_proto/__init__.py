"""IPP wire format: values, attributes, codec and request/response assembly."""

from .attribute import IppAttribute, IppAttributeGroup, IppAttributes  # noqa: F401
from .errors import (  # noqa: F401
    AttributeNotFoundError,
    InvalidAttributeTypeError,
    InvalidValueError,
    IppError,
    IppStatusError,
    OrphanContinuationError,
    PayloadConsumedError,
    ProtocolError,
    TruncatedHeaderError,
    UnexpectedEndOfStreamError,
    UnknownTagError,
)
from .payload import ChainedReader, IppPayload, PayloadReader  # noqa: F401
from .protocol import IppHeader, decode, encode, read_ipp_message  # noqa: F401
from .request import IppRequestResponse, build_request, build_response  # noqa: F401

__all__ = [
    "AttributeNotFoundError",
    "ChainedReader",
    "InvalidAttributeTypeError",
    "InvalidValueError",
    "IppAttribute",
    "IppAttributeGroup",
    "IppAttributes",
    "IppError",
    "IppHeader",
    "IppPayload",
    "IppRequestResponse",
    "IppStatusError",
    "OrphanContinuationError",
    "PayloadConsumedError",
    "PayloadReader",
    "ProtocolError",
    "TruncatedHeaderError",
    "UnexpectedEndOfStreamError",
    "UnknownTagError",
    "build_request",
    "build_response",
    "decode",
    "encode",
    "read_ipp_message",
]
