"""Exception hierarchy for the IPP codec and attribute model."""

from __future__ import annotations


class IppError(Exception):
    """Base class for every error raised by this package."""


class ProtocolError(IppError):
    """Raised when an IPP message is malformed.

    Decode errors are terminal: no partially decoded message is returned.
    """


class TruncatedHeaderError(ProtocolError):
    """Raised when fewer than eight header bytes are available."""

    def __init__(self, available: int):
        super().__init__(f"IPP header needs 8 bytes, got {available}")
        self.available = available


class UnknownTagError(ProtocolError):
    """Raised when a tag byte is neither a delimiter nor a value tag."""

    def __init__(self, tag: int, offset: int | None = None):
        where = f" at offset {offset}" if offset is not None else ""
        super().__init__(f"Unknown IPP tag 0x{tag:02x}{where}")
        self.tag = tag
        self.offset = offset


class UnexpectedEndOfStreamError(ProtocolError):
    """Raised when the stream ends before a declared length is satisfied."""


class OrphanContinuationError(ProtocolError):
    """Raised when an empty-name value has no attribute to attach to."""


class InvalidValueError(ProtocolError):
    """Raised when a value's bytes do not match the layout its tag requires."""


class AttributeNotFoundError(IppError):
    """Raised when a named attribute is absent from a group."""

    def __init__(self, name: str):
        super().__init__(f"Attribute '{name}' not found")
        self.name = name


class InvalidAttributeTypeError(IppError):
    """Raised when an attribute value does not have the expected type."""


class PayloadConsumedError(IppError):
    """Raised when a payload is turned into a reader a second time."""


class IppStatusError(IppError):
    """Raised by the client when a response carries an error status code."""

    def __init__(self, status: int, message: str | None = None):
        text = message or f"IPP request failed with status 0x{status:04x}"
        super().__init__(text)
        self.status = status
