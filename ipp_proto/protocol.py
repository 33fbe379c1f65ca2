"""IPP header framing and the attribute-section codec.

Wire layout (big-endian)::

    header   version.major(1) version.minor(1) code(2) request_id(4)
    group    delimiter_tag(1) record*
    record   value_tag(1) name_len(2) name value_len(2) value
    message  header group* end_of_attributes_tag(1) payload...

Additional values of a multi-valued attribute are records with an empty
name. Collections are a ``begCollection`` record, ``memberAttrName`` records
each followed by the member's value record(s), and an ``endCollection``
record.
"""

from __future__ import annotations

import asyncio
import struct
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

from ipp_shared.constants import DelimiterTag, IppVersion, Operation, StatusCode, ValueTag

from .attribute import IppAttribute, IppAttributeGroup, IppAttributes, join_values
from .errors import (
    InvalidValueError,
    OrphanContinuationError,
    ProtocolError,
    TruncatedHeaderError,
    UnexpectedEndOfStreamError,
    UnknownTagError,
)
from .logging_config import hex_preview, log
from .payload import IppPayload
from .value import (
    ArrayValue,
    CollectionValue,
    IppValue,
    decode_value,
    encode_value,
    tags_compatible,
)

if TYPE_CHECKING:
    from .request import IppRequestResponse

HEADER_STRUCT = struct.Struct(">BBHI")
HEADER_SIZE = HEADER_STRUCT.size
LENGTH_STRUCT = struct.Struct(">H")
MAX_FIELD_LENGTH = 0xFFFF

_DELIMITER_TAGS = {int(tag): tag for tag in DelimiterTag}
_VALUE_TAGS = {int(tag): tag for tag in ValueTag}


@dataclass
class IppHeader:
    """Version, operation or status code and request id of a message.

    ``operation_status`` holds an operation code in a request and a status
    code in a response. Codes outside the known enums are kept as plain ints.
    """

    version: IppVersion
    operation_status: int
    request_id: int

    def __post_init__(self):
        self.version = IppVersion(*self.version)

    @property
    def operation(self) -> Optional[Operation]:
        try:
            return Operation(self.operation_status)
        except ValueError:
            return None

    @property
    def status(self) -> Optional[StatusCode]:
        try:
            return StatusCode(self.operation_status)
        except ValueError:
            return None

    def to_bytes(self) -> bytes:
        """Encode the header into its eight wire bytes."""
        try:
            return HEADER_STRUCT.pack(
                self.version.major,
                self.version.minor,
                self.operation_status,
                self.request_id,
            )
        except struct.error as exc:
            raise InvalidValueError(f"Header field out of range: {exc}") from exc

    @classmethod
    def from_bytes(cls, data: bytes) -> "IppHeader":
        """Decode the first eight bytes of ``data``.

        Raises:
            TruncatedHeaderError: If fewer than eight bytes are available.
        """
        if len(data) < HEADER_SIZE:
            raise TruncatedHeaderError(len(data))
        major, minor, code, request_id = HEADER_STRUCT.unpack_from(data, 0)
        return cls(IppVersion(major, minor), code, request_id)


def encode_attributes(attributes: IppAttributes) -> bytes:
    """Encode every group followed by the end-of-attributes tag.

    Args:
        attributes: Groups to serialize, in order.

    Returns:
        bytes: Attribute section of a message.
    """
    out = bytearray()
    for group in attributes:
        out.append(group.tag)
        for attribute in group:
            _encode_attribute(out, attribute.name, attribute.value)
    out.append(DelimiterTag.END_OF_ATTRIBUTES)
    return bytes(out)


def encode(message: "IppRequestResponse") -> bytes:
    """Encode header and attributes of ``message``; the payload is not included."""
    return message.header.to_bytes() + encode_attributes(message.attributes)


def _encode_attribute(out: bytearray, name: str, value: IppValue) -> None:
    values = value.as_list()
    if not values:
        raise InvalidValueError(f"Attribute '{name}' has no values")
    first_tag = values[0].tag
    for index, item in enumerate(values):
        if isinstance(item, ArrayValue):
            raise InvalidValueError(f"Attribute '{name}' nests an array inside an array")
        if not tags_compatible(first_tag, item.tag):
            raise InvalidValueError(
                f"Attribute '{name}' mixes {first_tag.name} and {item.tag.name} values"
            )
        _encode_single(out, name if index == 0 else "", item)


def _encode_single(out: bytearray, name: str, value: IppValue) -> None:
    if isinstance(value, CollectionValue):
        _write_record(out, ValueTag.BEG_COLLECTION, name, b"")
        for member_name, member_value in value.members.items():
            _write_record(out, ValueTag.MEMBER_ATTR_NAME, "", member_name.encode("utf-8"))
            _encode_attribute(out, "", member_value)
        _write_record(out, ValueTag.END_COLLECTION, "", b"")
        return
    _write_record(out, value.tag, name, encode_value(value))


def _write_record(out: bytearray, tag: ValueTag, name: str, data: bytes) -> None:
    name_bytes = name.encode("utf-8")
    if len(name_bytes) > MAX_FIELD_LENGTH or len(data) > MAX_FIELD_LENGTH:
        raise InvalidValueError(f"Attribute '{name}' does not fit a 16-bit length field")
    out.append(tag)
    out += LENGTH_STRUCT.pack(len(name_bytes))
    out += name_bytes
    out += LENGTH_STRUCT.pack(len(data))
    out += data


@dataclass
class _CollectionFrame:
    """Collection being decoded and the member its next value belongs to."""

    name: str
    collection: CollectionValue = field(default_factory=CollectionValue)
    member: Optional[str] = None
    member_filled: bool = False


class _AttributeBuilder:
    """Turns a sequence of decoded records into attribute groups."""

    def __init__(self):
        self.attributes = IppAttributes()
        self._group: Optional[IppAttributeGroup] = None
        self._last: Optional[IppAttribute] = None
        self._frames: List[_CollectionFrame] = []

    def open_group(self, tag: DelimiterTag) -> None:
        if self._frames:
            raise ProtocolError(f"Delimiter {tag.name} inside an unterminated collection")
        log.debug("Opening group %s", tag.name)
        self._group = self.attributes.add_group(tag)
        self._last = None

    def add_record(self, tag: ValueTag, name: str, data: bytes) -> None:
        if self._group is None:
            raise ProtocolError("Attribute record before the first group delimiter")
        if tag == ValueTag.BEG_COLLECTION:
            self._frames.append(_CollectionFrame(name))
        elif tag == ValueTag.END_COLLECTION:
            if not self._frames:
                raise ProtocolError("endCollection without matching begCollection")
            frame = self._frames.pop()
            if frame.member is not None and not frame.member_filled:
                raise ProtocolError(f"Collection member '{frame.member}' has no value")
            self._place(frame.name, frame.collection)
        elif tag == ValueTag.MEMBER_ATTR_NAME:
            if not self._frames:
                raise ProtocolError("memberAttrName outside a collection")
            frame = self._frames[-1]
            if frame.member is not None and not frame.member_filled:
                raise ProtocolError(f"Collection member '{frame.member}' has no value")
            member = _decode_name(data)
            if not member:
                raise ProtocolError("Empty memberAttrName")
            if member in frame.collection.members:
                raise ProtocolError(f"Duplicate collection member '{member}'")
            frame.member = member
            frame.member_filled = False
        else:
            self._place(name, decode_value(tag, data))

    def _place(self, name: str, value: IppValue) -> None:
        if self._frames:
            frame = self._frames[-1]
            if name:
                raise ProtocolError(f"Named record '{name}' inside a collection")
            if frame.member is None:
                raise ProtocolError("Collection value without a memberAttrName")
            members = frame.collection.members
            if frame.member_filled:
                members[frame.member] = join_values(frame.member, members[frame.member], value)
            else:
                members[frame.member] = value
                frame.member_filled = True
            return

        if name:
            self._last = IppAttribute(name, value)
            self._group.attributes.append(self._last)
            return
        if self._last is None:
            raise OrphanContinuationError("Additional value without a preceding attribute")
        self._last.add_value(value)

    def finish(self) -> IppAttributes:
        if self._frames:
            raise ProtocolError("Collection not terminated before end-of-attributes")
        return self.attributes


def _decode_name(data: bytes) -> str:
    try:
        return bytes(data).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ProtocolError("Attribute name is not valid UTF-8") from exc


def _value_tag(tag: int, offset: Optional[int] = None) -> ValueTag:
    try:
        return _VALUE_TAGS[tag]
    except KeyError:
        raise UnknownTagError(tag, offset) from None


def decode(data: bytes) -> "IppRequestResponse":
    """Decode a complete message held in memory.

    Args:
        data: Header, attribute section and optionally the payload.

    Returns:
        IppRequestResponse: Decoded message. Bytes after the end-of-attributes
        tag, if any, are attached as its payload.

    Raises:
        ProtocolError: If the message is malformed; see the subclasses in
            :mod:`ipp_proto.errors`.
    """
    from .request import IppRequestResponse  # local import to avoid circular dependency

    header = IppHeader.from_bytes(data)
    log.debug("Decoding IPP header %s", hex_preview(bytes(data[:HEADER_SIZE])))
    builder = _AttributeBuilder()
    view = memoryview(data)
    offset = HEADER_SIZE
    end = len(data)

    while True:
        if offset >= end:
            raise UnexpectedEndOfStreamError("Message ends before the end-of-attributes tag")
        tag = data[offset]
        offset += 1
        if tag == DelimiterTag.END_OF_ATTRIBUTES:
            break
        if tag in _DELIMITER_TAGS:
            builder.open_group(_DELIMITER_TAGS[tag])
            continue
        value_tag = _value_tag(tag, offset - 1)
        name, offset = _read_field(view, offset)
        value, offset = _read_field(view, offset)
        builder.add_record(value_tag, _decode_name(name), value)

    message = IppRequestResponse(header, builder.finish())
    if offset < end:
        log.debug("Attaching %d trailing bytes as payload", end - offset)
        message.payload = IppPayload(view[offset:])
    return message


def _read_field(view: memoryview, offset: int) -> tuple:
    if offset + LENGTH_STRUCT.size > len(view):
        raise UnexpectedEndOfStreamError(f"Length field truncated at offset {offset}")
    (length,) = LENGTH_STRUCT.unpack_from(view, offset)
    offset += LENGTH_STRUCT.size
    if offset + length > len(view):
        raise UnexpectedEndOfStreamError(
            f"Field of {length} bytes truncated at offset {offset}"
        )
    return bytes(view[offset : offset + length]), offset + length


async def read_ipp_message(reader) -> "IppRequestResponse":
    """Read header and attributes from a stream and keep the rest as payload.

    Args:
        reader: ``asyncio.StreamReader`` or any object with coroutine
            ``read(n)`` and ``readexactly(n)`` methods, positioned at the start
            of a message.

    Returns:
        IppRequestResponse: Decoded message whose payload is the remainder of
        ``reader``.

    Raises:
        ProtocolError: If the message is malformed or the stream ends early.
    """
    from .request import IppRequestResponse  # local import to avoid circular dependency

    try:
        header_bytes = await reader.readexactly(HEADER_SIZE)
    except asyncio.IncompleteReadError as exc:
        raise TruncatedHeaderError(len(exc.partial)) from None
    header = IppHeader.from_bytes(header_bytes)
    builder = _AttributeBuilder()

    while True:
        tag = (await _read_exact(reader, 1))[0]
        if tag == DelimiterTag.END_OF_ATTRIBUTES:
            break
        if tag in _DELIMITER_TAGS:
            builder.open_group(_DELIMITER_TAGS[tag])
            continue
        value_tag = _value_tag(tag)
        (name_len,) = LENGTH_STRUCT.unpack(await _read_exact(reader, LENGTH_STRUCT.size))
        name = await _read_exact(reader, name_len)
        (value_len,) = LENGTH_STRUCT.unpack(await _read_exact(reader, LENGTH_STRUCT.size))
        value = await _read_exact(reader, value_len)
        builder.add_record(value_tag, _decode_name(name), value)

    message = IppRequestResponse(header, builder.finish())
    message.payload = IppPayload(reader)
    return message


async def _read_exact(reader, size: int) -> bytes:
    if size == 0:
        return b""
    try:
        return await reader.readexactly(size)
    except asyncio.IncompleteReadError as exc:
        raise UnexpectedEndOfStreamError(
            f"Stream ended after {len(exc.partial)} of {size} bytes"
        ) from None


decode_message = decode
encode_message = encode
