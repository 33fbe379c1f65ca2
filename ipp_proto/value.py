"""IPP attribute values and their byte encodings.

Every value kind on the wire maps to one class below. Accessors such as
``as_integer`` are defined on the base class and return ``None`` unless the
concrete class carries that kind of payload, so callers can probe a value
without checking its class first.

Collections and multi-valued attributes span several wire records; the codec
in :mod:`ipp_proto.protocol` takes care of those. The functions
:func:`encode_value` and :func:`decode_value` cover the single-record kinds.
"""

from __future__ import annotations

import datetime as dt
import struct
from dataclasses import dataclass, field
from typing import ClassVar, Dict, Iterator, List, Optional, Tuple

from ipp_shared.constants import (
    OUT_OF_BAND_TAGS,
    STRING_TAGS,
    UNITS_DOTS_PER_CM,
    UNITS_DOTS_PER_INCH,
    ValueTag,
)

from .errors import InvalidValueError, UnknownTagError
from .logging_config import log

INT_STRUCT = struct.Struct(">i")
BOOL_STRUCT = struct.Struct(">B")
DATETIME_STRUCT = struct.Struct(">HBBBBBBcBB")
RESOLUTION_STRUCT = struct.Struct(">iiB")
RANGE_STRUCT = struct.Struct(">ii")
LENGTH_STRUCT = struct.Struct(">H")

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


class IppValue:
    """Base class of all attribute values."""

    tag: ValueTag

    def as_integer(self) -> Optional[int]:
        return None

    def as_enum(self) -> Optional[int]:
        return None

    def as_boolean(self) -> Optional[bool]:
        return None

    def as_string(self) -> Optional[str]:
        return None

    def as_octets(self) -> Optional[bytes]:
        return None

    def as_datetime(self) -> Optional["DateTimeValue"]:
        return None

    def as_resolution(self) -> Optional["ResolutionValue"]:
        return None

    def as_range(self) -> Optional[Tuple[int, int]]:
        return None

    def as_collection(self) -> Optional[Dict[str, "IppValue"]]:
        return None

    def as_array(self) -> Optional[List["IppValue"]]:
        return None

    def is_out_of_band(self) -> bool:
        return False

    def as_list(self) -> List["IppValue"]:
        """Return the value as a list: the elements of an array, else ``[self]``."""
        return [self]


@dataclass
class IntegerValue(IppValue):
    value: int
    tag: ClassVar[ValueTag] = ValueTag.INTEGER

    def as_integer(self) -> Optional[int]:
        return self.value

    def __str__(self) -> str:
        return str(self.value)


@dataclass
class EnumValue(IppValue):
    value: int
    tag: ClassVar[ValueTag] = ValueTag.ENUM

    def as_enum(self) -> Optional[int]:
        return self.value

    def __str__(self) -> str:
        return str(self.value)


@dataclass
class BooleanValue(IppValue):
    value: bool
    tag: ClassVar[ValueTag] = ValueTag.BOOLEAN

    def as_boolean(self) -> Optional[bool]:
        return self.value

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass
class OctetStringValue(IppValue):
    value: bytes
    tag: ClassVar[ValueTag] = ValueTag.OCTET_STRING

    def as_octets(self) -> Optional[bytes]:
        return self.value

    def __str__(self) -> str:
        return self.value.hex()


@dataclass
class StringValue(IppValue):
    """One of the plain character-string kinds (keyword, uri, charset, ...)."""

    tag: ValueTag
    value: str

    def __post_init__(self):
        if self.tag not in STRING_TAGS:
            raise ValueError(f"{self.tag!r} is not a character string tag")

    def as_string(self) -> Optional[str]:
        return self.value

    def __str__(self) -> str:
        return self.value


@dataclass
class LanguageStringValue(IppValue):
    """textWithLanguage or nameWithLanguage."""

    tag: ValueTag
    language: str
    value: str

    def __post_init__(self):
        if self.tag not in (ValueTag.TEXT_WITH_LANGUAGE, ValueTag.NAME_WITH_LANGUAGE):
            raise ValueError(f"{self.tag!r} is not a with-language string tag")

    def as_string(self) -> Optional[str]:
        return self.value

    def __str__(self) -> str:
        return f"{self.value} [{self.language}]"


@dataclass
class DateTimeValue(IppValue):
    """RFC 2579 DateAndTime, eleven bytes on the wire."""

    year: int
    month: int
    day: int
    hour: int
    minutes: int
    seconds: int
    deci_seconds: int = 0
    utc_dir: str = "+"
    utc_hours: int = 0
    utc_minutes: int = 0
    tag: ClassVar[ValueTag] = ValueTag.DATE_TIME

    def as_datetime(self) -> Optional["DateTimeValue"]:
        return self

    @classmethod
    def from_datetime(cls, when: dt.datetime) -> "DateTimeValue":
        """Build a value from a ``datetime``; naive values are taken as UTC."""
        offset = when.utcoffset() or dt.timedelta(0)
        total_minutes = int(offset.total_seconds() // 60)
        utc_dir = "-" if total_minutes < 0 else "+"
        hours, minutes = divmod(abs(total_minutes), 60)
        return cls(
            year=when.year,
            month=when.month,
            day=when.day,
            hour=when.hour,
            minutes=when.minute,
            seconds=when.second,
            deci_seconds=when.microsecond // 100_000,
            utc_dir=utc_dir,
            utc_hours=hours,
            utc_minutes=minutes,
        )

    def to_datetime(self) -> dt.datetime:
        """Return a timezone-aware ``datetime``."""
        offset = dt.timedelta(hours=self.utc_hours, minutes=self.utc_minutes)
        if self.utc_dir == "-":
            offset = -offset
        return dt.datetime(
            self.year,
            self.month,
            self.day,
            self.hour,
            self.minutes,
            self.seconds,
            self.deci_seconds * 100_000,
            tzinfo=dt.timezone(offset),
        )

    def __str__(self) -> str:
        return (
            f"{self.year:04d}-{self.month:02d}-{self.day:02d}T"
            f"{self.hour:02d}:{self.minutes:02d}:{self.seconds:02d}.{self.deci_seconds}"
            f"{self.utc_dir}{self.utc_hours:02d}{self.utc_minutes:02d}"
        )


@dataclass
class ResolutionValue(IppValue):
    cross_feed: int
    feed: int
    units: int = UNITS_DOTS_PER_INCH
    tag: ClassVar[ValueTag] = ValueTag.RESOLUTION

    def as_resolution(self) -> Optional["ResolutionValue"]:
        return self

    def __str__(self) -> str:
        unit = {UNITS_DOTS_PER_INCH: "dpi", UNITS_DOTS_PER_CM: "dpcm"}.get(self.units, f"units{self.units}")
        return f"{self.cross_feed}x{self.feed}{unit}"


@dataclass
class RangeOfIntegerValue(IppValue):
    lower: int
    upper: int
    tag: ClassVar[ValueTag] = ValueTag.RANGE_OF_INTEGER

    @property
    def is_anomalous(self) -> bool:
        """True when the lower bound exceeds the upper one."""
        return self.lower > self.upper

    def as_range(self) -> Optional[Tuple[int, int]]:
        return (self.lower, self.upper)

    def __str__(self) -> str:
        return f"{self.lower}-{self.upper}"


@dataclass
class CollectionValue(IppValue):
    """Ordered mapping of member names to values."""

    members: Dict[str, IppValue] = field(default_factory=dict)
    tag: ClassVar[ValueTag] = ValueTag.BEG_COLLECTION

    def as_collection(self) -> Optional[Dict[str, IppValue]]:
        return self.members

    def __str__(self) -> str:
        inner = " ".join(f"{name}={value}" for name, value in self.members.items())
        return "{" + inner + "}"


@dataclass
class ArrayValue(IppValue):
    """Values of a multi-valued attribute, in wire order.

    A single-element array is written as one plain record, so it decodes back
    as the bare element. Builders store a lone value unwrapped.
    """

    values: List[IppValue] = field(default_factory=list)

    @property
    def tag(self) -> ValueTag:  # type: ignore[override]
        if not self.values:
            raise InvalidValueError("Empty array has no value tag")
        return self.values[0].tag

    def as_array(self) -> Optional[List[IppValue]]:
        return self.values

    def as_list(self) -> List[IppValue]:
        return list(self.values)

    def __iter__(self) -> Iterator[IppValue]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def __str__(self) -> str:
        return ", ".join(str(value) for value in self.values)


@dataclass
class OutOfBandValue(IppValue):
    """unsupported, unknown, no-value and the other out-of-band markers."""

    tag: ValueTag

    def __post_init__(self):
        if self.tag not in OUT_OF_BAND_TAGS:
            raise ValueError(f"{self.tag!r} is not an out-of-band tag")

    def is_out_of_band(self) -> bool:
        return True

    def __str__(self) -> str:
        return self.tag.name.lower().replace("_", "-")


def integer(value: int) -> IntegerValue:
    return IntegerValue(value)


def enum(value: int) -> EnumValue:
    return EnumValue(int(value))


def boolean(value: bool) -> BooleanValue:
    return BooleanValue(value)


def text(value: str, language: str | None = None) -> IppValue:
    if language is not None:
        return LanguageStringValue(ValueTag.TEXT_WITH_LANGUAGE, language, value)
    return StringValue(ValueTag.TEXT_WITHOUT_LANGUAGE, value)


def name(value: str, language: str | None = None) -> IppValue:
    if language is not None:
        return LanguageStringValue(ValueTag.NAME_WITH_LANGUAGE, language, value)
    return StringValue(ValueTag.NAME_WITHOUT_LANGUAGE, value)


def keyword(value: str) -> StringValue:
    return StringValue(ValueTag.KEYWORD, value)


def uri(value: str) -> StringValue:
    return StringValue(ValueTag.URI, value)


def uri_scheme(value: str) -> StringValue:
    return StringValue(ValueTag.URI_SCHEME, value)


def charset(value: str) -> StringValue:
    return StringValue(ValueTag.CHARSET, value)


def natural_language(value: str) -> StringValue:
    return StringValue(ValueTag.NATURAL_LANGUAGE, value)


def mime_media_type(value: str) -> StringValue:
    return StringValue(ValueTag.MIME_MEDIA_TYPE, value)


def no_value() -> OutOfBandValue:
    return OutOfBandValue(ValueTag.NO_VALUE)


# Tags that may follow one another inside a single multi-valued attribute.
_COMPATIBLE_FAMILIES = (
    frozenset({ValueTag.INTEGER, ValueTag.RANGE_OF_INTEGER}),
    frozenset({ValueTag.TEXT_WITHOUT_LANGUAGE, ValueTag.TEXT_WITH_LANGUAGE}),
    frozenset(
        {ValueTag.NAME_WITHOUT_LANGUAGE, ValueTag.NAME_WITH_LANGUAGE, ValueTag.KEYWORD}
    ),
)


def tags_compatible(first: ValueTag, other: ValueTag) -> bool:
    """Return True if ``other`` may continue an attribute whose first value has ``first``.

    Out-of-band markers mix with anything; otherwise the tags must be equal or
    belong to one of the families the registry allows to alternate
    (``integer | rangeOfInteger``, ``text``/``name`` with and without language,
    ``keyword | name``).
    """
    if first == other or first in OUT_OF_BAND_TAGS or other in OUT_OF_BAND_TAGS:
        return True
    return any(first in family and other in family for family in _COMPATIBLE_FAMILIES)


def encode_value(value: IppValue) -> bytes:
    """Encode a single-record value into the bytes following its length prefix.

    Args:
        value: Any value except collections and arrays.

    Returns:
        bytes: Value bytes without tag, name or length prefix.

    Raises:
        InvalidValueError: If a field does not fit its wire width.
        TypeError: For collections and arrays, which span several records.
    """
    try:
        if isinstance(value, (IntegerValue, EnumValue)):
            return INT_STRUCT.pack(value.value)
        if isinstance(value, BooleanValue):
            return BOOL_STRUCT.pack(1 if value.value else 0)
        if isinstance(value, OctetStringValue):
            return bytes(value.value)
        if isinstance(value, StringValue):
            return value.value.encode("utf-8")
        if isinstance(value, LanguageStringValue):
            language = value.language.encode("utf-8")
            body = value.value.encode("utf-8")
            return LENGTH_STRUCT.pack(len(language)) + language + LENGTH_STRUCT.pack(len(body)) + body
        if isinstance(value, DateTimeValue):
            if value.utc_dir not in ("+", "-"):
                raise InvalidValueError(f"UTC direction must be '+' or '-', got {value.utc_dir!r}")
            return DATETIME_STRUCT.pack(
                value.year,
                value.month,
                value.day,
                value.hour,
                value.minutes,
                value.seconds,
                value.deci_seconds,
                value.utc_dir.encode("ascii"),
                value.utc_hours,
                value.utc_minutes,
            )
        if isinstance(value, ResolutionValue):
            return RESOLUTION_STRUCT.pack(value.cross_feed, value.feed, value.units)
        if isinstance(value, RangeOfIntegerValue):
            return RANGE_STRUCT.pack(value.lower, value.upper)
        if isinstance(value, OutOfBandValue):
            return b""
    except struct.error as exc:
        raise InvalidValueError(f"Cannot encode {value!r}: {exc}") from exc
    raise TypeError(f"{type(value).__name__} is not a single-record value")


def decode_value(tag: ValueTag | int, data: bytes) -> IppValue:
    """Decode the bytes of a single record according to its value tag.

    Args:
        tag: Value tag read from the record.
        data: Value bytes following the length prefix.

    Returns:
        IppValue: Decoded value.

    Raises:
        InvalidValueError: If ``data`` does not have the layout ``tag`` requires.
        UnknownTagError: If ``tag`` is not a single-record value tag.
    """
    try:
        tag = ValueTag(tag)
    except ValueError:
        raise UnknownTagError(int(tag)) from None

    if tag in OUT_OF_BAND_TAGS:
        if data:
            log.debug("Ignoring %d value bytes of out-of-band tag %s", len(data), tag.name)
        return OutOfBandValue(tag)
    if tag in STRING_TAGS:
        return StringValue(tag, _decode_utf8(tag, data))
    if tag == ValueTag.INTEGER:
        return IntegerValue(_unpack(INT_STRUCT, tag, data)[0])
    if tag == ValueTag.ENUM:
        return EnumValue(_unpack(INT_STRUCT, tag, data)[0])
    if tag == ValueTag.BOOLEAN:
        (raw,) = _unpack(BOOL_STRUCT, tag, data)
        if raw not in (0, 1):
            raise InvalidValueError(f"Boolean value must be 0 or 1, got {raw}")
        return BooleanValue(raw == 1)
    if tag == ValueTag.OCTET_STRING:
        return OctetStringValue(bytes(data))
    if tag == ValueTag.DATE_TIME:
        fields = _unpack(DATETIME_STRUCT, tag, data)
        utc_dir = fields[7].decode("latin-1")
        if utc_dir not in ("+", "-"):
            raise InvalidValueError(f"Invalid UTC direction {fields[7]!r} in dateTime")
        return DateTimeValue(*fields[:7], utc_dir, fields[8], fields[9])
    if tag == ValueTag.RESOLUTION:
        return ResolutionValue(*_unpack(RESOLUTION_STRUCT, tag, data))
    if tag == ValueTag.RANGE_OF_INTEGER:
        lower, upper = _unpack(RANGE_STRUCT, tag, data)
        if lower > upper:
            log.warning("rangeOfInteger with lower bound %d above upper bound %d", lower, upper)
        return RangeOfIntegerValue(lower, upper)
    if tag in (ValueTag.TEXT_WITH_LANGUAGE, ValueTag.NAME_WITH_LANGUAGE):
        return _decode_language_string(tag, data)
    raise UnknownTagError(int(tag))


def _unpack(layout: struct.Struct, tag: ValueTag, data: bytes) -> tuple:
    if len(data) != layout.size:
        raise InvalidValueError(f"{tag.name} value needs {layout.size} bytes, got {len(data)}")
    return layout.unpack(data)


def _decode_utf8(tag: ValueTag, data: bytes) -> str:
    try:
        return bytes(data).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidValueError(f"{tag.name} value is not valid UTF-8") from exc


def _decode_language_string(tag: ValueTag, data: bytes) -> LanguageStringValue:
    offset = 0
    parts: List[str] = []
    for _ in range(2):
        if offset + LENGTH_STRUCT.size > len(data):
            raise InvalidValueError(f"Truncated {tag.name} value")
        (length,) = LENGTH_STRUCT.unpack_from(data, offset)
        offset += LENGTH_STRUCT.size
        if offset + length > len(data):
            raise InvalidValueError(f"Truncated {tag.name} value")
        parts.append(_decode_utf8(tag, data[offset : offset + length]))
        offset += length
    if offset != len(data):
        raise InvalidValueError(f"Trailing bytes in {tag.name} value")
    return LanguageStringValue(tag, parts[0], parts[1])
