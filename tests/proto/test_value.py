import datetime as dt
import logging
import struct

import pytest

from ipp_proto import value as v
from ipp_proto.errors import InvalidValueError, UnknownTagError
from ipp_shared.constants import UNITS_DOTS_PER_CM, ValueTag


@pytest.mark.parametrize(
    "item",
    [
        v.integer(-42),
        v.enum(3),
        v.boolean(True),
        v.boolean(False),
        v.OctetStringValue(b"\x00\xffraw"),
        v.keyword("one-sided"),
        v.uri("ipp://host/printers/p1"),
        v.charset("utf-8"),
        v.natural_language("en"),
        v.mime_media_type("application/pdf"),
        v.text("Büro drucker"),
        v.name("job", language="de"),
        v.DateTimeValue(2024, 2, 29, 23, 59, 58, 7, "-", 5, 30),
        v.ResolutionValue(600, 300, UNITS_DOTS_PER_CM),
        v.RangeOfIntegerValue(1, 99),
        v.no_value(),
        v.OutOfBandValue(ValueTag.UNSUPPORTED),
    ],
)
def test_single_record_values_roundtrip(item):
    """Every single-record value decodes back to itself.

    Returns:
        None
    """
    assert v.decode_value(item.tag, v.encode_value(item)) == item


def test_integer_is_signed_big_endian():
    """Integers are four-byte two's complement.

    Returns:
        None
    """
    assert v.encode_value(v.integer(-1)) == b"\xff\xff\xff\xff"
    assert v.decode_value(ValueTag.INTEGER, b"\x80\x00\x00\x00") == v.integer(-(2**31))


def test_integer_out_of_range_is_rejected():
    with pytest.raises(InvalidValueError):
        v.encode_value(v.integer(2**31))


def test_boolean_rejects_other_bytes():
    """Only 0 and 1 are valid boolean encodings.

    Returns:
        None
    """
    with pytest.raises(InvalidValueError):
        v.decode_value(ValueTag.BOOLEAN, b"\x02")


def test_fixed_size_values_check_length():
    with pytest.raises(InvalidValueError):
        v.decode_value(ValueTag.INTEGER, b"\x00\x01")
    with pytest.raises(InvalidValueError):
        v.decode_value(ValueTag.RESOLUTION, b"\x00" * 8)


def test_datetime_layout_and_conversion():
    """dateTime is eleven bytes and converts to an aware datetime.

    Returns:
        None
    """
    when = dt.datetime(2023, 6, 1, 12, 30, 15, 300_000, tzinfo=dt.timezone(dt.timedelta(hours=-4)))
    item = v.DateTimeValue.from_datetime(when)
    raw = v.encode_value(item)
    assert len(raw) == 11
    assert struct.unpack(">H", raw[:2])[0] == 2023
    assert raw[7] == 3
    assert raw[8:9] == b"-"
    assert raw[9] == 4
    assert item.to_datetime() == when


def test_datetime_rejects_bad_direction():
    raw = struct.pack(">HBBBBBBcBB", 2020, 1, 1, 0, 0, 0, 0, b"x", 0, 0)
    with pytest.raises(InvalidValueError):
        v.decode_value(ValueTag.DATE_TIME, raw)


def test_reversed_range_is_flagged_not_rejected(caplog):
    """A range with lower > upper decodes but is marked anomalous.

    Returns:
        None
    """
    with caplog.at_level(logging.WARNING, logger="ipp_proto"):
        item = v.decode_value(ValueTag.RANGE_OF_INTEGER, struct.pack(">ii", 10, 2))
    assert item.as_range() == (10, 2)
    assert item.is_anomalous
    assert "rangeOfInteger" in caplog.text
    assert not v.RangeOfIntegerValue(1, 2).is_anomalous


def test_language_string_layout():
    raw = v.encode_value(v.text("hola", language="es"))
    assert raw == b"\x00\x02es\x00\x04hola"
    with pytest.raises(InvalidValueError):
        v.decode_value(ValueTag.TEXT_WITH_LANGUAGE, b"\x00\x05es")


def test_unknown_tag_is_reported():
    with pytest.raises(UnknownTagError) as err:
        v.decode_value(0x7F, b"")
    assert err.value.tag == 0x7F


def test_accessors_are_total():
    """Accessors return None for mismatched variants instead of raising.

    Returns:
        None
    """
    missing = v.no_value()
    assert missing.is_out_of_band()
    for accessor in ("as_integer", "as_enum", "as_string", "as_boolean", "as_range", "as_collection"):
        assert getattr(missing, accessor)() is None

    number = v.integer(5)
    assert number.as_integer() == 5
    assert number.as_enum() is None
    assert number.as_string() is None
    assert v.enum(4).as_integer() is None
    assert v.keyword("a").as_string() == "a"
    assert v.name("n", language="fr").as_string() == "n"


def test_array_accessors():
    items = v.ArrayValue([v.integer(1), v.integer(2)])
    assert items.as_array() == [v.integer(1), v.integer(2)]
    assert items.tag == ValueTag.INTEGER
    assert v.integer(1).as_array() is None
    assert v.integer(1).as_list() == [v.integer(1)]
    assert str(items) == "1, 2"


def test_string_value_requires_string_tag():
    with pytest.raises(ValueError):
        v.StringValue(ValueTag.INTEGER, "x")


def test_tags_compatible():
    assert v.tags_compatible(ValueTag.INTEGER, ValueTag.RANGE_OF_INTEGER)
    assert v.tags_compatible(ValueTag.KEYWORD, ValueTag.NAME_WITHOUT_LANGUAGE)
    assert v.tags_compatible(ValueTag.KEYWORD, ValueTag.NO_VALUE)
    assert not v.tags_compatible(ValueTag.INTEGER, ValueTag.KEYWORD)
