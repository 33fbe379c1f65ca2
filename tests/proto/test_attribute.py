import pytest

from ipp_proto.attribute import IppAttribute, IppAttributeGroup, IppAttributes
from ipp_proto.errors import AttributeNotFoundError, InvalidValueError
from ipp_proto.value import ArrayValue, enum, integer, keyword, name, no_value
from ipp_shared.constants import DelimiterTag


def _printer(printer_name: str) -> IppAttribute:
    return IppAttribute("printer-name", name(printer_name))


def test_add_appends_to_trailing_group_and_reopens_after_other_tag():
    """Groups are only merged while the tag stays the same.

    Returns:
        None
    """
    attrs = IppAttributes()
    attrs.add(DelimiterTag.OPERATION_ATTRIBUTES, IppAttribute("a", integer(1)))
    attrs.add(DelimiterTag.OPERATION_ATTRIBUTES, IppAttribute("b", integer(2)))
    attrs.add(DelimiterTag.PRINTER_ATTRIBUTES, _printer("p1"))
    attrs.add(DelimiterTag.OPERATION_ATTRIBUTES, IppAttribute("c", integer(3)))

    assert [group.tag for group in attrs] == [
        DelimiterTag.OPERATION_ATTRIBUTES,
        DelimiterTag.PRINTER_ATTRIBUTES,
        DelimiterTag.OPERATION_ATTRIBUTES,
    ]
    assert attrs.groups[0].names() == ["a", "b"]
    assert attrs.groups[2].names() == ["c"]


def test_groups_of_is_restartable_and_ordered():
    """groups_of yields one group per printer, every time it is iterated.

    Returns:
        None
    """
    attrs = IppAttributes()
    attrs.add(DelimiterTag.OPERATION_ATTRIBUTES, IppAttribute("attributes-charset", keyword("utf-8")))
    for printer_name in ("p1", "p2", "p3"):
        attrs.add_group(DelimiterTag.PRINTER_ATTRIBUTES).attributes.append(_printer(printer_name))

    printers = attrs.groups_of(DelimiterTag.PRINTER_ATTRIBUTES)
    first_pass = [str(group.get("printer-name").value) for group in printers]
    second_pass = [str(group.get("printer-name").value) for group in printers]

    assert first_pass == ["p1", "p2", "p3"]
    assert second_pass == first_pass
    assert len(printers) == 3
    assert printers.first().get("printer-name").value == name("p1")
    assert list(attrs.groups_of(DelimiterTag.JOB_ATTRIBUTES)) == []


def test_lookup_returns_first_match_or_fails():
    group = IppAttributeGroup(DelimiterTag.PRINTER_ATTRIBUTES)
    group.attributes.append(IppAttribute("printer-state", enum(3)))
    group.attributes.append(IppAttribute("printer-state", enum(5)))

    assert group.get("printer-state").value == enum(3)
    assert group.find("printer-location") is None
    assert "printer-state" in group
    with pytest.raises(AttributeNotFoundError) as err:
        group.get("printer-location")
    assert err.value.name == "printer-location"
    # The group remains usable after a failed lookup.
    assert group.get("printer-state").value.as_enum() == 3


def test_add_value_promotes_scalar_to_array():
    attribute = IppAttribute("count", integer(1))
    attribute.add_value(integer(2))
    attribute.add_value(integer(3))
    assert attribute.value == ArrayValue([integer(1), integer(2), integer(3)])


def test_attribute_and_group_validation():
    with pytest.raises(ValueError):
        IppAttribute("", integer(1))
    with pytest.raises(ValueError):
        IppAttributeGroup(DelimiterTag.END_OF_ATTRIBUTES)


def test_find_across_groups():
    attrs = IppAttributes()
    attrs.add_group(DelimiterTag.PRINTER_ATTRIBUTES)
    attrs.add_group(DelimiterTag.PRINTER_ATTRIBUTES).attributes.append(_printer("late"))
    assert attrs.find(DelimiterTag.PRINTER_ATTRIBUTES, "printer-name").value == name("late")
    assert attrs.find(DelimiterTag.JOB_ATTRIBUTES, "printer-name") is None


def test_add_value_rejects_incompatible_tag():
    """Continuation values follow the same tag rules as the codec.

    Returns:
        None
    """
    attribute = IppAttribute("media", keyword("a4"))
    attribute.add_value(name("custom"))
    attribute.add_value(no_value())
    with pytest.raises(InvalidValueError):
        attribute.add_value(integer(3))
    assert len(attribute.value) == 3
