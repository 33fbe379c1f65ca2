"""Attributes, attribute groups and the ordered group sequence of a message."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from ipp_shared.constants import DelimiterTag

from .errors import AttributeNotFoundError, InvalidValueError
from .value import ArrayValue, IppValue, tags_compatible


@dataclass
class IppAttribute:
    """Named attribute value."""

    name: str
    value: IppValue

    def __post_init__(self):
        if not self.name:
            raise ValueError("Attribute name must be a non-empty string")

    def add_value(self, value: IppValue) -> None:
        """Append an additional value, turning a scalar into an array.

        Args:
            value: Value received as a continuation of this attribute.

        Raises:
            InvalidValueError: If ``value`` cannot follow the first value's tag.
        """
        self.value = join_values(self.name, self.value, value)

    def __str__(self) -> str:
        return f"{self.name}: {self.value}"


def join_values(name: str, current: IppValue, value: IppValue) -> ArrayValue:
    """Return ``current`` extended by ``value``, promoting a scalar to an array.

    Raises:
        InvalidValueError: If the tag of ``value`` is not compatible with the
            tag of the first value.
    """
    first_tag = current.as_list()[0].tag
    if not tags_compatible(first_tag, value.tag):
        raise InvalidValueError(
            f"Additional value of '{name}' has tag {value.tag.name}, "
            f"incompatible with {first_tag.name}"
        )
    if isinstance(current, ArrayValue):
        current.values.append(value)
        return current
    return ArrayValue([current, value])


@dataclass
class IppAttributeGroup:
    """Attributes of one delimiter section, in arrival order."""

    tag: DelimiterTag
    attributes: List[IppAttribute] = field(default_factory=list)

    def __post_init__(self):
        if self.tag == DelimiterTag.END_OF_ATTRIBUTES:
            raise ValueError("end-of-attributes does not open a group")

    def find(self, name: str) -> Optional[IppAttribute]:
        """Return the first attribute called ``name`` or ``None``."""
        for attribute in self.attributes:
            if attribute.name == name:
                return attribute
        return None

    def get(self, name: str) -> IppAttribute:
        """Return the first attribute called ``name``.

        Raises:
            AttributeNotFoundError: If the group has no such attribute.
        """
        attribute = self.find(name)
        if attribute is None:
            raise AttributeNotFoundError(name)
        return attribute

    def names(self) -> List[str]:
        return [attribute.name for attribute in self.attributes]

    def __contains__(self, name: object) -> bool:
        return any(attribute.name == name for attribute in self.attributes)

    def __iter__(self) -> Iterator[IppAttribute]:
        return iter(self.attributes)

    def __len__(self) -> int:
        return len(self.attributes)


class GroupsOf:
    """Restartable view over the groups of a message carrying one tag."""

    def __init__(self, groups: List[IppAttributeGroup], tag: DelimiterTag):
        self._groups = groups
        self._tag = tag

    def __iter__(self) -> Iterator[IppAttributeGroup]:
        return (group for group in self._groups if group.tag == self._tag)

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def first(self) -> Optional[IppAttributeGroup]:
        return next(iter(self), None)


class IppAttributes:
    """Ordered sequence of attribute groups of a message.

    The same delimiter tag may occur several times, e.g. once per printer in a
    CUPS-Get-Printers response, so groups are kept as a list and never merged
    across an intervening group of another kind.
    """

    def __init__(self, groups: Optional[List[IppAttributeGroup]] = None):
        self._groups: List[IppAttributeGroup] = list(groups or [])

    @property
    def groups(self) -> List[IppAttributeGroup]:
        return self._groups

    def add_group(self, tag: DelimiterTag) -> IppAttributeGroup:
        """Open a new group occurrence with ``tag`` and return it."""
        group = IppAttributeGroup(DelimiterTag(tag))
        self._groups.append(group)
        return group

    def add(self, tag: DelimiterTag, attribute: IppAttribute) -> None:
        """Append ``attribute`` to the trailing group, opening one if its tag differs.

        Args:
            tag: Delimiter tag of the target group.
            attribute: Attribute to append.
        """
        if self._groups and self._groups[-1].tag == tag:
            group = self._groups[-1]
        else:
            group = self.add_group(tag)
        group.attributes.append(attribute)

    def groups_of(self, tag: DelimiterTag) -> GroupsOf:
        """Return every group carrying ``tag``, in message order."""
        return GroupsOf(self._groups, tag)

    def find(self, tag: DelimiterTag, name: str) -> Optional[IppAttribute]:
        """Return the first attribute called ``name`` in any ``tag`` group."""
        for group in self.groups_of(tag):
            attribute = group.find(name)
            if attribute is not None:
                return attribute
        return None

    def __iter__(self) -> Iterator[IppAttributeGroup]:
        return iter(self._groups)

    def __len__(self) -> int:
        return len(self._groups)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IppAttributes):
            return NotImplemented
        return self._groups == other._groups

    def __repr__(self) -> str:
        return f"IppAttributes({self._groups!r})"
