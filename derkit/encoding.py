"""Encoding interfaces, reference wrappers, DER ordering and TLV headers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Iterable

from derkit.errors import DerError, ErrorKind
from derkit.length import Length
from derkit.tag import Tag
from derkit.writer import SliceWriter, Writer


class Encode(ABC):
    """Something that can be written as DER."""

    @abstractmethod
    def encoded_len(self) -> Length:
        """Length of the full DER encoding in bytes."""

    @abstractmethod
    def encode(self, writer: Writer) -> None:
        """Write the DER encoding to ``writer``."""

    def encode_to_slice(self, capacity: Any) -> bytes:
        """Encode into a buffer of ``capacity`` bytes, returning the bytes written."""
        writer = SliceWriter(capacity)
        self.encode(writer)
        return writer.finish()

    def to_der(self) -> bytes:
        """Return the DER encoding, checking it matches ``encoded_len``."""
        expected = self.encoded_len()
        writer = SliceWriter(expected)
        self.encode(writer)
        data = writer.finish()
        if len(data) != int(expected):
            raise DerError(
                ErrorKind.INCOMPLETE,
                expected_len=expected,
                actual_len=Length(len(data)),
            )
        return data


class EncodeValue(Encode):
    """A tagged value encoded as tag, length and value parts."""

    TAG: ClassVar[Tag]

    def tag(self) -> Tag:
        """The tag this value is encoded with; by default the class's ``TAG``."""
        return type(self).TAG

    def header(self) -> Header:
        """The tag and length header of this value."""
        return Header(self.tag(), self.value_len())

    @abstractmethod
    def value_len(self) -> Length:
        """Length of the value part alone."""

    @abstractmethod
    def encode_value(self, writer: Writer) -> None:
        """Write the value part alone."""

    def encoded_len(self) -> Length:
        return self.value_len().for_tlv()

    def encode(self, writer: Writer) -> None:
        self.header().encode(writer)
        self.encode_value(writer)

    def der_cmp(self, other: EncodeValue) -> int:
        """Compare DER encodings: header first, then value; negative, zero or positive."""
        order = self.header().der_cmp(other.header())
        if order:
            return order
        value_cmp = getattr(self, "value_cmp", None)
        if value_cmp is None:
            raise TypeError(f"{type(self).__name__} has no value ordering")
        return value_cmp(other)


class ValueOrd:
    """Ordering of value parts; by default the type's natural ordering."""

    def value_cmp(self, other: Any) -> int:
        """Compare value parts: negative, zero or positive."""
        return (self > other) - (self < other)


class EncodeRef(Encode):
    """Encodes by delegating to a wrapped encodable value."""

    def __init__(self, inner: Any) -> None:
        self.inner = inner

    def encoded_len(self) -> Length:
        return self.inner.encoded_len()

    def encode(self, writer: Writer) -> None:
        self.inner.encode(writer)


class EncodeValueRef(EncodeValue, ValueOrd):
    """Tagged value encoding delegated to a wrapped value."""

    def __init__(self, inner: Any) -> None:
        self.inner = inner

    def tag(self) -> Tag:
        return self.inner.tag()

    def value_len(self) -> Length:
        return self.inner.value_len()

    def encode_value(self, writer: Writer) -> None:
        self.inner.encode_value(writer)

    def value_cmp(self, other: EncodeValueRef) -> int:
        return self.inner.value_cmp(other.inner)


@dataclass(frozen=True)
class Header(Encode):
    """Tag and length parts of a TLV encoding."""

    tag: Tag
    length: Length

    def __post_init__(self) -> None:
        try:
            length = Length(self.length)
        except DerError as err:
            raise DerError(ErrorKind.OVERFLOW) from err
        object.__setattr__(self, "length", length)

    def encoded_len(self) -> Length:
        return self.tag.encoded_len() + self.length.encoded_len()

    def encode(self, writer: Writer) -> None:
        self.tag.encode(writer)
        self.length.encode(writer)

    @classmethod
    def decode(cls, reader: Any) -> Header:
        """Read a tag and length from ``reader``."""
        tag = Tag.decode(reader)
        try:
            length = Length.decode(reader)
        except DerError as err:
            if err.kind is ErrorKind.OVERLENGTH:
                raise DerError(ErrorKind.LENGTH, tag=tag) from err
            raise
        return cls(tag, length)

    def der_cmp(self, other: Header) -> int:
        """Compare by tag, then by encoded length."""
        return self.tag.der_cmp(other.tag) or self.length.der_cmp(other.length)


def iter_cmp(first: Iterable[Any], second: Iterable[Any]) -> int:
    """Compare two sequences element-wise with ``der_cmp``, then by length."""
    first, second = list(first), list(second)
    length_order = (len(first) > len(second)) - (len(first) < len(second))
    for left, right in zip(first, second):
        order = left.der_cmp(right)
        if order:
            return order
    return length_order