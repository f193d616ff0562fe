"""ASN.1 identifier octets: tag classes, tag numbers, tagging modes and tags."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import total_ordering
from typing import Any, ClassVar

from derkit.errors import DerError, ErrorKind
from derkit.length import Length

CONSTRUCTED_FLAG = 0b10_0000


class Class(Enum):
    """Class of an ASN.1 tag (the top two bits of the identifier octet)."""

    UNIVERSAL = 0b0000_0000
    APPLICATION = 0b0100_0000
    CONTEXT_SPECIFIC = 0b1000_0000
    PRIVATE = 0b1100_0000

    def octet(self, constructed: bool, number: TagNumber) -> int:
        """Identifier octet for a tag of this class with the given number."""
        return self.value | int(number) | (CONSTRUCTED_FLAG if constructed else 0)

    def __str__(self) -> str:
        return _CLASS_NAMES[self]


_CLASS_NAMES = {
    Class.UNIVERSAL: "UNIVERSAL",
    Class.APPLICATION: "APPLICATION",
    Class.CONTEXT_SPECIFIC: "CONTEXT-SPECIFIC",
    Class.PRIVATE: "PRIVATE",
}


class TagMode(Enum):
    """Tagging mode; ``EXPLICIT`` is the default."""

    EXPLICIT = "EXPLICIT"
    IMPLICIT = "IMPLICIT"

    @classmethod
    def parse(cls, text: str) -> TagMode:
        """Parse ``EXPLICIT``/``explicit`` or ``IMPLICIT``/``implicit``."""
        if text in ("EXPLICIT", "explicit"):
            return cls.EXPLICIT
        if text in ("IMPLICIT", "implicit"):
            return cls.IMPLICIT
        raise DerError(ErrorKind.TAG_MODE_UNKNOWN)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, order=True)
class TagNumber:
    """Tag number in the range 0 to 30 inclusive (single identifier octet)."""

    value: int

    MASK: ClassVar[int] = 0b1_1111
    MAX: ClassVar[int] = 30

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise DerError(ErrorKind.TAG_NUMBER_INVALID)
        if not 0 <= self.value <= self.MAX:
            raise DerError(ErrorKind.TAG_NUMBER_INVALID)

    def application(self, constructed: bool) -> Tag:
        """An ``APPLICATION`` tag with this number."""
        return Tag("APPLICATION", constructed=constructed, number=self)

    def context_specific(self, constructed: bool) -> Tag:
        """A ``CONTEXT-SPECIFIC`` tag with this number."""
        return Tag("CONTEXT_SPECIFIC", constructed=constructed, number=self)

    def private(self, constructed: bool) -> Tag:
        """A ``PRIVATE`` tag with this number."""
        return Tag("PRIVATE", constructed=constructed, number=self)

    def __int__(self) -> int:
        return self.value

    def __index__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return str(self.value)


for _n in range(TagNumber.MAX + 1):
    setattr(TagNumber, f"N{_n}", TagNumber(_n))


# Universal tags in declaration order: (attribute name, octet, display name).
_UNIVERSAL_TAGS = (
    ("BOOLEAN", 0x01, "BOOLEAN"),
    ("INTEGER", 0x02, "INTEGER"),
    ("BIT_STRING", 0x03, "BIT STRING"),
    ("OCTET_STRING", 0x04, "OCTET STRING"),
    ("NULL", 0x05, "NULL"),
    ("OBJECT_IDENTIFIER", 0x06, "OBJECT IDENTIFIER"),
    ("REAL", 0x09, "REAL"),
    ("ENUMERATED", 0x0A, "ENUMERATED"),
    ("UTF8_STRING", 0x0C, "UTF8String"),
    ("SEQUENCE", 0x10 | CONSTRUCTED_FLAG, "SEQUENCE"),
    ("SET", 0x11 | CONSTRUCTED_FLAG, "SET"),
    ("NUMERIC_STRING", 0x12, "NumericString"),
    ("PRINTABLE_STRING", 0x13, "PrintableString"),
    ("TELETEX_STRING", 0x14, "TeletexString"),
    ("VIDEOTEX_STRING", 0x15, "VideotexString"),
    ("IA5_STRING", 0x16, "IA5String"),
    ("UTC_TIME", 0x17, "UTCTime"),
    ("GENERALIZED_TIME", 0x18, "GeneralizedTime"),
    ("VISIBLE_STRING", 0x1A, "VisibleString"),
    ("BMP_STRING", 0x1D, "BMPString"),
)

_UNIVERSAL_OCTETS = {name: octet for name, octet, _ in _UNIVERSAL_TAGS}
_UNIVERSAL_DISPLAY = {name: display for name, _, display in _UNIVERSAL_TAGS}
_UNIVERSAL_BY_OCTET = {octet: name for name, octet, _ in _UNIVERSAL_TAGS}

_CLASSED_VARIANTS = {
    "APPLICATION": Class.APPLICATION,
    "CONTEXT_SPECIFIC": Class.CONTEXT_SPECIFIC,
    "PRIVATE": Class.PRIVATE,
}

_RANK = {
    name: index
    for index, name in enumerate(
        [name for name, _, _ in _UNIVERSAL_TAGS] + list(_CLASSED_VARIANTS)
    )
}


@total_ordering
class Tag:
    """An ASN.1 tag: a universal type, or an application, context-specific or private tag."""

    __slots__ = ("_variant", "_constructed", "_number")

    BOOLEAN: ClassVar[Tag]
    INTEGER: ClassVar[Tag]
    BIT_STRING: ClassVar[Tag]
    OCTET_STRING: ClassVar[Tag]
    NULL: ClassVar[Tag]
    OBJECT_IDENTIFIER: ClassVar[Tag]
    REAL: ClassVar[Tag]
    ENUMERATED: ClassVar[Tag]
    UTF8_STRING: ClassVar[Tag]
    SEQUENCE: ClassVar[Tag]
    SET: ClassVar[Tag]
    NUMERIC_STRING: ClassVar[Tag]
    PRINTABLE_STRING: ClassVar[Tag]
    TELETEX_STRING: ClassVar[Tag]
    VIDEOTEX_STRING: ClassVar[Tag]
    IA5_STRING: ClassVar[Tag]
    UTC_TIME: ClassVar[Tag]
    GENERALIZED_TIME: ClassVar[Tag]
    VISIBLE_STRING: ClassVar[Tag]
    BMP_STRING: ClassVar[Tag]

    def __init__(
        self,
        variant: str,
        *,
        constructed: bool = False,
        number: TagNumber | None = None,
    ) -> None:
        if variant in _CLASSED_VARIANTS:
            if not isinstance(number, TagNumber):
                raise TypeError("a tag number is required for this tag class")
            self._constructed = bool(constructed)
            self._number: TagNumber | None = number
        elif variant in _UNIVERSAL_OCTETS:
            self._constructed = False
            self._number = None
        else:
            raise ValueError(f"unknown tag variant: {variant!r}")
        self._variant = variant

    @classmethod
    def from_byte(cls, byte: int) -> Tag:
        """Parse a tag from its identifier octet."""
        if not 0 <= byte <= 0xFF:
            raise DerError(ErrorKind.TAG_UNKNOWN, byte=byte & 0xFF)
        constructed = bool(byte & CONSTRUCTED_FLAG)
        number = TagNumber(byte & TagNumber.MASK)

        universal = _UNIVERSAL_BY_OCTET.get(byte)
        if universal is not None:
            return getattr(cls, universal)
        if 0x40 <= byte <= 0x7E:
            return number.application(constructed)
        if 0x80 <= byte <= 0xBE:
            return number.context_specific(constructed)
        if 0xC0 <= byte <= 0xFE:
            return number.private(constructed)
        raise DerError(ErrorKind.TAG_UNKNOWN, byte=byte)

    def octet(self) -> int:
        """The identifier octet encoding this tag."""
        tag_class = _CLASSED_VARIANTS.get(self._variant)
        if tag_class is None:
            return _UNIVERSAL_OCTETS[self._variant]
        assert self._number is not None
        return tag_class.octet(self._constructed, self._number)

    def assert_eq(self, expected: Tag) -> Tag:
        """Return this tag if it equals ``expected``, otherwise raise TAG_UNEXPECTED."""
        if self == expected:
            return self
        raise self.unexpected_error(expected)

    def tag_class(self) -> Class:
        """The class of this tag."""
        return _CLASSED_VARIANTS.get(self._variant, Class.UNIVERSAL)

    def number(self) -> TagNumber:
        """The tag number (low five bits of the identifier octet)."""
        return TagNumber(self.octet() & TagNumber.MASK)

    def is_constructed(self) -> bool:
        """Whether this tag marks a constructed (not primitive) encoding."""
        return bool(self.octet() & CONSTRUCTED_FLAG)

    def is_application(self) -> bool:
        return self.tag_class() is Class.APPLICATION

    def is_context_specific(self) -> bool:
        return self.tag_class() is Class.CONTEXT_SPECIFIC

    def is_private(self) -> bool:
        return self.tag_class() is Class.PRIVATE

    def is_universal(self) -> bool:
        return self.tag_class() is Class.UNIVERSAL

    def length_error(self) -> DerError:
        """An error for an incorrect length of a value with this tag."""
        return DerError(ErrorKind.LENGTH, tag=self)

    def non_canonical_error(self) -> DerError:
        """An error for a non-canonical encoding of a value with this tag."""
        return DerError(ErrorKind.NONCANONICAL, tag=self)

    def unexpected_error(self, expected: Tag | None) -> DerError:
        """An error reporting this tag as unexpected."""
        return DerError(ErrorKind.TAG_UNEXPECTED, expected=expected, actual=self)

    def value_error(self) -> DerError:
        """An error for a malformed value with this tag."""
        return DerError(ErrorKind.VALUE, tag=self)

    def encoded_len(self) -> Length:
        """A tag always encodes as a single octet."""
        return Length.ONE

    def encode(self, writer: Any) -> None:
        writer.write_byte(self.octet())

    @classmethod
    def decode(cls, reader: Any) -> Tag:
        return cls.from_byte(reader.read_byte())

    def der_cmp(self, other: Tag) -> int:
        """Compare identifier octets: negative, zero or positive."""
        mine, theirs = self.octet(), other.octet()
        return (mine > theirs) - (mine < theirs)

    def _key(self) -> tuple[int, bool, int]:
        number = self._number.value if self._number is not None else -1
        return (_RANK[self._variant], self._constructed, number)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tag):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Tag):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        tag_class = _CLASSED_VARIANTS.get(self._variant)
        if tag_class is None:
            return _UNIVERSAL_DISPLAY[self._variant]
        field_type = "constructed" if self._constructed else "primitive"
        return f"{tag_class} [{self._number}] ({field_type})"

    def __repr__(self) -> str:
        return f"Tag(0x{self.octet():02x}: {self})"


for _name, _octet, _display in _UNIVERSAL_TAGS:
    setattr(Tag, _name, Tag(_name))