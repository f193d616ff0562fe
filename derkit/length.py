"""ASN.1 DER length values, limited to 256 MiB."""

from __future__ import annotations

import operator
from dataclasses import dataclass
from typing import Any, ClassVar

from derkit.errors import DerError, ErrorKind

_MAX_VALUE = 0xFFF_FFFF


def _overflow() -> DerError:
    return DerError(ErrorKind.OVERFLOW)


@dataclass(frozen=True, order=True)
class Length:
    """A non-negative length no greater than ``Length.MAX``."""

    value: int

    ZERO: ClassVar[Length]
    ONE: ClassVar[Length]
    MAX: ClassVar[Length]

    def __post_init__(self) -> None:
        try:
            number = operator.index(self.value)
        except TypeError as exc:
            raise _overflow() from exc
        if not 0 <= number <= _MAX_VALUE:
            raise _overflow()
        object.__setattr__(self, "value", number)

    def __int__(self) -> int:
        return self.value

    def __index__(self) -> int:
        return self.value

    @staticmethod
    def _operand(other: Any) -> int | None:
        if isinstance(other, Length):
            return other.value
        if isinstance(other, int) and not isinstance(other, bool):
            return Length(other).value
        return None

    def __add__(self, other: Any) -> Length:
        operand = self._operand(other)
        if operand is None:
            return NotImplemented
        return Length(self.value + operand)

    __radd__ = __add__

    def __sub__(self, other: Any) -> Length:
        operand = self._operand(other)
        if operand is None:
            return NotImplemented
        return Length(self.value - operand)

    def __rsub__(self, other: Any) -> Length:
        operand = self._operand(other)
        if operand is None:
            return NotImplemented
        return Length(operand - self.value)

    def __str__(self) -> str:
        return str(self.value)

    def is_zero(self) -> bool:
        """Whether this length is zero."""
        return self.value == 0

    def for_tlv(self) -> Length:
        """Total length of a TLV whose value part has this length."""
        return Length.ONE + self.encoded_len() + self

    def saturating_add(self, other: Any) -> Length:
        """Add, clamping at ``Length.MAX``."""
        return Length(min(self.value + int(other), _MAX_VALUE))

    def saturating_sub(self, other: Any) -> Length:
        """Subtract, clamping at zero."""
        return Length(max(self.value - int(other), 0))

    def _initial_octet(self) -> int | None:
        if self.value < 0x80:
            return None
        if self.value <= 0xFF:
            return 0x81
        if self.value <= 0xFFFF:
            return 0x82
        if self.value <= 0xFF_FFFF:
            return 0x83
        return 0x84

    def encoded_len(self) -> Length:
        """Number of octets in the DER encoding of this length."""
        octet = self._initial_octet()
        return Length(1 if octet is None else octet - 0x80 + 1)

    def encode(self, writer: Any) -> None:
        """Write the DER encoding of this length to ``writer``."""
        octet = self._initial_octet()
        if octet is None:
            writer.write_byte(self.value)
            return
        writer.write_byte(octet)
        writer.write(self.value.to_bytes(octet - 0x80, "big"))

    def to_der(self) -> bytes:
        """Return the DER encoding of this length."""
        sink = _ByteSink()
        self.encode(sink)
        data = bytes(sink.buffer)
        expected = self.encoded_len()
        if len(data) != expected.value:
            raise DerError(
                ErrorKind.INCOMPLETE, expected_len=expected, actual_len=Length(len(data))
            )
        return data

    @classmethod
    def decode(cls, reader: Any) -> Length:
        """Read a DER length from ``reader``."""
        first = reader.read_byte()
        if first < 0x80:
            return cls(first)
        if 0x81 <= first <= 0x84:
            decoded = 0
            for _ in range(first - 0x80):
                decoded = (decoded << 8) | reader.read_byte()
            length = cls(decoded)
            if length._initial_octet() != first:
                raise DerError(ErrorKind.OVERLENGTH)
            return length
        # 0x80 is the indefinite form, which DER forbids; longer forms are unsupported.
        raise DerError(ErrorKind.OVERLENGTH)

    @classmethod
    def from_der(cls, data: bytes) -> Length:
        """Decode a length from exactly the bytes in ``data``."""
        cursor = _ByteCursor(data)
        result = cls.decode(cursor)
        cursor.finish()
        return result

    def der_cmp(self, other: Length) -> int:
        """Compare DER encodings: negative, zero or positive."""
        mine, theirs = self.to_der(), other.to_der()
        return (mine > theirs) - (mine < theirs)


Length.ZERO = Length(0)
Length.ONE = Length(1)
Length.MAX = Length(_MAX_VALUE)


class _ByteSink:
    def __init__(self) -> None:
        self.buffer = bytearray()

    def write(self, data: bytes) -> None:
        self.buffer.extend(data)

    def write_byte(self, byte: int) -> None:
        self.buffer.append(byte)


class _ByteCursor:
    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._input_len = Length(len(self._data))
        self._position = 0

    def read_byte(self) -> int:
        if self._position >= len(self._data):
            raise DerError(
                ErrorKind.INCOMPLETE,
                Length(self._position),
                expected_len=Length(self._position + 1),
                actual_len=self._input_len,
            )
        byte = self._data[self._position]
        self._position += 1
        return byte

    def finish(self) -> None:
        remaining = len(self._data) - self._position
        if remaining:
            position = Length(self._position)
            raise DerError(
                ErrorKind.TRAILING_DATA,
                position,
                decoded=position,
                remaining=Length(remaining),
            )