"""Error kinds and the exception raised for DER encoding and decoding failures."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(Enum):
    """Kinds of failure reported by the DER codec."""

    DATE_TIME = "date/time error"
    FAILED = "operation failed"
    FILE_NOT_FOUND = "file not found"
    INCOMPLETE = "ASN.1 DER message is incomplete"
    IO = "I/O error"
    LENGTH = "incorrect length"
    NONCANONICAL = "not canonically encoded as DER"
    OID_MALFORMED = "malformed OID"
    SET_ORDERING = "SET OF ordering error"
    OVERFLOW = "integer overflow"
    OVERLENGTH = "ASN.1 DER message is too long"
    PERMISSION_DENIED = "permission denied"
    READER = "reader does not support the requested operation"
    TAG_MODE_UNKNOWN = "unknown tag mode"
    TAG_NUMBER_INVALID = "invalid tag number"
    TAG_UNEXPECTED = "unexpected ASN.1 DER tag"
    TAG_UNKNOWN = "unknown/unsupported ASN.1 DER tag"
    TRAILING_DATA = "trailing data at end of DER message"
    UTF8 = "invalid UTF-8"
    VALUE = "malformed ASN.1 DER value"


_DETAIL_FIELDS = (
    "tag",
    "expected",
    "actual",
    "byte",
    "expected_len",
    "actual_len",
    "decoded",
    "remaining",
    "message",
)


class DerError(Exception):
    """A DER failure of a given kind, optionally located at a byte position."""

    def __init__(
        self,
        kind: ErrorKind,
        position: Any = None,
        *,
        tag: Any = None,
        expected: Any = None,
        actual: Any = None,
        byte: int | None = None,
        expected_len: Any = None,
        actual_len: Any = None,
        decoded: Any = None,
        remaining: Any = None,
        message: str | None = None,
    ) -> None:
        self.kind = kind
        self.position = position
        self.tag = tag
        self.expected = expected
        self.actual = actual
        self.byte = byte
        self.expected_len = expected_len
        self.actual_len = actual_len
        self.decoded = decoded
        self.remaining = remaining
        self.message = message
        super().__init__(str(self))

    @classmethod
    def incomplete(cls, actual_len: Any) -> DerError:
        """Build an INCOMPLETE error expecting one byte more than ``actual_len``."""
        try:
            expected_len = actual_len + 1
        except DerError as err:
            return cls(err.kind, actual_len)
        return cls(
            ErrorKind.INCOMPLETE,
            actual_len,
            expected_len=expected_len,
            actual_len=actual_len,
        )

    def _details(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in _DETAIL_FIELDS}

    def at(self, position: Any) -> DerError:
        """Return a copy of this error located at ``position``."""
        return DerError(self.kind, position, **self._details())

    def nested(self, nested_position: Any) -> DerError:
        """Return a copy whose position is offset by where a nested message starts."""
        try:
            position = nested_position + (self.position if self.position is not None else 0)
        except DerError:
            position = None
        return DerError(self.kind, position, **self._details())

    def _describe(self) -> str:
        kind = self.kind
        if kind is ErrorKind.INCOMPLETE:
            return (
                f"ASN.1 DER message is incomplete: expected {self.expected_len}, "
                f"actual {self.actual_len}"
            )
        if kind is ErrorKind.IO:
            return f"I/O error: {self.message}"
        if kind is ErrorKind.LENGTH:
            return f"incorrect length for {self.tag}"
        if kind is ErrorKind.NONCANONICAL:
            return f"ASN.1 {self.tag} not canonically encoded as DER"
        if kind is ErrorKind.TAG_UNEXPECTED:
            text = "unexpected ASN.1 DER tag: "
            if self.expected is not None:
                text += f"expected {self.expected}, "
            return text + f"got {self.actual}"
        if kind is ErrorKind.TAG_UNKNOWN:
            return f"unknown/unsupported ASN.1 DER tag: 0x{self.byte:02x}"
        if kind is ErrorKind.TRAILING_DATA:
            return (
                "trailing data at end of DER message: "
                f"decoded {self.decoded} bytes, {self.remaining} bytes remaining"
            )
        if kind is ErrorKind.UTF8:
            return self.message if self.message is not None else kind.value
        if kind is ErrorKind.VALUE:
            return f"malformed ASN.1 DER value for {self.tag}"
        return kind.value

    def __str__(self) -> str:
        text = self._describe()
        if self.position is not None:
            text += f" at DER byte {self.position}"
        return text

    def __repr__(self) -> str:
        return f"DerError({self.kind.name}, position={self.position!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DerError):
            return NotImplemented
        return (
            self.kind is other.kind
            and self.position == other.position
            and self._details() == other._details()
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.position, tuple(self._details().values())))