import pytest

from derkit.errors import DerError, ErrorKind
from derkit.length import Length


class _FakeTag:
    def __init__(self, name):
        self.name = name

    def __str__(self):
        return self.name

    def __eq__(self, other):
        return isinstance(other, _FakeTag) and other.name == self.name

    def __hash__(self):
        return hash(self.name)


def test_simple_kind_message_without_position():
    err = DerError(ErrorKind.OVERFLOW)
    assert str(err) == "integer overflow"
    assert err.position is None


def test_message_includes_position():
    err = DerError(ErrorKind.FAILED, Length(7))
    assert str(err).startswith("operation failed at DER byte ")
    assert str(err).endswith(str(Length(7)))


def test_incomplete_expects_one_more_byte():
    err = DerError.incomplete(Length(5))
    assert err.kind is ErrorKind.INCOMPLETE
    assert err.actual_len == Length(5)
    assert err.expected_len == Length(5) + Length.ONE
    assert err.position == Length(5)


def test_incomplete_at_max_reports_overflow():
    err = DerError.incomplete(Length.MAX)
    assert err.kind is ErrorKind.OVERFLOW
    assert err.position == Length.MAX


def test_at_sets_position_and_keeps_details():
    base = DerError(ErrorKind.TAG_UNKNOWN, byte=0x1F)
    located = base.at(Length(3))
    assert located.position == Length(3)
    assert located.byte == base.byte
    assert located.kind is base.kind
    assert base.position is None


def test_nested_adds_offsets():
    err = DerError(ErrorKind.VALUE, Length(3), tag=_FakeTag("INTEGER"))
    nested = err.nested(Length(4))
    assert nested.position == Length(4) + Length(3)
    assert nested.tag == err.tag


def test_nested_without_position_uses_nested_offset():
    err = DerError(ErrorKind.OVERLENGTH)
    assert err.nested(Length(9)).position == Length(9)


def test_nested_overflow_drops_position():
    err = DerError(ErrorKind.OVERLENGTH, Length.MAX)
    assert err.nested(Length.ONE).position is None


def test_tag_unexpected_message_with_and_without_expected():
    with_expected = DerError(
        ErrorKind.TAG_UNEXPECTED, expected=_FakeTag("SEQUENCE"), actual=_FakeTag("BOOLEAN")
    )
    assert str(with_expected) == "unexpected ASN.1 DER tag: expected SEQUENCE, got BOOLEAN"
    without = DerError(ErrorKind.TAG_UNEXPECTED, actual=_FakeTag("BOOLEAN"))
    assert str(without) == "unexpected ASN.1 DER tag: got BOOLEAN"


def test_trailing_data_message():
    err = DerError(ErrorKind.TRAILING_DATA, decoded=Length(3), remaining=Length(1))
    assert str(err) == (
        "trailing data at end of DER message: decoded 3 bytes, 1 bytes remaining"
    )


def test_tag_related_messages():
    tag = _FakeTag("INTEGER")
    assert str(DerError(ErrorKind.LENGTH, tag=tag)) == "incorrect length for INTEGER"
    assert str(DerError(ErrorKind.NONCANONICAL, tag=tag)) == (
        "ASN.1 INTEGER not canonically encoded as DER"
    )
    assert str(DerError(ErrorKind.VALUE, tag=tag)) == "malformed ASN.1 DER value for INTEGER"


def test_equality_and_hash():
    first = DerError(ErrorKind.DATE_TIME, Length(2))
    second = DerError(ErrorKind.DATE_TIME, Length(2))
    assert first == second
    assert hash(first) == hash(second)
    assert first != DerError(ErrorKind.DATE_TIME, Length(1))


def test_is_raisable_and_catchable():
    located = DerError(ErrorKind.READER).at(Length(4))
    with pytest.raises(DerError) as info:
        raise located
    assert info.value.kind is ErrorKind.READER
    assert info.value.position == Length(4)
    assert str(info.value) == (
        "reader does not support the requested operation at DER byte 4"
    )