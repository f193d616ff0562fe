import io

import pytest

from derkit.errors import DerError, ErrorKind
from derkit.length import Length
from derkit.tag import Tag
from derkit.writer import SliceWriter, StreamWriter, Writer


class _Collector(Writer):
    def __init__(self):
        self.chunks = []

    def write(self, data):
        self.chunks.append(bytes(data))


class _Failing:
    def encode(self, writer):
        writer.write(b"\x01")
        raise DerError(ErrorKind.VALUE)


def test_overlength_message():
    writer = SliceWriter(0)
    with pytest.raises(DerError) as info:
        Tag.BOOLEAN.encode(writer)
    assert info.value.kind is ErrorKind.OVERLENGTH
    assert info.value.position == Length.ONE


def test_overlength_does_not_mark_failed():
    writer = SliceWriter(1)
    with pytest.raises(DerError):
        writer.write(b"ab")
    assert writer.is_failed() is False
    writer.write(b"a")
    assert writer.finish() == b"a"


def test_write_and_finish():
    writer = SliceWriter(4)
    writer.write(b"\x01\x02")
    writer.write_byte(3)
    assert writer.finish() == b"\x01\x02\x03"


def test_default_write_byte_delegates_to_write():
    sink = _Collector()
    Writer.write_byte(sink, 0x2A)
    assert sink.chunks == [b"\x2a"]


def test_encode_value():
    writer = SliceWriter(2)
    writer.encode(Tag.NULL)
    assert writer.finish() == bytes([Tag.NULL.octet()])


def test_encode_failure_marks_failed_and_nests_position():
    writer = SliceWriter(8)
    with pytest.raises(DerError) as info:
        writer.encode(_Failing())
    assert info.value.kind is ErrorKind.VALUE
    assert info.value.position == Length(1)
    assert writer.is_failed() is True
    with pytest.raises(DerError) as finished:
        writer.finish()
    assert finished.value.kind is ErrorKind.FAILED


def test_encode_after_failure_is_refused():
    writer = SliceWriter(8)
    writer.error(ErrorKind.VALUE)
    with pytest.raises(DerError) as info:
        writer.encode(Tag.NULL)
    assert info.value.kind is ErrorKind.FAILED


def test_error_reports_position_and_marks_failed():
    writer = SliceWriter(4)
    writer.write(b"xy")
    err = writer.error(ErrorKind.OVERFLOW)
    assert err.kind is ErrorKind.OVERFLOW
    assert err.position == Length(2)
    assert writer.is_failed() is True


def test_write_after_failure_raises_failed():
    writer = SliceWriter(4)
    writer.error(ErrorKind.VALUE)
    with pytest.raises(DerError) as info:
        writer.write(b"a")
    assert info.value.kind is ErrorKind.FAILED


def test_sequence_writes_header_and_body():
    writer = SliceWriter(16)
    writer.sequence(2, lambda nested: nested.write(b"\x05\x00"))
    out = writer.finish()
    assert out[0] == Tag.SEQUENCE.octet()
    assert out[1:2] == Length(2).to_der()
    assert out[2:] == b"\x05\x00"


def test_sequence_with_short_body_is_length_error():
    writer = SliceWriter(16)
    with pytest.raises(DerError) as info:
        writer.sequence(2, lambda nested: nested.write(b"\x05"))
    assert info.value.kind is ErrorKind.LENGTH
    assert info.value.tag == Tag.SEQUENCE
    assert writer.is_failed() is True


def test_sequence_with_long_body_overflows_nested_writer():
    writer = SliceWriter(16)
    with pytest.raises(DerError) as info:
        writer.sequence(1, lambda nested: nested.write(b"\x05\x00"))
    assert info.value.kind is ErrorKind.OVERLENGTH


def test_sequence_rejects_oversized_length():
    writer = SliceWriter(16)
    with pytest.raises(DerError) as info:
        writer.sequence(Length.MAX.value + 1, lambda nested: None)
    assert info.value.kind is ErrorKind.OVERFLOW


def test_stream_writer_forwards_bytes():
    stream = io.BytesIO()
    writer = StreamWriter(stream)
    writer.write(b"ab")
    writer.write_byte(0x63)
    assert stream.getvalue() == b"abc"


class _BrokenStream:
    def __init__(self, exc):
        self.exc = exc

    def write(self, data):
        raise self.exc


@pytest.mark.parametrize(
    "exc, kind",
    [
        (FileNotFoundError("gone"), ErrorKind.FILE_NOT_FOUND),
        (PermissionError("denied"), ErrorKind.PERMISSION_DENIED),
        (OSError("disk trouble"), ErrorKind.IO),
    ],
)
def test_stream_writer_maps_os_errors(exc, kind):
    writer = StreamWriter(_BrokenStream(exc))
    with pytest.raises(DerError) as info:
        writer.write(b"a")
    assert info.value.kind is kind