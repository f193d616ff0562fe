"""Sinks for DER output: a fixed-capacity buffer writer and a stream adapter."""

from __future__ import annotations

import operator
from abc import ABC, abstractmethod
from typing import Any, BinaryIO, Callable

from derkit.errors import DerError, ErrorKind
from derkit.length import Length
from derkit.tag import Tag


class Writer(ABC):
    """Destination for DER-encoded bytes."""

    @abstractmethod
    def write(self, data: bytes) -> None:
        """Write the given encoded bytes."""

    def write_byte(self, byte: int) -> None:
        """Write a single byte."""
        self.write(bytes((byte,)))


class SliceWriter(Writer):
    """Writer into a buffer of fixed capacity.

    Once an encoding step fails the writer is marked as failed and refuses
    further work.
    """

    def __init__(self, capacity: Any) -> None:
        self._buffer = bytearray(operator.index(capacity))
        self._failed = False
        self._position = Length.ZERO

    def encode(self, value: Any) -> None:
        """Encode ``value`` (anything with an ``encode(writer)`` method)."""
        if self._failed:
            raise self.error(ErrorKind.FAILED)
        try:
            value.encode(self)
        except DerError as err:
            self._failed = True
            raise err.nested(self._position) from err

    def _fail(self, error: DerError) -> DerError:
        self._failed = True
        return error.at(self._position)

    def error(self, kind: ErrorKind) -> DerError:
        """Mark the writer failed and return an error of ``kind`` at the current position."""
        return self._fail(DerError(kind))

    def is_failed(self) -> bool:
        """Whether an encoding step has failed."""
        return self._failed

    def finish(self) -> bytes:
        """Return the bytes written so far."""
        if self._failed:
            raise DerError(ErrorKind.FAILED, self._position)
        end = int(self._position)
        if end > len(self._buffer):
            raise DerError(ErrorKind.OVERLENGTH, self._position)
        return bytes(self._buffer[:end])

    def sequence(self, length: Any, build: Callable[[SliceWriter], None]) -> None:
        """Write a ``SEQUENCE`` whose body ``build`` writes into a nested writer.

        The body must come to exactly ``length`` bytes.
        """
        try:
            length = Length(length)
        except DerError as err:
            raise DerError(ErrorKind.OVERFLOW) from err
        Tag.SEQUENCE.encode(self)
        length.encode(self)
        start = self._reserve(length)
        nested = SliceWriter(length)
        build(nested)
        body = nested.finish()
        if len(body) != int(length):
            raise self._fail(Tag.SEQUENCE.length_error())
        self._buffer[start : start + len(body)] = body

    def _reserve(self, size: Any) -> int:
        if self._failed:
            raise DerError(ErrorKind.FAILED, self._position)
        try:
            size = Length(size)
        except DerError as err:
            raise self.error(ErrorKind.OVERFLOW) from err
        try:
            end = self._position + size
        except DerError as err:
            raise self._fail(DerError(err.kind)) from err
        if int(end) > len(self._buffer):
            raise DerError(ErrorKind.OVERLENGTH, end)
        start = int(self._position)
        self._position = end
        return start

    def write(self, data: bytes) -> None:
        """Copy ``data`` into the buffer at the current position."""
        data = bytes(data)
        start = self._reserve(len(data))
        self._buffer[start : start + len(data)] = data


class StreamWriter(Writer):
    """Writer that forwards encoded bytes to a binary stream."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def write(self, data: bytes) -> None:
        """Write ``data`` to the stream, reporting I/O failures as ``DerError``."""
        try:
            self._stream.write(bytes(data))
        except FileNotFoundError as exc:
            raise DerError(ErrorKind.FILE_NOT_FOUND) from exc
        except PermissionError as exc:
            raise DerError(ErrorKind.PERMISSION_DENIED) from exc
        except OSError as exc:
            raise DerError(ErrorKind.IO, message=str(exc)) from exc