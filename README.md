# derkit

derkit is a small, strict toolkit of building blocks for ASN.1 DER (Distinguished Encoding Rules). It deals with the tag and length parts of tag–length–value data, writes DER output, and handles UTC calendar times. It follows the canonical-encoding rules of X.690 and caps every length at 256 MiB.

## Modules

- `derkit.errors`: `ErrorKind`, an enum of failure kinds, and `DerError`, the exception that every failure raises. A `DerError` has a `kind`, an optional byte `position`, and detail fields such as `tag`, `expected_len` or `remaining`. `DerError.incomplete(n)` builds an "incomplete" error that expects one byte more than `n`. `at()` returns a copy placed at a given position, and `nested()` returns a copy whose position is shifted by an offset.
- `derkit.length`: `Length`, a length from 0 to `Length.MAX` (`0xFFFFFFF`). Addition and subtraction are checked and raise an `OVERFLOW` error when the result leaves that range. `saturating_add` and `saturating_sub` clamp instead. It also provides `encoded_len`, `for_tlv`, `encode`, `to_der`, `decode`, `from_der` and `der_cmp`. Decoding rejects the indefinite form (`0x80`), forms longer than four octets, and non-minimal encodings.
- `derkit.tag`: `Class`, `TagMode` (with `TagMode.parse`), `TagNumber` (0 to 30, with constants `TagNumber.N0` to `TagNumber.N30`) and `Tag`. `Tag` offers the universal tags as class attributes (`Tag.BOOLEAN`, `Tag.INTEGER`, `Tag.SEQUENCE`, `Tag.UTC_TIME` and others). It builds application, context-specific and private tags from a `TagNumber`, and parses identifier octets with `Tag.from_byte`.
- `derkit.writer`: the abstract `Writer` and two writers:
  - `SliceWriter` writes into a buffer of fixed capacity. After a failure it refuses further work. Its `sequence()` method writes a `SEQUENCE` whose body must be exactly the stated length.
  - `StreamWriter` forwards bytes to a binary stream and reports I/O failures as `DerError`.
- `derkit.encoding`: the base classes `Encode` and `EncodeValue`. `Encode` provides `encode_to_slice` and `to_der`. `EncodeValue` derives the header, encoded length, encoding and `der_cmp` from a `TAG`, `value_len` and `encode_value`. The module also has `ValueOrd`, the delegating wrappers `EncodeRef` and `EncodeValueRef`, `Header` (a tag and a length) and `iter_cmp`.
- `derkit.date_time`: `DateTime`, a Z-normalised calendar time from 1970 up to 9999-12-31T23:59:59Z. It converts to and from a duration since the Unix epoch and to and from `datetime`. It parses and prints `YYYY-MM-DDTHH:MM:SSZ`. The module also has the two-digit helpers `decode_decimal` and `encode_decimal`.

## Examples

Lengths:

```python
from derkit.errors import DerError, ErrorKind
from derkit.length import Length

assert Length.from_der(bytes([0x82, 0x01, 0x00])) == Length(0x100)
assert Length(0x80).to_der() == bytes([0x81, 0x80])

try:
    Length.MAX + Length.ONE
except DerError as err:
    assert err.kind is ErrorKind.OVERFLOW
```

Tags:

```python
from derkit.tag import Tag, TagNumber

assert Tag.from_byte(0x30) == Tag.SEQUENCE
assert repr(Tag.SEQUENCE) == "Tag(0x30: SEQUENCE)"

explicit = TagNumber(3).context_specific(True)
assert explicit.octet() == 0xA3
assert str(explicit) == "CONTEXT-SPECIFIC [3] (constructed)"
```

A type of your own:

```python
from derkit.encoding import EncodeValue, Header
from derkit.length import Length
from derkit.tag import Tag
from derkit.writer import SliceWriter


class Boolean(EncodeValue):
    TAG = Tag.BOOLEAN

    def __init__(self, value: bool) -> None:
        self.value = value

    def value_len(self) -> Length:
        return Length.ONE

    def encode_value(self, writer) -> None:
        writer.write_byte(0xFF if self.value else 0x00)


assert Boolean(True).to_der() == bytes([0x01, 0x01, 0xFF])
assert Header(Tag.INTEGER, 1).to_der() == bytes([0x02, 0x01])

writer = SliceWriter(4)
writer.sequence(2, lambda body: body.encode(Header(Tag.NULL, 0)))
assert writer.finish() == bytes([0x30, 0x02, 0x05, 0x00])
```

A writer without room reports where it ran out:

```python
from derkit.errors import DerError, ErrorKind
from derkit.length import Length

try:
    SliceWriter(0).encode(Boolean(False))
except DerError as err:
    assert err.kind is ErrorKind.OVERLENGTH
    assert err.position == Length(1)
```

Dates and times:

```python
from derkit.date_time import DateTime

moment = DateTime.parse("2001-01-02T12:13:14Z")
assert (moment.year, moment.month, moment.day) == (2001, 1, 2)
assert str(moment) == "2001-01-02T12:13:14Z"
assert DateTime.from_unix_duration(moment.unix_duration()) == moment
```

## What it does not do

derkit provides the pieces of a DER codec, not the whole of one:

- There is no reader type over byte input. `Length.from_der` decodes a standalone length. `Tag.decode`, `Length.decode` and `Header.decode` accept any object with a `read_byte()` method that you supply.
- There are no value types for ASN.1 strings, `UTCTime`, `INTEGER` or other universal types. Write them yourself as `EncodeValue` subclasses.
- There is no storage for whole DER documents: nothing reads them from files or writes them to files.

## Tests

The test suite uses pytest and hypothesis, both listed under the `test` extra.