"""Strict ASN.1 DER building blocks: errors, lengths, tags, headers, writers and UTC date-times."""

__version__ = "0.1.0"