"""
SalesTrack Backend — Document Transport Codec
===============================================

What:  Converts the document to and from the blob-store transport encoding.
How:   Whole-document JSON, pretty-printed (indent 2, non-ASCII kept) so the
       stored file diffs cleanly, then base64 for the contents API.
"""

import base64
import binascii
import json

from salestrack.models.document import Document


def dump_document(document: Document) -> str:
    """Pretty-printed JSON text, newline-terminated."""
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


def load_document(text: str) -> Document:
    document = json.loads(text)
    if not isinstance(document, dict):
        raise ValueError("Stored document is not a JSON object")
    return document


def encode_document(document: Document) -> str:
    """Base64 of the UTF-8 pretty JSON, as an ASCII string."""
    return base64.b64encode(dump_document(document).encode("utf-8")).decode("ascii")


def decode_document(encoded: str) -> Document:
    """
    Inverse of encode_document().

    The contents API wraps base64 payloads at 60 columns, so whitespace is
    stripped before decoding.

    Raises:
        ValueError: payload is not base64 or not a JSON object.
    """
    compact = "".join(encoded.split())
    try:
        raw = base64.b64decode(compact, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 document payload: {e}") from e
    return load_document(raw.decode("utf-8"))
