"""JSON and XML wire formats for book records.

Writes pick their format from the request's Content-Type, reads from the
Accept header. Every encoder returns the serialized body as bytes; pair it
with ``media_type(fmt)`` when building a response.
"""

import json
import xml.etree.ElementTree as ET
from typing import Any, Iterable, List, Optional

from book import FIELDS, Book
from errors import MalformedBodyError, UnsupportedFormatError
from validators import BookDraft, validate_draft

JSON = "json"
XML = "xml"

MEDIA_TYPES = {
    JSON: "application/json",
    XML: "application/xml",
}


def media_type(fmt: str) -> str:
    return MEDIA_TYPES[fmt]


# --- Negotiation ---
def negotiate_content_type(content_type: Optional[str]) -> str:
    """Format of a request body, from its Content-Type header.

    Raises UnsupportedFormatError for a missing or unrecognized header.
    """
    if content_type:
        if MEDIA_TYPES[JSON] in content_type:
            return JSON
        if MEDIA_TYPES[XML] in content_type:
            return XML
    raise UnsupportedFormatError()


def negotiate_accept(accept: Optional[str]) -> str:
    """Format of a response, from the Accept header. JSON unless XML is asked for."""
    if accept and MEDIA_TYPES[XML] in accept:
        return XML
    return JSON


# --- Decoding ---
def decode_book_draft(body: bytes, fmt: str) -> BookDraft:
    """Parse an add-book request body into a validated draft."""
    if fmt == XML:
        root = _parse_xml(body)
        if root.tag != "book":
            data: Any = None
        else:
            data = {name: _child_text(root, name) for name in ("title", "author", "year", "type")}
    else:
        data = _parse_json(body)
    return validate_draft(data)


def decode_catalog(body: bytes, fmt: str) -> List[Book]:
    """Inverse of encode_catalog."""
    try:
        if fmt == XML:
            root = _parse_xml(body)
            if root.tag != "books":
                raise MalformedBodyError("Expected a <books> document")
            return [
                Book.from_dict({name: _child_text(el, name) or "" for name in FIELDS})
                for el in root.findall("book")
            ]
        data = _parse_json(body)
        if not isinstance(data, list):
            raise MalformedBodyError("Expected a JSON array")
        return [Book.from_dict(item) for item in data]
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedBodyError(f"Invalid book record: {e}") from e


def _parse_json(body: bytes) -> Any:
    try:
        return json.loads(body)
    except (ValueError, UnicodeDecodeError) as e:
        raise MalformedBodyError("Invalid JSON") from e


def _parse_xml(body: bytes) -> ET.Element:
    try:
        return ET.fromstring(body)
    except ET.ParseError as e:
        raise MalformedBodyError("Invalid XML") from e


def _child_text(parent: ET.Element, tag: str) -> Optional[str]:
    el = parent.find(tag)
    if el is None:
        return None
    return el.text


# --- Encoding ---
def encode_book_response(status: str, message: str, book: Book, fmt: str) -> bytes:
    """Success envelope around a single book."""
    if fmt == XML:
        root = ET.Element("response")
        ET.SubElement(root, "status").text = status
        ET.SubElement(root, "message").text = message
        _book_element(root, book)
        return _xml_bytes(root)
    return _json_bytes({"status": status, "message": message, "book": book.to_dict()})


def encode_catalog(books: Iterable[Book], fmt: str) -> bytes:
    if fmt == XML:
        root = ET.Element("books")
        for book in books:
            _book_element(root, book)
        return _xml_bytes(root)
    return _json_bytes([book.to_dict() for book in books])


def encode_error(message: str, fmt: str) -> bytes:
    if fmt == XML:
        root = ET.Element("error")
        root.text = message
        return _xml_bytes(root)
    return _json_bytes({"error": message})


def _book_element(parent: ET.Element, book: Book) -> ET.Element:
    el = ET.SubElement(parent, "book")
    for name, value in book.to_dict().items():
        ET.SubElement(el, name).text = str(value)
    return el


def _xml_bytes(root: ET.Element) -> bytes:
    ET.indent(root, space="  ")
    return ET.tostring(root, encoding="utf-8", xml_declaration=True)


def _json_bytes(payload: Any) -> bytes:
    # Same serialization settings as starlette's JSONResponse
    return json.dumps(payload, ensure_ascii=False, allow_nan=False, separators=(",", ":")).encode("utf-8")
