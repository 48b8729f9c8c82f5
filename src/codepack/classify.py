"""
Binary/text classification of file heads.

Only the first :data:`LOOKAHEAD` bytes of a file are inspected. A NUL byte
means binary; otherwise the bytes are content-sniffed following the WHATWG
MIME sniffing rules and anything that is not a text, JSON or XML type counts
as binary.
"""

from __future__ import annotations

from typing import List, Tuple

LOOKAHEAD = 512
LARGE_FILE_THRESHOLD = 500 * 1024

TEXT_TYPES = ("application/json", "application/xml")

_WHITESPACE = b"\t\n\x0c\r "

# Tags that make a document sniff as HTML when followed by a space or ">".
_HTML_TAGS: List[bytes] = [
    b"<!DOCTYPE HTML", b"<HTML", b"<HEAD", b"<SCRIPT", b"<IFRAME", b"<H1",
    b"<DIV", b"<FONT", b"<TABLE", b"<A", b"<STYLE", b"<TITLE", b"<B",
    b"<BODY", b"<BR", b"<P", b"<!--",
]

# (mask, pattern, content type); a mask byte of 0xFF means "must equal".
_MASKED_SIGNATURES: List[Tuple[bytes, bytes, str]] = [
    (b"\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff\xff\xff\xff",
     b"RIFF\x00\x00\x00\x00WEBPVP", "image/webp"),
    (b"\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff",
     b"RIFF\x00\x00\x00\x00WAVE", "audio/wave"),
    (b"\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff",
     b"RIFF\x00\x00\x00\x00AVI ", "video/avi"),
    (b"\xff\xff\xff\xff\x00\x00\x00\x00\xff\xff\xff\xff",
     b"FORM\x00\x00\x00\x00AIFF", "audio/aiff"),
]

_EXACT_SIGNATURES: List[Tuple[bytes, str]] = [
    (b"%PDF-", "application/pdf"),
    (b"%!PS-Adobe-", "application/postscript"),
    (b"\xfe\xff", "text/plain; charset=utf-16be"),
    (b"\xff\xfe", "text/plain; charset=utf-16le"),
    (b"\xef\xbb\xbf", "text/plain; charset=utf-8"),
    (b"\x00\x00\x01\x00", "image/x-icon"),
    (b"\x00\x00\x02\x00", "image/x-icon"),
    (b"BM", "image/bmp"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"ID3", "audio/mpeg"),
    (b"OggS\x00", "application/ogg"),
    (b"MThd\x00\x00\x00\x06", "audio/midi"),
    (b"\x1a\x45\xdf\xa3", "video/webm"),
    (b"wOFF", "font/woff"),
    (b"wOF2", "font/woff2"),
    (b"OTTO", "font/otf"),
    (b"\x00\x01\x00\x00", "font/ttf"),
    (b"ttcf", "font/collection"),
    (b"\x1f\x8b\x08", "application/x-gzip"),
    (b"PK\x03\x04", "application/zip"),
    (b"Rar!\x1a\x07\x00", "application/x-rar-compressed"),
    (b"Rar!\x1a\x07\x01\x00", "application/x-rar-compressed"),
    (b"7z\xbc\xaf\x27\x1c", "application/x-7z-compressed"),
    (b"\x00asm", "application/wasm"),
]

# Control bytes that never occur in text; ESC (0x1B) is allowed.
_BINARY_BYTES = frozenset(
    list(range(0x00, 0x09)) + [0x0B] + list(range(0x0E, 0x1B)) + list(range(0x1C, 0x20))
)


def _is_html(data: bytes) -> bool:
    for tag in _HTML_TAGS:
        if len(data) <= len(tag):
            continue
        if data[: len(tag)].upper() == tag and data[len(tag)] in b" >":
            return True
    return False


def _masked_match(data: bytes, mask: bytes, pattern: bytes) -> bool:
    if len(data) < len(pattern):
        return False
    return all((data[i] & mask[i]) == pattern[i] for i in range(len(pattern)))


def _looks_like_mp4(data: bytes) -> bool:
    if len(data) < 12:
        return False
    box_size = int.from_bytes(data[:4], "big")
    if len(data) < box_size or box_size % 4 != 0 or data[4:8] != b"ftyp":
        return False
    for start in range(8, box_size, 4):
        if start == 12:
            continue
        if data[start:start + 3] == b"mp4":
            return True
    return False


def sniff_content_type(data: bytes) -> str:
    """Return the MIME type suggested by the leading bytes *data*."""
    data = data[:LOOKAHEAD]
    stripped = data.lstrip(_WHITESPACE)

    if _is_html(stripped):
        return "text/html; charset=utf-8"
    if stripped.startswith(b"<?xml"):
        return "text/xml; charset=utf-8"

    for signature, content_type in _EXACT_SIGNATURES:
        if data.startswith(signature):
            return content_type
    for mask, pattern, content_type in _MASKED_SIGNATURES:
        if _masked_match(data, mask, pattern):
            return content_type
    if _looks_like_mp4(data):
        return "video/mp4"

    if any(byte in _BINARY_BYTES for byte in data):
        return "application/octet-stream"
    return "text/plain; charset=utf-8"


def is_binary(head: bytes) -> bool:
    """Classify a file from its lookahead bytes."""
    if not head:
        return False
    if b"\x00" in head:
        return True
    media_type = sniff_content_type(head).split(";", 1)[0].strip()
    return not (media_type.startswith("text/") or media_type in TEXT_TYPES)
