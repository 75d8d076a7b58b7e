"""Reading and writing Intel HEX files."""

from __future__ import annotations

from .elements import ImageElement, append_contiguous, compact_elements
from .errors import ImageFormatError

_MASK32 = 0xFFFFFFFF
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_WHITESPACE = frozenset(" \t\n\r\v\f")

_NOT_HEX = "Not in Intel Hex format!"
_CHECKSUM = "Bad hexadecimal checksum!"

_RECORD_BYTES = 32
_RECORDS_PER_EXTENDED = 0x100

_DATA = 0x00
_END_OF_FILE = 0x01
_EXTENDED_SEGMENT = 0x02
_START_SEGMENT = 0x03
_EXTENDED_LINEAR = 0x04
_START_LINEAR = 0x05


class _Scanner:
    """Reads single characters and whitespace-prefixed hex fields."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0

    def char(self) -> str | None:
        if self._pos >= len(self._text):
            return None
        c = self._text[self._pos]
        self._pos += 1
        return c

    def hex(self, width: int, lineno: int) -> int:
        text = self._text
        while self._pos < len(text) and text[self._pos] in _WHITESPACE:
            self._pos += 1
        start = self._pos
        while (
            self._pos < len(text)
            and self._pos - start < width
            and text[self._pos] in _HEX_DIGITS
        ):
            self._pos += 1
        if self._pos == start:
            raise ImageFormatError(_NOT_HEX, lineno)
        return int(text[start:self._pos], 16)


def _word_sum(value: int) -> int:
    return (value >> 8) + (value & 0xFF)


def _check(checksum: int, total: int, lineno: int) -> None:
    if (checksum + total) % 256 != 0:
        raise ImageFormatError(_CHECKSUM, lineno)


def parse_intel_hex(text) -> list[ImageElement]:
    """Parse Intel HEX text into sorted, merged elements.

    Parsing stops at an end-of-file record or at the end of the text.
    Raises ImageFormatError on a malformed record or a bad checksum.
    """
    scan = _Scanner(text.replace("\r\n", "\n"))
    elements: list[ImageElement] = []
    lineno = 1
    base_address = 0
    extended_address = 0
    while True:
        c = scan.char()
        if c is None:
            break
        if c == ":":
            count = scan.hex(2, lineno)
            address = scan.hex(4, lineno)
            kind = scan.hex(2, lineno)
            total = count + _word_sum(address) + kind
            if kind == _DATA:
                data = bytes(scan.hex(2, lineno) for _ in range(count))
                total += sum(data)
                _check(scan.hex(2, lineno), total, lineno)
                target = ((extended_address << 16) + (base_address << 4) + address) & _MASK32
                append_contiguous(elements, ImageElement(target, data))
            elif kind == _END_OF_FILE:
                _check(scan.hex(2, lineno), total, lineno)
                break
            elif kind == _EXTENDED_SEGMENT:
                base_address = scan.hex(4, lineno)
                _check(scan.hex(2, lineno), total + _word_sum(base_address), lineno)
            elif kind == _EXTENDED_LINEAR:
                extended_address = scan.hex(4, lineno)
                _check(scan.hex(2, lineno), total + _word_sum(extended_address), lineno)
            elif kind in (_START_SEGMENT, _START_LINEAR):
                total += sum(scan.hex(2, lineno) for _ in range(count))
                _check(scan.hex(2, lineno), total, lineno)
            else:
                raise ImageFormatError(_NOT_HEX, lineno)
        elif c in "\r\n":
            lineno += 1
        elif c == " ":
            continue
        else:
            raise ImageFormatError(_NOT_HEX, lineno)
    return compact_elements(elements)


def _record(address: int, kind: int, payload: bytes) -> str:
    total = len(payload) + _word_sum(address) + kind + sum(payload)
    checksum = -total & 0xFF
    return f":{len(payload):02X}{address:04X}{kind:02X}{payload.hex().upper()}{checksum:02X}\n"


def format_intel_hex(elements) -> str:
    """Render elements as Intel HEX data records.

    Each element starts with an extended linear address record, repeated
    every 256 data records and whenever the upper 16 address bits change.
    Data records carry at most 32 bytes. No end-of-file record is written.
    """
    lines: list[str] = []
    for element in elements:
        data = bytes(element.data)
        current_extended = None
        records_since_extended = 0
        offset = 0
        while offset < len(data):
            address = (element.address + offset) & _MASK32
            extended = address >> 16
            if extended != current_extended or records_since_extended == _RECORDS_PER_EXTENDED:
                lines.append(_record(0, _EXTENDED_LINEAR, extended.to_bytes(2, "big")))
                current_extended = extended
                records_since_extended = 0
            low = address & 0xFFFF
            length = min(_RECORD_BYTES, len(data) - offset, 0x10000 - low)
            lines.append(_record(low, _DATA, data[offset:offset + length]))
            offset += length
            records_since_extended += 1
    return "".join(lines)