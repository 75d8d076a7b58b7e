"""Reading and writing Motorola S-record files."""

from __future__ import annotations

from .elements import ImageElement, append_contiguous, compact_elements
from .errors import ImageFormatError

_MASK32 = 0xFFFFFFFF
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_WHITESPACE = frozenset(" \t\n\r\v\f")

_DATA_ADDRESS_BYTES = {"1": 2, "2": 3, "3": 4}
# Allowed byte counts of termination records and the address bytes they carry.
_TERMINATOR_LAYOUTS = {"7": {5: 4}, "8": {4: 3}, "9": {3: 2, 4: 3}}

_NOT_S19 = "Not in Motorola S19 format!"
_CHECKSUM = "Checksum error!"

_RECORD_BYTES = 32


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

    def hex(self, width: int) -> int | None:
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
            return None
        return int(text[start:self._pos], 16)


def _byte_sum(value: int, nbytes: int) -> int:
    return sum((value >> (8 * shift)) & 0xFF for shift in range(nbytes))


def _field(scan: _Scanner, width: int, lineno: int) -> int:
    value = scan.hex(width)
    if value is None:
        raise ImageFormatError(_NOT_S19, lineno)
    return value


def _check(checksum: int, total: int, lineno: int) -> None:
    if (checksum + total + 1) % 256 != 0:
        raise ImageFormatError(_CHECKSUM, lineno)


def _parse_record(scan: _Scanner, kind: str, lineno: int, elements: list) -> bool:
    """Parse the record after its ``S`` header; return True at a terminator."""
    if kind == "0":
        count = _field(scan, 2, lineno)
        for _ in range(count):
            _field(scan, 2, lineno)
        return False

    if kind in _DATA_ADDRESS_BYTES:
        address_bytes = _DATA_ADDRESS_BYTES[kind]
        count = _field(scan, 2, lineno)
        if count < address_bytes + 1:
            raise ImageFormatError(f"S{kind} line 'byte count' error!", lineno)
        address = _field(scan, 2 * address_bytes, lineno)
        data = bytes(_field(scan, 2, lineno) for _ in range(count - address_bytes - 1))
        total = count + _byte_sum(address, address_bytes) + sum(data)
        _check(_field(scan, 2, lineno), total, lineno)
        append_contiguous(elements, ImageElement(address, data))
        return False

    if kind == "5":
        count = _field(scan, 2, lineno)
        if count != 3:
            raise ImageFormatError("S5 line 'byte count' error!", lineno)
        lines = _field(scan, 4, lineno)
        _check(_field(scan, 2, lineno), count + _byte_sum(lines, 2), lineno)
        return False

    if kind in _TERMINATOR_LAYOUTS:
        count = _field(scan, 2, lineno)
        address_bytes = _TERMINATOR_LAYOUTS[kind].get(count)
        if address_bytes is None:
            raise ImageFormatError(f"S{kind} line 'byte count' error!", lineno)
        address = _field(scan, 2 * address_bytes, lineno)
        _check(_field(scan, 2, lineno), count + _byte_sum(address, address_bytes), lineno)
        return True

    raise ImageFormatError(_NOT_S19, lineno)


def parse_srecords(text) -> list[ImageElement]:
    """Parse S-record text into sorted, merged elements.

    Raises ImageFormatError on a malformed record or a bad checksum.
    """
    scan = _Scanner(text.replace("\r\n", "\n"))
    elements: list[ImageElement] = []
    lineno = 1
    while True:
        c = scan.char()
        if c is None:
            break
        if c == "S":
            if _parse_record(scan, scan.char() or "", lineno, elements):
                break
        elif c in "\r\n":
            lineno += 1
        elif c == " ":
            continue
        else:
            raise ImageFormatError(_NOT_S19, lineno)
    return compact_elements(elements)


def format_srecords(elements) -> str:
    """Render elements as S-record text with a matching termination record.

    The record type (S1, S2 or S3) is chosen from the highest address used.
    """
    populated = [element for element in elements if len(element.data)]
    max_address = max(
        ((element.end() - 1) & _MASK32 for element in populated), default=0
    )
    if max_address > 0xFFFFFF:
        kind, address_bytes, terminator = "3", 4, "S70500000000FA\n"
    elif max_address > 0xFFFF:
        kind, address_bytes, terminator = "2", 3, "S804000000FB\n"
    else:
        kind, address_bytes, terminator = "1", 2, "S9030000FC\n"

    lines: list[str] = []
    for element in populated:
        for offset in range(0, len(element.data), _RECORD_BYTES):
            chunk = element.data[offset:offset + _RECORD_BYTES]
            first = (element.address + offset) & _MASK32
            address = first & ((1 << (8 * address_bytes)) - 1)
            count = len(chunk) + address_bytes + 1
            total = count + _byte_sum(address, address_bytes) + sum(chunk)
            checksum = ~total & 0xFF
            lines.append(
                f"S{kind}{count:02X}{address:0{2 * address_bytes}X}"
                f"{chunk.hex().upper()}{checksum:02X}\n"
            )
    lines.append(terminator)
    return "".join(lines)