"""Firmware images: address-tagged byte runs for one alternate setting."""

from __future__ import annotations

import os

from .elements import ImageElement, compact_elements
from .errors import DfuseError, PrtErrorCode
from .intelhex import format_intel_hex, parse_intel_hex
from .mapping import Mapping, Operation, SectorAttribute
from .srecord import format_srecords, parse_srecords

_S19 = ".S19"
_HEX = ".HEX"


def _extension(path) -> str:
    return os.path.splitext(os.fspath(path))[1].upper()


def _all_ff(data) -> bool:
    return all(byte == 0xFF for byte in data)


def _overlap(element: ImageElement, start: int, end: int) -> tuple[int, int] | None:
    lo = max(element.address, start)
    hi = min(element.end(), end)
    if element.address >= end or element.end() <= start:
        return None
    return lo, hi


class Image:
    """An ordered list of image elements targeting one alternate setting."""

    def __init__(self, alternate=0, name=None):
        self.alternate = alternate
        self.name = name
        self.elements: list[ImageElement] = []

    def __len__(self) -> int:
        return len(self.elements)

    def __iter__(self):
        return iter(self.elements)

    @classmethod
    def from_mapping(cls, mapping: Mapping, name=None) -> Image:
        """Build an image with one 0xFF-filled element per usable sector."""
        image = cls(mapping.alternate, name)
        image.elements = [
            ImageElement(sector.start_address, b"\xff" * sector.size)
            for sector in mapping.usable_sectors()
        ]
        return image

    @classmethod
    def load(cls, alternate, path, name=None) -> Image:
        """Load an image from a ``.s19`` or ``.hex`` file.

        Raises DfuseError for an unknown extension and ImageFormatError
        for a malformed file.
        """
        extension = _extension(path)
        if extension == _S19:
            parser = parse_srecords
        elif extension == _HEX:
            parser = parse_intel_hex
        else:
            raise DfuseError(
                f"unsupported file extension: {extension or '(none)'}",
                PrtErrorCode.BAD_PARAMETER,
            )
        with open(path, "r") as handle:
            text = handle.read()
        image = cls(alternate, name)
        image.elements = parser(text)
        return image

    def copy(self) -> Image:
        """Return an independent copy of this image."""
        image = Image(self.alternate, self.name)
        image.elements = [ImageElement(e.address, e.data) for e in self.elements]
        return image

    def dump_to_file(self, path) -> None:
        """Write the image to a ``.s19`` or ``.hex`` file."""
        extension = _extension(path)
        if extension == _S19:
            text = format_srecords(self.elements)
        elif extension == _HEX:
            text = format_intel_hex(self.elements)
        else:
            raise DfuseError(
                f"unsupported file extension: {extension or '(none)'}",
                PrtErrorCode.BAD_PARAMETER,
            )
        with open(path, "w") as handle:
            handle.write(text)

    def get_buffer(self, address, size) -> bytes | None:
        """Return ``size`` bytes starting at ``address``.

        Bytes not covered by any element are 0xFF. Where elements overlap,
        the earlier element wins. Returns None if no element touches the range.
        """
        end = address + size
        buffer: bytearray | None = None
        for element in reversed(self.elements):
            span = _overlap(element, address, end)
            if span is None:
                continue
            if buffer is None:
                buffer = bytearray(b"\xff" * size)
            lo, hi = span
            buffer[lo - address:hi - address] = element.data[
                lo - element.address:hi - element.address
            ]
        return None if buffer is None else bytes(buffer)

    def set_element(self, rank, element, insert=True) -> None:
        """Insert a copy of ``element`` at ``rank``, or replace the one there."""
        copy = ImageElement(element.address, element.data)
        if insert:
            if not 0 <= rank <= len(self.elements):
                raise IndexError(f"element rank {rank} out of range")
            self.elements.insert(rank, copy)
        else:
            if not 0 <= rank < len(self.elements):
                raise IndexError(f"element rank {rank} out of range")
            self.elements[rank] = copy

    def get_element(self, rank) -> ImageElement:
        """Return a copy of the element at ``rank``."""
        if not 0 <= rank < len(self.elements):
            raise IndexError(f"element rank {rank} out of range")
        element = self.elements[rank]
        return ImageElement(element.address, element.data)

    def remove_element(self, rank) -> None:
        """Remove the element at ``rank``."""
        if not 0 <= rank < len(self.elements):
            raise IndexError(f"element rank {rank} out of range")
        del self.elements[rank]

    def filter_for_operation(self, mapping, operation, truncate_lead_ff=False) -> None:
        """Reshape the elements to the sectors that ``operation`` may touch.

        For an erase, each erasable sector holding data becomes an empty
        element at the sector start. Otherwise each element is cut along
        the eligible sectors; with ``truncate_lead_ff`` an upgrade drops
        pieces made only of 0xFF bytes.
        """
        operation = Operation(operation)
        sectors = [s for s in mapping.sectors if s.use_for_operation]

        if operation == Operation.ERASE:
            kept: list[ImageElement] = []
            for sector in sectors:
                if not sector.has(SectorAttribute.ERASABLE):
                    continue
                buffer = self.get_buffer(sector.start_address, sector.size)
                if buffer is None:
                    continue
                if truncate_lead_ff and _all_ff(buffer):
                    continue
                kept.append(ImageElement(sector.start_address, b""))
            self.elements = kept
            return

        truncate = operation == Operation.UPGRADE and truncate_lead_ff
        result: list[ImageElement] = []
        for element in self.elements:
            if truncate and _all_ff(element.data):
                continue
            if operation == Operation.DETACH:
                continue
            for sector in sectors:
                if operation in (Operation.RETURN, Operation.UPLOAD) and not sector.has(
                    SectorAttribute.READABLE
                ):
                    continue
                if operation == Operation.UPGRADE and not sector.has(
                    SectorAttribute.WRITEABLE
                ):
                    continue
                span = _overlap(
                    element, sector.start_address, sector.start_address + sector.size
                )
                if span is None:
                    continue
                lo, hi = span
                data = element.data[lo - element.address:hi - element.address]
                if truncate and _all_ff(data):
                    continue
                result.append(ImageElement(lo, data))
        self.elements = result

        if operation == Operation.UPLOAD:
            self.elements = compact_elements(self.elements)

    def size(self) -> int:
        """Return the total number of data bytes in all elements."""
        return sum(len(element.data) for element in self.elements)