"""Contiguous runs of firmware bytes and helpers to merge them."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ImageElement:
    """A run of bytes that starts at ``address``."""

    address: int
    data: bytearray

    def __post_init__(self) -> None:
        self.data = bytearray(self.data)

    def __len__(self) -> int:
        return len(self.data)

    def end(self) -> int:
        """Return the address just past the last byte."""
        return self.address + len(self.data)


def append_contiguous(elements, element) -> None:
    """Append a copy of ``element`` to ``elements``.

    If the last element ends exactly where ``element`` starts, its data is
    extended instead of adding a new element.
    """
    if elements and elements[-1].end() == element.address:
        elements[-1].data.extend(element.data)
    else:
        elements.append(ImageElement(element.address, element.data))


def compact_elements(elements) -> list[ImageElement]:
    """Return the elements sorted by address with touching runs merged.

    Overlapping runs are kept apart; only exactly contiguous ones merge.
    The input elements are left untouched.
    """
    result: list[ImageElement] = []
    for element in sorted(elements, key=lambda item: item.address):
        append_contiguous(result, element)
    return result