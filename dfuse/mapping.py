"""Device memory mappings parsed from DFU interface string descriptors."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import IntEnum, IntFlag
from typing import Iterator

from .errors import DfuseError, PrtErrorCode

_MASK32 = 0xFFFFFFFF

_SEPARATOR_ADDRESS_ALIASED = "-"
_SEPARATOR_ADDRESS = "/"
_SEPARATOR_NBSECTORS_SECTORSIZE = "*"
_SEPARATOR_BLOCKS = ","

_ATOI = re.compile(r"\s*([+-]?\d+)")
_STRTOUL16 = re.compile(r"\s*([+-]?)(?:0[xX](?=[0-9a-fA-F]))?([0-9a-fA-F]+)")
_DIGITS = re.compile(r"\d*")
_SECTOR_COUNT = re.compile(r"(\d*)\*")


class Operation(IntEnum):
    """Operations that can be run against a device."""

    DETACH = 0
    RETURN = 1
    UPLOAD = 2
    ERASE = 3
    UPGRADE = 4


class SectorAttribute(IntFlag):
    """Bits of a sector type character."""

    READABLE = 1
    ERASABLE = 2
    WRITEABLE = 4


@dataclass
class MappingSector:
    """One sector of a memory area."""

    start_address: int
    aliased_address: int
    index: int
    size: int
    sector_type: int
    use_for_operation: bool = True

    def has(self, attribute) -> bool:
        """Return True if every bit of ``attribute`` is set in the sector type."""
        bits = int(attribute)
        return (self.sector_type & bits) == bits


@dataclass
class Mapping:
    """The memory layout of one alternate setting."""

    alternate: int
    name: str
    sectors: list[MappingSector] = field(default_factory=list)

    def usable_sectors(self) -> Iterator[MappingSector]:
        """Yield the sectors selected for operations."""
        return (sector for sector in self.sectors if sector.use_for_operation)


def _atoi(text: str) -> int:
    match = _ATOI.match(text)
    return int(match.group(1)) if match else 0


def _strtoul16(text: str) -> int:
    match = _STRTOUL16.match(text)
    if not match:
        return 0
    value = int(match.group(2), 16)
    if match.group(1) == "-":
        value = -value
    return value & _MASK32


def _parse_addresses(segment: str) -> tuple[int, int]:
    base, sep, aliased = segment.partition(_SEPARATOR_ADDRESS_ALIASED)
    base_address = _strtoul16(base)
    if not sep:
        return base_address, base_address
    return base_address, _strtoul16(aliased)


def _bad(message: str) -> DfuseError:
    return DfuseError(message, PrtErrorCode.BAD_PARAMETER)


def parse_mapping(descriptor, alternate=0) -> Mapping:
    """Parse a descriptor such as ``@Name/0x08000000/04*016Kg,01*064Kg``."""
    if not descriptor.startswith("@"):
        raise _bad("mapping descriptor must start with '@'")
    slash = descriptor.find(_SEPARATOR_ADDRESS)
    if slash < 0:
        raise _bad("mapping descriptor has no address block")

    rest = descriptor[slash:]
    total = sum(int(digits) for digits in _SECTOR_COUNT.findall(rest) if digits)
    if total == 0:
        raise _bad("mapping descriptor declares no sectors")

    mapping = Mapping(alternate=alternate, name=descriptor[1:slash])
    sectors = mapping.sectors
    pos = 0
    while len(sectors) != total:
        if pos >= len(rest):
            break
        pos += 1
        if pos >= len(rest):
            break
        end = rest.find(_SEPARATOR_ADDRESS, pos)
        if end < 0:
            break
        base_address, aliased_address = _parse_addresses(rest[pos:end])
        pos = end
        block_start = True
        while block_start or rest[pos:pos + 1] == _SEPARATOR_BLOCKS:
            block_start = False
            pos += 1
            star = rest.find(_SEPARATOR_NBSECTORS_SECTORSIZE, pos)
            if star < 0:
                break
            count = _atoi(rest[pos:star])
            pos = star + 1
            digits = _DIGITS.match(rest, pos).group(0)
            pos += len(digits)
            indicator = rest[pos:pos + 1]
            size = _atoi(digits)
            if indicator == "K":
                size *= 1024
            elif indicator == "M":
                size *= 1024 * 1024
            size &= _MASK32
            if indicator == "g":
                sector_type = ord("g")
            else:
                type_char = rest[pos + 1:pos + 2]
                sector_type = ord(type_char) & 0xFF if type_char else 0
            for _ in range(count):
                sectors.append(
                    MappingSector(
                        start_address=base_address,
                        aliased_address=aliased_address,
                        index=len(sectors),
                        size=size,
                        sector_type=sector_type,
                    )
                )
                base_address = (base_address + size) & _MASK32
                aliased_address = (aliased_address + size) & _MASK32
            pos += 2
    return mapping