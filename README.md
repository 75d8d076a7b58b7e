# dfuse

Plain-Python tools for DfuSe firmware images: read and write Motorola
S-record and Intel HEX files, describe a device's flash layout from its DfuSe
memory descriptor string, and reshape an image for a detach, return, upload,
erase or upgrade operation. There are no dependencies beyond the standard
library.

## Installation

```
pip install .
```

## Memory mappings (`dfuse.mapping`)

A DfuSe device describes each alternate setting with a string such as
`@Internal Flash  /0x08000000/04*016Kg,01*064Kg,07*128Kg`.
`parse_mapping(descriptor, alternate=0)` turns it into a `Mapping` (its
`alternate`, its `name` and a list of `MappingSector` entries):

```python
from dfuse.mapping import parse_mapping, SectorAttribute

mapping = parse_mapping("@Internal Flash  /0x08000000/04*016Kg,01*064Kg,07*128Kg", 0)
for sector in mapping.usable_sectors():
    print(hex(sector.start_address), sector.size, sector.has(SectorAttribute.ERASABLE))
```

Each `MappingSector` has `start_address`, `aliased_address` (from an
`address-alias` pair in the descriptor), `index`, `size` (sizes ending in `K`
or `M` are scaled), `sector_type` (the character code after the size) and
`use_for_operation`. `SectorAttribute` holds the `READABLE`, `ERASABLE` and
`WRITEABLE` bits of a sector type; `Mapping.usable_sectors()` yields the
sectors whose `use_for_operation` is set.

A descriptor that does not start with `@`, has no address block, or declares
no sectors raises `DfuseError` with code `PrtErrorCode.BAD_PARAMETER`.

`Operation` enumerates `DETACH`, `RETURN`, `UPLOAD`, `ERASE` and `UPGRADE`.

## Images (`dfuse.image`)

An `Image` holds an ordered list of `ImageElement` blocks (an `address` and a
`bytearray` of `data`) for one alternate setting, plus an optional `name`.

```python
from dfuse.image import Image
from dfuse.mapping import Operation, parse_mapping

mapping = parse_mapping("@Internal Flash  /0x08000000/04*016Kg,01*064Kg,07*128Kg", 0)
image = Image.load(0, "firmware.hex", "Internal Flash")
print(image.size())

image.filter_for_operation(mapping, Operation.UPGRADE, True)
image.dump_to_file("firmware.s19")
```

- `Image.load(alternate, path, name=None)` and `Image.dump_to_file(path)`
  choose the format from the file extension (`.s19` or `.hex`, any case);
  another extension raises `DfuseError`. Parse errors raise
  `ImageFormatError`, whose `line` attribute is the 1-based line number.
- `Image.from_mapping(mapping, name=None)` builds an image with one
  `0xFF`-filled element per usable sector, ready to receive an upload.
- `get_buffer(address, size)` returns the bytes of a range with gaps filled
  with `0xFF`, or `None` if no element touches the range.
- `get_element(rank)`, `set_element(rank, element, insert=True)` and
  `remove_element(rank)` work on copies of elements and raise `IndexError`
  for a rank out of range. `copy()` returns an independent image.
- `filter_for_operation(mapping, operation, truncate_lead_ff=False)`:
  - for `ERASE`, each usable erasable sector that holds data becomes an
    empty element at the sector start (with `truncate_lead_ff`, sectors
    holding only `0xFF` are skipped);
  - for `DETACH`, all elements are dropped;
  - otherwise elements are cut along the usable sectors that are readable
    (`RETURN`, `UPLOAD`) or writeable (`UPGRADE`); with `truncate_lead_ff`
    an upgrade drops pieces made only of `0xFF`; after an `UPLOAD` the
    pieces are sorted and contiguous ones merged.
- `size()` returns the total number of data bytes.

## File formats on their own

The record parsers and writers also work directly on text and lists of
`ImageElement`:

```python
from dfuse.srecord import parse_srecords, format_srecords
from dfuse.intelhex import parse_intel_hex, format_intel_hex

with open("firmware.hex") as handle:
    elements = parse_intel_hex(handle.read())
text = format_srecords(elements)
```

- `parse_srecords` accepts S0, S1/S2/S3, S5 and S7/S8/S9 records and stops
  at a termination record; `format_srecords` uses S1, S2 or S3 records of up
  to 32 bytes according to the highest address and ends with the matching
  termination record.
- `parse_intel_hex` handles data, end-of-file, extended segment/linear
  address and start address records; `format_intel_hex` writes extended
  linear address records and data records of up to 32 bytes, and writes no
  end-of-file record.

Both parsers return elements sorted by address with contiguous runs merged,
the same as `dfuse.elements.compact_elements`; `append_contiguous` extends
the last element of a list when a new one starts where it ends.

## Error codes (`dfuse.errors`)

`DeviceErrorCode` and `PrtErrorCode` are `IntEnum`s of the numeric status
codes of the device and protocol layers. `DfuseError` carries a `message`
and a `code`; `ImageFormatError` is also a `ValueError`.

## What this package does not do

It does not talk to USB devices: there is no device enumeration, no reading
of descriptors from hardware, no detach, upload, erase or upgrade transfers,
and no command-line tool. It prepares and converts the images and mappings
that such transfers use.

## Running the tests

```
pip install .[test]
pytest
```