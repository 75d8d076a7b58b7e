import pytest

from dfuse.errors import DfuseError, PrtErrorCode
from dfuse.mapping import (
    Mapping,
    MappingSector,
    Operation,
    SectorAttribute,
    parse_mapping,
)

F4_FLASH = "@Internal Flash  /0x08000000/04*016Kg,01*064Kg,07*128Kg"


def test_operation_lookup_by_value():
    assert Operation(0) is Operation.DETACH
    assert Operation(4) is Operation.UPGRADE
    with pytest.raises(ValueError):
        Operation(5)


def test_name_and_alternate():
    mapping = parse_mapping(F4_FLASH, 2)
    assert mapping.name == "Internal Flash  "
    assert mapping.alternate == 2


def test_sector_count_and_indices():
    mapping = parse_mapping(F4_FLASH, 0)
    assert len(mapping.sectors) == 4 + 1 + 7
    assert [s.index for s in mapping.sectors] == list(range(len(mapping.sectors)))


def test_sectors_are_contiguous():
    sectors = parse_mapping(F4_FLASH, 0).sectors
    assert sectors[0].start_address == 0x08000000
    for prev, cur in zip(sectors, sectors[1:]):
        assert cur.start_address == prev.start_address + prev.size
        assert cur.aliased_address == cur.start_address


def test_kilobyte_sizes():
    sectors = parse_mapping(F4_FLASH, 0).sectors
    assert {s.size for s in sectors[:4]} == {16 * 1024}
    assert sectors[4].size == 64 * 1024
    assert sectors[-1].size == 128 * 1024


def test_sector_type_g_has_all_attributes():
    sector = parse_mapping(F4_FLASH, 0).sectors[0]
    assert sector.sector_type == ord("g")
    assert sector.has(SectorAttribute.READABLE)
    assert sector.has(SectorAttribute.ERASABLE)
    assert sector.has(SectorAttribute.WRITEABLE)


def test_read_only_sector_type():
    sector = parse_mapping("@Otp/0x1FFF7800/01*512 a", 0).sectors[0]
    assert sector.size == 512
    assert sector.sector_type == ord("a")
    assert sector.has(SectorAttribute.READABLE)
    assert not sector.has(SectorAttribute.ERASABLE)
    assert not sector.has(SectorAttribute.WRITEABLE | SectorAttribute.READABLE)


def test_megabyte_indicator():
    sector = parse_mapping("@Ext/0x90000000/01*001Mg", 0).sectors[0]
    assert sector.size == 1024 * 1024


def test_g_without_size_indicator():
    sectors = parse_mapping("@Flash/0x08000000/02*128g", 0).sectors
    assert [s.size for s in sectors] == [128, 128]
    assert all(s.sector_type == ord("g") for s in sectors)


def test_aliased_address():
    sectors = parse_mapping("@Flash/0x08000000-0x00000000/02*001Ka", 0).sectors
    assert sectors[0].start_address == 0x08000000
    assert sectors[0].aliased_address == 0x00000000
    assert sectors[1].aliased_address == sectors[0].aliased_address + 1024


def test_multiple_address_blocks():
    mapping = parse_mapping("@Opt/0x1FFFC000/01*016 e/0x1FFEC000/01*016 e", 0)
    assert [s.start_address for s in mapping.sectors] == [0x1FFFC000, 0x1FFEC000]
    assert [s.index for s in mapping.sectors] == [0, 1]


def test_usable_sectors_filters():
    mapping = parse_mapping(F4_FLASH, 0)
    mapping.sectors[1].use_for_operation = False
    usable = list(mapping.usable_sectors())
    assert mapping.sectors[1] not in usable
    assert len(usable) == len(mapping.sectors) - 1


def test_usable_sectors_on_manual_mapping():
    keep = MappingSector(0, 0, 0, 16, ord("g"))
    drop = MappingSector(16, 16, 1, 16, ord("g"), use_for_operation=False)
    assert list(Mapping(0, "x", [keep, drop]).usable_sectors()) == [keep]


@pytest.mark.parametrize(
    "descriptor",
    ["Internal Flash/0x08000000/04*016Kg", "@NoSlash", "@Flash/0x08000000/", ""],
)
def test_bad_descriptors(descriptor):
    with pytest.raises(DfuseError) as info:
        parse_mapping(descriptor, 0)
    assert info.value.code == PrtErrorCode.BAD_PARAMETER