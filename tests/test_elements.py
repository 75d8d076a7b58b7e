from dfuse.elements import ImageElement, append_contiguous, compact_elements


def test_end_is_address_plus_length():
    element = ImageElement(0x100, b"\x01\x02\x03")
    assert element.end() == 0x103
    assert len(element) == 3


def test_data_is_copied_into_bytearray():
    source = bytearray(b"\xaa\xbb")
    element = ImageElement(0, source)
    source[0] = 0
    assert element.data == bytearray(b"\xaa\xbb")


def test_append_contiguous_extends_last():
    elements = [ImageElement(0x10, b"\x01\x02")]
    append_contiguous(elements, ImageElement(0x12, b"\x03"))
    assert len(elements) == 1
    assert elements[0].address == 0x10
    assert bytes(elements[0].data) == b"\x01\x02\x03"


def test_append_contiguous_adds_when_gap():
    elements = [ImageElement(0x10, b"\x01\x02")]
    append_contiguous(elements, ImageElement(0x20, b"\x03"))
    assert [e.address for e in elements] == [0x10, 0x20]


def test_append_contiguous_copies_element():
    elements = []
    new = ImageElement(0x0, b"\x05")
    append_contiguous(elements, new)
    new.data[0] = 9
    assert bytes(elements[0].data) == b"\x05"


def test_compact_sorts_and_merges():
    elements = [
        ImageElement(0x20, b"\x03"),
        ImageElement(0x10, b"\x01"),
        ImageElement(0x11, b"\x02"),
        ImageElement(0x40, b"\x04"),
    ]
    result = compact_elements(elements)
    assert [e.address for e in result] == [0x10, 0x20, 0x40]
    assert bytes(result[0].data) == b"\x01\x02"


def test_compact_keeps_overlaps_apart():
    elements = [ImageElement(0x10, b"\x01\x02"), ImageElement(0x11, b"\x03")]
    result = compact_elements(elements)
    assert len(result) == 2


def test_compact_leaves_input_untouched():
    elements = [ImageElement(0x0, b"\x01"), ImageElement(0x1, b"\x02")]
    compact_elements(elements)
    assert bytes(elements[0].data) == b"\x01"
    assert len(elements) == 2


def test_compact_preserves_total_size():
    elements = [ImageElement(a, bytes([a & 0xFF]) * 4) for a in (0, 8, 4, 100)]
    result = compact_elements(elements)
    assert sum(len(e) for e in result) == sum(len(e) for e in elements)