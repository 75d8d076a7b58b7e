import pytest

from dfuse.errors import DeviceErrorCode, DfuseError, ImageFormatError, PrtErrorCode


def test_device_no_error_looked_up_from_offset():
    assert DeviceErrorCode(0x12340000) is DeviceErrorCode.NO_ERROR


def test_device_codes_follow_offset():
    assert DeviceErrorCode(0x12340000 + 1) is DeviceErrorCode.MEMORY
    assert DeviceErrorCode(0x12340000 + 0x16) is DeviceErrorCode.PIPES_ARE_OPEN


def test_device_unknown_code_rejected():
    with pytest.raises(ValueError):
        DeviceErrorCode(0x12340000 + 0x17)


@pytest.mark.parametrize("offset", range(0x17))
def test_device_codes_cover_every_offset(offset):
    code = DeviceErrorCode(0x12340000 + offset)
    assert code.value == 0x12340000 + offset


def test_device_codes_are_unique():
    looked_up = {DeviceErrorCode(0x12340000 + offset) for offset in range(0x17)}
    assert len(looked_up) == 0x17


def test_prt_codes_looked_up_by_value():
    assert PrtErrorCode(0x12340000 + 0x5000 + 0x0008) is PrtErrorCode.BAD_PARAMETER
    assert PrtErrorCode(0x12340000 + 0x5000 + 0x000D) is PrtErrorCode.UNSUPPORTED_FEATURE
    assert PrtErrorCode(0x12340000).name == "NO_ERROR"


def test_prt_unknown_code_rejected():
    with pytest.raises(ValueError):
        PrtErrorCode(0x12340000 + 0x5000 + 0x0002)


def test_dfuse_error_carries_code():
    err = DfuseError("boom", PrtErrorCode.DFU_ERROR)
    assert err.code is PrtErrorCode.DFU_ERROR
    assert str(err) == "boom"


def test_dfuse_error_with_device_code():
    err = DfuseError("bad", DeviceErrorCode.OPEN_DRIVER_ERROR)
    assert err.code == 0x12340000 + 5
    assert str(err) == "bad"


def test_image_format_error_message_and_line():
    err = ImageFormatError("Checksum error!", 7)
    assert err.line == 7
    assert str(err) == "FILE : line 7: Checksum error!"
    assert err.code == PrtErrorCode.BAD_PARAMETER


def test_image_format_error_is_value_error_and_dfuse_error():
    err = ImageFormatError("Not in Intel Hex format!", 1)
    assert str(err) == "FILE : line 1: Not in Intel Hex format!"
    assert isinstance(err, ValueError)
    assert isinstance(err, DfuseError)