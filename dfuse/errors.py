"""Error codes and exceptions shared across the package."""

from __future__ import annotations

from enum import IntEnum

_DEVICE_ERROR_OFFSET = 0x12340000
_PRT_ERROR_OFFSET = 0x12340000 + 0x5000


class DeviceErrorCode(IntEnum):
    """Status codes reported by the low-level device layer."""

    NO_ERROR = _DEVICE_ERROR_OFFSET
    MEMORY = _DEVICE_ERROR_OFFSET + 0x1
    BAD_PARAMETER = _DEVICE_ERROR_OFFSET + 0x2
    NOT_IMPLEMENTED = _DEVICE_ERROR_OFFSET + 0x3
    ENUM_FINISHED = _DEVICE_ERROR_OFFSET + 0x4
    OPEN_DRIVER_ERROR = _DEVICE_ERROR_OFFSET + 0x5
    ERROR_DESCRIPTOR_BUILDING = _DEVICE_ERROR_OFFSET + 0x6
    PIPE_CREATION_ERROR = _DEVICE_ERROR_OFFSET + 0x7
    PIPE_RESET_ERROR = _DEVICE_ERROR_OFFSET + 0x8
    PIPE_ABORT_ERROR = _DEVICE_ERROR_OFFSET + 0x9
    STRING_DESCRIPTOR_ERROR = _DEVICE_ERROR_OFFSET + 0xA
    DRIVER_IS_CLOSED = _DEVICE_ERROR_OFFSET + 0xB
    VENDOR_RQ_PB = _DEVICE_ERROR_OFFSET + 0xC
    ERROR_WHILE_READING = _DEVICE_ERROR_OFFSET + 0xD
    ERROR_BEFORE_READING = _DEVICE_ERROR_OFFSET + 0xE
    ERROR_WHILE_WRITING = _DEVICE_ERROR_OFFSET + 0xF
    ERROR_BEFORE_WRITING = _DEVICE_ERROR_OFFSET + 0x10
    DEVICE_RESET_ERROR = _DEVICE_ERROR_OFFSET + 0x11
    CANT_USE_UNPLUG_EVENT = _DEVICE_ERROR_OFFSET + 0x12
    INCORRECT_BUFFER_SIZE = _DEVICE_ERROR_OFFSET + 0x13
    DESCRIPTOR_NOT_FOUND = _DEVICE_ERROR_OFFSET + 0x14
    PIPES_ARE_CLOSED = _DEVICE_ERROR_OFFSET + 0x15
    PIPES_ARE_OPEN = _DEVICE_ERROR_OFFSET + 0x16


class PrtErrorCode(IntEnum):
    """Status codes reported by the firmware-upgrade protocol layer."""

    NO_ERROR = 0x12340000
    UNABLE_TO_LAUNCH_DFU_THREAD = _PRT_ERROR_OFFSET + 0x1
    DFU_ALREADY_RUNNING = _PRT_ERROR_OFFSET + 0x7
    BAD_PARAMETER = _PRT_ERROR_OFFSET + 0x8
    BAD_FIRMWARE_STATE_MACHINE = _PRT_ERROR_OFFSET + 0x9
    UNEXPECTED_ERROR = _PRT_ERROR_OFFSET + 0xA
    DFU_ERROR = _PRT_ERROR_OFFSET + 0xB
    RETRY_ERROR = _PRT_ERROR_OFFSET + 0xC
    UNSUPPORTED_FEATURE = _PRT_ERROR_OFFSET + 0xD


class DfuseError(Exception):
    """Base error carrying one of the numeric status codes."""

    def __init__(self, message, code=PrtErrorCode.BAD_PARAMETER):
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        return self.message


class ImageFormatError(DfuseError, ValueError):
    """A firmware file could not be parsed; ``line`` is 1-based."""

    def __init__(self, message, line):
        self.line = line
        super().__init__(f"FILE : line {line}: {message}", PrtErrorCode.BAD_PARAMETER)