"""LAS point record layouts and their little-endian packing."""

from __future__ import annotations

import struct
from dataclasses import dataclass


class LazPerfError(RuntimeError):
    """Raised for malformed point data."""


def _unpack(fmt: struct.Struct, data: bytes, what: str) -> tuple:
    if len(data) < fmt.size:
        raise LazPerfError(f"{what} needs {fmt.size} bytes, got {len(data)}")
    return fmt.unpack_from(data)


_POINT10 = struct.Struct("<iiiHBBbBH")
_GPSTIME = struct.Struct("<q")
_RGB = struct.Struct("<HHH")
_NIR = struct.Struct("<H")
_POINT14 = struct.Struct("<iiiHBBBBhHd")


@dataclass
class Point10:
    """A LAS 1.0 point record (formats 0 to 5 base)."""

    SIZE = _POINT10.size

    x: int = 0
    y: int = 0
    z: int = 0
    intensity: int = 0
    return_number: int = 0
    number_of_returns_of_given_pulse: int = 0
    scan_direction_flag: int = 0
    edge_of_flight_line: int = 0
    classification: int = 0
    scan_angle_rank: int = 0
    user_data: int = 0
    point_source_id: int = 0

    @classmethod
    def unpack(cls, data: bytes) -> Point10:
        x, y, z, intensity, bits, cls_, angle, user, psid = _unpack(_POINT10, data, "point10")
        point = cls(x=x, y=y, z=z, intensity=intensity, classification=cls_,
                    scan_angle_rank=angle, user_data=user, point_source_id=psid)
        point.to_bitfields(bits)
        return point

    def pack(self) -> bytes:
        return _POINT10.pack(self.x, self.y, self.z, self.intensity, self.from_bitfields(),
                             self.classification, self.scan_angle_rank, self.user_data,
                             self.point_source_id)

    def to_bitfields(self, value: int) -> None:
        """Set the return and flag fields from their packed byte."""
        self.return_number = value & 0x7
        self.number_of_returns_of_given_pulse = (value >> 3) & 0x7
        self.scan_direction_flag = (value >> 6) & 0x1
        self.edge_of_flight_line = (value >> 7) & 0x1

    def from_bitfields(self) -> int:
        """Pack the return and flag fields into one byte."""
        return (((self.edge_of_flight_line & 0x1) << 7)
                | ((self.scan_direction_flag & 0x1) << 6)
                | ((self.number_of_returns_of_given_pulse & 0x7) << 3)
                | (self.return_number & 0x7))


@dataclass
class GpsTime:
    """GPS time held as its raw 64-bit integer bit pattern."""

    SIZE = _GPSTIME.size

    value: int = 0

    @classmethod
    def unpack(cls, data: bytes) -> GpsTime:
        return cls(_unpack(_GPSTIME, data, "gpstime")[0])

    def pack(self) -> bytes:
        return _GPSTIME.pack(self.value)


@dataclass
class Rgb:
    """Red, green and blue 16-bit colour channels."""

    SIZE = _RGB.size

    r: int = 0
    g: int = 0
    b: int = 0

    @classmethod
    def unpack(cls, data: bytes) -> Rgb:
        return cls(*_unpack(_RGB, data, "rgb"))

    def pack(self) -> bytes:
        return _RGB.pack(self.r, self.g, self.b)


@dataclass
class Nir14:
    """Near-infrared 16-bit channel."""

    SIZE = _NIR.size

    val: int = 0

    @classmethod
    def unpack(cls, data: bytes) -> Nir14:
        return cls(_unpack(_NIR, data, "nir14")[0])

    def pack(self) -> bytes:
        return _NIR.pack(self.val)


@dataclass
class Point14:
    """A LAS 1.4 point record (formats 6 to 10 base)."""

    SIZE = _POINT14.size

    x: int = 0
    y: int = 0
    z: int = 0
    intensity: int = 0
    returns: int = 0
    flags: int = 0
    classification: int = 0
    user_data: int = 0
    scan_angle: int = 0
    point_source_id: int = 0
    gps_time: float = 0.0

    @classmethod
    def unpack(cls, data: bytes) -> Point14:
        return cls(*_unpack(_POINT14, data, "point14"))

    @property
    def return_num(self) -> int:
        return self.returns & 0xF

    @return_num.setter
    def return_num(self, rn: int) -> None:
        self.returns = (rn | (self.returns & 0xF0)) & 0xFF

    @property
    def num_returns(self) -> int:
        return self.returns >> 4

    @num_returns.setter
    def num_returns(self, nr: int) -> None:
        self.returns = ((nr << 4) | (self.returns & 0xF)) & 0xFF

    @property
    def class_flags(self) -> int:
        return self.flags & 0xF

    @class_flags.setter
    def class_flags(self, value: int) -> None:
        self.flags = (value | (self.flags & 0xF0)) & 0xFF

    @property
    def scanner_channel(self) -> int:
        return (self.flags >> 4) & 0x3

    @scanner_channel.setter
    def scanner_channel(self, channel: int) -> None:
        self.flags = ((channel << 4) | (self.flags & ~0x30)) & 0xFF

    @property
    def scan_dir_flag(self) -> int:
        return (self.flags >> 6) & 1

    @scan_dir_flag.setter
    def scan_dir_flag(self, flag: int) -> None:
        self.flags = ((flag << 6) | (self.flags & 0xBF)) & 0xFF

    @property
    def eof_flag(self) -> int:
        return (self.flags >> 7) & 1

    @eof_flag.setter
    def eof_flag(self, flag: int) -> None:
        self.flags = ((flag << 7) | (self.flags & 0x7F)) & 0xFF