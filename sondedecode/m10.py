"""Decoder for M10 radiosonde packets."""

from __future__ import annotations

from dataclasses import dataclass

from .codec import Position, itoa_with_zeroes, manchester_decode
from .m20 import descramble, m10_crc_step
from .sonde import CrcError, DecodeError, Sonde

M10_MAX_DATA_LEN = 99
M10_PACKET_LENGTH = 202
SYNC_MARK = bytes([0x55, 0x55, 0x85])
FRAME_BUFFER_LENGTH = 3 + 1 + 1 + M10_MAX_DATA_LEN
FRAME_9F_LENGTH = 102

_LEN = 3
_LAT = 17
_LON = 21
_ALT = 25
_SERIAL = 96


def frame_correct(frame: bytes) -> bool:
    """True if the checksum at the end of the frame (as its length byte says) matches."""
    if len(frame) <= _LEN:
        return False
    length = frame[_LEN]
    crc_at = _LEN + length - 1
    if length < 1 or crc_at + 1 >= len(frame):
        return False
    crc = 0
    for b in frame[_LEN:crc_at]:
        crc = m10_crc_step(crc, b)
    return crc == (frame[crc_at] << 8 | frame[crc_at + 1])


def _int32(raw: bytes) -> int:
    return int.from_bytes(raw, "big", signed=True)


@dataclass(frozen=True)
class M10Frame:
    """A descrambled M10 frame of type 0x9f, sync mark included."""

    data: bytes

    @classmethod
    def from_bytes(cls, data: bytes) -> "M10Frame":
        if len(data) < FRAME_9F_LENGTH:
            raise DecodeError("M10 frame too short")
        return cls(bytes(data))

    def serial(self) -> str:
        s = self.data[_SERIAL : _SERIAL + 5]
        serial_0 = (s[2] >> 4) * 100 + (s[2] & 0xF)
        serial_2 = s[3] | s[4] << 8
        return (
            itoa_with_zeroes(serial_0, 10, 3)
            + "-"
            + itoa_with_zeroes(s[0], 10, 1)
            + "-"
            + itoa_with_zeroes(serial_2 >> 13, 10, 1)
            + itoa_with_zeroes(serial_2 & 0x1FFF, 10, 4)
        )

    def latitude(self) -> float:
        return _int32(self.data[_LAT : _LAT + 4]) * 360.0 / (1 << 32)

    def longitude(self) -> float:
        return _int32(self.data[_LON : _LON + 4]) * 360.0 / (1 << 32)

    def altitude(self) -> float:
        return _int32(self.data[_ALT : _ALT + 4]) / 1e3


class M10Decoder:
    """Turns raw M10 packets into position updates."""

    def process(self, packet: bytes, position: Position) -> bytes:
        """Decode ``packet`` into ``position``; return the decoded bytes after the sync mark."""
        if len(packet) < M10_PACKET_LENGTH:
            raise DecodeError("M10 packet too short")
        body = bytes(b ^ 0xFF for b in manchester_decode(packet[:M10_PACKET_LENGTH]))
        data = descramble(SYNC_MARK + body)
        if not frame_correct(data):
            raise CrcError("M10 frame checksum mismatch")
        frame = M10Frame.from_bytes(data)
        position.serial = frame.serial()
        position.lat = frame.latitude()
        position.lng = frame.longitude()
        position.alt = frame.altitude()
        return body


M10 = Sonde(
    name="M10",
    bit_rate=9615,
    afc_bandwidth=50000,
    bandwidth=12500,
    packet_length=M10_PACKET_LENGTH,
    preamble_length=0,
    sync_word_len=48,
    sync_word=bytes([0x66, 0x66, 0x66, 0x66, 0xB3, 0x66]),
    decoder=M10Decoder,
)