"""Decoder for M20 radiosonde packets."""

from __future__ import annotations

from .codec import Position, itoa_with_zeroes, manchester_decode
from .sonde import CrcError, DecodeError, Sonde

M20_PACKET_LENGTH = 140
M20_FRAME_LENGTH = M20_PACKET_LENGTH // 2


def descramble(data: bytes) -> bytes:
    """Undo the Modem line scrambling and inversion."""
    out = bytearray()
    topbit = 0
    for b in data:
        out.append(b ^ 0xFF ^ (topbit | b >> 1))
        topbit = (b << 7) & 0xFF
    return bytes(out)


def m10_crc_step(c: int, b: int) -> int:
    """Advance the Modem frame checksum by one byte."""
    c1 = c & 0xFF
    b = ((b >> 1) | ((b & 1) << 7)) & 0xFF
    b ^= (b >> 2) & 0xFF
    t6 = (c & 1) ^ ((c >> 2) & 1) ^ ((c >> 4) & 1)
    t7 = ((c >> 1) & 1) ^ ((c >> 3) & 1) ^ ((c >> 5) & 1)
    t = (c & 0x3F) | (t6 << 6) | (t7 << 7)
    s = (c >> 7) & 0xFF
    s ^= (s >> 2) & 0xFF
    c0 = b ^ t ^ s
    return ((c1 << 8) | c0) & 0xFFFF


def check_crc(frame: bytes) -> bool:
    """True if the checksum in the last two bytes of the frame matches."""
    if len(frame) < M20_FRAME_LENGTH:
        return False
    expected = frame[M20_FRAME_LENGTH - 2] << 8 | frame[M20_FRAME_LENGTH - 1]
    crc = 0
    for b in frame[: M20_FRAME_LENGTH - 2]:
        crc = m10_crc_step(crc, b)
    return crc == expected


def decode_serial(frame: bytes) -> str:
    """Serial number text encoded in a decoded M20 frame."""
    ym = frame[0x12] & 0x7F
    s2 = frame[0x14] << 8 | frame[0x13]
    return (
        itoa_with_zeroes(ym // 12, 10, 1)
        + itoa_with_zeroes(ym % 12 + 1, 10, 2)
        + "-"
        + itoa_with_zeroes(s2 & 0x5, 10, 1)
        + "-"
        + itoa_with_zeroes((s2 >> 15) & 0x1, 10, 1)
        + itoa_with_zeroes((s2 >> 2) & 0x1FFF, 10, 4)
    )


class M20Decoder:
    """Turns raw M20 packets into position updates."""

    def process(self, packet: bytes, position: Position) -> bytes:
        """Decode ``packet`` into ``position``; return the decoded frame."""
        if len(packet) < M20_PACKET_LENGTH:
            raise DecodeError("M20 packet too short")
        frame = descramble(manchester_decode(packet[:M20_PACKET_LENGTH]))
        if not check_crc(frame):
            raise CrcError("M20 frame checksum mismatch")
        position.serial = decode_serial(frame)
        position.lat = int.from_bytes(frame[0x1C:0x20], "big") / 1e6
        position.lng = int.from_bytes(frame[0x20:0x24], "big") / 1e6
        position.alt = int.from_bytes(frame[8:11], "big") / 1e2
        return frame


M20 = Sonde(
    name="M20",
    bit_rate=9600,
    afc_bandwidth=50000,
    bandwidth=12500,
    packet_length=M20_PACKET_LENGTH,
    preamble_length=0,
    sync_word_len=48,
    sync_word=bytes([0x66, 0x66, 0x66, 0x66, 0xB3, 0x66]),
    decoder=M20Decoder,
)