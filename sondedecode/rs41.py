"""Handling of RS41 radiosonde packets."""

from __future__ import annotations

from itertools import cycle

from .codec import Position, flip_byte
from .sonde import DecodeError, Sonde

RS41_PACKET_LENGTH = 312

WHITENING = bytes([
    0x32, 0x05, 0x59, 0x0E, 0xF9, 0x44, 0xC6, 0x26, 0x21, 0x60, 0xC2, 0xEA, 0x79, 0x5D, 0x6D, 0xA1,
    0x54, 0x69, 0x47, 0x0C, 0xDC, 0xE8, 0x5C, 0xF1, 0xF7, 0x76, 0x82, 0x7F, 0x07, 0x99, 0xA2, 0x2C,
    0x93, 0x7C, 0x30, 0x63, 0xF5, 0x10, 0x2E, 0x61, 0xD0, 0xBC, 0xB4, 0xB6, 0x06, 0xAA, 0xF4, 0x23,
    0x78, 0x6E, 0x3B, 0xAE, 0xBF, 0x7B, 0x4C, 0xC1, 0x96, 0x83, 0x3E, 0x51, 0xB1, 0x49, 0x08, 0x98,
])


def dewhiten(packet: bytes) -> bytes:
    """Bit-reverse each byte and remove the whitening sequence."""
    if len(packet) < RS41_PACKET_LENGTH:
        raise DecodeError("RS41 packet too short")
    return bytes(
        w ^ flip_byte(b) for w, b in zip(cycle(WHITENING), packet[:RS41_PACKET_LENGTH])
    )


class Rs41Decoder:
    """Dewhitens RS41 packets; the position is left as it is."""

    def process(self, packet: bytes, position: Position) -> bytes:
        """Return the dewhitened packet."""
        return dewhiten(packet)


RS41 = Sonde(
    name="RS41",
    bit_rate=4800,
    afc_bandwidth=12500,
    bandwidth=3600,
    packet_length=RS41_PACKET_LENGTH,
    preamble_length=3,
    sync_word_len=64,
    sync_word=bytes([0x08, 0x6D, 0x53, 0x88, 0x44, 0x69, 0x48, 0x1F]),
    decoder=Rs41Decoder,
)