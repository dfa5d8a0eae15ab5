"""Decoder for DFM09 radiosonde packets."""

from __future__ import annotations

from enum import IntEnum

from .codec import Position, manchester_decode
from .sonde import DecodeError, EccError, Sonde

DFM09_PACKET_LENGTH = 66
_CONF_LEN = 7
_DAT_LEN = 13
_HAMMING_MASKS = (0xAA, 0x66, 0x1E, 0xFF)


class DatType(IntEnum):
    SEQ = 0
    TIME = 1
    LAT = 2
    LON = 3
    ALT = 4
    DATE = 8


def deinterleave(data: bytes) -> bytes:
    """Undo the bit interleaving of one block."""
    n = len(data)
    bits = [(b >> (7 - j)) & 1 for b in data for j in range(8)]
    out = bytearray()
    for i in range(n):
        value = 0
        for j in range(8):
            value = value << 1 | bits[n * j + i]
        out.append(value)
    return bytes(out)


def parity(x: int) -> int:
    """1 if ``x`` has an odd number of set bits."""
    return bin(x).count("1") & 1


def hamming(data: bytes) -> tuple[bytes, int]:
    """Correct each byte; return the corrected bytes and the number of corrections."""
    out = bytearray(data)
    errors = 0
    for i, b in enumerate(out):
        errpos = sum(parity(b & mask) << j for j, mask in enumerate(_HAMMING_MASKS))
        if errpos > 7:
            raise EccError("uncorrectable error")
        if errpos:
            errors += 1
            out[i] ^= 1 << (8 - errpos)
    return bytes(out), errors


def _pack_nibbles(data: bytes, start: int, count: int) -> bytes:
    return bytes(
        (data[start + 2 * i] & 0xF0) | data[start + 2 * i + 1] >> 4 for i in range(count)
    )


class Dfm09Decoder:
    """Turns raw DFM09 packets into position updates; keeps serial assembly state."""

    def __init__(self) -> None:
        self.serial_conf_type = -1
        self.raw_serial = 0

    def process_conf(self, conf_type: int, data: bytes, position: Position) -> None:
        """Handle a configuration block carrying serial number pieces."""
        ch = data[0] << 16 | data[1] << 8 | data[2]
        if ch == 0:
            self.serial_conf_type = conf_type + 1
            return
        if conf_type != self.serial_conf_type:
            return
        idx = 3 - (ch & 0xF)
        if 0 <= idx <= 3:
            shard = (ch >> 4) & 0xFFFF
            self.raw_serial &= ~(0xFFFF << (16 * idx))
            self.raw_serial |= shard << (16 * idx)
        if ch & 0xF == 0:
            while self.raw_serial and not self.raw_serial & 0xFFFF:
                self.raw_serial >>= 16
            position.serial = str(self.raw_serial & 0xFFFFFFFF)[:11]
            self.raw_serial = 0

    def process_dat(self, dat_type: int, data: bytes, position: Position) -> bool:
        """Handle a data block; True if it updated the position."""
        if not any(data[: _DAT_LEN // 2]):
            return False
        value = int.from_bytes(data[:4], "big")
        if dat_type == DatType.LAT:
            position.lat = value / 1e7
        elif dat_type == DatType.LON:
            position.lng = value / 1e7
        elif dat_type == DatType.ALT:
            position.alt = value / 1e2
        else:
            return False
        return True

    def process(self, packet: bytes, position: Position) -> bytes:
        """Decode ``packet`` into ``position``; return the Manchester-decoded bytes."""
        if len(packet) < DFM09_PACKET_LENGTH:
            raise DecodeError("DFM09 packet too short")
        buf = manchester_decode(packet[:DFM09_PACKET_LENGTH])

        conf, _ = hamming(deinterleave(buf[:_CONF_LEN]))
        self.process_conf(conf[0] >> 4, _pack_nibbles(conf, 1, _CONF_LEN // 2), position)

        for start in (_CONF_LEN, _CONF_LEN + _DAT_LEN):
            dat, _ = hamming(deinterleave(buf[start : start + _DAT_LEN]))
            self.process_dat(dat[12] >> 4, _pack_nibbles(dat, 0, _DAT_LEN // 2), position)
        return buf


DFM09 = Sonde(
    name="DFM09",
    bit_rate=2500,
    afc_bandwidth=50000,
    bandwidth=11700,
    packet_length=DFM09_PACKET_LENGTH,
    preamble_length=0,
    sync_word_len=32,
    sync_word=bytes([0x9A, 0x99, 0x5A, 0x55]),
    decoder=Dfm09Decoder,
)