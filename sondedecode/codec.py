"""Bit-level helpers and text formatting shared by the sonde decoders."""

from __future__ import annotations

from dataclasses import dataclass

from .sonde import DecodeError

CRYSTAL_FREQUENCY = 32_000_000
_DIGITS = "0123456789ABCDEF"


class ManchesterError(DecodeError):
    """A pair of line bits was not a valid Manchester symbol."""


@dataclass
class Position:
    """Last decoded sonde identity and fix."""

    serial: str = ""
    lat: float = 0.0
    lng: float = 0.0
    alt: float = 0.0

    def clear(self) -> None:
        """Forget the serial number and the fix."""
        self.serial = ""
        self.lat = self.lng = self.alt = 0.0


def itoa_with_zeroes(val: int, base: int, digits: int) -> str:
    """Render the low ``digits`` digits of ``val`` in ``base``, zero padded."""
    if not 2 <= base <= len(_DIGITS):
        raise ValueError(f"base must be in 2..{len(_DIGITS)}")
    if digits < 0:
        raise ValueError("digit count cannot be negative")
    val &= 0xFFFFFFFF
    out = []
    for _ in range(digits):
        val, rem = divmod(val, base)
        out.append(_DIGITS[rem])
    return "".join(reversed(out))


def flip_byte(b: int) -> int:
    """Reverse the bit order of a byte."""
    if not 0 <= b <= 0xFF:
        raise ValueError("value is not a byte")
    return int(f"{b:08b}"[::-1], 2)


def manchester_decode(data: bytes) -> bytes:
    """Decode Manchester pairs (01 -> 1, 10 -> 0); two input bytes make one output byte."""
    out = bytearray()
    for hi, lo in zip(data[0::2], data[1::2]):
        word = hi << 8 | lo
        value = 0
        for shift in range(14, -2, -2):
            symbol = (word >> shift) & 0b11
            if symbol == 0b01:
                value = value << 1 | 1
            elif symbol == 0b10:
                value <<= 1
            else:
                raise ManchesterError("invalid Manchester symbol")
        out.append(value)
    return bytes(out)


def calc_mant_exp(bandwidth: int) -> int:
    """Encode a receiver bandwidth in Hz as the radio's mantissa/exponent byte."""
    if not 0 < bandwidth <= 0xFFFF:
        raise ValueError("bandwidth must be in 1..65535 Hz")
    exp = 1
    bw = (CRYSTAL_FREQUENCY // bandwidth // 8) & 0xFFFF
    while bw > 31:
        exp += 1
        bw //= 2
    mant = 0 if bw < 17 else 1 if bw < 21 else 2
    return (mant << 3 | exp) & 0xFF


def starts_with(text: str, prefix: str) -> bool:
    """Case-insensitive prefix test."""
    if len(text) < len(prefix):
        return False
    return all(a.upper() == b.upper() for a, b in zip(text, prefix))


def format_rssi(rssi: int) -> str:
    """Format a raw RSSI register value (half-dB steps below 0 dBm)."""
    whole = int(rssi / 2)
    return f"rssi:-{whole}.{'5' if rssi & 1 else '0'}dBm\n"


def _fixed(value: float, scale: int, digits: int) -> str:
    whole = int(value)
    fraction = int((value - whole) * scale)
    return f"{whole}.{itoa_with_zeroes(fraction, 10, digits)}"


def format_position(position: Position, rssi: int) -> str:
    """Format the position report line, RSSI included."""
    return (
        f"DSer:{position.serial}"
        f",Lat:{_fixed(position.lat, 1_000_000, 6)}"
        f",Lng:{_fixed(position.lng, 1_000_000, 6)}"
        f",Alt:{_fixed(position.alt, 10, 1)},"
        + format_rssi(rssi)
    )


def hex_dump(data: bytes) -> str:
    """Upper-case hex of ``data`` followed by a newline."""
    return "".join(itoa_with_zeroes(b, 16, 2) for b in data) + "\n"