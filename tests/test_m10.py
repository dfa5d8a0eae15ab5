import pytest

from sondedecode.codec import Position
from sondedecode.m10 import M10, M10Decoder, M10Frame, frame_correct
from sondedecode.m20 import descramble, m10_crc_step
from sondedecode.sonde import CrcError, DecodeError


def scramble(plain, prev=0):
    out = bytearray()
    for p in plain:
        for s in range(256):
            if s ^ 0xFF ^ (((prev << 7) & 0xFF) | s >> 1) == p:
                break
        out.append(s)
        prev = s
    return bytes(out)


def manchester(data):
    out = bytearray()
    for b in data:
        w = 0
        for k in range(7, -1, -1):
            w = w << 2 | (0b01 if (b >> k) & 1 else 0b10)
        out += w.to_bytes(2, "big")
    return bytes(out)


def make_plain():
    frame = bytearray(104)
    frame[0:3] = descramble(bytes([0x55, 0x55, 0x85]))
    frame[3] = 100
    frame[4] = 0x9F
    frame[17:21] = (0x10000000).to_bytes(4, "big")
    frame[21:25] = (0xF0000000).to_bytes(4, "big")
    frame[25:29] = (1000).to_bytes(4, "big")
    frame[96:101] = bytes([0x03, 0x00, 0x25, 0x01, 0x20])
    crc = 0
    for b in frame[3:102]:
        crc = m10_crc_step(crc, b)
    frame[102:104] = crc.to_bytes(2, "big")
    return bytes(frame)


def encode(plain):
    raw = scramble(plain[3:], prev=0x85)
    return manchester(bytes(b ^ 0xFF for b in raw))


def test_frame_fields():
    frame = M10Frame.from_bytes(make_plain())
    assert frame.latitude() == 22.5
    assert frame.longitude() == -frame.latitude()
    assert frame.altitude() == 1.0
    assert frame.serial() == "205-3-10001"


def test_frame_too_short():
    with pytest.raises(DecodeError):
        M10Frame.from_bytes(bytes(50))


def test_frame_correct():
    plain = make_plain()
    assert frame_correct(plain)
    broken = bytearray(plain)
    broken[40] ^= 0x08
    assert not frame_correct(bytes(broken))


def test_process_round_trip():
    plain = make_plain()
    pos = Position()
    M10Decoder().process(encode(plain), pos)
    frame = M10Frame.from_bytes(plain)
    assert pos.serial == frame.serial()
    assert pos.lat == frame.latitude()
    assert pos.lng == frame.longitude()
    assert pos.alt == frame.altitude()


def test_process_crc_error():
    plain = bytearray(make_plain())
    plain[30] ^= 0x01
    with pytest.raises(CrcError):
        M10Decoder().process(encode(bytes(plain)), Position())


def test_process_short():
    with pytest.raises(DecodeError):
        M10Decoder().process(bytes(20), Position())


def test_sonde_description():
    assert M10.payload_length() == 202
    assert M10.bit_rate == 9615