import pytest

from sondedecode.codec import Position
from sondedecode.dfm09 import DFM09, Dfm09Decoder, deinterleave, hamming, parity
from sondedecode.sonde import DecodeError, EccError


def manchester(data):
    out = bytearray()
    for b in data:
        w = 0
        for k in range(7, -1, -1):
            w = w << 2 | (0b01 if (b >> k) & 1 else 0b10)
        out += w.to_bytes(2, "big")
    return bytes(out)


def test_deinterleave_single_byte_identity():
    assert deinterleave(bytes([0xA7])) == bytes([0xA7])


def test_deinterleave_preserves_bit_count():
    data = bytes([0x12, 0x34, 0x56, 0x78, 0x9A, 0xBC, 0xDE])
    out = deinterleave(data)
    assert len(out) == len(data)
    assert sum(bin(b).count("1") for b in out) == sum(bin(b).count("1") for b in data)


def test_parity():
    assert parity(0) == 0
    assert parity(0b1011) == 1
    assert parity(0xFF) == 0


def test_hamming_clean():
    assert hamming(bytes(3)) == (bytes(3), 0)


def test_hamming_corrects_one_bit():
    out, count = hamming(bytes([0xC0]))
    assert count == 1
    assert bin(out[0] ^ 0xC0).count("1") == 1


def test_hamming_uncorrectable():
    with pytest.raises(EccError):
        hamming(bytes([0x80]))


def test_serial_assembly_single_shard():
    dec = Dfm09Decoder()
    pos = Position()
    dec.process_conf(0, bytes(3), pos)
    dec.process_conf(1, bytes([0x00, 0x12, 0x30]), pos)
    assert pos.serial == "291"


def test_serial_assembly_two_shards():
    dec = Dfm09Decoder()
    pos = Position()
    dec.process_conf(4, bytes(3), pos)
    dec.process_conf(5, bytes([0x00, 0x00, 0x11]), pos)
    assert pos.serial == ""
    dec.process_conf(5, bytes([0x00, 0x00, 0x20]), pos)
    assert pos.serial == "131073"


def test_conf_of_other_type_ignored():
    dec = Dfm09Decoder()
    pos = Position()
    dec.process_conf(0, bytes(3), pos)
    dec.process_conf(3, bytes([0x00, 0x12, 0x30]), pos)
    assert pos.serial == ""


def test_process_dat_latitude():
    pos = Position()
    assert Dfm09Decoder().process_dat(2, bytes([0x05, 0xF5, 0xE1, 0x00, 0, 0]), pos)
    assert pos.lat == 10.0


def test_process_dat_unknown_and_empty():
    pos = Position()
    dec = Dfm09Decoder()
    assert not dec.process_dat(8, bytes([1, 2, 3, 4, 5, 6]), pos)
    assert not dec.process_dat(2, bytes(6), pos)
    assert pos == Position()


def test_process_zero_packet():
    pos = Position()
    dec = Dfm09Decoder()
    out = dec.process(manchester(bytes(33)), pos)
    assert out == bytes(33)
    assert pos == Position()
    assert dec.serial_conf_type == 1


def test_process_short():
    with pytest.raises(DecodeError):
        Dfm09Decoder().process(bytes(4), Position())


def test_sonde_description():
    assert DFM09.sync_bytes() == bytes([0x9A, 0x99, 0x5A, 0x55])