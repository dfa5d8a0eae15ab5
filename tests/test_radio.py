import pytest

from sondedecode.dfm09 import DFM09
from sondedecode.m10 import M10
from sondedecode.m20 import M20
from sondedecode.radio import (
    Radio,
    SpiRegisterBus,
    bit_rate_registers,
    frequency_registers,
    radio_config,
)
from sondedecode.registers import OpMode, Register
from sondedecode.rs41 import RS41, RS41_PACKET_LENGTH


class FakeChip:
    def __init__(self, stuck_mode=None):
        self.registers = {}
        self.frames = []
        self.stuck_mode = stuck_mode

    def transfer(self, frame):
        frame = bytes(frame)
        self.frames.append(frame)
        address = frame[0]
        if address & 0x80:
            self.registers[address & 0x7F] = frame[1]
            return bytes(2)
        if address == Register.OP_MODE and self.stuck_mode is not None:
            return bytes([0, self.stuck_mode])
        return bytes([0, self.registers.get(address, 0)])


def make_radio(chip, reset=None):
    return Radio(SpiRegisterBus(chip.transfer), reset=reset, delay=lambda seconds: None)


def test_bus_write_sets_write_flag():
    chip = FakeChip()
    SpiRegisterBus(chip.transfer).write(Register.FIFO_THRESH, 48)
    assert chip.frames == [bytes([0x80 | Register.FIFO_THRESH, 48])]
    assert chip.registers[Register.FIFO_THRESH] == 48


def test_bus_read_returns_second_byte():
    chip = FakeChip()
    chip.registers[Register.VERSION] = 0x12
    bus = SpiRegisterBus(chip.transfer)
    assert bus.read(Register.VERSION) == 0x12
    assert chip.frames == [bytes([Register.VERSION, 0])]


def test_bit_rate_registers_rs41():
    assert bit_rate_registers(4800) == (0x1A, 0x0A, 11)


@pytest.mark.parametrize("sonde", [RS41, M10, M20, DFM09])
def test_bit_rate_registers_approximate_rate(sonde):
    msb, lsb, frac = bit_rate_registers(sonde.bit_rate)
    divider = (msb << 8 | lsb) + frac / 16
    assert abs(divider - 32_000_000 / sonde.bit_rate) <= 1 / 16


@pytest.mark.parametrize("bit_rate", [0, -1, 100])
def test_bit_rate_registers_rejects_bad_rates(bit_rate):
    with pytest.raises(ValueError):
        bit_rate_registers(bit_rate)


@pytest.mark.parametrize("frequency", [400_000_000, 402_002_000, 405_950_000])
def test_frequency_registers_scale(frequency):
    msb, mid, lsb = frequency_registers(frequency)
    steps = msb << 16 | mid << 8 | lsb
    exact = frequency // 1000 * 2048 / 125
    assert 0 <= exact - steps < 1


def test_frequency_registers_rejects_negative():
    with pytest.raises(ValueError):
        frequency_registers(-1)


def test_radio_config_rs41_preamble_and_length():
    writes = dict(radio_config(RS41, 405_950_000))
    assert writes[Register.PREAMBLE_DETECT] == 0xF8
    assert writes[Register.DIO_MAPPING2] == 1
    assert writes[Register.PACKET_CONFIG2] == 0x41
    assert writes[Register.PAYLOAD_LENGTH] == RS41_PACKET_LENGTH & 0xFF


def test_radio_config_without_preamble_disables_detection():
    writes = dict(radio_config(M10, 402_002_000))
    assert writes[Register.PREAMBLE_DETECT] == 0
    assert writes[Register.DIO_MAPPING2] == 0
    assert writes[Register.SYNC_CONFIG] & 0x07 == len(M10.sync_bytes()) - 1


@pytest.mark.parametrize("sonde", [RS41, M10, M20, DFM09])
def test_radio_config_sync_word_in_order(sonde):
    writes = radio_config(sonde, 402_000_000)
    sync = [v for r, v in writes if Register.SYNC_VALUE1 <= r <= Register.SYNC_VALUE8]
    assert bytes(sync) == sonde.sync_bytes()


def test_radio_config_ends_in_receive_mode_with_cleared_flags():
    writes = radio_config(DFM09, 402_871_000)
    assert writes[-3:] == [
        (Register.OP_MODE, OpMode.RX),
        (Register.IRQ_FLAGS1, 0xFF),
        (Register.IRQ_FLAGS2, 0xFF),
    ]
    registers = dict(writes)
    assert (
        registers[Register.FREQ_MSB],
        registers[Register.FREQ_MID],
        registers[Register.FREQ_LSB],
    ) == frequency_registers(402_871_000)


def test_configure_sequence_and_result():
    chip = FakeChip()
    assert make_radio(chip).configure(M20, 402_002_000) is True
    assert chip.frames[:4] == [
        bytes([0x80 | Register.OCP, 0x3B]),
        bytes([0x80 | Register.OP_MODE, OpMode.SLEEP]),
        bytes([0x80 | Register.OP_MODE, OpMode.SLEEP]),
        bytes([0x80 | Register.OP_MODE, OpMode.STANDBY]),
    ]
    assert chip.registers[Register.OP_MODE] == OpMode.RX


def test_configure_reports_missing_standby_but_still_configures():
    chip = FakeChip(stuck_mode=OpMode.SLEEP)
    assert make_radio(chip).configure(RS41, 405_950_000) is False
    got = tuple(chip.registers[r] for r in (Register.FREQ_MSB, Register.FREQ_MID, Register.FREQ_LSB))
    assert got == frequency_registers(405_950_000)


def test_configure_pulses_reset_line():
    levels = []
    make_radio(FakeChip(), reset=levels.append).configure(RS41, 405_950_000)
    assert levels == [1, 0, 1]


def test_rssi_reads_register():
    chip = FakeChip()
    chip.registers[Register.RSSI_VALUE] = 0x9B
    assert make_radio(chip).rssi() == 0x9B


@pytest.mark.parametrize("flags, expected", [(0x10, True), (0xEF, False), (0x00, False)])
def test_fifo_overrun(flags, expected):
    chip = FakeChip()
    chip.registers[Register.IRQ_FLAGS2] = flags
    assert make_radio(chip).fifo_overrun() is expected