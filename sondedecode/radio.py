"""Register-level configuration of the SX127x FSK receiver."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Protocol

from .codec import CRYSTAL_FREQUENCY, calc_mant_exp
from .registers import Flags2, OpMode, Register
from .sonde import Sonde

log = logging.getLogger(__name__)

WRITE_FLAG = 0x80
FDEV_STEP = 61
FIFO_THRESHOLD = 48
OCP_MAX_CURRENT = 0x3B


class RegisterBus(Protocol):
    def read(self, register: int) -> int: ...

    def write(self, register: int, value: int) -> None: ...


class SpiRegisterBus:
    """Register access over a full-duplex SPI transfer function.

    ``transfer`` sends the given bytes with chip select held low and returns
    the bytes clocked in at the same time.
    """

    def __init__(self, transfer: Callable[[bytes], bytes]) -> None:
        self._transfer = transfer

    def read(self, register: int) -> int:
        """Read one register."""
        reply = self._transfer(bytes([register, 0]))
        return reply[1]

    def write(self, register: int, value: int) -> None:
        """Write one register."""
        self._transfer(bytes([WRITE_FLAG | register, value & 0xFF]))


def bit_rate_registers(bit_rate: int) -> tuple[int, int, int]:
    """Bit-rate MSB, LSB and fractional register values for ``bit_rate`` bit/s."""
    if bit_rate <= 0:
        raise ValueError("bit rate must be positive")
    rate = int(CRYSTAL_FREQUENCY / bit_rate)
    if rate > 0xFFFF:
        raise ValueError("bit rate too low for the radio")
    frac = int(CRYSTAL_FREQUENCY * 16.0 / bit_rate - rate * 16 + 0.5) & 0xFFFF
    return rate >> 8 & 0xFF, rate & 0xFF, frac & 0xFF


def frequency_registers(frequency: int) -> tuple[int, int, int]:
    """Carrier frequency MSB, MID and LSB register values for ``frequency`` Hz."""
    if frequency < 0:
        raise ValueError("frequency cannot be negative")
    f = (frequency // 1000 * (1 << 11)) & 0xFFFFFFFF
    f //= (CRYSTAL_FREQUENCY // 1000) // (1 << 8)
    return f >> 16 & 0xFF, f >> 8 & 0xFF, f & 0xFF


def radio_config(sonde: Sonde, frequency: int) -> list[tuple[Register, int]]:
    """Register writes, in order, that set the radio up to receive ``sonde``."""
    msb, lsb, frac = bit_rate_registers(sonde.bit_rate)
    fdev = sonde.frequency_deviation // FDEV_STEP
    sync = sonde.sync_bytes()
    length = sonde.payload_length()

    writes: list[tuple[Register, int]] = [
        (Register.BIT_RATE_MSB, msb),
        (Register.BIT_RATE_LSB, lsb),
        (Register.BIT_RATE_FRAC, frac),
        (Register.AFC_BW, calc_mant_exp(sonde.afc_bandwidth)),
        (Register.RX_BW, calc_mant_exp(sonde.bandwidth)),
        (Register.FDEV_LSB, fdev & 0xFF),
        (Register.FDEV_MSB, fdev >> 8 & 0xFF),
        # AFC, AGC, receiver triggered by AGC
        (Register.RX_CONFIG, 1 << 4 | 1 << 3 | 7),
        # auto restart without PLL wait, sync on, sync word length
        (Register.SYNC_CONFIG, 1 << 6 | 1 << 4 | (len(sync) - 1)),
    ]
    if sonde.preamble_length > 0:
        detect = (1 << 7 | ((sonde.preamble_length // 8) - 1) << 4 | 0x8) & 0xFF
        writes += [(Register.PREAMBLE_DETECT, detect), (Register.DIO_MAPPING2, 1)]
    else:
        writes += [(Register.PREAMBLE_DETECT, 0), (Register.DIO_MAPPING2, 0)]

    writes += [(Register(Register.SYNC_VALUE1 + i), b) for i, b in enumerate(sync)]
    writes += [
        # fixed length, no DC-free coding, no CRC, no address filtering
        (Register.PACKET_CONFIG1, 0x08),
        (Register.PACKET_CONFIG2, 1 << 6 | (length >> 8) & 7),
        (Register.PAYLOAD_LENGTH, length & 0xFF),
        (Register.DIO_MAPPING1, 0),
        (Register.FIFO_THRESH, FIFO_THRESHOLD),
        (Register.TCXO, 0),
    ]
    fmsb, fmid, flsb = frequency_registers(frequency)
    writes += [
        (Register.FREQ_MSB, fmsb),
        (Register.FREQ_MID, fmid),
        (Register.FREQ_LSB, flsb),
        (Register.OP_MODE, OpMode.RX),
        (Register.IRQ_FLAGS1, 0xFF),
        (Register.IRQ_FLAGS2, 0xFF),
    ]
    return writes


class Radio:
    """An SX127x in FSK packet mode, reached through a register bus."""

    def __init__(
        self,
        bus: RegisterBus,
        reset: Optional[Callable[[int], None]] = None,
        delay: Callable[[float], None] = time.sleep,
    ) -> None:
        self._bus = bus
        self._reset = reset
        self._delay = delay

    def configure(self, sonde: Sonde, frequency: int) -> bool:
        """Reset and set up the radio; False if it did not reach standby."""
        if self._reset is not None:
            for level, pause in ((1, 0.010), (0, 0.001), (1, 0.005)):
                self._reset(level)
                self._delay(pause)

        self._bus.write(Register.OCP, OCP_MAX_CURRENT)
        self._bus.write(Register.OP_MODE, OpMode.SLEEP)
        self._bus.write(Register.OP_MODE, OpMode.SLEEP)
        self._bus.write(Register.OP_MODE, OpMode.STANDBY)
        self._delay(0.1)

        mode = self._bus.read(Register.OP_MODE)
        in_standby = mode == OpMode.STANDBY
        if not in_standby:
            log.warning("radio not in standby, mode %d", mode)

        for register, value in radio_config(sonde, frequency):
            if register == Register.FREQ_MSB:
                self._delay(0.001)
            self._bus.write(register, value)
            if register == Register.OP_MODE:
                self._delay(0.001)
        self._delay(0.001)
        return in_standby

    def rssi(self) -> int:
        """Raw RSSI register value, in half-dB steps below 0 dBm."""
        return self._bus.read(Register.RSSI_VALUE)

    def fifo_overrun(self) -> bool:
        """True if the receive FIFO has overrun."""
        return bool(self._bus.read(Register.IRQ_FLAGS2) & Flags2.FIFO_OVERRUN)