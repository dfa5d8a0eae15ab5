"""Register map and flag values of the SX127x radio in FSK mode."""

from __future__ import annotations

from enum import IntEnum, IntFlag


class Register(IntEnum):
    """Register addresses."""

    FIFO = 0x00
    OP_MODE = 0x01
    BIT_RATE_MSB = 0x02
    BIT_RATE_LSB = 0x03
    FDEV_MSB = 0x04
    FDEV_LSB = 0x05
    FREQ_MSB = 0x06
    FREQ_MID = 0x07
    FREQ_LSB = 0x08
    PA_CONFIG = 0x09
    PA_RAMP = 0x0A
    OCP = 0x0B
    LNA = 0x0C
    RX_CONFIG = 0x0D
    RSSI_CONFIG = 0x0E
    RSSI_COLLISION = 0x0F
    RSSI_THRESH = 0x10
    RSSI_VALUE = 0x11
    RX_BW = 0x12
    AFC_BW = 0x13
    OOK_PEAK = 0x14
    OOK_FIX = 0x15
    OOK_AVG = 0x16
    AFC_FEI = 0x1A
    AFC_MSB = 0x1B
    AFC_LSB = 0x1C
    FEI_MSB = 0x1D
    FEI_LSB = 0x1E
    PREAMBLE_DETECT = 0x1F
    RX_TIMEOUT1 = 0x20
    RX_TIMEOUT2 = 0x21
    RX_TIMEOUT3 = 0x22
    RX_DELAY = 0x23
    OSC = 0x24
    PREAMBLE_MSB = 0x25
    PREAMBLE_LSB = 0x26
    SYNC_CONFIG = 0x27
    SYNC_VALUE1 = 0x28
    SYNC_VALUE2 = 0x29
    SYNC_VALUE3 = 0x2A
    SYNC_VALUE4 = 0x2B
    SYNC_VALUE5 = 0x2C
    SYNC_VALUE6 = 0x2D
    SYNC_VALUE7 = 0x2E
    SYNC_VALUE8 = 0x2F
    PACKET_CONFIG1 = 0x30
    PACKET_CONFIG2 = 0x31
    PAYLOAD_LENGTH = 0x32
    NODE_ADRS = 0x33
    BROADCAST_ADRS = 0x34
    FIFO_THRESH = 0x35
    SEQ_CONFIG1 = 0x36
    SEQ_CONFIG2 = 0x37
    TIMER_RESOL = 0x38
    TIMER1_COEF = 0x39
    SYNC_WORD = 0x39
    TIMER2_COEF = 0x3A
    IMAGE_CAL = 0x3B
    TEMP = 0x3C
    LOW_BAT = 0x3D
    IRQ_FLAGS1 = 0x3E
    IRQ_FLAGS2 = 0x3F
    DIO_MAPPING1 = 0x40
    DIO_MAPPING2 = 0x41
    VERSION = 0x42
    PLL_HOP = 0x44
    TCXO = 0x4B
    PA_DAC = 0x4D
    BIT_RATE_FRAC = 0x5D


class OpMode(IntEnum):
    """Operating modes written to the op-mode register."""

    SLEEP = 0x00
    STANDBY = 0x01
    TX = 0x03
    RX = 0x05


class Flags1(IntFlag):
    """Bits of the first interrupt flag register."""

    MODE_READY = 0x80
    RX_READY = 0x40
    TX_READY = 0x20
    PLL_LOCK = 0x10
    RSSI = 0x08
    TIMEOUT = 0x04
    PREAMBLE_DETECT = 0x02
    SYNC_ADDRESS_MATCH = 0x01


class Flags2(IntFlag):
    """Bits of the second interrupt flag register."""

    FIFO_FULL = 0x80
    FIFO_EMPTY = 0x40
    FIFO_LEVEL = 0x20
    FIFO_OVERRUN = 0x10
    PACKET_SENT = 0x08
    PAYLOAD_READY = 0x04
    CRC_OK = 0x02
    LOW_BAT = 0x01


def register_name(address: int) -> str:
    """Name of the register at ``address``; ValueError if there is none."""
    return Register(address).name