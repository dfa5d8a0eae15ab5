# sondedecode

Packet decoding and receiver logic for weather-balloon radiosondes received
with an SX1278 (SX127x) FSK transceiver. Four sonde families are handled:

| Sonde  | Bit rate | Packet handling                                   |
|--------|----------|---------------------------------------------------|
| RS41   | 4800     | bit reversal and de-whitening (no position fields)|
| M10    | 9615     | Manchester decoding, descrambling, CRC check      |
| M20    | 9600     | Manchester decoding, descrambling, CRC check      |
| DFM09  | 2500     | Manchester decoding, deinterleaving, Hamming ECC  |

From a raw packet the M10, M20 and DFM09 decoders recover the serial number,
latitude, longitude and altitude and store them in a `Position`. RS41 packets
are only de-whitened; the position is left unchanged.

The package has no dependencies outside the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## The `sondedecode` command

```
sondedecode [--settings FILE] [INPUT]
```

reads lines from `INPUT` (standard input if omitted) and writes replies to
standard output. Blank lines are skipped. A line made only of hex digits, of
even length, is taken as one raw packet from the radio FIFO and decoded with
the currently selected sonde; any other line is a command:

| Command          | Reply                                                  |
|------------------|--------------------------------------------------------|
| `?`              | current settings (`#<sonde>@<kHz>`) and the command list |
| `$`              | RSSI line                                              |
| `*`              | build time, taken from the installed module's file time |
| `=`              | last decoded position                                  |
| `!ssssssFFFFFF`  | select sonde type `ssssss` at `FFFFFF` kHz             |
| `@`              | `reboot` (nothing else happens on the command line)    |

The sonde type is `RS41`, `M10`, `M20` or `DFM09` (case-insensitive), padded to
six characters, followed by six digits in 400000–405999 kHz, for example
`!M20   402002`. Anything else is answered with `?`.

A decoded packet produces the position line followed by `P` and the decoded
bytes in hex, for example

```
DSer:<serial>,Lat:45.123456,Lng:9.123456,Alt:1234.5,rssi:-0.0dBm
P0A1B...
```

A packet that cannot be decoded produces a line starting with `#` and the
reason.

With `--settings FILE` the selected sonde and frequency are read from `FILE`
at start-up, if it exists, and written to it after every `!` command. The file
holds five bytes: the sonde type followed by the frequency in Hz,
little-endian. A first byte of `0xFF` (erased) means the defaults: RS41 at
405.950 MHz.

## Using the library

Each decoder takes a raw packet and updates a `Position` in place; `process`
returns the decoded bytes:

```python
from sondedecode.codec import Position, format_position
from sondedecode.m20 import M20Decoder

position = Position()
decoder = M20Decoder()
frame = decoder.process(packet, position)
print(format_position(position, rssi=180), end="")
```

Decoders: `sondedecode.rs41.Rs41Decoder`, `sondedecode.m10.M10Decoder`,
`sondedecode.m20.M20Decoder` and `sondedecode.dfm09.Dfm09Decoder` (which keeps
state across packets while it assembles the serial number). Each module also
defines a `Sonde` description (`RS41`, `M10`, `M20`, `DFM09`) with bit rate,
bandwidths, packet length and sync word.

Failures raise exceptions from `sondedecode.sonde`, all derived from
`DecodeError`: `CrcError` for a failed checksum, `EccError` when the DFM09
Hamming code cannot correct a block, plus `sondedecode.codec.ManchesterError`
for an invalid Manchester symbol. A packet shorter than its sonde's packet
length raises `DecodeError`.

Lower-level functions:

- `sondedecode.codec`: `manchester_decode`, `flip_byte`, `calc_mant_exp`,
  `itoa_with_zeroes`, `starts_with`, `hex_dump`, `format_rssi`,
  `format_position`
- `sondedecode.m20`: `descramble`, `m10_crc_step`, `check_crc`, `decode_serial`
- `sondedecode.m10`: `M10Frame`, `frame_correct`
- `sondedecode.dfm09`: `deinterleave`, `parity`, `hamming`
- `sondedecode.rs41`: `dewhiten`

## Radio configuration

`sondedecode.radio` computes SX127x register settings without touching
hardware: `bit_rate_registers`, `frequency_registers` and `radio_config`
(the ordered list of register writes for a sonde and frequency). `Radio`
applies them through any object with `read(register)` and
`write(register, value)` methods, such as `SpiRegisterBus`, which wraps a
full-duplex SPI transfer function you supply. `Radio.configure` returns
`False` if the chip did not reach standby; `Radio.rssi` and
`Radio.fifo_overrun` read status. Register addresses and flag bits are in
`sondedecode.registers` (`Register`, `OpMode`, `Flags1`, `Flags2`,
`register_name`).

`sondedecode.receiver.Receiver` ties it together: `handle_command` answers
command lines, `process_packet` decodes packets and `select` switches sonde
and frequency, reconfiguring a `Radio` and storing `Settings` if they were
given.

## What it does not do

The package does not talk to a radio on its own: there is no SPI or GPIO
driver and no loop that reads packets from the FIFO. To receive live, supply
your own SPI transfer function to `SpiRegisterBus` and feed the packets you
read to `Receiver.process_packet`. The `sondedecode` command works only on
packets given to it as hex lines, and `@` only replies `reboot`.