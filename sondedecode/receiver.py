"""Receiver state machine: sonde selection, settings, commands and packet reports."""

from __future__ import annotations

import argparse
import string
import sys
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from pathlib import Path
from typing import Callable, Optional

from .codec import Position, format_position, format_rssi, hex_dump, starts_with
from .dfm09 import DFM09
from .m10 import M10
from .m20 import M20
from .radio import Radio
from .rs41 import RS41
from .sonde import DecodeError, Sonde

DEFAULT_FREQUENCY = 405_950_000
MIN_FREQUENCY_KHZ = 400_000
MAX_FREQUENCY_KHZ = 406_000
ERASED = 0xFF
SETTINGS_LENGTH = 5

HELP = (
    "@\treboot in bootloader mode\n"
    "$\tprint RSSI\n"
    "*\tprint build time\n"
    "=\tprint last position\n"
    "!ssssssFFFFFF set sonde type ssssss at FFFFFF kHz\n"
)


class SondeType(IntEnum):
    RS41 = 0
    M10 = 1
    M20 = 2
    DFM09 = 3
    DFM17 = 4


_SONDES = {
    SondeType.RS41: RS41,
    SondeType.M10: M10,
    SondeType.M20: M20,
    SondeType.DFM09: DFM09,
    SondeType.DFM17: DFM09,
}

_SELECTABLE = (SondeType.RS41, SondeType.M10, SondeType.M20, SondeType.DFM09)


def sonde_for(sonde_type: SondeType) -> Sonde:
    """Description of the sonde model handled for ``sonde_type``."""
    return _SONDES[SondeType(sonde_type)]


def parse_select_command(text: str) -> tuple[SondeType, int]:
    """Parse ``ssssssFFFFFF``: a sonde name padded to six characters and six kHz digits.

    Returns the sonde type and the frequency in Hz; raises ValueError if invalid.
    """
    sonde_type = next((t for t in _SELECTABLE if starts_with(text, t.name)), None)
    if sonde_type is None:
        raise ValueError("unknown sonde type")
    digits = text[6:12]
    if len(digits) != 6 or not all(c in string.digits for c in digits):
        raise ValueError("frequency must be six decimal digits")
    khz = int(digits)
    if not MIN_FREQUENCY_KHZ <= khz < MAX_FREQUENCY_KHZ:
        raise ValueError("frequency out of range")
    return sonde_type, khz * 1000


@dataclass
class Settings:
    """Persisted receiver settings."""

    sonde_type: SondeType = SondeType.RS41
    frequency: int = DEFAULT_FREQUENCY

    def to_bytes(self) -> bytes:
        """Storage image: type byte followed by the frequency, little-endian."""
        return bytes([self.sonde_type]) + self.frequency.to_bytes(4, "little")

    @classmethod
    def from_bytes(cls, data: bytes) -> "Settings":
        """Load a storage image; erased storage yields the defaults."""
        if not data or data[0] == ERASED:
            return cls()
        if len(data) < SETTINGS_LENGTH:
            raise ValueError("settings image too short")
        return cls(SondeType(data[0]), int.from_bytes(data[1:SETTINGS_LENGTH], "little"))


def _build_time() -> str:
    stamp = datetime.fromtimestamp(Path(__file__).stat().st_mtime)
    return f"{stamp:%b} {stamp.day:2d} {stamp:%Y}, {stamp:%H:%M:%S}"


class Receiver:
    """Holds the selected sonde, the last fix and answers serial commands."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        radio: Optional[Radio] = None,
        store: Optional[Callable[[Settings], None]] = None,
        reboot: Optional[Callable[[], None]] = None,
    ) -> None:
        self.settings = settings if settings is not None else Settings()
        self.position = Position()
        self.rssi = 0
        self._radio = radio
        self._store = store
        self._reboot = reboot
        self._decoder = self.sonde.decoder()
        if radio is not None:
            radio.configure(self.sonde, self.settings.frequency)

    @property
    def sonde(self) -> Sonde:
        return sonde_for(self.settings.sonde_type)

    def _settings_line(self) -> str:
        return f"#{self.sonde.name}@{self.settings.frequency // 1000}\n"

    def handle_command(self, line: str) -> str:
        """Execute one command line and return the reply text."""
        line = line.rstrip("\r\n")
        command, rest = line[:1], line[1:]
        if command in ("", "@"):
            if self._reboot is not None:
                self._reboot()
            return "reboot\n"
        if command == "?":
            return self._settings_line() + HELP
        if command == "$":
            if self._radio is not None:
                self.rssi = self._radio.rssi()
            return format_rssi(self.rssi)
        if command == "*":
            return f"Build time: {_build_time()}\n"
        if command == "=":
            return format_position(self.position, self.rssi)
        if command == "!":
            try:
                sonde_type, frequency = parse_select_command(rest)
            except ValueError:
                return "?\n"
            return self.select(sonde_type, frequency)
        return "?\n"

    def process_packet(self, packet: bytes) -> str:
        """Decode one raw packet and return the report text."""
        try:
            data = self._decoder.process(bytes(packet), self.position)
        except DecodeError as exc:
            return f"#{exc}\n"
        return format_position(self.position, self.rssi) + "P" + hex_dump(data)

    def select(self, sonde_type: SondeType, frequency: int) -> str:
        """Switch to another sonde and frequency; return the settings line."""
        self.settings = Settings(SondeType(sonde_type), frequency)
        self.position.clear()
        if self._store is not None:
            self._store(self.settings)
        self._decoder = self.sonde.decoder()
        if self._radio is not None:
            self._radio.configure(self.sonde, frequency)
        return self._settings_line()


def _is_hex(line: str) -> bool:
    return len(line) % 2 == 0 and all(c in string.hexdigits for c in line)


def main(argv: Optional[list[str]] = None) -> int:
    """Read commands and hex-encoded raw packets, one per line, and print the replies."""
    parser = argparse.ArgumentParser(
        prog="sondedecode",
        description="Decode radiosonde packets and answer receiver commands.",
    )
    parser.add_argument("--settings", type=Path, help="file holding the persisted settings")
    parser.add_argument("input", nargs="?", type=Path, help="input file (default: standard input)")
    args = parser.parse_args(argv)

    settings = Settings()
    store = None
    if args.settings is not None:
        settings_path: Path = args.settings
        if settings_path.exists():
            try:
                settings = Settings.from_bytes(settings_path.read_bytes())
            except ValueError as exc:
                parser.error(f"bad settings file: {exc}")

        def store(new: Settings) -> None:
            settings_path.write_bytes(new.to_bytes())

    receiver = Receiver(settings, store=store)

    def run(stream) -> None:
        for raw in stream:
            line = raw.strip()
            if not line:
                continue
            if _is_hex(line):
                sys.stdout.write(receiver.process_packet(bytes.fromhex(line)))
            else:
                sys.stdout.write(receiver.handle_command(line))

    if args.input is None:
        run(sys.stdin)
    else:
        with args.input.open() as stream:
            run(stream)
    return 0


if __name__ == "__main__":
    sys.exit(main())