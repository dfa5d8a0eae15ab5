"""Radiosonde descriptions and the errors raised while decoding their packets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

MAX_SYNC_WORD_BYTES = 8
MAX_PACKET_LENGTH = 0x7FF


class DecodeError(Exception):
    """A received packet could not be decoded."""


class CrcError(DecodeError):
    """A decoded frame failed its checksum."""


class EccError(DecodeError):
    """A block held more errors than its code can correct."""


@dataclass(frozen=True)
class Sonde:
    """Radio and framing parameters of one radiosonde model.

    ``packet_length`` is the number of raw bytes the radio collects per packet
    and ``sync_word_len`` is the sync word length in bits.  ``decoder`` builds
    the object whose ``process(packet, position)`` handles a received packet.
    """

    name: str
    bit_rate: int
    afc_bandwidth: int
    bandwidth: int
    packet_length: int
    preamble_length: int
    sync_word_len: int
    sync_word: bytes
    decoder: Optional[Callable[[], Any]] = None
    frequency_deviation: int = 0

    def __post_init__(self) -> None:
        if self.bit_rate <= 0:
            raise ValueError("bit rate must be positive")
        if self.afc_bandwidth <= 0 or self.bandwidth <= 0:
            raise ValueError("bandwidths must be positive")
        if not 0 < self.packet_length <= MAX_PACKET_LENGTH:
            raise ValueError(f"packet length must be in 1..{MAX_PACKET_LENGTH}")
        if self.preamble_length < 0:
            raise ValueError("preamble length cannot be negative")
        if self.sync_word_len % 8 or not 8 <= self.sync_word_len <= 8 * MAX_SYNC_WORD_BYTES:
            raise ValueError("sync word length must be a multiple of 8 between 8 and 64 bits")
        if len(self.sync_word) < self.sync_word_len // 8:
            raise ValueError("sync word is shorter than its declared length")
        object.__setattr__(self, "sync_word", bytes(self.sync_word))

    def sync_bytes(self) -> bytes:
        """The bytes of the sync word the radio matches on."""
        return self.sync_word[: self.sync_word_len // 8]

    def payload_length(self) -> int:
        """Number of bytes the radio delivers for each packet."""
        return self.packet_length