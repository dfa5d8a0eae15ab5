"""Radiosonde packet decoders (RS41, M10, M20, DFM09), SX127x register configuration and receiver command handling."""

__version__ = "0.1.0"