"""Decoders for sFlow v5 and NetFlow v5 telemetry, with a raw socket producer."""

__version__ = "0.7.0"