"""Bit codec and checksum helpers."""
