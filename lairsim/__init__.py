"""Territorial predator simulation: lair selection, hunting, and captivity."""

__version__ = "0.1.0"
