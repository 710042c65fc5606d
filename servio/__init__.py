"""Servomotor control core: control loops, conversions, a motor simulation, configuration storage and command handling."""

__version__ = "0.1.0"