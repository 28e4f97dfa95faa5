"""tickline - tick, time and bar mapping for music timelines."""

__version__ = "0.1.0"
