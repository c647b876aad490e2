"""Towed underwater cable dynamics solver with a shared control-file turn loop."""

__version__ = "0.1.0"