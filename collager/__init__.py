"""Techo Collager: print-ready photo grids with pan, zoom and undo."""

__version__ = "0.1.0"
